from sqlalchemy import Column, Integer, Text, Enum, DateTime, ForeignKey
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin
from app.models.enums.quality_check_status import QualityCheckStatus


class QualityCheckRecord(Base, TimestampMixin, AuditMixin):
    """Latest inspection outcome for a product; re-submission overwrites it."""

    __tablename__ = "quality_check_records"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    status = Column(Enum(QualityCheckStatus), nullable=False, default=QualityCheckStatus.pending)
    damaged_quantity = Column(Integer, nullable=True)
    remarks = Column(Text, nullable=True)
    checked_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    checked_at = Column(DateTime(timezone=True), nullable=True)
    # set once the approval has been fanned out to the intake locations
    intake_applied_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<QualityCheckRecord product_id={self.product_id} status={self.status}>"
