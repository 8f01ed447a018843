from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Enum, DateTime, ForeignKey, CheckConstraint, Text
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.core.config import DEFAULT_CURRENCY
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin
from app.models.enums.product_status import ProductStatus
from app.models.enums.quality_check_status import QualityCheckStatus


class Product(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(String(500), nullable=True)

    # canonical catalog pricing
    unit_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)

    quantity = Column(Integer, nullable=False, default=0)
    damaged_quantity = Column(Integer, nullable=False, default=0)
    available_quantity = Column(Integer, nullable=False, default=0)

    status = Column(Enum(ProductStatus), nullable=False, default=ProductStatus.pending_qc, index=True)
    qc_status = Column(Enum(QualityCheckStatus), nullable=False, default=QualityCheckStatus.pending)
    qc_remarks = Column(Text, nullable=True)
    qc_checked_at = Column(DateTime(timezone=True), nullable=True)
    qc_checked_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    store_approved_at = Column(DateTime(timezone=True), nullable=True)
    store_approved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    version = Column(Integer, nullable=False, default=1)

    ledger_entries = relationship("StockLedgerEntry", back_populates="product", lazy="raise")

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_product_unit_price_non_negative"),
        CheckConstraint("quantity >= 0 AND damaged_quantity >= 0 AND available_quantity >= 0", name="ck_product_quantities_non_negative"),
    )

    def __repr__(self):
        return f"<Product id={self.id} sku={self.sku} name={self.name}>"
