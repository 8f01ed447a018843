from sqlalchemy import Column, Integer, String, Text, Numeric, Enum, Date, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin
from app.models.enums.manifest_approval_status import ManifestApprovalStatus


class TransferManifest(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    """Batch of products moving from a source location to a destination.

    While in draft the quantities are already taken from the source ledger
    and belong to no location (in transit); approval credits the destination.
    """

    __tablename__ = "transfer_manifests"

    id = Column(Integer, primary_key=True)
    box_number = Column(String(100), nullable=False, unique=True, index=True)
    source_location_id = Column(Integer, ForeignKey("inventory_locations.id", ondelete="RESTRICT"), nullable=False, index=True)
    destination_location_id = Column(Integer, ForeignKey("inventory_locations.id", ondelete="RESTRICT"), nullable=True, index=True)
    currency = Column(String(3), nullable=True)
    exchange_rate = Column(Numeric(14, 6), nullable=True)
    approval_status = Column(Enum(ManifestApprovalStatus), nullable=False, default=ManifestApprovalStatus.draft, index=True)
    total_quantity = Column(Integer, nullable=False, default=0)
    shipment_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    approved_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    items = relationship(
        "TransferManifestItem",
        back_populates="manifest",
        cascade="all, delete-orphan",
        order_by="TransferManifestItem.id",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total_quantity >= 0", name="ck_transfer_manifest_total_non_negative"),
        CheckConstraint("exchange_rate IS NULL OR exchange_rate > 0", name="ck_transfer_manifest_rate_positive"),
        Index("ix_transfer_manifest_source_status", "source_location_id", "approval_status"),
    )

    def __repr__(self):
        return f"<TransferManifest id={self.id} box={self.box_number} status={self.approval_status}>"


class TransferManifestItem(Base):
    __tablename__ = "transfer_manifest_items"

    id = Column(Integer, primary_key=True)
    manifest_id = Column(Integer, ForeignKey("transfer_manifests.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    description = Column(String(255), nullable=True)

    manifest = relationship("TransferManifest", back_populates="items", lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transfer_manifest_item_qty_positive"),
        Index("ux_transfer_manifest_item_product", "manifest_id", "product_id", unique=True),
    )

    def __repr__(self):
        return f"<TransferManifestItem manifest_id={self.manifest_id} product_id={self.product_id} qty={self.quantity}>"
