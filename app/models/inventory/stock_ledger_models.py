from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.core.config import DEFAULT_CURRENCY
from app.models.base.mixins import TimestampMixin, AuditMixin


class StockLedgerEntry(Base, TimestampMixin, AuditMixin):
    """Authoritative quantity and price of one product at one location.

    Rows are created lazily on the first write for a (product, location)
    pair and never deleted; emptied entries stay at quantity 0.
    """

    __tablename__ = "stock_ledger_entries"

    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), primary_key=True)
    location_id = Column(Integer, ForeignKey("inventory_locations.id", ondelete="RESTRICT"), primary_key=True)
    quantity = Column(Integer, nullable=False, default=0)

    margin_percent = Column(Numeric(7, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    unit_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    exchange_rate = Column(Numeric(14, 6), nullable=True)

    # manifest whose approval last credited this entry
    manifest_id = Column(Integer, ForeignKey("transfer_manifests.id", ondelete="SET NULL"), nullable=True, index=True)

    product = relationship("Product", back_populates="ledger_entries", lazy="raise")
    location = relationship("InventoryLocation", back_populates="ledger_entries", lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stock_ledger_quantity_non_negative"),
        CheckConstraint("margin_percent >= 0", name="ck_stock_ledger_margin_non_negative"),
        CheckConstraint("unit_price >= 0", name="ck_stock_ledger_unit_price_non_negative"),
    )

    def __repr__(self):
        return f"<StockLedgerEntry product_id={self.product_id} location_id={self.location_id} qty={self.quantity}>"
