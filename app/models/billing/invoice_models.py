from sqlalchemy import Column, Integer, String, Text, ForeignKey, Numeric, Index, CheckConstraint, Date
from sqlalchemy.orm import relationship
from decimal import Decimal
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin


class Invoice(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    """Sales issuance: consumes ledger quantity at a single location."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(50), nullable=False, unique=True, index=True)
    invoice_date = Column(Date, nullable=False)
    location_id = Column(Integer, ForeignKey("inventory_locations.id", ondelete="RESTRICT"), nullable=False, index=True)
    customer_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    sub_total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    discount_total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    vat_total = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    tax_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    net_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_invoice_location_date", "location_id", "invoice_date"),
        CheckConstraint(
            "sub_total >= 0 AND discount_total >= 0 AND vat_total >= 0 AND tax_amount >= 0 AND net_amount >= 0",
            name="ck_invoice_amounts_non_negative",
        ),
    )

    def __repr__(self):
        return f"<Invoice {self.invoice_number} location_id={self.location_id}>"


class InvoiceItem(Base, TimestampMixin):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    description = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    discount_percent = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    discount_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    vat_percent = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    vat_amount = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    line_total = Column(Numeric(14, 2), nullable=False)

    invoice = relationship("Invoice", back_populates="items", lazy="raise")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_invoice_item_qty_positive"),
        CheckConstraint("unit_price >= 0", name="ck_invoice_item_price_non_negative"),
        CheckConstraint("discount_percent >= 0 AND discount_percent <= 100", name="ck_invoice_item_discount_range"),
        CheckConstraint("vat_percent >= 0", name="ck_invoice_item_vat_non_negative"),
        CheckConstraint("line_total >= 0", name="ck_invoice_item_total_non_negative"),
        Index("ux_invoice_item_product", "invoice_id", "product_id", unique=True),
    )

    def __repr__(self):
        return f"<InvoiceItem id={self.id} product_id={self.product_id} qty={self.quantity} total={self.line_total}>"
