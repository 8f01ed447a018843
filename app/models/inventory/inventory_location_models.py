from sqlalchemy import Column, Integer, String, Boolean, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, AuditMixin


class InventoryLocation(Base, TimestampMixin, SoftDeleteMixin, AuditMixin):
    __tablename__ = "inventory_locations"

    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True, index=True)  # business identifier (warehouse, showroom, etc.)
    name = Column(String(100), nullable=False)
    # role flag, e.g. ROLE_PURCHASER marks a quality-check intake destination
    role = Column(String(50), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    ledger_entries = relationship("StockLedgerEntry", back_populates="location", lazy="raise")

    __table_args__ = (Index("ix_inventory_location_active_role", "is_active", "role"),)

    def __repr__(self):
        return f"<InventoryLocation id={self.id} code={self.code} role={self.role} active={self.is_active}>"
