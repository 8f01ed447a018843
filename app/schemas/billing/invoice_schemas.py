from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date


# =====================================================
# BASE
# =====================================================
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# =====================================================
# ITEM INPUTS
# =====================================================
class InvoiceItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    vat_percent: Decimal = Field(default=Decimal("0"), ge=0)
    description: Optional[str] = Field(default=None, max_length=255)


# =====================================================
# ITEM OUTPUT
# =====================================================
class InvoiceItemOut(ORMBase):
    product_id: int
    description: Optional[str]
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal
    discount_amount: Decimal
    vat_percent: Decimal
    vat_amount: Decimal
    line_total: Decimal


# =====================================================
# CREATE / UPDATE
# =====================================================
class InvoiceCreate(BaseModel):
    location_id: int
    invoice_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    invoice_date: Optional[date] = None
    customer_name: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0)
    items: List[InvoiceItemCreate]


class InvoiceUpdate(BaseModel):
    items: List[InvoiceItemCreate]
    tax_amount: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None

    # optimistic locking
    version: Optional[int] = None


# =====================================================
# SINGLE INVOICE OUTPUT
# =====================================================
class InvoiceOut(ORMBase):
    id: int
    invoice_number: str
    invoice_date: date
    location_id: int
    customer_name: Optional[str]
    notes: Optional[str]

    sub_total: Decimal
    discount_total: Decimal
    vat_total: Decimal
    tax_amount: Decimal
    net_amount: Decimal

    version: int
    created_by: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]

    items: List[InvoiceItemOut]
