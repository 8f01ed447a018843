from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date

from app.models.enums.manifest_approval_status import ManifestApprovalStatus


# ==============================
# ITEM SCHEMAS
# ==============================
class ManifestItemSchema(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    description: Optional[str] = Field(default=None, max_length=255)


class ManifestItemOut(BaseModel):
    product_id: int
    quantity: int
    description: Optional[str]


# ==============================
# INPUT SCHEMAS
# ==============================
class ManifestCreateSchema(BaseModel):
    box_number: str = Field(min_length=1, max_length=100)
    source_location_id: int
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    shipment_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[ManifestItemSchema]


class ManifestUpdateSchema(BaseModel):
    items: List[ManifestItemSchema]
    shipment_date: Optional[date] = None
    notes: Optional[str] = None

    # optimistic locking
    version: Optional[int] = None


class ManifestApproveSchema(BaseModel):
    destination_location_id: int
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Optional[Decimal] = Field(default=None, gt=0)
    reprice_catalog: Optional[bool] = Field(
        default=None,
        description="Write converted prices back to the catalog; defaults to TRANSFER_REPRICES_CATALOG",
    )


# ==============================
# OUTPUT SCHEMAS
# ==============================
class ManifestOut(BaseModel):
    id: int
    box_number: str
    source_location_id: int
    destination_location_id: Optional[int]
    currency: Optional[str]
    exchange_rate: Optional[Decimal]
    approval_status: ManifestApprovalStatus
    total_quantity: int
    shipment_date: Optional[date]
    notes: Optional[str]
    version: int

    created_by: Optional[int]
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    items: List[ManifestItemOut]
