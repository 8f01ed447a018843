from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.models.enums.quality_check_status import QualityCheckStatus
from app.models.enums.product_status import ProductStatus


class QualityCheckSubmitSchema(BaseModel):
    product_id: int
    # kept as str so an unknown status reaches the service and is reported as such
    status: str
    damaged_quantity: Optional[int] = None
    remarks: Optional[str] = Field(default=None, max_length=2000)


class QualityCheckOut(BaseModel):
    id: int
    product_id: int
    status: QualityCheckStatus
    damaged_quantity: Optional[int]
    remarks: Optional[str]
    checked_by: Optional[int]
    checked_at: Optional[datetime]
    intake_applied_at: Optional[datetime]

    product_status: ProductStatus
    available_quantity: int
