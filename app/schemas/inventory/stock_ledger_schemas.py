from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal
from datetime import datetime


class StockPricingUpsertSchema(BaseModel):
    product_id: int
    location_id: int
    margin_percent: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    seed_quantity: Optional[int] = Field(
        default=None,
        ge=0,
        description="Initial quantity, applied only when the entry is created",
    )


class StockQuantityAdjustSchema(BaseModel):
    quantity: int = Field(ge=0, description="New absolute quantity")


class StockLedgerEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    location_id: int
    quantity: int
    margin_percent: Decimal
    currency: str
    unit_price: Decimal
    exchange_rate: Optional[Decimal]
    manifest_id: Optional[int]

    updated_by_id: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime]
