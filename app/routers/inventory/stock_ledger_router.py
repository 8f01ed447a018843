from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_role
from app.constants.user_roles import UserRole
from app.utils.response import success_response, APIResponse, LEDGER_ERROR_RESPONSES

from app.schemas.inventory.stock_ledger_schemas import (
    StockPricingUpsertSchema,
    StockQuantityAdjustSchema,
    StockLedgerEntryOut,
)
from app.services.inventory.stock_ledger_service import (
    get_entry,
    update_location_pricing,
    adjust_quantity,
)

router = APIRouter(
    prefix="/stock-ledger",
    tags=["Stock Ledger"],
)


@router.get(
    "/{product_id}/{location_id}",
    response_model=APIResponse[StockLedgerEntryOut],
)
async def get_stock_entry_api(
    product_id: int,
    location_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory, UserRole.cashier])),
):
    entry = await get_entry(db, product_id, location_id)
    return success_response(
        "Stock entry retrieved successfully",
        StockLedgerEntryOut.model_validate(entry),
    )


@router.put(
    "/pricing",
    response_model=APIResponse[StockLedgerEntryOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def upsert_stock_pricing_api(
    payload: StockPricingUpsertSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    entry = await update_location_pricing(db, payload, user)
    return success_response(
        "Stock pricing updated successfully",
        StockLedgerEntryOut.model_validate(entry),
    )


@router.patch(
    "/{product_id}/{location_id}/quantity",
    response_model=APIResponse[StockLedgerEntryOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def adjust_stock_quantity_api(
    product_id: int,
    location_id: int,
    payload: StockQuantityAdjustSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    entry = await adjust_quantity(
        db,
        product_id=product_id,
        location_id=location_id,
        new_quantity=payload.quantity,
        actor_user=user,
    )
    return success_response(
        "Stock quantity adjusted successfully",
        StockLedgerEntryOut.model_validate(entry),
    )
