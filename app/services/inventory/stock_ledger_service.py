from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models.inventory.stock_ledger_models import StockLedgerEntry
from app.models.inventory.inventory_movement_models import InventoryMovement
from app.models.enums.product_status import ProductStatus
from app.schemas.inventory.stock_ledger_schemas import StockPricingUpsertSchema
from app.constants.inventory_movement_type import (
    InventoryMovementType,
    InventoryReferenceType,
)
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, InsufficientStockError
from app.services.inventory.valuation_service import compute_sell_price
from app.services.masters.catalog_service import get_product, validate_currency
from app.services.inventory.location_service import get_location
from app.utils.decimal_utils import to_decimal
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Every quantity change in the system goes through increment(),
# decrement_if_sufficient() or adjust_quantity(). Each one locks the ledger
# row before reading it and only flushes; the calling workflow owns the
# transaction and commits or rolls back all of its lines together.

POSITIVE_MOVEMENTS = {
    InventoryMovementType.STOCK_IN,
    InventoryMovementType.TRANSFER_IN,
}

NEGATIVE_MOVEMENTS = {
    InventoryMovementType.STOCK_OUT,
    InventoryMovementType.TRANSFER_OUT,
}


# =====================================================
# INTERNALS
# =====================================================
async def _lock_entry(
    db: AsyncSession,
    product_id: int,
    location_id: int,
) -> StockLedgerEntry | None:
    return await db.scalar(
        select(StockLedgerEntry)
        .where(
            StockLedgerEntry.product_id == product_id,
            StockLedgerEntry.location_id == location_id,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def _create_entry(
    db: AsyncSession,
    *,
    product_id: int,
    location_id: int,
    quantity: int,
    actor_user,
    **pricing,
) -> StockLedgerEntry:
    product = await get_product(db, product_id)
    entry = StockLedgerEntry(
        product_id=product_id,
        location_id=location_id,
        quantity=quantity,
        currency=pricing.pop("currency", None) or product.currency,
        unit_price=pricing.pop("unit_price", None) or product.unit_price,
        created_by_id=actor_user.id,
        updated_by_id=actor_user.id,
        **pricing,
    )
    db.add(entry)

    try:
        await db.flush()
    except IntegrityError:
        raise AppException(
            409,
            "Concurrent inventory update detected",
            ErrorCode.CONCURRENT_STOCK_UPDATE,
            details={"product_id": product_id, "location_id": location_id},
        )

    return entry


def _validate_delta(delta: int) -> None:
    if delta is None or delta < 0:
        raise AppException(
            400,
            "Stock movement quantity must be zero or positive",
            ErrorCode.VALIDATION_ERROR,
        )


def _touch(entry: StockLedgerEntry, actor_user) -> None:
    entry.updated_by_id = actor_user.id
    entry.updated_at = datetime.now(timezone.utc)


def _journal(
    db: AsyncSession,
    *,
    entry: StockLedgerEntry,
    quantity_change: int,
    movement_type: InventoryMovementType,
    reference_type: InventoryReferenceType,
    reference_id: int | None,
    actor_user,
) -> None:
    if movement_type in POSITIVE_MOVEMENTS and quantity_change < 0:
        raise AppException(
            400,
            f"{movement_type.value} must have positive quantity",
            ErrorCode.VALIDATION_ERROR,
        )
    if movement_type in NEGATIVE_MOVEMENTS and quantity_change > 0:
        raise AppException(
            400,
            f"{movement_type.value} must have negative quantity",
            ErrorCode.VALIDATION_ERROR,
        )

    db.add(
        InventoryMovement(
            product_id=entry.product_id,
            location_id=entry.location_id,
            quantity_change=quantity_change,
            movement_type=movement_type,
            reference_type=reference_type.value,
            reference_id=reference_id,
            created_by_id=actor_user.id,
        )
    )

    logger.debug(
        "Ledger movement",
        extra={
            "product_id": entry.product_id,
            "location_id": entry.location_id,
            "quantity_change": quantity_change,
            "quantity": entry.quantity,
            "reference": f"{reference_type.value}:{reference_id}",
        },
    )


# =====================================================
# READ
# =====================================================
async def get_entry(
    db: AsyncSession,
    product_id: int,
    location_id: int,
) -> StockLedgerEntry:
    entry = await db.scalar(
        select(StockLedgerEntry).where(
            StockLedgerEntry.product_id == product_id,
            StockLedgerEntry.location_id == location_id,
        )
    )
    if not entry:
        raise AppException(
            404,
            "Stock ledger entry not found",
            ErrorCode.STOCK_ENTRY_NOT_FOUND,
            details={"product_id": product_id, "location_id": location_id},
        )
    return entry


# =====================================================
# INCREMENT
# =====================================================
async def increment(
    db: AsyncSession,
    *,
    product_id: int,
    location_id: int,
    delta: int,
    actor_user,
    movement_type: InventoryMovementType = InventoryMovementType.STOCK_IN,
    reference_type: InventoryReferenceType = InventoryReferenceType.ADJUSTMENT,
    reference_id: int | None = None,
) -> StockLedgerEntry:
    _validate_delta(delta)

    entry = await _lock_entry(db, product_id, location_id)

    if entry is None:
        entry = await _create_entry(
            db,
            product_id=product_id,
            location_id=location_id,
            quantity=delta,
            actor_user=actor_user,
        )
    else:
        entry.quantity += delta
        _touch(entry, actor_user)

    if delta:
        _journal(
            db,
            entry=entry,
            quantity_change=delta,
            movement_type=movement_type,
            reference_type=reference_type,
            reference_id=reference_id,
            actor_user=actor_user,
        )

    await db.flush()
    return entry


# =====================================================
# CONDITIONAL DECREMENT
# =====================================================
async def decrement_if_sufficient(
    db: AsyncSession,
    *,
    product_id: int,
    location_id: int,
    delta: int,
    actor_user,
    movement_type: InventoryMovementType = InventoryMovementType.STOCK_OUT,
    reference_type: InventoryReferenceType = InventoryReferenceType.ADJUSTMENT,
    reference_id: int | None = None,
) -> StockLedgerEntry:
    _validate_delta(delta)

    entry = await _lock_entry(db, product_id, location_id)
    available = entry.quantity if entry else 0

    if available < delta:
        logger.info(
            "Insufficient stock",
            extra={
                "product_id": product_id,
                "location_id": location_id,
                "available": available,
                "requested": delta,
            },
        )
        raise InsufficientStockError(
            product_id=product_id,
            location_id=location_id,
            available=available,
            requested=delta,
        )

    if entry is None:
        # zero-quantity request against a pair that has never held stock
        raise AppException(
            404,
            "Stock ledger entry not found",
            ErrorCode.STOCK_ENTRY_NOT_FOUND,
            details={"product_id": product_id, "location_id": location_id},
        )

    if delta:
        entry.quantity -= delta
        _touch(entry, actor_user)
        _journal(
            db,
            entry=entry,
            quantity_change=-delta,
            movement_type=movement_type,
            reference_type=reference_type,
            reference_id=reference_id,
            actor_user=actor_user,
        )
        await db.flush()

    return entry


# =====================================================
# PRICING
# =====================================================
async def upsert_pricing(
    db: AsyncSession,
    *,
    product_id: int,
    location_id: int,
    margin_percent,
    currency: str | None,
    actor_user,
    seed_quantity: int | None = None,
) -> StockLedgerEntry:
    if seed_quantity is not None and seed_quantity < 0:
        raise AppException(
            400,
            "Quantity must be a non-negative number",
            ErrorCode.VALIDATION_ERROR,
        )

    await get_location(db, location_id)
    product = await get_product(db, product_id, for_update=True)

    selected_currency = validate_currency(currency or product.currency)
    unit_price = compute_sell_price(product.unit_price, margin_percent)
    margin = to_decimal(margin_percent)

    entry = await _lock_entry(db, product_id, location_id)

    if entry is None:
        entry = await _create_entry(
            db,
            product_id=product_id,
            location_id=location_id,
            quantity=seed_quantity or 0,
            actor_user=actor_user,
            currency=selected_currency,
            unit_price=unit_price,
            margin_percent=margin,
        )
        if seed_quantity:
            _journal(
                db,
                entry=entry,
                quantity_change=seed_quantity,
                movement_type=InventoryMovementType.STOCK_IN,
                reference_type=InventoryReferenceType.ADJUSTMENT,
                reference_id=None,
                actor_user=actor_user,
            )
    else:
        entry.margin_percent = margin
        entry.currency = selected_currency
        entry.unit_price = unit_price
        _touch(entry, actor_user)

    now = datetime.now(timezone.utc)
    product.status = ProductStatus.store_approved
    product.store_approved_by_id = actor_user.id
    product.store_approved_at = now

    await db.flush()
    return entry


# =====================================================
# MANUAL ADJUSTMENT
# =====================================================
async def adjust_quantity(
    db: AsyncSession,
    *,
    product_id: int,
    location_id: int,
    new_quantity: int,
    actor_user,
) -> StockLedgerEntry:
    if new_quantity is None or new_quantity < 0:
        raise AppException(
            400,
            "Quantity must be a non-negative number",
            ErrorCode.VALIDATION_ERROR,
        )

    try:
        entry = await _lock_entry(db, product_id, location_id)
        if entry is None:
            raise AppException(
                404,
                "Stock ledger entry not found",
                ErrorCode.STOCK_ENTRY_NOT_FOUND,
                details={"product_id": product_id, "location_id": location_id},
            )

        change = new_quantity - entry.quantity
        entry.quantity = new_quantity
        _touch(entry, actor_user)

        if change:
            _journal(
                db,
                entry=entry,
                quantity_change=change,
                movement_type=InventoryMovementType.ADJUSTMENT,
                reference_type=InventoryReferenceType.ADJUSTMENT,
                reference_id=None,
                actor_user=actor_user,
            )

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Ledger quantity adjusted",
        extra={
            "product_id": product_id,
            "location_id": location_id,
            "quantity_change": change,
            "user_id": actor_user.id,
        },
    )
    return entry


# =====================================================
# PRICING (REQUEST ENTRYPOINT)
# =====================================================
async def update_location_pricing(
    db: AsyncSession,
    payload: StockPricingUpsertSchema,
    user,
) -> StockLedgerEntry:
    try:
        entry = await upsert_pricing(
            db,
            product_id=payload.product_id,
            location_id=payload.location_id,
            margin_percent=payload.margin_percent,
            currency=payload.currency,
            actor_user=user,
            seed_quantity=payload.seed_quantity,
        )
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Ledger pricing updated",
        extra={
            "product_id": entry.product_id,
            "location_id": entry.location_id,
            "margin_percent": str(entry.margin_percent),
            "unit_price": str(entry.unit_price),
            "currency": entry.currency,
            "user_id": user.id,
        },
    )
    return entry
