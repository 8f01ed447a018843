# app/services/quality/quality_check_service.py

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.quality.quality_check_models import QualityCheckRecord
from app.models.masters.product_models import Product
from app.models.enums.quality_check_status import QualityCheckStatus
from app.models.enums.product_status import ProductStatus
from app.schemas.quality.quality_check_schemas import (
    QualityCheckSubmitSchema,
    QualityCheckOut,
)
from app.constants.error_codes import ErrorCode
from app.constants.inventory_movement_type import (
    InventoryMovementType,
    InventoryReferenceType,
)
from app.core.config import INTAKE_LOCATION_ROLE
from app.core.exceptions import AppException
from app.services.masters.catalog_service import get_product
from app.services.inventory.location_service import list_locations_by_role
from app.services.inventory import stock_ledger_service
from app.utils.logger import get_logger

logger = get_logger(__name__)

PRODUCT_STATUS_BY_QC = {
    QualityCheckStatus.approved: ProductStatus.store_pending,
    QualityCheckStatus.rejected: ProductStatus.qc_failed,
    QualityCheckStatus.pending: ProductStatus.pending_qc,
}


def _parse_status(value) -> QualityCheckStatus:
    try:
        return QualityCheckStatus(str(value).lower())
    except ValueError:
        raise AppException(
            400,
            "Invalid QC status. Must be approved, rejected or pending",
            ErrorCode.QUALITY_CHECK_INVALID_STATUS,
        )


def _map_record(record: QualityCheckRecord, product: Product) -> QualityCheckOut:
    return QualityCheckOut(
        id=record.id,
        product_id=record.product_id,
        status=record.status,
        damaged_quantity=record.damaged_quantity,
        remarks=record.remarks,
        checked_by=record.checked_by_id,
        checked_at=record.checked_at,
        intake_applied_at=record.intake_applied_at,
        product_status=product.status,
        available_quantity=product.available_quantity,
    )


def _apply_to_product(
    product: Product,
    *,
    status: QualityCheckStatus,
    damaged_quantity: int | None,
    remarks: str | None,
    user,
    now: datetime,
) -> None:
    if damaged_quantity is not None:
        product.damaged_quantity = damaged_quantity
        product.available_quantity = max(0, product.quantity - damaged_quantity)
    elif not product.available_quantity:
        product.available_quantity = max(0, product.quantity - product.damaged_quantity)

    product.qc_status = status
    product.qc_remarks = remarks
    product.qc_checked_at = now
    product.qc_checked_by_id = user.id
    product.status = PRODUCT_STATUS_BY_QC[status]
    product.updated_by_id = user.id
    product.version += 1


async def _fan_out_intake(
    db: AsyncSession,
    record: QualityCheckRecord,
    product: Product,
    user,
    now: datetime,
) -> None:
    locations = await list_locations_by_role(db, INTAKE_LOCATION_ROLE)
    if not locations:
        raise AppException(
            409,
            f"No active locations with role {INTAKE_LOCATION_ROLE}",
            ErrorCode.INTAKE_LOCATIONS_NOT_CONFIGURED,
        )

    if product.available_quantity > 0:
        for location in locations:
            await stock_ledger_service.increment(
                db,
                product_id=product.id,
                location_id=location.id,
                delta=product.available_quantity,
                actor_user=user,
                movement_type=InventoryMovementType.STOCK_IN,
                reference_type=InventoryReferenceType.QC_INTAKE,
                reference_id=record.id,
            )

    record.intake_applied_at = now

    logger.info(
        "QC intake applied",
        extra={
            "product_id": product.id,
            "quantity": product.available_quantity,
            "locations": [loc.id for loc in locations],
        },
    )


# =====================================================
# SUBMIT
# =====================================================
async def submit_quality_check(
    db: AsyncSession,
    payload: QualityCheckSubmitSchema,
    user,
) -> QualityCheckOut:
    status = _parse_status(payload.status)

    try:
        product = await get_product(db, payload.product_id, for_update=True)

        damaged = payload.damaged_quantity
        if damaged is not None and (damaged < 0 or damaged > product.quantity):
            raise AppException(
                400,
                "Damaged quantity must be between 0 and the product quantity",
                ErrorCode.VALIDATION_ERROR,
                details={"quantity": product.quantity, "damaged_quantity": damaged},
            )

        now = datetime.now(timezone.utc)

        record = await db.scalar(
            select(QualityCheckRecord)
            .where(QualityCheckRecord.product_id == product.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if record is None:
            record = QualityCheckRecord(
                product_id=product.id,
                created_by_id=user.id,
            )
            db.add(record)

        record.status = status
        record.damaged_quantity = damaged
        record.remarks = payload.remarks
        record.checked_by_id = user.id
        record.checked_at = now
        record.updated_by_id = user.id
        await db.flush()

        _apply_to_product(
            product,
            status=status,
            damaged_quantity=damaged,
            remarks=payload.remarks,
            user=user,
            now=now,
        )

        if status == QualityCheckStatus.approved and record.intake_applied_at is None:
            await _fan_out_intake(db, record, product, user, now)

        await db.flush()
        result = _map_record(record, product)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Quality check submitted",
        extra={
            "product_id": product.id,
            "status": status.value,
            "user_id": user.id,
        },
    )
    return result


# =====================================================
# GET
# =====================================================
async def get_quality_check(db: AsyncSession, product_id: int) -> QualityCheckOut:
    product = await get_product(db, product_id)

    record = await db.scalar(
        select(QualityCheckRecord).where(
            QualityCheckRecord.product_id == product_id,
        )
    )
    if not record:
        raise AppException(
            404,
            "Quality check not found",
            ErrorCode.QUALITY_CHECK_NOT_FOUND,
        )
    return _map_record(record, product)
