# app/services/inventory/transfer_manifest_service.py

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.inventory.transfer_manifest_models import (
    TransferManifest,
    TransferManifestItem,
)
from app.models.enums.manifest_approval_status import ManifestApprovalStatus
from app.schemas.inventory.transfer_manifest_schemas import (
    ManifestCreateSchema,
    ManifestUpdateSchema,
    ManifestApproveSchema,
    ManifestOut,
    ManifestItemOut,
)
from app.constants.error_codes import ErrorCode
from app.constants.inventory_movement_type import (
    InventoryMovementType,
    InventoryReferenceType,
)
from app.core.config import TRANSFER_REPRICES_CATALOG
from app.core.exceptions import AppException
from app.services.inventory import stock_ledger_service
from app.services.inventory.location_service import get_location
from app.services.inventory.valuation_service import convert_price
from app.services.masters.catalog_service import (
    get_products,
    set_product_pricing,
    validate_currency,
)
from app.utils.line_items import validate_line_items, diff_quantities
from app.utils.logger import get_logger

logger = get_logger(__name__)


# =====================================================
# HELPERS
# =====================================================
def _map_manifest(manifest: TransferManifest) -> ManifestOut:
    return ManifestOut(
        id=manifest.id,
        box_number=manifest.box_number,
        source_location_id=manifest.source_location_id,
        destination_location_id=manifest.destination_location_id,
        currency=manifest.currency,
        exchange_rate=manifest.exchange_rate,
        approval_status=manifest.approval_status,
        total_quantity=manifest.total_quantity,
        shipment_date=manifest.shipment_date,
        notes=manifest.notes,
        version=manifest.version,
        created_by=manifest.created_by_id,
        approved_by=manifest.approved_by_id,
        approved_at=manifest.approved_at,
        created_at=manifest.created_at,
        updated_at=manifest.updated_at,
        items=[
            ManifestItemOut(
                product_id=i.product_id,
                quantity=i.quantity,
                description=i.description,
            )
            for i in manifest.items
        ],
    )


async def _get_manifest_for_update(
    db: AsyncSession,
    manifest_id: int,
) -> TransferManifest:
    manifest = await db.scalar(
        select(TransferManifest)
        .where(
            TransferManifest.id == manifest_id,
            TransferManifest.is_deleted.is_(False),
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not manifest:
        raise AppException(404, "Manifest not found", ErrorCode.MANIFEST_NOT_FOUND)
    return manifest


def _ensure_draft(manifest: TransferManifest, action: str) -> None:
    if manifest.approval_status != ManifestApprovalStatus.draft:
        raise AppException(
            409,
            f"Approved manifest cannot be {action}",
            ErrorCode.MANIFEST_ALREADY_APPROVED,
        )


async def _release_to_source(
    db: AsyncSession,
    manifest: TransferManifest,
    product_id: int,
    quantity: int,
    user,
) -> None:
    await stock_ledger_service.increment(
        db,
        product_id=product_id,
        location_id=manifest.source_location_id,
        delta=quantity,
        actor_user=user,
        movement_type=InventoryMovementType.TRANSFER_IN,
        reference_type=InventoryReferenceType.TRANSFER,
        reference_id=manifest.id,
    )


async def _take_from_source(
    db: AsyncSession,
    manifest: TransferManifest,
    product_id: int,
    quantity: int,
    user,
) -> None:
    await stock_ledger_service.decrement_if_sufficient(
        db,
        product_id=product_id,
        location_id=manifest.source_location_id,
        delta=quantity,
        actor_user=user,
        movement_type=InventoryMovementType.TRANSFER_OUT,
        reference_type=InventoryReferenceType.TRANSFER,
        reference_id=manifest.id,
    )


# =====================================================
# CREATE
# =====================================================
async def create_manifest(
    db: AsyncSession,
    payload: ManifestCreateSchema,
    user,
) -> ManifestOut:
    quantities = validate_line_items(payload.items)
    currency = validate_currency(payload.currency) if payload.currency else None

    try:
        exists = await db.scalar(
            select(TransferManifest.id).where(
                TransferManifest.box_number == payload.box_number,
            )
        )
        if exists:
            raise AppException(
                409,
                f"Manifest with box number {payload.box_number} already exists",
                ErrorCode.MANIFEST_BOX_EXISTS,
            )

        await get_location(db, payload.source_location_id)
        await get_products(db, quantities.keys())

        manifest = TransferManifest(
            box_number=payload.box_number,
            source_location_id=payload.source_location_id,
            currency=currency,
            shipment_date=payload.shipment_date,
            notes=payload.notes,
            approval_status=ManifestApprovalStatus.draft,
            total_quantity=sum(quantities.values()),
            created_by_id=user.id,
            updated_by_id=user.id,
        )
        manifest.items = [
            TransferManifestItem(
                product_id=item.product_id,
                quantity=item.quantity,
                description=item.description,
            )
            for item in payload.items
        ]
        db.add(manifest)
        await db.flush()

        # list order; the first short line aborts the whole manifest
        for item in payload.items:
            await _take_from_source(db, manifest, item.product_id, item.quantity, user)

        await db.flush()
        result = _map_manifest(manifest)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Transfer manifest created",
        extra={
            "manifest_id": result.id,
            "box_number": result.box_number,
            "source_location_id": result.source_location_id,
            "total_quantity": result.total_quantity,
            "user_id": user.id,
        },
    )
    return result


# =====================================================
# GET
# =====================================================
async def get_manifest(db: AsyncSession, manifest_id: int) -> ManifestOut:
    manifest = await db.scalar(
        select(TransferManifest).where(
            TransferManifest.id == manifest_id,
            TransferManifest.is_deleted.is_(False),
        )
        .execution_options(populate_existing=True)
    )
    if not manifest:
        raise AppException(404, "Manifest not found", ErrorCode.MANIFEST_NOT_FOUND)
    return _map_manifest(manifest)


# =====================================================
# EDIT
# =====================================================
async def edit_manifest(
    db: AsyncSession,
    manifest_id: int,
    payload: ManifestUpdateSchema,
    user,
) -> ManifestOut:
    new_quantities = validate_line_items(payload.items)

    try:
        manifest = await _get_manifest_for_update(db, manifest_id)
        _ensure_draft(manifest, "edited")

        if payload.version is not None and payload.version != manifest.version:
            raise AppException(
                409,
                "Manifest was modified by another user",
                ErrorCode.MANIFEST_VERSION_CONFLICT,
            )

        await get_products(db, new_quantities.keys())

        old_quantities = {i.product_id: i.quantity for i in manifest.items}
        changes = diff_quantities(old_quantities, new_quantities)

        for product_id, change in changes.items():
            if change > 0:
                await _take_from_source(db, manifest, product_id, change, user)
            else:
                await _release_to_source(db, manifest, product_id, -change, user)

        existing = {i.product_id: i for i in manifest.items}
        items = []
        for item in payload.items:
            line = existing.get(item.product_id) or TransferManifestItem(
                product_id=item.product_id,
            )
            line.quantity = item.quantity
            line.description = item.description
            items.append(line)
        manifest.items = items

        if payload.notes is not None:
            manifest.notes = payload.notes
        if payload.shipment_date is not None:
            manifest.shipment_date = payload.shipment_date

        manifest.total_quantity = sum(new_quantities.values())
        manifest.version += 1
        manifest.updated_by_id = user.id

        await db.flush()
        result = _map_manifest(manifest)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Transfer manifest edited",
        extra={
            "manifest_id": manifest_id,
            "changes": changes,
            "user_id": user.id,
        },
    )
    return result


# =====================================================
# APPROVE
# =====================================================
async def approve_manifest(
    db: AsyncSession,
    manifest_id: int,
    payload: ManifestApproveSchema,
    user,
) -> ManifestOut:
    reprice_catalog = (
        TRANSFER_REPRICES_CATALOG
        if payload.reprice_catalog is None
        else payload.reprice_catalog
    )

    try:
        manifest = await _get_manifest_for_update(db, manifest_id)
        if manifest.approval_status == ManifestApprovalStatus.approved:
            raise AppException(
                409,
                "Manifest is already approved",
                ErrorCode.MANIFEST_ALREADY_APPROVED,
            )

        if payload.destination_location_id == manifest.source_location_id:
            raise AppException(
                400,
                "Destination must differ from the source location",
                ErrorCode.MANIFEST_INVALID_DESTINATION,
            )
        await get_location(db, payload.destination_location_id)

        transfer_currency = payload.currency or manifest.currency
        if transfer_currency:
            transfer_currency = validate_currency(transfer_currency)

        products = await get_products(db, [i.product_id for i in manifest.items])
        converted = False

        for item in manifest.items:
            product = products[item.product_id]
            currency = transfer_currency or product.currency
            unit_price = product.unit_price
            rate = None

            if currency != product.currency:
                if payload.exchange_rate is None:
                    raise AppException(
                        400,
                        f"Exchange rate required to convert {product.currency} to {currency}",
                        ErrorCode.EXCHANGE_RATE_REQUIRED,
                        details={"product_id": product.id},
                    )
                rate = payload.exchange_rate
                unit_price = convert_price(product.unit_price, rate)
                converted = True

            entry = await stock_ledger_service.increment(
                db,
                product_id=item.product_id,
                location_id=payload.destination_location_id,
                delta=item.quantity,
                actor_user=user,
                movement_type=InventoryMovementType.TRANSFER_IN,
                reference_type=InventoryReferenceType.TRANSFER,
                reference_id=manifest.id,
            )
            entry.currency = currency
            entry.unit_price = unit_price
            entry.exchange_rate = rate
            entry.manifest_id = manifest.id

            if reprice_catalog and rate is not None:
                await set_product_pricing(
                    db,
                    product.id,
                    unit_price=unit_price,
                    currency=currency,
                    actor_user=user,
                )

        now = datetime.now(timezone.utc)
        manifest.destination_location_id = payload.destination_location_id
        manifest.currency = transfer_currency
        # the rate is recorded only when some line was actually converted
        manifest.exchange_rate = payload.exchange_rate if converted else None
        manifest.approval_status = ManifestApprovalStatus.approved
        manifest.approved_by_id = user.id
        manifest.approved_at = now
        manifest.updated_by_id = user.id
        manifest.version += 1

        await db.flush()
        result = _map_manifest(manifest)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Transfer manifest approved",
        extra={
            "manifest_id": manifest_id,
            "destination_location_id": payload.destination_location_id,
            "currency": transfer_currency,
            "reprice_catalog": reprice_catalog,
            "user_id": user.id,
        },
    )
    return result


# =====================================================
# DELETE
# =====================================================
async def delete_manifest(db: AsyncSession, manifest_id: int, user) -> None:
    try:
        manifest = await _get_manifest_for_update(db, manifest_id)
        _ensure_draft(manifest, "deleted")

        for item in manifest.items:
            await _release_to_source(db, manifest, item.product_id, item.quantity, user)

        manifest.is_deleted = True
        manifest.updated_by_id = user.id
        manifest.version += 1

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Transfer manifest deleted",
        extra={"manifest_id": manifest_id, "user_id": user.id},
    )
