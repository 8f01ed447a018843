from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, InsufficientStockError
from app.models.enums.manifest_approval_status import ManifestApprovalStatus
from app.models.masters.product_models import Product
from app.schemas.inventory.transfer_manifest_schemas import (
    ManifestCreateSchema,
    ManifestUpdateSchema,
    ManifestApproveSchema,
    ManifestItemSchema,
)
from app.services.inventory.transfer_manifest_service import (
    create_manifest,
    get_manifest,
    edit_manifest,
    approve_manifest,
    delete_manifest,
)


def _items(**quantities):
    return [
        ManifestItemSchema(product_id=int(pid.lstrip("p")), quantity=qty)
        for pid, qty in quantities.items()
    ]


@pytest.fixture
async def world(factory, actor):
    source = await factory.location("warehouse", role="ROLE_PURCHASER")
    destination = await factory.location("dubai-store", role="ROLE_STORE")
    x = await factory.product("SKU-X", unit_price="100.00", currency="INR")
    y = await factory.product("SKU-Y", unit_price="40.00", currency="INR")
    await factory.stock(actor, x, source, 20)
    await factory.stock(actor, y, source, 5)
    return SimpleNamespace(source=source, destination=destination, x=x, y=y)


def _create(world, box="BOX-1", **quantities):
    return ManifestCreateSchema(
        box_number=box,
        source_location_id=world.source,
        items=_items(**quantities),
    )


async def test_create_moves_stock_in_transit(db, factory, actor, world):
    manifest = await create_manifest(
        db, _create(world, **{f"p{world.x}": 10, f"p{world.y}": 2}), actor
    )

    assert manifest.approval_status == ManifestApprovalStatus.draft
    assert manifest.total_quantity == 12
    assert await factory.quantity(world.x, world.source) == 10
    assert await factory.quantity(world.y, world.source) == 3
    assert await factory.quantity(world.x, world.destination) is None


async def test_create_failing_line_rolls_back_earlier_lines(db, factory, actor, world):
    with pytest.raises(InsufficientStockError) as exc:
        await create_manifest(
            db, _create(world, **{f"p{world.x}": 10, f"p{world.y}": 6}), actor
        )

    assert exc.value.available == 5
    assert exc.value.requested == 6
    assert await factory.quantity(world.x, world.source) == 20
    assert await factory.quantity(world.y, world.source) == 5
    assert await factory.journal(world.x, world.source) == [20]


async def test_duplicate_box_number(db, actor, world):
    await create_manifest(db, _create(world, **{f"p{world.x}": 1}), actor)

    with pytest.raises(AppException) as exc:
        await create_manifest(db, _create(world, **{f"p{world.x}": 1}), actor)
    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.MANIFEST_BOX_EXISTS


async def test_empty_and_duplicate_lines(db, actor, world):
    with pytest.raises(AppException) as exc:
        await create_manifest(db, _create(world), actor)
    assert exc.value.error_code == ErrorCode.EMPTY_LINE_ITEMS

    payload = ManifestCreateSchema(
        box_number="BOX-DUP",
        source_location_id=world.source,
        items=[
            ManifestItemSchema(product_id=world.x, quantity=1),
            ManifestItemSchema(product_id=world.x, quantity=2),
        ],
    )
    with pytest.raises(AppException) as exc:
        await create_manifest(db, payload, actor)
    assert exc.value.error_code == ErrorCode.DUPLICATE_LINE_ITEM


async def test_edit_reconciles_against_persisted_items(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 5}), actor)

    edited = await edit_manifest(
        db,
        manifest.id,
        ManifestUpdateSchema(items=_items(**{f"p{world.x}": 8, f"p{world.y}": 2})),
        actor,
    )
    assert edited.total_quantity == 10
    assert edited.version == manifest.version + 1
    assert await factory.quantity(world.x, world.source) == 12
    assert await factory.quantity(world.y, world.source) == 3

    await edit_manifest(
        db,
        manifest.id,
        ManifestUpdateSchema(items=_items(**{f"p{world.y}": 2})),
        actor,
    )
    assert await factory.quantity(world.x, world.source) == 20
    assert await factory.quantity(world.y, world.source) == 3


async def test_edit_with_stale_version(db, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 1}), actor)

    with pytest.raises(AppException) as exc:
        await edit_manifest(
            db,
            manifest.id,
            ManifestUpdateSchema(items=_items(**{f"p{world.x}": 2}), version=99),
            actor,
        )
    assert exc.value.error_code == ErrorCode.MANIFEST_VERSION_CONFLICT


async def test_approve_converts_currency(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 10}), actor)

    approved = await approve_manifest(
        db,
        manifest.id,
        ManifestApproveSchema(
            destination_location_id=world.destination,
            currency="AED",
            exchange_rate=Decimal("0.044"),
        ),
        actor,
    )

    assert approved.approval_status == ManifestApprovalStatus.approved
    assert approved.approved_by == actor.id

    row = await factory.entry_row(world.x, world.destination)
    assert row.quantity == 10
    assert row.currency == "AED"
    assert row.unit_price == Decimal("4.40")
    assert row.manifest_id == manifest.id

    # catalog untouched unless repricing is requested
    price = await db.scalar(select(Product.unit_price).where(Product.id == world.x))
    assert price == Decimal("100.00")


async def test_approve_can_reprice_catalog(db, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 1}), actor)

    await approve_manifest(
        db,
        manifest.id,
        ManifestApproveSchema(
            destination_location_id=world.destination,
            currency="AED",
            exchange_rate=Decimal("0.044"),
            reprice_catalog=True,
        ),
        actor,
    )

    row = await db.execute(
        select(Product.unit_price, Product.currency).where(Product.id == world.x)
    )
    assert tuple(row.one()) == (Decimal("4.40"), "AED")


async def test_approve_same_currency_keeps_price(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.y}": 2}), actor)

    await approve_manifest(
        db,
        manifest.id,
        ManifestApproveSchema(destination_location_id=world.destination),
        actor,
    )

    row = await factory.entry_row(world.y, world.destination)
    assert row.unit_price == Decimal("40.00")
    assert row.currency == "INR"
    assert row.exchange_rate is None


async def test_approve_requires_rate_for_currency_change(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 3}), actor)

    with pytest.raises(AppException) as exc:
        await approve_manifest(
            db,
            manifest.id,
            ManifestApproveSchema(destination_location_id=world.destination, currency="AED"),
            actor,
        )

    assert exc.value.error_code == ErrorCode.EXCHANGE_RATE_REQUIRED
    assert await factory.quantity(world.x, world.destination) is None
    assert (await get_manifest(db, manifest.id)).approval_status == ManifestApprovalStatus.draft


async def test_approve_twice_credits_once(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 4}), actor)
    approval = ManifestApproveSchema(destination_location_id=world.destination)

    await approve_manifest(db, manifest.id, approval, actor)
    with pytest.raises(AppException) as exc:
        await approve_manifest(db, manifest.id, approval, actor)

    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.MANIFEST_ALREADY_APPROVED
    assert await factory.quantity(world.x, world.destination) == 4


async def test_destination_must_differ_from_source(db, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 1}), actor)

    with pytest.raises(AppException) as exc:
        await approve_manifest(
            db,
            manifest.id,
            ManifestApproveSchema(destination_location_id=world.source),
            actor,
        )
    assert exc.value.error_code == ErrorCode.MANIFEST_INVALID_DESTINATION


async def test_delete_restores_last_persisted_items(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 5}), actor)
    await edit_manifest(
        db,
        manifest.id,
        ManifestUpdateSchema(items=_items(**{f"p{world.x}": 7, f"p{world.y}": 1})),
        actor,
    )

    await delete_manifest(db, manifest.id, actor)

    assert await factory.quantity(world.x, world.source) == 20
    assert await factory.quantity(world.y, world.source) == 5

    with pytest.raises(AppException) as exc:
        await delete_manifest(db, manifest.id, actor)
    assert exc.value.error_code == ErrorCode.MANIFEST_NOT_FOUND
    assert await factory.quantity(world.x, world.source) == 20


async def test_approved_manifest_cannot_change(db, factory, actor, world):
    manifest = await create_manifest(db, _create(world, **{f"p{world.x}": 2}), actor)
    await approve_manifest(
        db,
        manifest.id,
        ManifestApproveSchema(destination_location_id=world.destination),
        actor,
    )

    with pytest.raises(AppException) as exc:
        await delete_manifest(db, manifest.id, actor)
    assert exc.value.error_code == ErrorCode.MANIFEST_ALREADY_APPROVED

    with pytest.raises(AppException):
        await edit_manifest(
            db,
            manifest.id,
            ManifestUpdateSchema(items=_items(**{f"p{world.x}": 1})),
            actor,
        )
    assert await factory.quantity(world.x, world.source) == 18


async def test_rate_is_kept_only_when_lines_were_converted(db, actor, world):
    same = await create_manifest(db, _create(world, "BOX-SAME", **{f"p{world.y}": 1}), actor)
    approved = await approve_manifest(
        db,
        same.id,
        ManifestApproveSchema(
            destination_location_id=world.destination,
            currency="INR",
            exchange_rate=Decimal("0.044"),
        ),
        actor,
    )
    assert approved.exchange_rate is None

    converted = await create_manifest(db, _create(world, "BOX-FX", **{f"p{world.x}": 1}), actor)
    approved = await approve_manifest(
        db,
        converted.id,
        ManifestApproveSchema(
            destination_location_id=world.destination,
            currency="AED",
            exchange_rate=Decimal("0.044"),
        ),
        actor,
    )
    assert approved.exchange_rate == Decimal("0.044")
