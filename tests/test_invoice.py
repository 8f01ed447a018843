from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException, InsufficientStockError
from app.models.billing.invoice_models import Invoice
from app.schemas.billing.invoice_schemas import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceItemCreate,
)
from app.services.billing.invoice_service import (
    create_invoice,
    get_invoice,
    update_invoice,
    delete_invoice,
)


@pytest.fixture
async def shop(factory, actor):
    store = await factory.location("showroom", role="ROLE_STORE")
    a = await factory.product("SKU-A", unit_price="50.00")
    b = await factory.product("SKU-B", unit_price="20.00")
    await factory.stock(actor, a, store, 10)
    await factory.stock(actor, b, store, 10)
    return SimpleNamespace(store=store, a=a, b=b)


def _line(product_id, quantity, unit_price="50", discount="0", vat="0"):
    return InvoiceItemCreate(
        product_id=product_id,
        quantity=quantity,
        unit_price=Decimal(unit_price),
        discount_percent=Decimal(discount),
        vat_percent=Decimal(vat),
    )


async def test_create_then_delete_restores_stock(db, factory, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(
            location_id=shop.store,
            invoice_number="INV-001",
            items=[_line(shop.a, 3, "50", "10", "5")],
        ),
        actor,
    )

    assert await factory.quantity(shop.a, shop.store) == 7
    assert invoice.items[0].line_total == Decimal("141.75")
    assert invoice.net_amount == Decimal("141.75")

    await delete_invoice(db, invoice.id, actor)
    assert await factory.quantity(shop.a, shop.store) == 10

    with pytest.raises(AppException) as exc:
        await delete_invoice(db, invoice.id, actor)
    assert exc.value.error_code == ErrorCode.INVOICE_NOT_FOUND
    assert await factory.quantity(shop.a, shop.store) == 10


async def test_totals_include_tax(db, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(
            location_id=shop.store,
            tax_amount=Decimal("10"),
            items=[
                _line(shop.a, 3, "50", "10", "5"),
                _line(shop.b, 1, "200"),
            ],
        ),
        actor,
    )

    assert invoice.invoice_number.startswith("INV-")
    assert invoice.sub_total == Decimal("350.00")
    assert invoice.discount_total == Decimal("15.00")
    assert invoice.vat_total == Decimal("6.75")
    assert invoice.net_amount == Decimal("351.75")


async def test_edit_reconciles_against_persisted_lines(db, factory, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(location_id=shop.store, items=[_line(shop.a, 5)]),
        actor,
    )
    assert await factory.quantity(shop.a, shop.store) == 5

    await update_invoice(
        db,
        invoice.id,
        InvoiceUpdate(items=[_line(shop.a, 8), _line(shop.b, 2, "20")]),
        actor,
    )
    assert await factory.quantity(shop.a, shop.store) == 2
    assert await factory.quantity(shop.b, shop.store) == 8

    updated = await update_invoice(
        db,
        invoice.id,
        InvoiceUpdate(items=[_line(shop.b, 2, "20")]),
        actor,
    )
    assert await factory.quantity(shop.a, shop.store) == 10
    assert await factory.quantity(shop.b, shop.store) == 8

    assert [i.product_id for i in updated.items] == [shop.b]
    assert updated.net_amount == Decimal("40.00")
    assert updated.version == 3


async def test_delete_after_edits_uses_latest_lines(db, factory, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(location_id=shop.store, items=[_line(shop.a, 2)]),
        actor,
    )
    await update_invoice(
        db,
        invoice.id,
        InvoiceUpdate(items=[_line(shop.a, 4), _line(shop.b, 3, "20")]),
        actor,
    )

    await delete_invoice(db, invoice.id, actor)

    assert await factory.quantity(shop.a, shop.store) == 10
    assert await factory.quantity(shop.b, shop.store) == 10


async def test_create_failing_line_rolls_back(db, factory, actor, shop):
    with pytest.raises(InsufficientStockError):
        await create_invoice(
            db,
            InvoiceCreate(
                location_id=shop.store,
                invoice_number="INV-FAIL",
                items=[_line(shop.a, 4), _line(shop.b, 11, "20")],
            ),
            actor,
        )

    assert await factory.quantity(shop.a, shop.store) == 10
    assert await factory.quantity(shop.b, shop.store) == 10
    assert await db.scalar(select(Invoice.id).where(Invoice.invoice_number == "INV-FAIL")) is None


async def test_edit_beyond_stock_keeps_previous_state(db, factory, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(location_id=shop.store, items=[_line(shop.a, 5)]),
        actor,
    )

    with pytest.raises(InsufficientStockError) as exc:
        await update_invoice(
            db,
            invoice.id,
            InvoiceUpdate(items=[_line(shop.a, 16)]),
            actor,
        )

    assert exc.value.available == 5
    assert exc.value.requested == 11
    assert await factory.quantity(shop.a, shop.store) == 5
    assert (await get_invoice(db, invoice.id)).items[0].quantity == 5


async def test_duplicate_invoice_number(db, actor, shop):
    payload = InvoiceCreate(
        location_id=shop.store,
        invoice_number="INV-SAME",
        items=[_line(shop.a, 1)],
    )
    await create_invoice(db, payload, actor)

    with pytest.raises(AppException) as exc:
        await create_invoice(db, payload, actor)
    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.INVOICE_NUMBER_EXISTS


async def test_unknown_location_and_product(db, actor, shop):
    with pytest.raises(AppException) as exc:
        await create_invoice(
            db, InvoiceCreate(location_id=999, items=[_line(shop.a, 1)]), actor
        )
    assert exc.value.error_code == ErrorCode.LOCATION_NOT_FOUND

    with pytest.raises(AppException) as exc:
        await create_invoice(
            db, InvoiceCreate(location_id=shop.store, items=[_line(999, 1)]), actor
        )
    assert exc.value.error_code == ErrorCode.PRODUCT_NOT_FOUND


async def test_get_missing_invoice(db, shop):
    with pytest.raises(AppException) as exc:
        await get_invoice(db, 12345)
    assert exc.value.status_code == 404


async def test_vat_above_one_hundred_percent_is_stored(db, actor, shop):
    invoice = await create_invoice(
        db,
        InvoiceCreate(location_id=shop.store, items=[_line(shop.a, 1, "50", "0", "150")]),
        actor,
    )

    assert invoice.items[0].vat_percent == Decimal("150")
    assert invoice.vat_total == Decimal("75.00")
    assert invoice.net_amount == Decimal("125.00")
