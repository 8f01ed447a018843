from datetime import datetime, timezone
import logging
import secrets

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.billing.invoice_models import Invoice, InvoiceItem

from app.schemas.billing.invoice_schemas import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceOut,
    InvoiceItemOut,
)

from app.constants.inventory_movement_type import (
    InventoryMovementType,
    InventoryReferenceType,
)
from app.constants.error_codes import ErrorCode

from app.core.exceptions import AppException
from app.services.inventory import stock_ledger_service
from app.services.inventory.location_service import get_location
from app.services.inventory.valuation_service import (
    compute_line_total,
    summarize_lines,
)
from app.services.masters.catalog_service import get_products
from app.utils.line_items import validate_line_items, diff_quantities

logger = logging.getLogger(__name__)


def _generate_invoice_number() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"INV-{stamp}-{secrets.token_hex(2)}"


async def _get_invoice_for_update(db: AsyncSession, invoice_id: int) -> Invoice:
    invoice = await db.scalar(
        select(Invoice)
        .where(
            Invoice.id == invoice_id,
            Invoice.is_deleted.is_(False),
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if not invoice:
        raise AppException(404, "Invoice not found", ErrorCode.INVOICE_NOT_FOUND)
    return invoice


def _map_invoice(invoice: Invoice) -> InvoiceOut:
    return InvoiceOut(
        id=invoice.id,
        invoice_number=invoice.invoice_number,
        invoice_date=invoice.invoice_date,
        location_id=invoice.location_id,
        customer_name=invoice.customer_name,
        notes=invoice.notes,
        sub_total=invoice.sub_total,
        discount_total=invoice.discount_total,
        vat_total=invoice.vat_total,
        tax_amount=invoice.tax_amount,
        net_amount=invoice.net_amount,
        version=invoice.version,
        created_by=invoice.created_by_id,
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        items=[InvoiceItemOut.model_validate(i) for i in invoice.items],
    )


def _build_lines(invoice: Invoice, items, products) -> list:
    """Price every payload line onto the invoice, reusing persisted rows by product."""
    existing = {i.product_id: i for i in invoice.items}
    lines, totals = [], []

    for item in items:
        priced = compute_line_total(
            item.quantity,
            item.unit_price,
            item.discount_percent,
            item.vat_percent,
        )
        line = existing.get(item.product_id) or InvoiceItem(
            product_id=item.product_id,
        )
        line.description = item.description or products[item.product_id].name
        line.quantity = item.quantity
        line.unit_price = item.unit_price
        line.discount_percent = item.discount_percent
        line.discount_amount = priced.discount_amount
        line.vat_percent = item.vat_percent
        line.vat_amount = priced.vat_amount
        line.line_total = priced.total_price

        lines.append(line)
        totals.append(priced)

    invoice.items = lines
    return totals


def _apply_totals(invoice: Invoice, line_totals, tax_amount) -> None:
    totals = summarize_lines(line_totals, tax_amount)
    invoice.sub_total = totals.sub_total
    invoice.discount_total = totals.discount_total
    invoice.vat_total = totals.vat_total
    invoice.tax_amount = totals.tax_amount
    invoice.net_amount = totals.net_amount


async def _consume(db, invoice: Invoice, product_id: int, quantity: int, user) -> None:
    await stock_ledger_service.decrement_if_sufficient(
        db,
        product_id=product_id,
        location_id=invoice.location_id,
        delta=quantity,
        actor_user=user,
        movement_type=InventoryMovementType.STOCK_OUT,
        reference_type=InventoryReferenceType.INVOICE,
        reference_id=invoice.id,
    )


async def _restore(db, invoice: Invoice, product_id: int, quantity: int, user) -> None:
    await stock_ledger_service.increment(
        db,
        product_id=product_id,
        location_id=invoice.location_id,
        delta=quantity,
        actor_user=user,
        movement_type=InventoryMovementType.STOCK_IN,
        reference_type=InventoryReferenceType.INVOICE,
        reference_id=invoice.id,
    )


async def create_invoice(db: AsyncSession, payload: InvoiceCreate, user) -> InvoiceOut:
    quantities = validate_line_items(payload.items)

    try:
        await get_location(db, payload.location_id)
        products = await get_products(db, quantities.keys())

        invoice_number = payload.invoice_number or _generate_invoice_number()
        exists = await db.scalar(
            select(Invoice.id).where(Invoice.invoice_number == invoice_number)
        )
        if exists:
            raise AppException(
                409,
                f"Invoice number {invoice_number} already exists",
                ErrorCode.INVOICE_NUMBER_EXISTS,
            )

        invoice = Invoice(
            invoice_number=invoice_number,
            invoice_date=payload.invoice_date or datetime.now(timezone.utc).date(),
            location_id=payload.location_id,
            customer_name=payload.customer_name,
            notes=payload.notes,
            created_by_id=user.id,
            updated_by_id=user.id,
        )
        line_totals = _build_lines(invoice, payload.items, products)
        _apply_totals(invoice, line_totals, payload.tax_amount)

        db.add(invoice)
        await db.flush()

        for item in payload.items:
            await _consume(db, invoice, item.product_id, item.quantity, user)

        await db.flush()
        result = _map_invoice(invoice)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Invoice created",
        extra={
            "invoice_id": result.id,
            "invoice_number": result.invoice_number,
            "location_id": result.location_id,
            "net_amount": str(result.net_amount),
            "user_id": user.id,
        },
    )
    return result


async def get_invoice(db: AsyncSession, invoice_id: int) -> InvoiceOut:
    invoice = await db.scalar(
        select(Invoice).where(
            Invoice.id == invoice_id,
            Invoice.is_deleted.is_(False),
        )
        .execution_options(populate_existing=True)
    )
    if not invoice:
        raise AppException(404, "Invoice not found", ErrorCode.INVOICE_NOT_FOUND)

    return _map_invoice(invoice)


async def update_invoice(
    db: AsyncSession,
    invoice_id: int,
    payload: InvoiceUpdate,
    user,
) -> InvoiceOut:
    new_quantities = validate_line_items(payload.items)

    try:
        invoice = await _get_invoice_for_update(db, invoice_id)

        if payload.version is not None and payload.version != invoice.version:
            raise AppException(
                409,
                "Invoice was modified by another user",
                ErrorCode.INVOICE_VERSION_CONFLICT,
            )

        products = await get_products(db, new_quantities.keys())

        old_quantities = {i.product_id: i.quantity for i in invoice.items}
        changes = diff_quantities(old_quantities, new_quantities)

        for product_id, change in changes.items():
            if change > 0:
                await _consume(db, invoice, product_id, change, user)
            else:
                await _restore(db, invoice, product_id, -change, user)

        line_totals = _build_lines(invoice, payload.items, products)
        tax_amount = (
            payload.tax_amount
            if payload.tax_amount is not None
            else invoice.tax_amount
        )
        _apply_totals(invoice, line_totals, tax_amount)

        if payload.notes is not None:
            invoice.notes = payload.notes

        invoice.version += 1
        invoice.updated_by_id = user.id

        await db.flush()
        result = _map_invoice(invoice)
        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Invoice updated",
        extra={
            "invoice_id": invoice_id,
            "changes": changes,
            "net_amount": str(result.net_amount),
            "user_id": user.id,
        },
    )
    return result


async def delete_invoice(db: AsyncSession, invoice_id: int, user) -> None:
    try:
        invoice = await _get_invoice_for_update(db, invoice_id)

        for item in invoice.items:
            await _restore(db, invoice, item.product_id, item.quantity, user)

        invoice.is_deleted = True
        invoice.updated_by_id = user.id
        invoice.version += 1

        await db.commit()

    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Invoice deleted",
        extra={"invoice_id": invoice_id, "user_id": user.id},
    )
