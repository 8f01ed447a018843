from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_role
from app.constants.user_roles import UserRole
from app.utils.response import success_response, APIResponse, LEDGER_ERROR_RESPONSES

from app.schemas.billing.invoice_schemas import (
    InvoiceCreate,
    InvoiceUpdate,
    InvoiceOut,
)

from app.services.billing.invoice_service import (
    create_invoice,
    get_invoice,
    update_invoice,
    delete_invoice,
)

router = APIRouter(
    prefix="/sales-invoices",
    tags=["Sales Invoices"],
)


@router.post(
    "",
    response_model=APIResponse[InvoiceOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def create_invoice_api(
    payload: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.cashier])),
):
    invoice = await create_invoice(db, payload, user)
    return success_response(
        "Invoice created successfully",
        invoice,
    )


@router.get(
    "/{invoice_id}",
    response_model=APIResponse[InvoiceOut],
)
async def get_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.cashier])),
):
    invoice = await get_invoice(db, invoice_id)
    return success_response(
        "Invoice retrieved successfully",
        invoice,
    )


@router.put(
    "/{invoice_id}",
    response_model=APIResponse[InvoiceOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def update_invoice_api(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.cashier])),
):
    invoice = await update_invoice(db, invoice_id, payload, user)
    return success_response(
        "Invoice updated successfully",
        invoice,
    )


@router.delete(
    "/{invoice_id}",
    response_model=APIResponse[None],
    responses=LEDGER_ERROR_RESPONSES,
)
async def delete_invoice_api(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.cashier])),
):
    await delete_invoice(db, invoice_id, user)
    return success_response("Invoice deleted successfully")
