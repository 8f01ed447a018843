from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_role
from app.constants.user_roles import UserRole
from app.utils.response import success_response, APIResponse, LEDGER_ERROR_RESPONSES

from app.schemas.quality.quality_check_schemas import (
    QualityCheckSubmitSchema,
    QualityCheckOut,
)
from app.services.quality.quality_check_service import (
    submit_quality_check,
    get_quality_check,
)

router = APIRouter(
    prefix="/quality-checks",
    tags=["Quality Checks"],
)


@router.post(
    "",
    response_model=APIResponse[QualityCheckOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def submit_quality_check_api(
    payload: QualityCheckSubmitSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.qc])),
):
    record = await submit_quality_check(db, payload, user)
    return success_response(
        "Quality check submitted successfully",
        record,
    )


@router.get(
    "/{product_id}",
    response_model=APIResponse[QualityCheckOut],
)
async def get_quality_check_api(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.qc, UserRole.inventory])),
):
    record = await get_quality_check(db, product_id)
    return success_response(
        "Quality check retrieved successfully",
        record,
    )
