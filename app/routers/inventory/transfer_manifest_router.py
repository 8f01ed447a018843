from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_role
from app.constants.user_roles import UserRole
from app.utils.response import success_response, APIResponse, LEDGER_ERROR_RESPONSES

from app.schemas.inventory.transfer_manifest_schemas import (
    ManifestCreateSchema,
    ManifestUpdateSchema,
    ManifestApproveSchema,
    ManifestOut,
)
from app.services.inventory.transfer_manifest_service import (
    create_manifest,
    get_manifest,
    edit_manifest,
    approve_manifest,
    delete_manifest,
)

router = APIRouter(
    prefix="/transfer-manifests",
    tags=["Transfer Manifests"],
)


@router.post(
    "",
    response_model=APIResponse[ManifestOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def create_manifest_api(
    payload: ManifestCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    manifest = await create_manifest(db, payload, user)
    return success_response("Manifest created successfully", manifest)


@router.get(
    "/{manifest_id}",
    response_model=APIResponse[ManifestOut],
)
async def get_manifest_api(
    manifest_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    manifest = await get_manifest(db, manifest_id)
    return success_response("Manifest retrieved successfully", manifest)


@router.put(
    "/{manifest_id}",
    response_model=APIResponse[ManifestOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def edit_manifest_api(
    manifest_id: int,
    payload: ManifestUpdateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    manifest = await edit_manifest(db, manifest_id, payload, user)
    return success_response("Manifest updated successfully", manifest)


@router.post(
    "/{manifest_id}/approve",
    response_model=APIResponse[ManifestOut],
    responses=LEDGER_ERROR_RESPONSES,
)
async def approve_manifest_api(
    manifest_id: int,
    payload: ManifestApproveSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    manifest = await approve_manifest(db, manifest_id, payload, user)
    return success_response("Manifest approved successfully", manifest)


@router.delete(
    "/{manifest_id}",
    response_model=APIResponse[None],
    responses=LEDGER_ERROR_RESPONSES,
)
async def delete_manifest_api(
    manifest_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role([UserRole.inventory])),
):
    await delete_manifest(db, manifest_id, user)
    return success_response("Manifest deleted successfully")
