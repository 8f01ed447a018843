from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.inventory.inventory_location_models import InventoryLocation
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode


async def get_location(
    db: AsyncSession,
    location_id: int,
    *,
    active_only: bool = True,
) -> InventoryLocation:
    stmt = select(InventoryLocation).where(
        InventoryLocation.id == location_id,
        InventoryLocation.is_deleted.is_(False),
    )
    if active_only:
        stmt = stmt.where(InventoryLocation.is_active.is_(True))

    location = await db.scalar(stmt)
    if not location:
        raise AppException(
            404,
            f"Location {location_id} not found",
            ErrorCode.LOCATION_NOT_FOUND,
        )
    return location


async def list_locations_by_role(
    db: AsyncSession,
    role: str,
) -> list[InventoryLocation]:
    rows = await db.execute(
        select(InventoryLocation)
        .where(
            InventoryLocation.role == role,
            InventoryLocation.is_active.is_(True),
            InventoryLocation.is_deleted.is_(False),
        )
        .order_by(InventoryLocation.id)
    )
    return list(rows.scalars().all())
