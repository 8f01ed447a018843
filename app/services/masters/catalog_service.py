# app/services/masters/catalog_service.py

from decimal import Decimal
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.masters.product_models import Product
from app.core.config import SUPPORTED_CURRENCIES
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.decimal_utils import quantize_money
from app.utils.logger import get_logger

logger = get_logger(__name__)


def validate_currency(currency: str | None) -> str:
    code = (currency or "").upper()
    if code not in SUPPORTED_CURRENCIES:
        raise AppException(
            400,
            f"Currency must be one of {', '.join(sorted(SUPPORTED_CURRENCIES))}",
            ErrorCode.INVALID_CURRENCY,
        )
    return code


async def get_product(
    db: AsyncSession,
    product_id: int,
    *,
    for_update: bool = False,
) -> Product:
    stmt = select(Product).where(
        Product.id == product_id,
        Product.is_deleted.is_(False),
    )
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)

    product = await db.scalar(stmt)
    if not product:
        raise AppException(
            404,
            f"Product {product_id} not found",
            ErrorCode.PRODUCT_NOT_FOUND,
        )
    return product


async def get_products(db: AsyncSession, product_ids) -> dict[int, Product]:
    ids = set(product_ids)
    rows = await db.execute(
        select(Product).where(
            Product.id.in_(ids),
            Product.is_deleted.is_(False),
        )
    )
    products = {p.id: p for p in rows.scalars().all()}

    missing = ids - products.keys()
    if missing:
        raise AppException(
            404,
            f"Invalid product(s): {sorted(missing)}",
            ErrorCode.PRODUCT_NOT_FOUND,
            details={"product_ids": sorted(missing)},
        )
    return products


async def set_product_pricing(
    db: AsyncSession,
    product_id: int,
    *,
    unit_price: Decimal,
    currency: str,
    actor_user,
) -> Product:
    product = await get_product(db, product_id, for_update=True)

    old_price, old_currency = product.unit_price, product.currency
    product.unit_price = quantize_money(unit_price)
    product.currency = validate_currency(currency)
    product.version += 1
    product.updated_by_id = actor_user.id
    product.updated_at = datetime.now(timezone.utc)

    await db.flush()

    logger.info(
        "Catalog price changed",
        extra={
            "product_id": product_id,
            "old_price": str(old_price),
            "old_currency": old_currency,
            "new_price": str(product.unit_price),
            "new_currency": product.currency,
        },
    )
    return product
