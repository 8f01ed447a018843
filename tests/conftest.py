import os

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-secret-key")
os.environ.setdefault("INTAKE_LOCATION_ROLE", "ROLE_PURCHASER")

from decimal import Decimal
from types import SimpleNamespace

import pytest_asyncio
from sqlalchemy import event, select, func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, enable_sqlite_foreign_keys
from app.models.users.user_models import User
from app.models.masters.product_models import Product
from app.models.inventory.inventory_location_models import InventoryLocation
from app.models.inventory.stock_ledger_models import StockLedgerEntry
from app.models.inventory.inventory_movement_models import InventoryMovement
from app.services.inventory import stock_ledger_service


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Factory:
    """Seeds rows and reads ledger state through column queries.

    Reads never go through ORM instances, since a rolled back service call
    expires everything the session holds.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def user(self, username="stock.admin", role="admin"):
        user = User(username=username, role=role)
        self.db.add(user)
        await self.db.commit()
        # detached copy so later rollbacks cannot expire it
        return SimpleNamespace(id=user.id, username=username, role=role, token_version=0)

    async def location(self, code, role=None, is_active=True) -> int:
        location = InventoryLocation(code=code, name=code.title(), role=role, is_active=is_active)
        self.db.add(location)
        await self.db.commit()
        return location.id

    async def product(self, sku, unit_price="100.00", currency="INR", quantity=0) -> int:
        product = Product(
            sku=sku,
            name=f"Product {sku}",
            unit_price=Decimal(unit_price),
            currency=currency,
            quantity=quantity,
        )
        self.db.add(product)
        await self.db.commit()
        return product.id

    async def stock(self, actor, product_id, location_id, quantity) -> None:
        await stock_ledger_service.increment(
            self.db,
            product_id=product_id,
            location_id=location_id,
            delta=quantity,
            actor_user=actor,
        )
        await self.db.commit()

    async def quantity(self, product_id, location_id):
        return await self.db.scalar(
            select(StockLedgerEntry.quantity).where(
                StockLedgerEntry.product_id == product_id,
                StockLedgerEntry.location_id == location_id,
            )
        )

    async def entry_row(self, product_id, location_id):
        row = await self.db.execute(
            select(
                StockLedgerEntry.quantity,
                StockLedgerEntry.currency,
                StockLedgerEntry.unit_price,
                StockLedgerEntry.exchange_rate,
                StockLedgerEntry.manifest_id,
                StockLedgerEntry.margin_percent,
            ).where(
                StockLedgerEntry.product_id == product_id,
                StockLedgerEntry.location_id == location_id,
            )
        )
        return row.one_or_none()

    async def journal(self, product_id, location_id) -> list[int]:
        rows = await self.db.execute(
            select(InventoryMovement.quantity_change)
            .where(
                InventoryMovement.product_id == product_id,
                InventoryMovement.location_id == location_id,
            )
            .order_by(InventoryMovement.id)
        )
        return list(rows.scalars().all())

    async def journal_total(self, product_id, location_id) -> int:
        return await self.db.scalar(
            select(func.coalesce(func.sum(InventoryMovement.quantity_change), 0)).where(
                InventoryMovement.product_id == product_id,
                InventoryMovement.location_id == location_id,
            )
        )


@pytest_asyncio.fixture
async def factory(db):
    return Factory(db)


@pytest_asyncio.fixture
async def actor(factory):
    return await factory.user()
