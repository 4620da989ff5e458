"""
Pytest fixtures for the inventory backend.

Every test gets its own file-backed SQLite primary store and secondary
store under ``tmp_path``, wrapped in a freshly initialized DatabaseManager.
"""

import os

os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("JWT_SECRET", "test-secret")

from dataclasses import replace
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from jose import jwt
from sqlalchemy import insert

from app.core import config
from app.core.config import DatabaseConfig
from app.core.db import DatabaseManager
from app.models.users.user_models import User
from app.schemas.masters.product_schemas import ProductCreate
from app.services.masters.product_service import create_product


@pytest.fixture
def db_config(tmp_path) -> DatabaseConfig:
    return DatabaseConfig(
        url=f"sqlite+aiosqlite:///{tmp_path / 'primary.db'}",
        db_type="sqlite",
        pool_size=5,
        pool_timeout=5,
        command_timeout=30,
        sqlite_path=str(tmp_path / "offline" / "offline.db"),
    )


@pytest_asyncio.fixture
async def make_db(db_config):
    """Factory for extra managers with config overrides; all are shut down after the test."""
    managers = []

    async def _make(**overrides) -> DatabaseManager:
        manager = DatabaseManager(replace(db_config, **overrides))
        await manager.initialize()
        await manager.init_models()
        managers.append(manager)
        return manager

    yield _make

    for manager in managers:
        await manager.shutdown()


@pytest_asyncio.fixture
async def db(make_db) -> DatabaseManager:
    return await make_db()


async def _insert_user(db: DatabaseManager, username: str, role: str, is_active: bool = True) -> dict:
    result = await db.execute(
        insert(User).values(
            username=username,
            email=f"{username}@example.com",
            password="not-a-real-hash",
            first_name=username.capitalize(),
            last_name="Tester",
            role=role,
            is_active=is_active,
        )
    )
    return {"id": result.inserted_id, "username": username, "role": role}


@pytest_asyncio.fixture
async def admin_user(db) -> dict:
    return await _insert_user(db, "admin", "admin")


@pytest_asyncio.fixture
async def cashier_user(db) -> dict:
    return await _insert_user(db, "cashier", "cashier")


@pytest_asyncio.fixture
async def inactive_user(db) -> dict:
    return await _insert_user(db, "ghost", "admin", is_active=False)


@pytest.fixture
def product_factory(db):
    counter = {"n": 0}

    async def _create(user_id: int | None = None, **fields) -> dict:
        counter["n"] += 1
        n = counter["n"]
        data = {
            "sku": f"SKU-{n:04d}",
            "name": f"Product {n:04d}",
            "cost_price": Decimal("50.00"),
            "selling_price": Decimal("80.00"),
        }
        data.update(fields)
        return await create_product(db, ProductCreate(**data), user_id)

    return _create


def make_token(user: dict) -> str:
    return jwt.encode(
        {"userId": user["id"], "username": user["username"], "role": user["role"]},
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )


def auth_headers(user: dict) -> dict:
    return {"Authorization": f"Bearer {make_token(user)}"}


@pytest_asyncio.fixture
async def client(db):
    from main import app

    app.state.db = db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth():
    return auth_headers
