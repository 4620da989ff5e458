import logging
from decimal import Decimal

import pytest
from sqlalchemy import insert

from app.middleware.request_logging import _level_for
from app.models.sales.sale_models import SaleItem

PRODUCT_PAYLOAD = {
    "sku": "A1",
    "name": "Maize Flour 2kg",
    "category": "Groceries",
    "cost_price": "150.00",
    "selling_price": "185.00",
    "quantity_in_stock": 10,
    "reorder_level": 5,
}


@pytest.fixture
def admin_headers(admin_user, auth):
    return auth(admin_user)


@pytest.fixture
def cashier_headers(cashier_user, auth):
    return auth(cashier_user)


async def _create(client, headers, **overrides) -> dict:
    response = await client.post(
        "/api/inventory/products",
        json={**PRODUCT_PAYLOAD, **overrides},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


async def test_requests_need_a_valid_token(client):
    response = await client.get(
        "/api/inventory/products",
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


async def test_inactive_user_is_rejected(client, inactive_user, auth):
    response = await client.get("/api/inventory/products", headers=auth(inactive_user))
    assert response.status_code == 401
    assert response.json()["error_code"] == "USER_INACTIVE"


async def test_token_for_unknown_user_is_rejected(client, auth):
    ghost = {"id": 4242, "username": "nobody", "role": "admin"}

    response = await client.get("/api/inventory/products", headers=auth(ghost))

    assert response.status_code == 401
    assert response.json()["error_code"] == "USER_NOT_FOUND"


async def test_malformed_authorization_header(client):
    response = await client.get("/api/inventory/products", headers={"Authorization": "Token abc"})

    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


async def test_create_and_fetch_product(client, admin_headers, admin_user):
    created = await _create(client, admin_headers)
    assert created["sku"] == "A1"
    assert created["created_by_username"] == admin_user["username"]

    response = await client.get(f"/api/inventory/products/{created['id']}", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Maize Flour 2kg"


async def test_cashier_cannot_create_products(client, cashier_headers):
    response = await client.post("/api/inventory/products", json=PRODUCT_PAYLOAD, headers=cashier_headers)
    assert response.status_code == 403
    assert response.json()["error_code"] == "PERMISSION_DENIED"


async def test_cashier_can_read_products(client, admin_headers, cashier_headers):
    await _create(client, admin_headers)

    response = await client.get("/api/inventory/products", headers=cashier_headers)
    assert response.status_code == 200
    assert response.json()["data"]["pagination"]["total"] == 1


async def test_duplicate_sku_is_conflict(client, admin_headers):
    await _create(client, admin_headers)

    response = await client.post("/api/inventory/products", json=PRODUCT_PAYLOAD, headers=admin_headers)
    assert response.status_code == 409
    assert response.json()["error_code"] == "PRODUCT_SKU_EXISTS"


async def test_missing_product_is_not_found(client, admin_headers):
    response = await client.get("/api/inventory/products/999", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"


async def test_update_product(client, admin_headers):
    created = await _create(client, admin_headers)

    response = await client.put(
        f"/api/inventory/products/{created['id']}",
        json={"selling_price": "199.99", "brand": "Jogoo"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert Decimal(data["selling_price"]) == Decimal("199.99")
    assert data["brand"] == "Jogoo"


async def test_update_rejects_stock_quantity(client, admin_headers):
    created = await _create(client, admin_headers)

    response = await client.put(
        f"/api/inventory/products/{created['id']}",
        json={"quantity_in_stock": 500},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


async def test_stock_adjustment_and_low_stock_listing(client, admin_headers):
    created = await _create(client, admin_headers)

    response = await client.post(
        "/api/inventory/stock-adjustment",
        json={
            "product_id": created["id"],
            "adjustment_type": "decrease",
            "quantity": 15,
            "reason": "damaged",
        },
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["previous_quantity"] == 10
    assert data["new_quantity"] == 0
    assert data["adjustment_type"] == "decrease"

    response = await client.get("/api/inventory/low-stock", headers=admin_headers)
    products = response.json()["data"]["products"]
    assert [(p["sku"], p["shortage"]) for p in products] == [("A1", 5)]


async def test_stock_adjustment_rejects_negative_quantity(client, admin_headers):
    created = await _create(client, admin_headers)

    response = await client.post(
        "/api/inventory/stock-adjustment",
        json={
            "product_id": created["id"],
            "adjustment_type": "decrease",
            "quantity": -1,
            "reason": "typo",
        },
        headers=admin_headers,
    )
    assert response.status_code == 422


async def test_stock_adjustment_unknown_product(client, admin_headers):
    response = await client.post(
        "/api/inventory/stock-adjustment",
        json={"product_id": 42, "adjustment_type": "set", "quantity": 1, "reason": "count"},
        headers=admin_headers,
    )
    assert response.status_code == 404


async def test_categories(client, admin_headers):
    await _create(client, admin_headers, sku="A1", category="Groceries")
    await _create(client, admin_headers, sku="A2", category="Groceries", quantity_in_stock=2)

    response = await client.get("/api/inventory/categories", headers=admin_headers)
    assert response.status_code == 200
    categories = response.json()["data"]["categories"]
    assert len(categories) == 1
    assert categories[0]["category"] == "Groceries"
    assert categories[0]["product_count"] == 2
    assert Decimal(categories[0]["total_value"]) == Decimal("2220.00")


async def test_delete_product_soft_and_hard(client, db, admin_headers, cashier_headers):
    keep = await _create(client, admin_headers, sku="SOLD")
    drop = await _create(client, admin_headers, sku="NEW")
    await db.execute(
        insert(SaleItem).values(sale_id=1, product_id=keep["id"], quantity=1, unit_price=185, total_price=185)
    )

    response = await client.delete(f"/api/inventory/products/{drop['id']}", headers=cashier_headers)
    assert response.status_code == 403

    response = await client.delete(f"/api/inventory/products/{keep['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["action"] == "deactivated"

    response = await client.delete(f"/api/inventory/products/{drop['id']}", headers=admin_headers)
    assert response.json()["data"]["action"] == "deleted"

    response = await client.get(f"/api/inventory/products/{drop['id']}", headers=admin_headers)
    assert response.status_code == 404
    response = await client.get(f"/api/inventory/products/{keep['id']}", headers=admin_headers)
    assert response.json()["data"]["is_active"] is False


# ---------------- LOGGING ----------------
async def test_responses_carry_process_time(client):
    response = await client.get("/health")

    assert float(response.headers["X-Process-Time-Ms"]) >= 0


@pytest.mark.parametrize(
    "status_code, level",
    [(200, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
)
def test_access_log_level_follows_status(status_code, level):
    assert _level_for(status_code) == level


def test_store_loggers_have_their_own_handler():
    import main  # noqa: F401  applies setup_logging()

    for name in ("app.core.db", "app.core.transaction", "sqlalchemy.pool"):
        store_logger = logging.getLogger(name)
        assert store_logger.propagate is False
        assert store_logger.handlers
