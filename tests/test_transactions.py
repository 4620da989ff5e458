import pytest
from sqlalchemy import select, insert

from app.core.exceptions import TransactionStateError
from app.core.transaction import TransactionState
from app.models.masters.product_models import Product


def _new_product(sku: str):
    return insert(Product).values(sku=sku, name=f"Product {sku}", cost_price=1, selling_price=2)


async def _skus(db) -> list[str]:
    rows = await db.query(select(Product.sku).order_by(Product.sku))
    return [r["sku"] for r in rows]


async def test_commit_persists_and_releases_connection(db):
    handle = await db.begin_transaction()
    assert handle.state is TransactionState.OPEN
    assert db.engine.pool.checkedout() == 1

    await handle.execute(_new_product("T-1"))
    await db.commit(handle)

    assert handle.state is TransactionState.COMMITTED
    assert db.engine.pool.checkedout() == 0
    assert await _skus(db) == ["T-1"]


async def test_rollback_discards_and_releases_connection(db):
    handle = await db.begin_transaction()
    await handle.execute(_new_product("T-2"))
    await db.rollback(handle)

    assert handle.state is TransactionState.ROLLED_BACK
    assert db.engine.pool.checkedout() == 0
    assert await _skus(db) == []


async def test_statements_share_the_handle_connection(db):
    handle = await db.begin_transaction()
    await handle.execute(_new_product("T-3"))

    # visible inside the transaction before commit
    row = await handle.query_one(select(Product.sku).where(Product.sku == "T-3"))
    assert row == {"sku": "T-3"}

    await db.rollback(handle)


async def test_committed_handle_cannot_be_rolled_back(db):
    handle = await db.begin_transaction()
    await db.commit(handle)

    with pytest.raises(TransactionStateError):
        await db.rollback(handle)

    assert handle.state is TransactionState.COMMITTED
    assert db.engine.pool.checkedout() == 0


async def test_committed_handle_cannot_be_queried(db):
    handle = await db.begin_transaction()
    await db.commit(handle)

    with pytest.raises(TransactionStateError):
        await handle.query("SELECT 1")
    with pytest.raises(TransactionStateError):
        await handle.execute(_new_product("T-4"))

    assert db.engine.pool.checkedout() == 0
    assert await _skus(db) == []


async def test_rolled_back_handle_cannot_be_committed(db):
    handle = await db.begin_transaction()
    await db.rollback(handle)

    with pytest.raises(TransactionStateError):
        await db.commit(handle)
    with pytest.raises(TransactionStateError):
        await db.rollback(handle)


async def test_failed_commit_still_releases_connection(db):
    handle = await db.begin_transaction()

    class BrokenTransaction:
        async def commit(self):
            raise RuntimeError("commit lost")

    handle._transaction = BrokenTransaction()

    with pytest.raises(RuntimeError):
        await db.commit(handle)

    assert handle.state is TransactionState.ROLLED_BACK
    assert db.engine.pool.checkedout() == 0


async def test_scoped_transaction_commits_on_success(db):
    async with db.transaction() as tx:
        await tx.execute(_new_product("T-5"))

    assert tx.state is TransactionState.COMMITTED
    assert await _skus(db) == ["T-5"]


async def test_scoped_transaction_rolls_back_on_error(db):
    with pytest.raises(ValueError):
        async with db.transaction() as tx:
            await tx.execute(_new_product("T-6"))
            raise ValueError("abort")

    assert tx.state is TransactionState.ROLLED_BACK
    assert db.engine.pool.checkedout() == 0
    assert await _skus(db) == []


async def test_scoped_transaction_respects_explicit_rollback(db):
    async with db.transaction() as tx:
        await tx.execute(_new_product("T-7"))
        await tx.rollback()

    assert tx.state is TransactionState.ROLLED_BACK
    assert await _skus(db) == []
