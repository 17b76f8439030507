import pytest
from sqlalchemy import text

from posledger.core.db import Database, close_db
from posledger.core.errors import DatabaseNotOpenError, MigrationError
from posledger.core.schema import SCHEMA_VERSION, Migration, SchemaManager, init_db

MEMORY_URL = "sqlite+aiosqlite:///:memory:"

# The tables a version 1 install had, before employees and expenses existed
V1_TABLES = [
    "CREATE TABLE schema_version (version INTEGER NOT NULL PRIMARY KEY, applied_at DATETIME NOT NULL)",
    "INSERT INTO schema_version (version, applied_at) VALUES (1, '2024-01-01 00:00:00')",
    """
    CREATE TABLE ingredients (
        id INTEGER NOT NULL PRIMARY KEY, name VARCHAR(255) NOT NULL, description TEXT,
        cost_per_unit FLOAT NOT NULL, unit_type VARCHAR(16) NOT NULL, quantity_in_stock FLOAT NOT NULL,
        low_stock_threshold FLOAT NOT NULL, supplier TEXT, expiration_date DATE,
        created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL, is_active BOOLEAN NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE inventory_transactions (
        id INTEGER NOT NULL PRIMARY KEY, ingredient_id INTEGER NOT NULL REFERENCES ingredients (id),
        transaction_type VARCHAR(16) NOT NULL, quantity FLOAT NOT NULL, unit_cost FLOAT, notes TEXT,
        reference_id INTEGER,
        created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL, is_active BOOLEAN NOT NULL DEFAULT 1
    )
    """,
]


async def _tables(db):
    async with db.in_transaction() as session:
        rows = await session.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))
        return {name for (name,) in rows}


async def _install_v1(db):
    async with db.in_transaction() as session:
        for statement in V1_TABLES:
            await session.execute(text(statement))


@pytest.mark.asyncio
async def test_fresh_install_creates_every_table(db):
    assert await SchemaManager(db).current_version() == SCHEMA_VERSION
    assert {
        "ingredients",
        "recipes",
        "recipe_items",
        "products",
        "sales",
        "sale_items",
        "inventory_transactions",
        "expenses",
        "employees",
        "schema_version",
    } <= await _tables(db)


@pytest.mark.asyncio
async def test_initialize_is_idempotent(db):
    manager = SchemaManager(db)

    assert await manager.initialize() == SCHEMA_VERSION
    assert await manager.initialize() == SCHEMA_VERSION

    async with db.in_transaction() as session:
        stamped = await session.scalar(text("SELECT COUNT(*) FROM schema_version"))
    assert stamped == 1


@pytest.mark.asyncio
async def test_migrates_version_one_database_in_order():
    db = Database(MEMORY_URL)
    await db.open()
    try:
        await _install_v1(db)

        assert await SchemaManager(db).initialize() == SCHEMA_VERSION

        assert {"employees", "expenses"} <= await _tables(db)
        async with db.in_transaction() as session:
            versions = (await session.execute(text("SELECT version FROM schema_version ORDER BY version"))).scalars().all()
            index = await session.scalar(
                text("SELECT name FROM sqlite_master WHERE type = 'index' AND name = 'idx_inventory_transactions_reference'")
            )
        assert versions == [1, 2, 3]
        assert index is not None
    finally:
        await close_db(db)


@pytest.mark.asyncio
async def test_missing_migration_aborts_before_applying_anything():
    db = Database(MEMORY_URL)
    await db.open()
    try:
        await _install_v1(db)
        manager = SchemaManager(db, migrations={3: Migration("only three", ["SELECT 1"])}, target_version=3)

        with pytest.raises(MigrationError) as excinfo:
            await manager.initialize()

        assert excinfo.value.version == 2
        assert await manager.current_version() == 1
    finally:
        await close_db(db)


@pytest.mark.asyncio
async def test_failed_migration_rolls_back_its_statements():
    db = Database(MEMORY_URL)
    await db.open()
    try:
        await _install_v1(db)
        broken = {
            2: Migration(
                "half broken",
                ["CREATE TABLE half_done (id INTEGER PRIMARY KEY)", "ALTER TABLE no_such_table ADD COLUMN x INTEGER"],
            )
        }
        manager = SchemaManager(db, migrations=broken, target_version=2)

        with pytest.raises(MigrationError):
            await manager.initialize()

        assert "half_done" not in await _tables(db)
        assert await manager.current_version() == 1
    finally:
        await close_db(db)


@pytest.mark.asyncio
async def test_foreign_keys_are_enforced(db):
    async with db.in_transaction() as session:
        enabled = await session.scalar(text("PRAGMA foreign_keys"))
    assert enabled == 1


@pytest.mark.asyncio
async def test_close_is_idempotent_and_blocks_further_use():
    db = Database(MEMORY_URL)
    await init_db(db)

    await db.close()
    await db.close()

    assert db.is_open is False
    with pytest.raises(DatabaseNotOpenError):
        async with db.in_transaction():
            pass


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        async with db.in_transaction() as session:
            await session.execute(
                text(
                    "INSERT INTO employees (name, role, wage_type, wage_amount, created_at, updated_at, is_active) "
                    "VALUES ('Temp', 'staff', 'daily', 1, '2024-01-01', '2024-01-01', 1)"
                )
            )
            raise RuntimeError("abort")

    async with db.in_transaction() as session:
        assert await session.scalar(text("SELECT COUNT(*) FROM employees")) == 0
