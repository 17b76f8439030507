import logging
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from posledger.core.db import Database
from posledger.core.errors import MigrationError
from posledger.models import Base, SchemaVersion

log = logging.getLogger("posledger.schema")

# Bump together with a new entry in MIGRATIONS
SCHEMA_VERSION = 3


class Migration(NamedTuple):
    description: str
    statements: List[str]


# Target version -> statements that bring version N-1 up to N.
# A fresh database is built straight from the model metadata instead.
MIGRATIONS: Dict[int, Migration] = {
    2: Migration(
        description="Add employees and expenses tables",
        statements=[
            """
            CREATE TABLE IF NOT EXISTS employees (
                id INTEGER NOT NULL PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                role VARCHAR(16) NOT NULL DEFAULT 'staff',
                wage_type VARCHAR(16) NOT NULL DEFAULT 'daily',
                wage_amount FLOAT NOT NULL DEFAULT 0,
                pin_hash TEXT,
                created_at DATETIME NOT NULL,
                updated_at DATETIME NOT NULL,
                is_active BOOLEAN NOT NULL DEFAULT 1
            )
            """,
            "CREATE INDEX IF NOT EXISTS idx_employees_name ON employees (name)",
            "CREATE INDEX IF NOT EXISTS idx_employees_active ON employees (is_active)",
            """
            CREATE TABLE IF NOT EXISTS expenses (
                id INTEGER NOT NULL PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                category VARCHAR(16) NOT NULL DEFAULT 'other',
                amount FLOAT NOT NULL DEFAULT 0,
                is_recurring BOOLEAN NOT NULL DEFAULT 0,
                recurrence_type VARCHAR(16),
                expense_date DATE NOT NULL,
                notes TEXT,
                created_at DATETIME NOT NULL,
                updated_at DATETIME NOT NULL,
                is_active BOOLEAN NOT NULL DEFAULT 1
            )
            """,
            "CREATE INDEX IF NOT EXISTS idx_expenses_date ON expenses (expense_date)",
            "CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses (category)",
            "CREATE INDEX IF NOT EXISTS idx_expenses_active ON expenses (is_active)",
        ],
    ),
    3: Migration(
        description="Index inventory transactions by originating sale",
        statements=[
            "CREATE INDEX IF NOT EXISTS idx_inventory_transactions_reference "
            "ON inventory_transactions (reference_id)",
        ],
    ),
}


class SchemaManager:
    """Installs the schema on a fresh database or brings an older one up to date."""

    def __init__(
        self,
        db: Database,
        migrations: Optional[Dict[int, Migration]] = None,
        target_version: int = SCHEMA_VERSION,
    ):
        self.db = db
        self.migrations = MIGRATIONS if migrations is None else migrations
        self.target_version = target_version

    async def current_version(self) -> int:
        """Highest recorded version, 0 when the version table does not exist yet."""
        async with self.db.in_transaction() as session:
            table = await session.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'")
            )
            if table.first() is None:
                return 0
            version = await session.scalar(select(func.max(SchemaVersion.version)))
            return version or 0

    async def initialize(self) -> int:
        """Safe to call on every start. Returns the installed version."""
        current = await self.current_version()

        if current == 0:
            log.info("Initializing fresh database...")
            await self._install()
            log.info(f"Schema version {self.target_version} initialized successfully")
            return self.target_version

        if current < self.target_version:
            log.info(f"Migrating from version {current} to {self.target_version}...")
            await self._migrate(current)
            log.info("Migrations completed successfully")
            return self.target_version

        if current > self.target_version:
            log.warning(f"Database schema version {current} is newer than this build ({self.target_version})")
        else:
            log.info(f"Schema is up to date (version {current})")
        return current

    async def _install(self) -> None:
        async with self.db.in_transaction() as session:
            await session.run_sync(lambda sync_session: Base.metadata.create_all(sync_session.connection()))
            session.add(SchemaVersion(version=self.target_version))

    async def _migrate(self, current: int) -> None:
        pending = list(range(current + 1, self.target_version + 1))

        # Refuse to start applying anything if the chain has a hole
        missing = [version for version in pending if version not in self.migrations]
        if missing:
            raise MigrationError(missing[0], "migration not found")

        for version in pending:
            migration = self.migrations[version]
            log.info(f"Running migration to version {version}: {migration.description}")
            try:
                async with self.db.in_transaction() as session:
                    for statement in migration.statements:
                        await session.execute(text(statement))
                    session.add(SchemaVersion(version=version))
            except SQLAlchemyError as e:
                log.error(f"Migration to version {version} failed: {e}")
                raise MigrationError(version, str(e)) from e


async def init_db(db: Database) -> int:
    """Opens the connection and installs or migrates the schema."""
    try:
        await db.open()
        return await SchemaManager(db).initialize()
    except Exception as e:
        log.error(f"FATAL ERROR: Could not initialize database at {db.url}. Error: {e}")
        # Re-raise to prevent the application from starting on a half-built schema
        raise
