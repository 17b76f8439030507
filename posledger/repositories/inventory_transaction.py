import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.db import Database
from posledger.models import InventoryTransaction, TransactionType
from posledger.models.inventory import stock_change_for
from posledger.repositories.base import BaseRepository, patch_row
from posledger.repositories.ingredient import IngredientRepository
from posledger.schemas.inventory import InventoryTransactionCreate, InventoryTransactionUpdate

log = logging.getLogger("posledger.inventory")


class InventoryTransactionRepository(BaseRepository[InventoryTransaction]):
    model = InventoryTransaction

    def __init__(self, db: Database, ingredients: IngredientRepository):
        super().__init__(db)
        self.ingredients = ingredients

    async def create(
        self, data: InventoryTransactionCreate, session: Optional[AsyncSession] = None
    ) -> Optional[InventoryTransaction]:
        """
        Moves the ingredient's stock and records the ledger row atomically.
        Returns None, writing nothing, when the ingredient is missing or deleted.
        """
        async with self.db.in_transaction(session) as s:
            delta = stock_change_for(data.transaction_type, data.quantity)
            applied = await self.ingredients.update_stock(data.ingredient_id, delta, session=s)
            if not applied:
                log.warning(
                    f"Ingredient {data.ingredient_id} not found or inactive; "
                    f"{data.transaction_type.value} of {data.quantity} not recorded."
                )
                return None

            record = InventoryTransaction(**data.model_dump())
            s.add(record)
            await s.flush()
            return await self.get_by_id(record.id, session=s)

    async def update(
        self, record_id: int, data: InventoryTransactionUpdate, session: Optional[AsyncSession] = None
    ) -> Optional[InventoryTransaction]:
        async with self.db.in_transaction(session) as s:
            existing = await self.get_by_id(record_id, session=s)
            if existing is None:
                return None
            if "notes" not in data.model_fields_set:
                return existing
            await patch_row(s, InventoryTransaction, record_id, {"notes": data.notes})
            return await self.get_by_id(record_id, session=s)

    async def get_by_ingredient(
        self, ingredient_id: int, session: Optional[AsyncSession] = None
    ) -> List[InventoryTransaction]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._newest_first(self._active().where(InventoryTransaction.ingredient_id == ingredient_id))
            )
            return list(result)

    async def get_by_type(
        self, transaction_type: TransactionType, session: Optional[AsyncSession] = None
    ) -> List[InventoryTransaction]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._newest_first(self._active().where(InventoryTransaction.transaction_type == transaction_type))
            )
            return list(result)

    async def get_by_date_range(
        self, start: date, end: date, session: Optional[AsyncSession] = None
    ) -> List[InventoryTransaction]:
        day = func.date(InventoryTransaction.created_at)
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._newest_first(self._active().where(day >= start.isoformat(), day <= end.isoformat()))
            )
            return list(result)

    async def get_by_reference(
        self,
        reference_id: int,
        transaction_type: Optional[TransactionType] = None,
        session: Optional[AsyncSession] = None,
    ) -> List[InventoryTransaction]:
        """Ledger rows written on behalf of one sale, oldest first."""
        stmt = self._active().where(InventoryTransaction.reference_id == reference_id)
        if transaction_type is not None:
            stmt = stmt.where(InventoryTransaction.transaction_type == transaction_type)
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(stmt.order_by(InventoryTransaction.id.asc()))
            return list(result)
