import logging
from datetime import date, timedelta
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.config import AUTO_RECALCULATE_RECIPE_COSTS, EXPIRY_WARNING_DAYS
from posledger.core.db import Database
from posledger.models import Ingredient
from posledger.models.base import local_now
from posledger.repositories.base import BaseRepository
from posledger.schemas.ingredient import IngredientUpdate

if TYPE_CHECKING:
    from posledger.repositories.recipe import RecipeRepository

log = logging.getLogger("posledger.ingredients")


class IngredientRepository(BaseRepository[Ingredient]):
    model = Ingredient

    def __init__(
        self,
        db: Database,
        recipes: Optional["RecipeRepository"] = None,
        cascade_cost_changes: bool = AUTO_RECALCULATE_RECIPE_COSTS,
    ):
        super().__init__(db)
        self.recipes = recipes
        self.cascade_cost_changes = cascade_cost_changes

    async def update(
        self, record_id: int, data: IngredientUpdate, session: Optional[AsyncSession] = None
    ) -> Optional[Ingredient]:
        async with self.db.in_transaction(session) as s:
            existing = await self.get_by_id(record_id, session=s)
            if existing is None:
                return None
            old_cost = existing.cost_per_unit

            updated = await super().update(record_id, data, session=s)

            if self.cascade_cost_changes and self.recipes is not None and updated.cost_per_unit != old_cost:
                await self.recipes.recalculate_for_ingredient(record_id, session=s)
            return updated

    async def get_low_stock(self, session: Optional[AsyncSession] = None) -> List[Ingredient]:
        """Most urgent first."""
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._active()
                .where(Ingredient.quantity_in_stock <= Ingredient.low_stock_threshold)
                .order_by(Ingredient.quantity_in_stock.asc())
            )
            return list(result)

    async def get_expiring_soon(
        self, days: int = EXPIRY_WARNING_DAYS, session: Optional[AsyncSession] = None
    ) -> List[Ingredient]:
        """Ingredients expiring within ``days`` from today, already expired ones included."""
        cutoff = date.today() + timedelta(days=days)
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._active()
                .where(Ingredient.expiration_date.is_not(None), Ingredient.expiration_date <= cutoff)
                .order_by(Ingredient.expiration_date.asc())
            )
            return list(result)

    async def search(self, text: str, session: Optional[AsyncSession] = None) -> List[Ingredient]:
        return await self._search_by_name(text, session=session)

    async def update_stock(self, record_id: int, delta: float, session: Optional[AsyncSession] = None) -> bool:
        """
        Adds ``delta`` (negative to take stock out) to quantity_in_stock in one
        statement. Every stock movement goes through here.
        """
        async with self.db.in_transaction(session) as s:
            result = await s.execute(
                update(Ingredient)
                .where(Ingredient.id == record_id, Ingredient.is_active.is_(True))
                .values(quantity_in_stock=Ingredient.quantity_in_stock + delta, updated_at=local_now())
                .execution_options(synchronize_session=False)
            )
            return result.rowcount > 0
