import logging
from typing import List, Optional, Sequence, Union

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.models import Ingredient, Recipe, RecipeItem
from posledger.models.base import local_now
from posledger.repositories.base import BaseRepository, patch_row
from posledger.schemas.recipe import (
    RecipeCreate,
    RecipeItemDetail,
    RecipeItemInput,
    RecipeRead,
    RecipeUpdate,
    RecipeWithItems,
)

log = logging.getLogger("posledger.recipes")

CostedItem = Union[RecipeItemInput, RecipeItem]


class RecipeRepository(BaseRepository[Recipe]):
    """
    Recipes and their items. total_cost and cost_per_serving are derived from
    live ingredient prices whenever the item set is written, and otherwise only
    by recalculate_cost.
    """
    model = Recipe

    async def create(self, data: RecipeCreate, session: Optional[AsyncSession] = None) -> Recipe:
        async with self.db.in_transaction(session) as s:
            total_cost = await self._total_cost(s, data.items)
            recipe = Recipe(
                name=data.name,
                description=data.description,
                servings=data.servings,
                total_cost=total_cost,
                cost_per_serving=total_cost / data.servings,
            )
            s.add(recipe)
            await s.flush()

            await self._insert_items(s, recipe.id, data.items)
            log.info(f"Recipe {recipe.id} '{data.name}' created with {len(data.items)} items, cost {total_cost:.2f}")
            return await self.get_by_id(recipe.id, session=s)

    async def update(
        self, record_id: int, data: RecipeUpdate, session: Optional[AsyncSession] = None
    ) -> Optional[Recipe]:
        async with self.db.in_transaction(session) as s:
            existing = await self.get_by_id(record_id, session=s)
            if existing is None:
                return None

            values = data.model_dump(exclude_unset=True, exclude={"items"})
            if not values and data.items is None:
                return existing

            servings = values.get("servings", existing.servings)
            if data.items is not None:
                # Replace the item set: old rows are kept as history, only flagged inactive
                await s.execute(
                    update(RecipeItem)
                    .where(RecipeItem.recipe_id == record_id, RecipeItem.is_active.is_(True))
                    .values(is_active=False, updated_at=local_now())
                    .execution_options(synchronize_session=False)
                )
                await self._insert_items(s, record_id, data.items)
                total_cost = await self._total_cost(s, data.items)
                values.update(total_cost=total_cost, cost_per_serving=total_cost / servings)
            elif "servings" in values:
                values["cost_per_serving"] = existing.total_cost / servings

            await patch_row(s, Recipe, record_id, values)
            return await self.get_by_id(record_id, session=s)

    async def get_items(self, record_id: int, session: Optional[AsyncSession] = None) -> List[RecipeItem]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                select(RecipeItem)
                .where(RecipeItem.recipe_id == record_id, RecipeItem.is_active.is_(True))
                .order_by(RecipeItem.id)
            )
            return list(result)

    async def get_with_items(self, record_id: int, session: Optional[AsyncSession] = None) -> Optional[RecipeWithItems]:
        """Fetches the recipe with its active items and each item's ingredient."""
        async with self.db.in_transaction(session) as s:
            recipe = await self.get_by_id(record_id, session=s)
            if recipe is None:
                return None

            rows = await s.execute(
                select(RecipeItem, Ingredient.name, Ingredient.cost_per_unit, Ingredient.unit_type)
                .join(Ingredient, Ingredient.id == RecipeItem.ingredient_id)
                .where(RecipeItem.recipe_id == record_id, RecipeItem.is_active.is_(True))
                .order_by(RecipeItem.id)
            )
            items = [
                RecipeItemDetail(
                    id=item.id,
                    recipe_id=item.recipe_id,
                    ingredient_id=item.ingredient_id,
                    quantity=item.quantity,
                    unit_type=item.unit_type,
                    ingredient_name=name,
                    ingredient_cost_per_unit=cost_per_unit,
                    ingredient_unit_type=unit_type,
                )
                for item, name, cost_per_unit, unit_type in rows.all()
            ]
            return RecipeWithItems(**RecipeRead.model_validate(recipe).model_dump(), items=items)

    async def search(self, text: str, session: Optional[AsyncSession] = None) -> List[Recipe]:
        return await self._search_by_name(text, session=session)

    async def recalculate_cost(self, record_id: int, session: Optional[AsyncSession] = None) -> Optional[Recipe]:
        """Re-derives the cost snapshot from current ingredient prices."""
        async with self.db.in_transaction(session) as s:
            recipe = await self.get_by_id(record_id, session=s)
            if recipe is None:
                return None

            items = await self.get_items(record_id, session=s)
            total_cost = await self._total_cost(s, items)
            await patch_row(
                s, Recipe, record_id, {"total_cost": total_cost, "cost_per_serving": total_cost / recipe.servings}
            )
            log.info(f"Recipe {record_id} cost recalculated: {recipe.total_cost:.2f} -> {total_cost:.2f}")
            return await self.get_by_id(record_id, session=s)

    async def recalculate_for_ingredient(
        self, ingredient_id: int, session: Optional[AsyncSession] = None
    ) -> List[Recipe]:
        """Recalculates every active recipe that uses the ingredient."""
        async with self.db.in_transaction(session) as s:
            recipe_ids = await s.scalars(
                select(RecipeItem.recipe_id)
                .join(Recipe, Recipe.id == RecipeItem.recipe_id)
                .where(
                    RecipeItem.ingredient_id == ingredient_id,
                    RecipeItem.is_active.is_(True),
                    Recipe.is_active.is_(True),
                )
                .distinct()
            )
            recalculated = []
            for recipe_id in list(recipe_ids):
                recipe = await self.recalculate_cost(recipe_id, session=s)
                if recipe is not None:
                    recalculated.append(recipe)
            return recalculated

    async def _total_cost(self, session: AsyncSession, items: Sequence[CostedItem]) -> float:
        """Sum of quantity x current cost_per_unit. Unknown ingredients add nothing."""
        if not items:
            return 0.0
        ingredient_ids = {item.ingredient_id for item in items}
        rows = await session.execute(
            select(Ingredient.id, Ingredient.cost_per_unit).where(Ingredient.id.in_(ingredient_ids))
        )
        prices = {ingredient_id: cost for ingredient_id, cost in rows.all()}
        return sum(item.quantity * prices.get(item.ingredient_id, 0.0) for item in items)

    async def _insert_items(self, session: AsyncSession, recipe_id: int, items: Sequence[RecipeItemInput]) -> None:
        session.add_all(
            [
                RecipeItem(
                    recipe_id=recipe_id,
                    ingredient_id=item.ingredient_id,
                    quantity=item.quantity,
                    unit_type=item.unit_type,
                )
                for item in items
            ]
        )
        await session.flush()
