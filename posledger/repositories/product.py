from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.models import Product, ProductCategory, Recipe
from posledger.repositories.base import BaseRepository
from posledger.schemas.product import ProductRead, ProductWithRecipe
from posledger.schemas.recipe import RecipeRead


def _with_margin(product: Product, recipe: Optional[Recipe]) -> ProductWithRecipe:
    cost = recipe.cost_per_serving if recipe is not None else 0.0
    return ProductWithRecipe(
        **ProductRead.model_validate(product).model_dump(),
        recipe=RecipeRead.model_validate(recipe) if recipe is not None else None,
        profit_margin=product.selling_price - cost,
    )


class ProductRepository(BaseRepository[Product]):
    model = Product

    async def get_by_category(
        self, category: ProductCategory, session: Optional[AsyncSession] = None
    ) -> List[Product]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._active().where(Product.category == category).order_by(Product.name))
            return list(result)

    async def search(self, text: str, session: Optional[AsyncSession] = None) -> List[Product]:
        return await self._search_by_name(text, session=session)

    async def get_for_pos(self, session: Optional[AsyncSession] = None) -> List[Product]:
        """Sellable products grouped for the register grid."""
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._active().order_by(Product.category, Product.name))
            return list(result)

    async def get_with_recipe(
        self, record_id: int, session: Optional[AsyncSession] = None
    ) -> Optional[ProductWithRecipe]:
        async with self.db.in_transaction(session) as s:
            row = (
                await s.execute(
                    select(Product, Recipe)
                    .outerjoin(Recipe, and_(Recipe.id == Product.recipe_id, Recipe.is_active.is_(True)))
                    .where(Product.id == record_id, Product.is_active.is_(True))
                )
            ).first()
            if row is None:
                return None
            product, recipe = row
            return _with_margin(product, recipe)

    async def get_all_with_profit_margins(self, session: Optional[AsyncSession] = None) -> List[ProductWithRecipe]:
        """Products without a recipe (or with a deleted one) count their whole price as margin."""
        async with self.db.in_transaction(session) as s:
            rows = await s.execute(
                select(Product, Recipe)
                .outerjoin(Recipe, and_(Recipe.id == Product.recipe_id, Recipe.is_active.is_(True)))
                .where(Product.is_active.is_(True))
                .order_by(Product.name)
            )
            return [_with_margin(product, recipe) for product, recipe in rows.all()]
