from typing import Optional

from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column
from posledger.models.ingredient import UnitType


class Recipe(LedgerRecord, Base):
    __tablename__ = "recipes"
    __table_args__ = (
        Index("idx_recipes_name", "name"),
        Index("idx_recipes_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    servings: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # Snapshots taken at write time; refreshed by RecipeRepository.recalculate_cost
    total_cost: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    cost_per_serving: Mapped[float] = mapped_column(Float, nullable=False, default=0)


class RecipeItem(LedgerRecord, Base):
    __tablename__ = "recipe_items"
    __table_args__ = (
        Index("idx_recipe_items_recipe", "recipe_id"),
        Index("idx_recipe_items_ingredient", "ingredient_id"),
    )

    recipe_id: Mapped[int] = mapped_column(ForeignKey("recipes.id"), nullable=False)
    ingredient_id: Mapped[int] = mapped_column(ForeignKey("ingredients.id"), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    unit_type: Mapped[UnitType] = mapped_column(enum_column(UnitType), nullable=False, default=UnitType.PCS)
