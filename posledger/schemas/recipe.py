from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from posledger.models import UnitType
from posledger.schemas.common import RecordRead, reject_null


class RecipeItemInput(BaseModel):
    ingredient_id: int
    quantity: float = Field(..., gt=0, description="Amount of the ingredient one unit of the recipe uses.")
    unit_type: UnitType = UnitType.PCS


class RecipeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    servings: int = Field(1, gt=0)
    items: List[RecipeItemInput] = Field(default_factory=list)


class RecipeUpdate(BaseModel):
    """Supplying items replaces the whole item set and re-derives the costs."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    servings: Optional[int] = Field(None, gt=0)
    items: Optional[List[RecipeItemInput]] = None

    @field_validator("name", "servings")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class RecipeRead(RecordRead):
    name: str
    description: Optional[str] = None
    servings: int
    total_cost: float
    cost_per_serving: float


class RecipeItemDetail(BaseModel):
    """A recipe item joined with the ingredient it consumes."""
    id: int
    recipe_id: int
    ingredient_id: int
    quantity: float
    unit_type: UnitType
    ingredient_name: str
    ingredient_cost_per_unit: float
    ingredient_unit_type: UnitType

    @property
    def line_cost(self) -> float:
        return self.quantity * self.ingredient_cost_per_unit


class RecipeWithItems(RecipeRead):
    items: List[RecipeItemDetail]
