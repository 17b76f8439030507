from typing import Optional

from pydantic import BaseModel, Field, field_validator

from posledger.models import ProductCategory
from posledger.schemas.common import RecordRead, reject_null
from posledger.schemas.recipe import RecipeRead


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Name shown on the POS (e.g., Pandesal).")
    description: Optional[str] = None
    category: ProductCategory = ProductCategory.OTHER
    selling_price: float = Field(..., ge=0)
    recipe_id: Optional[int] = Field(None, description="Recipe whose ingredients a sale consumes.")
    is_inventory_tracked: bool = True
    image_uri: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    selling_price: Optional[float] = Field(None, ge=0)
    recipe_id: Optional[int] = None
    is_inventory_tracked: Optional[bool] = None
    image_uri: Optional[str] = None

    @field_validator("name", "category", "selling_price", "is_inventory_tracked")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ProductRead(RecordRead):
    name: str
    description: Optional[str] = None
    category: ProductCategory
    selling_price: float
    recipe_id: Optional[int] = None
    is_inventory_tracked: bool
    image_uri: Optional[str] = None


class ProductWithRecipe(ProductRead):
    recipe: Optional[RecipeRead] = None
    profit_margin: float
