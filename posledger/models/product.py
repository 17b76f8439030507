import enum
from typing import Optional

from sqlalchemy import Boolean, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column


class ProductCategory(str, enum.Enum):
    FOOD = "food"
    BEVERAGE = "beverage"
    DESSERT = "dessert"
    SNACK = "snack"
    OTHER = "other"


class Product(LedgerRecord, Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_products_name", "name"),
        Index("idx_products_category", "category"),
        Index("idx_products_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[ProductCategory] = mapped_column(
        enum_column(ProductCategory), nullable=False, default=ProductCategory.OTHER
    )
    selling_price: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    recipe_id: Mapped[Optional[int]] = mapped_column(ForeignKey("recipes.id"))
    # Tracked + linked recipe => selling it deducts the recipe's ingredients
    is_inventory_tracked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    image_uri: Mapped[Optional[str]] = mapped_column(Text)
