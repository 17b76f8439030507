import enum
from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from posledger.models.base import Base, LedgerRecord, enum_column


class UnitType(str, enum.Enum):
    PCS = "pcs"
    KG = "kg"
    G = "g"
    MG = "mg"
    L = "l"
    ML = "ml"
    TBSP = "tbsp"
    TSP = "tsp"
    CUP = "cup"
    OZ = "oz"


class Ingredient(LedgerRecord, Base):
    __tablename__ = "ingredients"
    __table_args__ = (
        Index("idx_ingredients_name", "name"),
        Index("idx_ingredients_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    cost_per_unit: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    unit_type: Mapped[UnitType] = mapped_column(enum_column(UnitType), nullable=False, default=UnitType.PCS)
    # Running balance; changed through IngredientRepository.update_stock
    quantity_in_stock: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    low_stock_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_LOW_STOCK_THRESHOLD)
    supplier: Mapped[Optional[str]] = mapped_column(String(255))
    expiration_date: Mapped[Optional[date]] = mapped_column(Date)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_in_stock <= self.low_stock_threshold
