from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from posledger.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from posledger.models import UnitType
from posledger.schemas.common import RecordRead, reject_null


class IngredientCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Name of the ingredient (e.g., Flour).")
    description: Optional[str] = None
    cost_per_unit: float = Field(..., ge=0, description="Purchase cost of one unit.")
    unit_type: UnitType = Field(UnitType.PCS, description="Unit the stock and cost are measured in.")
    quantity_in_stock: float = Field(0, description="Opening stock balance.")
    low_stock_threshold: float = Field(DEFAULT_LOW_STOCK_THRESHOLD, ge=0, description="Stock level that counts as low.")
    supplier: Optional[str] = None
    expiration_date: Optional[date] = None


class IngredientUpdate(BaseModel):
    """Only the fields that are set get written."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    cost_per_unit: Optional[float] = Field(None, ge=0)
    unit_type: Optional[UnitType] = None
    quantity_in_stock: Optional[float] = None
    low_stock_threshold: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    expiration_date: Optional[date] = None

    @field_validator("name", "cost_per_unit", "unit_type", "quantity_in_stock", "low_stock_threshold")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class IngredientRead(RecordRead):
    name: str
    description: Optional[str] = None
    cost_per_unit: float
    unit_type: UnitType
    quantity_in_stock: float
    low_stock_threshold: float
    supplier: Optional[str] = None
    expiration_date: Optional[date] = None


class StockMovementRequest(BaseModel):
    """Schema for a manual stock-in, stock-out or correction on one ingredient."""
    quantity: float = Field(..., description="Quantity moved; signed for adjustments.")
    unit_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
