from typing import Optional

from pydantic import BaseModel, Field, model_validator

from posledger.models import TransactionType
from posledger.schemas.common import RecordRead


class InventoryTransactionCreate(BaseModel):
    """One stock ledger entry; the ingredient balance moves with it."""
    ingredient_id: int
    transaction_type: TransactionType
    quantity: float = Field(..., description="Amount moved. Signed only for adjustments.")
    unit_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    reference_id: Optional[int] = Field(None, description="Sale that caused the movement, if any.")

    @model_validator(mode="after")
    def _direction_comes_from_type(self):
        if self.transaction_type != TransactionType.ADJUSTMENT and self.quantity < 0:
            raise ValueError(f"{self.transaction_type.value} quantity must not be negative")
        return self


class InventoryTransactionUpdate(BaseModel):
    # Ledger rows are immutable apart from their notes
    notes: Optional[str] = None


class InventoryTransactionRead(RecordRead):
    ingredient_id: int
    transaction_type: TransactionType
    quantity: float
    unit_cost: Optional[float] = None
    notes: Optional[str] = None
    reference_id: Optional[int] = None
