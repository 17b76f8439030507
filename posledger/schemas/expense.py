from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from posledger.models import ExpenseCategory, RecurrenceType
from posledger.schemas.common import RecordRead, reject_null


class ExpenseCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: ExpenseCategory = ExpenseCategory.OTHER
    amount: float = Field(..., ge=0)
    is_recurring: bool = False
    recurrence_type: Optional[RecurrenceType] = None
    expense_date: Optional[date] = Field(None, description="Defaults to today.")
    notes: Optional[str] = None


class ExpenseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[ExpenseCategory] = None
    amount: Optional[float] = Field(None, ge=0)
    is_recurring: Optional[bool] = None
    recurrence_type: Optional[RecurrenceType] = None
    expense_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("name", "category", "amount", "is_recurring", "expense_date")
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class ExpenseRead(RecordRead):
    name: str
    category: ExpenseCategory
    amount: float
    is_recurring: bool
    recurrence_type: Optional[RecurrenceType] = None
    expense_date: date
    notes: Optional[str] = None


class CategoryTotal(BaseModel):
    category: ExpenseCategory
    total: float
