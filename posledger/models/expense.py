import enum
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column


class ExpenseCategory(str, enum.Enum):
    RENT = "rent"
    UTILITIES = "utilities"
    SUPPLIES = "supplies"
    LABOR = "labor"
    OTHER = "other"


class RecurrenceType(str, enum.Enum):
    DAILY = "daily"
    MONTHLY = "monthly"


class Expense(LedgerRecord, Base):
    __tablename__ = "expenses"
    __table_args__ = (
        Index("idx_expenses_date", "expense_date"),
        Index("idx_expenses_category", "category"),
        Index("idx_expenses_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[ExpenseCategory] = mapped_column(
        enum_column(ExpenseCategory), nullable=False, default=ExpenseCategory.OTHER
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_recurring: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_type: Mapped[Optional[RecurrenceType]] = mapped_column(enum_column(RecurrenceType))
    expense_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    notes: Mapped[Optional[str]] = mapped_column(Text)
