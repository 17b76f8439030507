import enum
from datetime import datetime
from typing import Type

from sqlalchemy import Boolean, DateTime, Enum, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def local_now() -> datetime:
    """Timestamps are naive local time so date() buckets match the store's calendar day."""
    return datetime.now()


def enum_column(enum_cls: Type[enum.Enum]) -> Enum:
    """Stores the enum *value* ('kg', 'cash', ...) as text, not the member name."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=16,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )


class Base(DeclarativeBase):
    pass


class RecordState(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class LedgerRecord:
    """
    Columns every table carries. Rows are never removed; deleting flips
    is_active and every read filters on it.
    """
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=local_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=local_now)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")

    @property
    def state(self) -> RecordState:
        return RecordState.ACTIVE if self.is_active else RecordState.DELETED
