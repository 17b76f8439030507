import enum
from typing import Optional

from sqlalchemy import Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from posledger.models.base import Base, LedgerRecord, enum_column


class EmployeeRole(str, enum.Enum):
    OWNER = "owner"
    CASHIER = "cashier"
    STAFF = "staff"


class WageType(str, enum.Enum):
    HOURLY = "hourly"
    DAILY = "daily"
    MONTHLY = "monthly"


class Employee(LedgerRecord, Base):
    __tablename__ = "employees"
    __table_args__ = (
        Index("idx_employees_name", "name"),
        Index("idx_employees_active", "is_active"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[EmployeeRole] = mapped_column(enum_column(EmployeeRole), nullable=False, default=EmployeeRole.STAFF)
    wage_type: Mapped[WageType] = mapped_column(enum_column(WageType), nullable=False, default=WageType.DAILY)
    wage_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    pin_hash: Mapped[Optional[str]] = mapped_column(Text)
