from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.config import DAYS_PER_MONTH, HOURS_PER_WORKDAY
from posledger.models import Employee, WageType
from posledger.repositories.base import BaseRepository


def daily_wage():
    """What one employee costs per working day, whatever the wage basis."""
    return case(
        (Employee.wage_type == WageType.DAILY, Employee.wage_amount),
        (Employee.wage_type == WageType.HOURLY, Employee.wage_amount * HOURS_PER_WORKDAY),
        (Employee.wage_type == WageType.MONTHLY, Employee.wage_amount / DAYS_PER_MONTH),
        else_=0,
    )


class EmployeeRepository(BaseRepository[Employee]):
    model = Employee

    async def get_active_employees(self, session: Optional[AsyncSession] = None) -> List[Employee]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._active().order_by(Employee.name.asc()))
            return list(result)

    async def search(self, text: str, session: Optional[AsyncSession] = None) -> List[Employee]:
        return await self._search_by_name(text, session=session)

    async def get_daily_labor_cost(self, session: Optional[AsyncSession] = None) -> float:
        async with self.db.in_transaction(session) as s:
            total = await s.scalar(
                select(func.coalesce(func.sum(daily_wage()), 0)).where(Employee.is_active.is_(True))
            )
            return float(total)
