from datetime import date
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.models import Expense, ExpenseCategory
from posledger.repositories.base import BaseRepository
from posledger.schemas.expense import CategoryTotal, ExpenseCreate


class ExpenseRepository(BaseRepository[Expense]):
    model = Expense

    async def create(self, data: ExpenseCreate, session: Optional[AsyncSession] = None) -> Expense:
        values = data.model_dump()
        if values["expense_date"] is None:
            values["expense_date"] = date.today()

        async with self.db.in_transaction(session) as s:
            expense = Expense(**values)
            s.add(expense)
            await s.flush()
            return await self.get_by_id(expense.id, session=s)

    async def search(self, text: str, session: Optional[AsyncSession] = None) -> List[Expense]:
        return await self._search_by_name(text, session=session)

    async def get_by_date(self, day: date, session: Optional[AsyncSession] = None) -> List[Expense]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._newest_first(self._active().where(Expense.expense_date == day)))
            return list(result)

    async def get_by_date_range(self, start: date, end: date, session: Optional[AsyncSession] = None) -> List[Expense]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._active()
                .where(Expense.expense_date >= start, Expense.expense_date <= end)
                .order_by(Expense.expense_date.desc(), Expense.created_at.desc())
            )
            return list(result)

    async def get_by_category(
        self, category: ExpenseCategory, session: Optional[AsyncSession] = None
    ) -> List[Expense]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(
                self._active().where(Expense.category == category).order_by(Expense.expense_date.desc())
            )
            return list(result)

    async def get_daily_total(self, day: date, session: Optional[AsyncSession] = None) -> float:
        async with self.db.in_transaction(session) as s:
            total = await s.scalar(
                select(func.coalesce(func.sum(Expense.amount), 0)).where(
                    Expense.expense_date == day, Expense.is_active.is_(True)
                )
            )
            return float(total)

    async def get_category_breakdown(self, day: date, session: Optional[AsyncSession] = None) -> List[CategoryTotal]:
        """Spend per category on one day, largest first."""
        total = func.coalesce(func.sum(Expense.amount), 0).label("total")
        async with self.db.in_transaction(session) as s:
            rows = await s.execute(
                select(Expense.category, total)
                .where(Expense.expense_date == day, Expense.is_active.is_(True))
                .group_by(Expense.category)
                .order_by(total.desc())
            )
            return [CategoryTotal(category=category, total=amount) for category, amount in rows.all()]

    async def get_recurring(self, session: Optional[AsyncSession] = None) -> List[Expense]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._active().where(Expense.is_recurring.is_(True)).order_by(Expense.name))
            return list(result)

    async def get_recurring_total(self, session: Optional[AsyncSession] = None) -> float:
        """Sum of the active recurring amounts as entered, whatever their recurrence type."""
        async with self.db.in_transaction(session) as s:
            total = await s.scalar(
                select(func.coalesce(func.sum(Expense.amount), 0)).where(
                    Expense.is_recurring.is_(True), Expense.is_active.is_(True)
                )
            )
            return float(total)
