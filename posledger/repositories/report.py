import math
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import Integer, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.config import BEST_SELLER_LIMIT, BREAK_EVEN_COST_RATIO, REPORT_WINDOW_DAYS
from posledger.core.db import Database
from posledger.models import Ingredient, Product, RecipeItem, Sale, SaleItem
from posledger.models.base import local_now
from posledger.repositories.employee import EmployeeRepository
from posledger.repositories.expense import ExpenseRepository
from posledger.schemas.report import BestSeller, BreakEvenResult, DailyReport, HourlySales


def _product_unit_cost():
    """Ingredient cost of one unit of the sale item's product, 0 without a recipe."""
    return (
        select(func.coalesce(func.sum(RecipeItem.quantity * Ingredient.cost_per_unit), 0))
        .select_from(RecipeItem)
        .join(Ingredient, Ingredient.id == RecipeItem.ingredient_id)
        .join(Product, Product.recipe_id == RecipeItem.recipe_id)
        .where(Product.id == SaleItem.product_id, RecipeItem.is_active.is_(True))
        .correlate(SaleItem)
        .scalar_subquery()
    )


class ReportRepository:
    """
    Read-only aggregations over the sales ledger, expenses and payroll.
    "Sales" here always means sales that have not been voided.
    """

    def __init__(
        self,
        db: Database,
        expenses: Optional[ExpenseRepository] = None,
        employees: Optional[EmployeeRepository] = None,
        window_days: int = REPORT_WINDOW_DAYS,
        cost_ratio: float = BREAK_EVEN_COST_RATIO,
    ):
        self.db = db
        self.expenses = expenses or ExpenseRepository(db)
        self.employees = employees or EmployeeRepository(db)
        self.window_days = window_days
        self.cost_ratio = cost_ratio

    def _window_start(self):
        return local_now() - timedelta(days=self.window_days)

    async def get_daily_report(self, day: date, session: Optional[AsyncSession] = None) -> DailyReport:
        on_day = func.date(Sale.created_at) == day.isoformat()

        async with self.db.in_transaction(session) as s:
            revenue, transaction_count = (
                await s.execute(
                    select(func.coalesce(func.sum(Sale.total), 0), func.count(Sale.id)).where(
                        on_day, Sale.is_active.is_(True)
                    )
                )
            ).one()

            cogs = await s.scalar(
                select(func.coalesce(func.sum(SaleItem.quantity * _product_unit_cost()), 0))
                .select_from(SaleItem)
                .join(Sale, Sale.id == SaleItem.sale_id)
                .where(on_day, Sale.is_active.is_(True), SaleItem.is_active.is_(True))
            )

            expenses = await self.expenses.get_daily_total(day, session=s)
            labor = await self.employees.get_daily_labor_cost(session=s)

        return DailyReport(
            date=day,
            total_revenue=revenue,
            total_cogs=cogs,
            total_expenses=expenses,
            labor_cost=labor,
            net_profit=revenue - cogs - expenses - labor,
            transaction_count=transaction_count,
            avg_order_value=revenue / transaction_count if transaction_count > 0 else 0.0,
        )

    async def get_break_even_analysis(self, session: Optional[AsyncSession] = None) -> BreakEvenResult:
        """
        How many average sales a day cover the fixed costs. Per-sale cost is a
        flat cost_ratio of the sale total, not the recipe cost. Recurring
        expenses count at the amount entered, without spreading monthly bills.
        """
        since = self._window_start()

        async with self.db.in_transaction(session) as s:
            daily_fixed_costs = await self.expenses.get_recurring_total(session=s)
            daily_fixed_costs += await self.employees.get_daily_labor_cost(session=s)

            per_day = (
                select(
                    func.sum(Sale.total).label("daily_total"),
                    func.count(Sale.id).label("daily_count"),
                )
                .where(Sale.is_active.is_(True), Sale.created_at >= since)
                .group_by(func.date(Sale.created_at))
                .subquery()
            )
            avg_daily_revenue, avg_daily_count = (
                await s.execute(
                    select(
                        func.coalesce(func.avg(per_day.c.daily_total), 0),
                        func.coalesce(func.avg(per_day.c.daily_count), 0),
                    )
                )
            ).one()

            avg_cost_per_sale = await s.scalar(
                select(func.coalesce(func.avg(Sale.total * self.cost_ratio), 0)).where(
                    Sale.is_active.is_(True), Sale.created_at >= since
                )
            )

        avg_revenue_per_sale = avg_daily_revenue / avg_daily_count if avg_daily_count > 0 else 0.0
        contribution_margin = avg_revenue_per_sale - avg_cost_per_sale
        break_even_sales = math.ceil(daily_fixed_costs / contribution_margin) if contribution_margin > 0 else 0

        return BreakEvenResult(
            daily_fixed_costs=daily_fixed_costs,
            avg_revenue_per_sale=avg_revenue_per_sale,
            avg_cost_per_sale=avg_cost_per_sale,
            contribution_margin=contribution_margin,
            break_even_sales=break_even_sales,
            break_even_revenue=break_even_sales * avg_revenue_per_sale,
            current_daily_sales=avg_daily_count,
            is_above_break_even=avg_daily_count > break_even_sales,
        )

    async def get_best_sellers(
        self, limit: int = BEST_SELLER_LIMIT, session: Optional[AsyncSession] = None
    ) -> List[BestSeller]:
        quantity_sold = func.sum(SaleItem.quantity).label("quantity_sold")
        async with self.db.in_transaction(session) as s:
            rows = await s.execute(
                select(Product.id, Product.name, quantity_sold, func.sum(SaleItem.subtotal))
                .select_from(SaleItem)
                .join(Product, Product.id == SaleItem.product_id)
                .join(Sale, Sale.id == SaleItem.sale_id)
                .where(
                    Sale.is_active.is_(True),
                    SaleItem.is_active.is_(True),
                    Sale.created_at >= self._window_start(),
                )
                .group_by(Product.id, Product.name)
                .order_by(quantity_sold.desc(), Product.name)
                .limit(limit)
            )
            return [
                BestSeller(product_id=product_id, product_name=name, quantity_sold=quantity, revenue=revenue)
                for product_id, name, quantity, revenue in rows.all()
            ]

    async def get_peak_hours(self, session: Optional[AsyncSession] = None) -> List[HourlySales]:
        """Only hours that had at least one sale are returned."""
        hour = cast(func.strftime("%H", Sale.created_at), Integer).label("hour")
        async with self.db.in_transaction(session) as s:
            rows = await s.execute(
                select(hour, func.count(Sale.id), func.sum(Sale.total))
                .where(Sale.is_active.is_(True), Sale.created_at >= self._window_start())
                .group_by(hour)
                .order_by(hour.asc())
            )
            return [HourlySales(hour=h, count=count, revenue=revenue) for h, count, revenue in rows.all()]

    async def get_weekly_trend(self, session: Optional[AsyncSession] = None) -> List[DailyReport]:
        """Daily reports for the last seven days, oldest first, today included."""
        today = date.today()
        async with self.db.in_transaction(session) as s:
            return [await self.get_daily_report(today - timedelta(days=offset), session=s) for offset in range(6, -1, -1)]
