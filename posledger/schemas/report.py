from datetime import date

from pydantic import BaseModel


class DailyReport(BaseModel):
    date: date
    total_revenue: float
    total_cogs: float
    total_expenses: float
    labor_cost: float
    net_profit: float
    transaction_count: int
    avg_order_value: float


class BreakEvenResult(BaseModel):
    daily_fixed_costs: float
    avg_revenue_per_sale: float
    avg_cost_per_sale: float
    contribution_margin: float
    break_even_sales: int
    break_even_revenue: float
    current_daily_sales: float
    is_above_break_even: bool


class BestSeller(BaseModel):
    product_id: int
    product_name: str
    quantity_sold: int
    revenue: float


class HourlySales(BaseModel):
    hour: int
    count: int
    revenue: float
