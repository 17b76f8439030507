from datetime import date, datetime, timedelta

import pytest

from posledger.models import ExpenseCategory, RecurrenceType, WageType
from posledger.repositories import ReportRepository
from posledger.schemas.employee import EmployeeCreate
from posledger.schemas.expense import ExpenseCreate
from posledger.testing.testing_mocks import make_ingredient, make_product, make_recipe, make_sale


async def _store_with_one_day_of_trade(repos):
    """One 90.00 sale costing 20.00 in ingredients, 15.00 of expenses and 50.00 of wages."""
    flour = await make_ingredient(repos, cost_per_unit=10.0, stock=100)
    recipe = await make_recipe(repos, [(flour, 1.0)])
    product = await make_product(repos, price=50.0, recipe=recipe)
    await make_sale(repos, [(product, 2)], discount_percent=10, amount_received=100)
    await repos.expenses.create(ExpenseCreate(name="Ice", amount=15, category=ExpenseCategory.SUPPLIES))
    await repos.employees.create(EmployeeCreate(name="Ana", wage_type=WageType.DAILY, wage_amount=50))
    return product


@pytest.mark.asyncio
async def test_daily_report_net_profit(repos):
    await _store_with_one_day_of_trade(repos)

    report = await repos.reports.get_daily_report(date.today())

    assert report.total_revenue == pytest.approx(90)
    assert report.total_cogs == pytest.approx(20)
    assert report.total_expenses == pytest.approx(15)
    assert report.labor_cost == pytest.approx(50)
    assert report.net_profit == pytest.approx(5)
    assert report.transaction_count == 1
    assert report.avg_order_value == pytest.approx(90)


@pytest.mark.asyncio
async def test_cogs_covers_every_recipe_item(repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)
    sugar = await make_ingredient(repos, name="Sugar", cost_per_unit=4.0)
    recipe = await make_recipe(repos, [(flour, 1.0), (sugar, 0.5)])
    cake = await make_product(repos, name="Cake", price=30.0, recipe=recipe)
    water = await make_product(repos, name="Water", price=10.0)

    await make_sale(repos, [(cake, 3), (water, 1)])

    # (2.0 + 2.0) per cake, water has no recipe
    assert (await repos.reports.get_daily_report(date.today())).total_cogs == pytest.approx(12)


@pytest.mark.asyncio
async def test_voided_sales_leave_the_report(repos):
    product = await _store_with_one_day_of_trade(repos)
    voided = await make_sale(repos, [(product, 10)])
    await repos.sales.void_sale(voided.id)

    report = await repos.reports.get_daily_report(date.today())

    assert report.total_revenue == pytest.approx(90)
    assert report.total_cogs == pytest.approx(20)


@pytest.mark.asyncio
async def test_empty_day(repos):
    report = await repos.reports.get_daily_report(date(2000, 1, 1))

    assert report.total_revenue == 0
    assert report.transaction_count == 0
    assert report.avg_order_value == 0
    assert report.net_profit == 0


@pytest.mark.asyncio
async def test_break_even_analysis(repos):
    product = await make_product(repos, price=50.0, tracked=False)
    await make_sale(repos, [(product, 2)], discount_percent=10, amount_received=100)
    await make_sale(repos, [(product, 1)])
    await repos.employees.create(EmployeeCreate(name="Ana", wage_type=WageType.DAILY, wage_amount=50))
    await repos.expenses.create(
        ExpenseCreate(
            name="Rent",
            amount=3000,
            category=ExpenseCategory.RENT,
            is_recurring=True,
            recurrence_type=RecurrenceType.MONTHLY,
        )
    )

    result = await repos.reports.get_break_even_analysis()

    # Rent counts at its entered amount, plus one day of wages
    assert result.daily_fixed_costs == pytest.approx(3050)
    assert result.avg_revenue_per_sale == pytest.approx(70)
    assert result.avg_cost_per_sale == pytest.approx(28)
    assert result.contribution_margin == pytest.approx(42)
    assert result.break_even_sales == 73
    assert result.break_even_revenue == pytest.approx(5110)
    assert result.current_daily_sales == pytest.approx(2)
    assert result.is_above_break_even is False


@pytest.mark.asyncio
async def test_break_even_without_sales(repos):
    await repos.employees.create(EmployeeCreate(name="Ana", wage_amount=500))

    result = await repos.reports.get_break_even_analysis()

    assert result.daily_fixed_costs == pytest.approx(500)
    assert result.contribution_margin == 0
    assert result.break_even_sales == 0
    assert result.is_above_break_even is False


@pytest.mark.asyncio
async def test_break_even_cost_ratio_is_configurable(db, repos):
    product = await make_product(repos, price=100.0, tracked=False)
    await make_sale(repos, [(product, 1)])

    result = await ReportRepository(db, cost_ratio=0.25).get_break_even_analysis()

    assert result.avg_cost_per_sale == pytest.approx(25)
    assert result.is_above_break_even is True


@pytest.mark.asyncio
async def test_best_sellers(repos):
    bread = await make_product(repos, name="Bread", price=10.0, tracked=False)
    coffee = await make_product(repos, name="Coffee", price=60.0, tracked=False)
    tea = await make_product(repos, name="Tea", price=40.0, tracked=False)
    await make_sale(repos, [(bread, 3), (coffee, 1)])
    await make_sale(repos, [(bread, 2), (tea, 2)])
    voided = await make_sale(repos, [(coffee, 20)])
    await repos.sales.void_sale(voided.id)

    sellers = await repos.reports.get_best_sellers()

    assert [(s.product_name, s.quantity_sold, s.revenue) for s in sellers] == [
        ("Bread", 5, pytest.approx(50)),
        ("Tea", 2, pytest.approx(80)),
        ("Coffee", 1, pytest.approx(60)),
    ]
    assert [s.product_id for s in await repos.reports.get_best_sellers(limit=1)] == [bread.id]


@pytest.mark.asyncio
async def test_peak_hours(repos):
    product = await make_product(repos, price=25.0, tracked=False)
    hour = datetime.now().hour
    await make_sale(repos, [(product, 1)])
    await make_sale(repos, [(product, 2)])

    hours = await repos.reports.get_peak_hours()

    assert [(h.hour, h.count, h.revenue) for h in hours] == [(hour, 2, pytest.approx(75))]


@pytest.mark.asyncio
async def test_weekly_trend_is_oldest_first(repos):
    await _store_with_one_day_of_trade(repos)

    trend = await repos.reports.get_weekly_trend()

    today = date.today()
    assert [r.date for r in trend] == [today - timedelta(days=offset) for offset in range(6, -1, -1)]
    assert trend[-1].total_revenue == pytest.approx(90)
    assert all(r.total_revenue == 0 for r in trend[:-1])
