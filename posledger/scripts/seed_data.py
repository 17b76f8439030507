# scripts/seed_data.py
import asyncio

from posledger.core.config import DB_URL
from posledger.core.db import Database, close_db
from posledger.core.schema import init_db
from posledger.models import EmployeeRole, ExpenseCategory, ProductCategory, RecurrenceType, UnitType, WageType
from posledger.repositories import Repositories
from posledger.schemas.employee import EmployeeCreate
from posledger.schemas.expense import ExpenseCreate
from posledger.schemas.ingredient import IngredientCreate
from posledger.schemas.product import ProductCreate
from posledger.schemas.recipe import RecipeCreate, RecipeItemInput


async def _get_or_create(repo, name, payload):
    """Matches on exact name so the script can run more than once."""
    for record in await repo.search(name):
        if record.name == name:
            return record, False
    return await repo.create(payload), True


async def seed(repos: Repositories):
    flour, _ = await _get_or_create(
        repos.ingredients,
        "Flour",
        IngredientCreate(name="Flour", cost_per_unit=2.0, unit_type=UnitType.KG, quantity_in_stock=25, low_stock_threshold=5),
    )
    sugar, _ = await _get_or_create(
        repos.ingredients,
        "Sugar",
        IngredientCreate(name="Sugar", cost_per_unit=1.5, unit_type=UnitType.KG, quantity_in_stock=10, low_stock_threshold=2),
    )
    coffee, _ = await _get_or_create(
        repos.ingredients,
        "Coffee Beans",
        IngredientCreate(name="Coffee Beans", cost_per_unit=0.8, unit_type=UnitType.G, quantity_in_stock=2000, low_stock_threshold=250),
    )
    print("Ingredients:", flour.id, sugar.id, coffee.id)

    pandesal, _ = await _get_or_create(
        repos.recipes,
        "Pandesal Dough",
        RecipeCreate(
            name="Pandesal Dough",
            servings=10,
            items=[
                RecipeItemInput(ingredient_id=flour.id, quantity=0.5, unit_type=UnitType.KG),
                RecipeItemInput(ingredient_id=sugar.id, quantity=0.05, unit_type=UnitType.KG),
            ],
        ),
    )
    brewed, _ = await _get_or_create(
        repos.recipes,
        "Brewed Coffee",
        RecipeCreate(name="Brewed Coffee", items=[RecipeItemInput(ingredient_id=coffee.id, quantity=18, unit_type=UnitType.G)]),
    )
    print("Recipes:", pandesal.id, brewed.id)

    await _get_or_create(
        repos.products,
        "Pandesal",
        ProductCreate(name="Pandesal", category=ProductCategory.FOOD, selling_price=5, recipe_id=pandesal.id),
    )
    await _get_or_create(
        repos.products,
        "Brewed Coffee",
        ProductCreate(name="Brewed Coffee", category=ProductCategory.BEVERAGE, selling_price=60, recipe_id=brewed.id),
    )
    await _get_or_create(
        repos.products,
        "Bottled Water",
        ProductCreate(name="Bottled Water", category=ProductCategory.BEVERAGE, selling_price=20, is_inventory_tracked=False),
    )
    print("Products seeded.")

    await _get_or_create(
        repos.expenses,
        "Stall Rent",
        ExpenseCreate(
            name="Stall Rent",
            category=ExpenseCategory.RENT,
            amount=9000,
            is_recurring=True,
            recurrence_type=RecurrenceType.MONTHLY,
        ),
    )
    await _get_or_create(
        repos.employees,
        "Store Owner",
        EmployeeCreate(name="Store Owner", role=EmployeeRole.OWNER, wage_type=WageType.MONTHLY, wage_amount=15000),
    )
    await _get_or_create(
        repos.employees,
        "Cashier",
        EmployeeCreate(name="Cashier", role=EmployeeRole.CASHIER, wage_type=WageType.DAILY, wage_amount=500),
    )
    print("Expenses and employees seeded.")


async def main():
    db = Database(DB_URL)
    await init_db(db)
    try:
        await seed(Repositories(db))
    finally:
        await close_db(db)


if __name__ == "__main__":
    asyncio.run(main())
