# posledger/repositories/__init__.py
from posledger.core.db import Database

from .employee import EmployeeRepository
from .expense import ExpenseRepository
from .ingredient import IngredientRepository
from .inventory_transaction import InventoryTransactionRepository
from .product import ProductRepository
from .recipe import RecipeRepository
from .report import ReportRepository
from .sale import SaleRepository


class Repositories:
    """Every repository, wired to one Database handle."""

    def __init__(self, db: Database):
        self.db = db
        self.recipes = RecipeRepository(db)
        self.ingredients = IngredientRepository(db, recipes=self.recipes)
        self.inventory = InventoryTransactionRepository(db, self.ingredients)
        self.products = ProductRepository(db)
        self.sales = SaleRepository(db, self.inventory)
        self.expenses = ExpenseRepository(db)
        self.employees = EmployeeRepository(db)
        self.reports = ReportRepository(db, expenses=self.expenses, employees=self.employees)


__all__ = [
    "Repositories",
    "EmployeeRepository",
    "ExpenseRepository",
    "IngredientRepository",
    "InventoryTransactionRepository",
    "ProductRepository",
    "RecipeRepository",
    "ReportRepository",
    "SaleRepository",
]
