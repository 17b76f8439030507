# posledger/models/__init__.py
from .base import Base, LedgerRecord, RecordState
from .employee import Employee, EmployeeRole, WageType
from .expense import Expense, ExpenseCategory, RecurrenceType
from .ingredient import Ingredient, UnitType
from .inventory import InventoryTransaction, TransactionType
from .product import Product, ProductCategory
from .recipe import Recipe, RecipeItem
from .sale import PaymentMethod, Sale, SaleItem
from .schema_version import SchemaVersion

# Export all models
__all__ = [
    "Base",
    "LedgerRecord",
    "RecordState",
    "Employee",
    "EmployeeRole",
    "WageType",
    "Expense",
    "ExpenseCategory",
    "RecurrenceType",
    "Ingredient",
    "UnitType",
    "InventoryTransaction",
    "TransactionType",
    "Product",
    "ProductCategory",
    "Recipe",
    "RecipeItem",
    "PaymentMethod",
    "Sale",
    "SaleItem",
    "SchemaVersion",
]
