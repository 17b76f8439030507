import os

# Database Configuration
# A single local SQLite file; one writer, no replication
DB_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./posledger.db")
DB_ECHO = os.getenv("DB_ECHO", "0") == "1"

# Application Metadata
PROJECT_NAME = "POS Ledger"
VERSION = "1.0.0"

# Inventory
DEFAULT_LOW_STOCK_THRESHOLD = 10
EXPIRY_WARNING_DAYS = int(os.getenv("EXPIRY_WARNING_DAYS", 7))
# Recompute recipe costs when an ingredient price changes (off: use recalculate_cost explicitly)
AUTO_RECALCULATE_RECIPE_COSTS = os.getenv("AUTO_RECALCULATE_RECIPE_COSTS", "0") == "1"

# Reporting
REPORT_WINDOW_DAYS = int(os.getenv("REPORT_WINDOW_DAYS", 30))  # Look-back for break-even, best sellers, peak hours
BREAK_EVEN_COST_RATIO = float(os.getenv("BREAK_EVEN_COST_RATIO", 0.4))  # Estimated cost share of a sale
BEST_SELLER_LIMIT = 5
HOURS_PER_WORKDAY = 8
DAYS_PER_MONTH = 30
