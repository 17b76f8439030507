import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status

from posledger.api.v1.employees import router as employees_router
from posledger.api.v1.expenses import router as expenses_router
from posledger.api.v1.ingredients import router as ingredients_router
from posledger.api.v1.products import router as products_router
from posledger.api.v1.recipes import router as recipes_router
from posledger.api.v1.reports import router as reports_router
from posledger.api.v1.sales import router as sales_router
from posledger.core.config import DB_URL, PROJECT_NAME, VERSION
from posledger.core.db import Database, close_db
from posledger.core.exception_handlers import setup_exception_handlers
from posledger.core.schema import init_db
from posledger.repositories import Repositories

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


def create_app(db_url: Optional[str] = None) -> FastAPI:
    db = Database(db_url or DB_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handles startup and shutdown events."""
        log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
        await init_db(db)  # Open the connection and install or migrate the schema
        app.state.db = db
        app.state.repos = Repositories(db)
        yield
        await close_db(db)
        log.info(f"{PROJECT_NAME} stopped.")

    app = FastAPI(
        title=PROJECT_NAME,
        version=VERSION,
        lifespan=lifespan,
        # Configure API documentation and paths
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Include routers for modular API structure
    app.include_router(ingredients_router, prefix="/api/v1/ingredients", tags=["Ingredients"])
    app.include_router(recipes_router, prefix="/api/v1/recipes", tags=["Recipes"])
    app.include_router(products_router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(sales_router, prefix="/api/v1/sales", tags=["Sales"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(expenses_router, prefix="/api/v1/expenses", tags=["Expenses"])
    app.include_router(employees_router, prefix="/api/v1/employees", tags=["Employees"])

    setup_exception_handlers(app)

    @app.get("/health", status_code=status.HTTP_200_OK)
    async def health_check():
        """Simple health check endpoint."""
        return {"status": "ok", "app_name": PROJECT_NAME, "database": db.is_open}

    return app


app = create_app()
