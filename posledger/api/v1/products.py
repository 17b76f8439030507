import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from posledger.api.deps import found, get_repos
from posledger.models import ProductCategory
from posledger.repositories import Repositories
from posledger.schemas.product import ProductCreate, ProductRead, ProductUpdate
from posledger.schemas.response import SuccessResponse

router = APIRouter()
log = logging.getLogger("uvicorn")


def _read(product) -> dict:
    return ProductRead.model_validate(product).model_dump()


@router.get("/", response_model=SuccessResponse)
async def list_products(
    category: Optional[ProductCategory] = None, q: Optional[str] = None, repos: Repositories = Depends(get_repos)
):
    """The POS grid: every active product ordered by category then name."""
    if category is not None:
        products = await repos.products.get_by_category(category)
    elif q:
        products = await repos.products.search(q)
    else:
        products = await repos.products.get_for_pos()
    return SuccessResponse(data=[_read(p) for p in products])


@router.get("/margins", response_model=SuccessResponse)
async def list_profit_margins(repos: Repositories = Depends(get_repos)):
    products = await repos.products.get_all_with_profit_margins()
    return SuccessResponse(data=[p.model_dump() for p in products])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_product(payload: ProductCreate, repos: Repositories = Depends(get_repos)):
    if payload.recipe_id is not None and not await repos.recipes.exists(payload.recipe_id):
        raise HTTPException(status_code=400, detail=f"Recipe {payload.recipe_id} does not exist")
    product = await repos.products.create(payload)
    log.info(f"Product {product.id} '{product.name}' created.")
    return SuccessResponse(data=_read(product), message=f"Product '{product.name}' created.")


@router.get("/{product_id}", response_model=SuccessResponse)
async def get_product(product_id: int, repos: Repositories = Depends(get_repos)):
    product = found(await repos.products.get_with_recipe(product_id), "Product")
    return SuccessResponse(data=product.model_dump())


@router.patch("/{product_id}", response_model=SuccessResponse)
async def update_product(product_id: int, payload: ProductUpdate, repos: Repositories = Depends(get_repos)):
    product = found(await repos.products.update(product_id, payload), "Product")
    return SuccessResponse(data=_read(product))


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(product_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.products.delete(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return SuccessResponse(message=f"Product {product_id} deleted.")
