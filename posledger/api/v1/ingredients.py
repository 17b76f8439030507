import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from posledger.api.deps import found, get_repos
from posledger.models import TransactionType
from posledger.repositories import Repositories
from posledger.schemas.ingredient import IngredientCreate, IngredientRead, IngredientUpdate, StockMovementRequest
from posledger.schemas.inventory import InventoryTransactionCreate, InventoryTransactionRead
from posledger.schemas.response import SuccessResponse

router = APIRouter()
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")

_MOVEMENTS = {
    "stock-in": TransactionType.STOCK_IN,
    "stock-out": TransactionType.STOCK_OUT,
    "adjust": TransactionType.ADJUSTMENT,
}


def _read(ingredient) -> dict:
    return IngredientRead.model_validate(ingredient).model_dump()


@router.get("/", response_model=SuccessResponse)
async def list_ingredients(q: Optional[str] = None, repos: Repositories = Depends(get_repos)):
    """All active ingredients, or those whose name contains ``q``."""
    ingredients = await repos.ingredients.search(q) if q else await repos.ingredients.get_all()
    return SuccessResponse(data=[_read(i) for i in ingredients])


@router.get("/low-stock", response_model=SuccessResponse)
async def list_low_stock(repos: Repositories = Depends(get_repos)):
    ingredients = await repos.ingredients.get_low_stock()
    return SuccessResponse(data=[_read(i) for i in ingredients])


@router.get("/expiring", response_model=SuccessResponse)
async def list_expiring(days: Optional[int] = None, repos: Repositories = Depends(get_repos)):
    if days is None:
        ingredients = await repos.ingredients.get_expiring_soon()
    else:
        ingredients = await repos.ingredients.get_expiring_soon(days)
    return SuccessResponse(data=[_read(i) for i in ingredients])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_ingredient(payload: IngredientCreate, repos: Repositories = Depends(get_repos)):
    ingredient = await repos.ingredients.create(payload)
    log.info(f"Ingredient {ingredient.id} '{ingredient.name}' created.")
    return SuccessResponse(data=_read(ingredient), message=f"Ingredient '{ingredient.name}' created.")


@router.get("/{ingredient_id}", response_model=SuccessResponse)
async def get_ingredient(ingredient_id: int, repos: Repositories = Depends(get_repos)):
    ingredient = found(await repos.ingredients.get_by_id(ingredient_id), "Ingredient")
    return SuccessResponse(data=_read(ingredient))


@router.patch("/{ingredient_id}", response_model=SuccessResponse)
async def update_ingredient(ingredient_id: int, payload: IngredientUpdate, repos: Repositories = Depends(get_repos)):
    ingredient = found(await repos.ingredients.update(ingredient_id, payload), "Ingredient")
    return SuccessResponse(data=_read(ingredient))


@router.delete("/{ingredient_id}", response_model=SuccessResponse)
async def delete_ingredient(ingredient_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.ingredients.delete(ingredient_id):
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return SuccessResponse(message=f"Ingredient {ingredient_id} deleted.")


@router.post("/{ingredient_id}/restore", response_model=SuccessResponse)
async def restore_ingredient(ingredient_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.ingredients.restore(ingredient_id):
        raise HTTPException(status_code=404, detail="No deleted ingredient with that id")
    return SuccessResponse(data=_read(await repos.ingredients.get_by_id(ingredient_id)))


@router.post("/{ingredient_id}/{movement}", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def move_stock(
    ingredient_id: int, movement: str, payload: StockMovementRequest, repos: Repositories = Depends(get_repos)
):
    """
    Records a manual stock-in, stock-out or adjustment and moves the balance
    with it. Only adjustments accept a negative quantity.
    """
    transaction_type = _MOVEMENTS.get(movement)
    if transaction_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown stock movement '{movement}'")

    try:
        data = InventoryTransactionCreate(
            ingredient_id=ingredient_id,
            transaction_type=transaction_type,
            quantity=payload.quantity,
            unit_cost=payload.unit_cost,
            notes=payload.notes,
        )
    except ValueError as e:
        log.error(f"Value error recording {movement} for ingredient {ingredient_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    transaction = found(await repos.inventory.create(data), "Ingredient")
    ingredient = await repos.ingredients.get_by_id(ingredient_id)
    return SuccessResponse(
        data={
            "transaction": InventoryTransactionRead.model_validate(transaction).model_dump(),
            "ingredient": _read(ingredient),
        },
        message=f"Stock for ingredient {ingredient_id} is now {ingredient.quantity_in_stock}.",
    )


@router.get("/{ingredient_id}/transactions", response_model=SuccessResponse)
async def list_transactions(ingredient_id: int, repos: Repositories = Depends(get_repos)):
    transactions = await repos.inventory.get_by_ingredient(ingredient_id)
    return SuccessResponse(data=[InventoryTransactionRead.model_validate(t).model_dump() for t in transactions])
