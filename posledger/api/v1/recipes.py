import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from posledger.api.deps import found, get_repos
from posledger.repositories import Repositories
from posledger.schemas.recipe import RecipeCreate, RecipeRead, RecipeUpdate
from posledger.schemas.response import SuccessResponse

router = APIRouter()
log = logging.getLogger("uvicorn")


@router.get("/", response_model=SuccessResponse)
async def list_recipes(q: Optional[str] = None, repos: Repositories = Depends(get_repos)):
    recipes = await repos.recipes.search(q) if q else await repos.recipes.get_all()
    return SuccessResponse(data=[RecipeRead.model_validate(r).model_dump() for r in recipes])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_recipe(payload: RecipeCreate, repos: Repositories = Depends(get_repos)):
    """Creates the recipe and its items; costs come from current ingredient prices."""
    recipe = await repos.recipes.create(payload)
    data = await repos.recipes.get_with_items(recipe.id)
    return SuccessResponse(data=data.model_dump(), message=f"Recipe '{recipe.name}' created.")


@router.get("/{recipe_id}", response_model=SuccessResponse)
async def get_recipe(recipe_id: int, repos: Repositories = Depends(get_repos)):
    recipe = found(await repos.recipes.get_with_items(recipe_id), "Recipe")
    return SuccessResponse(data=recipe.model_dump())


@router.patch("/{recipe_id}", response_model=SuccessResponse)
async def update_recipe(recipe_id: int, payload: RecipeUpdate, repos: Repositories = Depends(get_repos)):
    found(await repos.recipes.update(recipe_id, payload), "Recipe")
    recipe = await repos.recipes.get_with_items(recipe_id)
    return SuccessResponse(data=recipe.model_dump())


@router.post("/{recipe_id}/recalculate", response_model=SuccessResponse)
async def recalculate_recipe(recipe_id: int, repos: Repositories = Depends(get_repos)):
    """Re-prices the recipe after ingredient costs changed."""
    recipe = found(await repos.recipes.recalculate_cost(recipe_id), "Recipe")
    return SuccessResponse(
        data=RecipeRead.model_validate(recipe).model_dump(),
        message=f"Recipe cost is now {recipe.total_cost:.2f} ({recipe.cost_per_serving:.2f} per serving).",
    )


@router.delete("/{recipe_id}", response_model=SuccessResponse)
async def delete_recipe(recipe_id: int, repos: Repositories = Depends(get_repos)):
    if not await repos.recipes.delete(recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return SuccessResponse(message=f"Recipe {recipe_id} deleted.")
