import pytest
from sqlalchemy import select

from posledger.models import RecipeItem
from posledger.schemas.ingredient import IngredientUpdate
from posledger.schemas.recipe import RecipeItemInput, RecipeUpdate
from posledger.testing.testing_mocks import make_ingredient, make_recipe


@pytest.mark.asyncio
async def test_dough_costs_from_flour_price(repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)

    dough = await make_recipe(repos, [(flour, 0.5)], name="Dough", servings=4)

    assert dough.total_cost == pytest.approx(1.00)
    assert dough.cost_per_serving == pytest.approx(0.25)
    assert dough.cost_per_serving * dough.servings == pytest.approx(dough.total_cost)


@pytest.mark.asyncio
async def test_cost_sums_every_item(repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)
    sugar = await make_ingredient(repos, name="Sugar", cost_per_unit=1.5)

    recipe = await make_recipe(repos, [(flour, 1.0), (sugar, 0.2)], servings=2)

    assert recipe.total_cost == pytest.approx(2.3)
    assert recipe.cost_per_serving == pytest.approx(1.15)


@pytest.mark.asyncio
async def test_recipe_without_items_costs_nothing(repos):
    recipe = await make_recipe(repos, [], name="Plain Water")

    assert recipe.total_cost == 0
    assert recipe.cost_per_serving == 0


@pytest.mark.asyncio
async def test_get_with_items_joins_ingredients(repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)

    detail = await repos.recipes.get_with_items(dough.id)

    assert detail.name == "Dough"
    assert len(detail.items) == 1
    item = detail.items[0]
    assert item.ingredient_name == "Flour"
    assert item.ingredient_cost_per_unit == 2.0
    assert item.line_cost == pytest.approx(1.0)
    assert await repos.recipes.get_with_items(999) is None


@pytest.mark.asyncio
async def test_replacing_items_soft_deletes_old_set_and_reprices(db, repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)
    sugar = await make_ingredient(repos, name="Sugar", cost_per_unit=1.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)

    updated = await repos.recipes.update(
        dough.id,
        RecipeUpdate(servings=2, items=[RecipeItemInput(ingredient_id=sugar.id, quantity=3)]),
    )

    assert updated.servings == 2
    assert updated.total_cost == pytest.approx(3.0)
    assert updated.cost_per_serving == pytest.approx(1.5)

    detail = await repos.recipes.get_with_items(dough.id)
    assert [i.ingredient_id for i in detail.items] == [sugar.id]

    async with db.in_transaction() as session:
        history = (await session.scalars(select(RecipeItem).where(RecipeItem.recipe_id == dough.id))).all()
    assert sorted((i.ingredient_id, i.is_active) for i in history) == sorted([(flour.id, False), (sugar.id, True)])


@pytest.mark.asyncio
async def test_servings_change_alone_keeps_total(repos):
    flour = await make_ingredient(repos, cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)

    updated = await repos.recipes.update(dough.id, RecipeUpdate(servings=2))

    assert updated.total_cost == pytest.approx(1.0)
    assert updated.cost_per_serving == pytest.approx(0.5)


@pytest.mark.asyncio
async def test_name_only_update_keeps_items(repos):
    flour = await make_ingredient(repos, cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)

    updated = await repos.recipes.update(dough.id, RecipeUpdate(name="Pan de Sal Dough"))

    assert updated.name == "Pan de Sal Dough"
    assert len((await repos.recipes.get_with_items(dough.id)).items) == 1
    assert updated.total_cost == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_costs_are_snapshots_until_recalculated(repos):
    flour = await make_ingredient(repos, cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)

    await repos.ingredients.update(flour.id, IngredientUpdate(cost_per_unit=3.0))
    assert (await repos.recipes.get_by_id(dough.id)).total_cost == pytest.approx(1.0)

    recalculated = await repos.recipes.recalculate_cost(dough.id)

    assert recalculated.total_cost == pytest.approx(1.5)
    assert recalculated.cost_per_serving == pytest.approx(0.375)
    assert await repos.recipes.recalculate_cost(999) is None


@pytest.mark.asyncio
async def test_recalculate_for_ingredient_touches_only_users(repos):
    flour = await make_ingredient(repos, name="Flour", cost_per_unit=2.0)
    sugar = await make_ingredient(repos, name="Sugar", cost_per_unit=1.0)
    dough = await make_recipe(repos, [(flour, 1.0)], name="Dough")
    syrup = await make_recipe(repos, [(sugar, 1.0)], name="Syrup")
    retired = await make_recipe(repos, [(flour, 1.0)], name="Retired")
    await repos.recipes.delete(retired.id)

    await repos.ingredients.update(flour.id, IngredientUpdate(cost_per_unit=5.0))
    recalculated = await repos.recipes.recalculate_for_ingredient(flour.id)

    assert [r.id for r in recalculated] == [dough.id]
    assert (await repos.recipes.get_by_id(dough.id)).total_cost == pytest.approx(5.0)
    assert (await repos.recipes.get_by_id(syrup.id)).total_cost == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_search_recipes(repos):
    await make_recipe(repos, [], name="Ube Dough")
    await make_recipe(repos, [], name="Coffee")

    assert [r.name for r in await repos.recipes.search("dough")] == ["Ube Dough"]
