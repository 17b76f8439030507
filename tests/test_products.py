import pytest

from posledger.models import ProductCategory
from posledger.schemas.product import ProductCreate, ProductUpdate
from posledger.testing.testing_mocks import make_ingredient, make_product, make_recipe


@pytest.mark.asyncio
async def test_profit_margin_uses_cost_per_serving(repos):
    flour = await make_ingredient(repos, cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 0.5)], servings=4)
    pandesal = await make_product(repos, price=5.0, recipe=dough)

    detail = await repos.products.get_with_recipe(pandesal.id)

    assert detail.recipe.id == dough.id
    assert detail.profit_margin == pytest.approx(4.75)


@pytest.mark.asyncio
async def test_product_without_recipe_keeps_whole_price(repos):
    water = await make_product(repos, name="Water", price=20.0, tracked=False)

    detail = await repos.products.get_with_recipe(water.id)

    assert detail.recipe is None
    assert detail.profit_margin == pytest.approx(20.0)
    assert await repos.products.get_with_recipe(999) is None


@pytest.mark.asyncio
async def test_all_with_profit_margins(repos):
    flour = await make_ingredient(repos, cost_per_unit=2.0)
    dough = await make_recipe(repos, [(flour, 1.0)])
    await make_product(repos, name="Bread", price=10.0, recipe=dough)
    await make_product(repos, name="Water", price=3.0)
    hidden = await make_product(repos, name="Old Bread", price=8.0, recipe=dough)
    await repos.products.delete(hidden.id)

    margins = {p.name: p.profit_margin for p in await repos.products.get_all_with_profit_margins()}

    assert margins == {"Bread": pytest.approx(8.0), "Water": pytest.approx(3.0)}


@pytest.mark.asyncio
async def test_pos_listing_groups_by_category_then_name(repos):
    for name, category in [
        ("Latte", ProductCategory.BEVERAGE),
        ("Ensaymada", ProductCategory.FOOD),
        ("Americano", ProductCategory.BEVERAGE),
        ("Adobo Rice", ProductCategory.FOOD),
    ]:
        await repos.products.create(ProductCreate(name=name, category=category, selling_price=1))

    listing = [(p.category, p.name) for p in await repos.products.get_for_pos()]

    assert listing == [
        (ProductCategory.BEVERAGE, "Americano"),
        (ProductCategory.BEVERAGE, "Latte"),
        (ProductCategory.FOOD, "Adobo Rice"),
        (ProductCategory.FOOD, "Ensaymada"),
    ]
    assert [p.name for p in await repos.products.get_by_category(ProductCategory.FOOD)] == ["Adobo Rice", "Ensaymada"]


@pytest.mark.asyncio
async def test_update_product_price(repos):
    product = await make_product(repos, price=50.0)

    updated = await repos.products.update(product.id, ProductUpdate(selling_price=55.0))

    assert updated.selling_price == 55.0
    assert updated.name == product.name
    assert [p.id for p in await repos.products.search("pande")] == [product.id]
