import pytest
import pytest_asyncio
from bson import ObjectId
from mongomock_motor import AsyncMongoMockClient

from recipe_cost.core.errors import ConflictError, NotFoundError
from recipe_cost.db.indexes import ensure_indexes
from recipe_cost.db.store import InMemoryRecipeStore, MongoRecipeStore, RecipeStore, build_filter, page_count
from recipe_cost.models.schemas import Recipe


def recipe(name: str, *ingredients: str, servings: int = 2) -> Recipe:
    names = ingredients or ("Flour",)
    return Recipe(
        recipe_name=name,
        servings=servings,
        ingredients=[{"name": n, "quantity": 1, "unit": "g", "unit_cost": 0.5} for n in names],
    )


# 같은 시나리오를 인메모리 / Mongo(mongomock) 양쪽에 돌린다
@pytest_asyncio.fixture(params=["memory", "mongo"])
async def recipes(request):
    if request.param == "memory":
        return InMemoryRecipeStore()
    client = AsyncMongoMockClient()
    col = client["recipe_cost_test"]["recipes"]
    await ensure_indexes(col)
    return MongoRecipeStore(col)


@pytest.mark.asyncio
async def test_store_satisfies_protocol(recipes) -> None:
    assert isinstance(recipes, RecipeStore)


def test_build_filter_empty() -> None:
    assert build_filter() == {}
    assert build_filter("", None) == {}


def test_build_filter_escapes_and_ignores_case() -> None:
    q = build_filter("mac (and) cheese", "c++")
    assert q == {
        "recipe_name": {"$regex": r"mac\ \(and\)\ cheese", "$options": "i"},
        "ingredients.name": {"$regex": r"c\+\+", "$options": "i"},
    }


@pytest.mark.parametrize("total,limit,expected", ((0, 10, 0), (10, 10, 1), (11, 10, 2), (3, 1, 3)))
def test_page_count(total, limit, expected) -> None:
    assert page_count(total, limit) == expected


@pytest.mark.asyncio
async def test_insert_then_get(recipes) -> None:
    saved = await recipes.insert(recipe("Bread"))
    got = await recipes.get("Bread")
    assert got.id == saved.id
    assert got.recipe_name == "Bread"
    assert got.ingredients[0].name == "Flour"


@pytest.mark.asyncio
async def test_insert_duplicate_conflicts(recipes) -> None:
    await recipes.insert(recipe("Bread"))
    with pytest.raises(ConflictError):
        await recipes.insert(recipe("Bread", "Yeast"))


@pytest.mark.asyncio
async def test_get_is_exact_match(recipes) -> None:
    await recipes.insert(recipe("Bread"))
    with pytest.raises(NotFoundError):
        await recipes.get("bread")


@pytest.mark.asyncio
async def test_find_filters_by_name_and_ingredient(recipes) -> None:
    await recipes.insert(recipe("Banana Bread", "Banana", "Flour"))
    await recipes.insert(recipe("Corn bread", "Cornmeal"))
    await recipes.insert(recipe("Omelette", "Egg"))

    by_name = await recipes.find(name="BREAD")
    assert [r.recipe_name for r in by_name.data] == ["Banana Bread", "Corn bread"]
    assert by_name.total == 2

    by_ing = await recipes.find(ingredient="corn")
    assert [r.recipe_name for r in by_ing.data] == ["Corn bread"]

    both = await recipes.find(name="bread", ingredient="egg")
    assert both.total == 0
    assert both.data == []


@pytest.mark.asyncio
async def test_find_paginates(recipes) -> None:
    for i in range(5):
        await recipes.insert(recipe(f"Dish {i}"))

    page2 = await recipes.find(page=2, limit=2)
    assert [r.recipe_name for r in page2.data] == ["Dish 2", "Dish 3"]
    assert page2.total == 5
    assert page2.page == 2
    assert page2.pages == 3

    past_end = await recipes.find(page=9, limit=2)
    assert past_end.data == []
    assert past_end.total == 5


@pytest.mark.asyncio
async def test_replace_keeps_id_and_allows_rename(recipes) -> None:
    saved = await recipes.insert(recipe("Soup", "Leek"))
    updated = await recipes.replace("Soup", recipe("Leek Soup", "Leek", "Potato", servings=4))
    assert updated.id == saved.id
    assert updated.servings == 4
    assert len(updated.ingredients) == 2
    with pytest.raises(NotFoundError):
        await recipes.get("Soup")


@pytest.mark.asyncio
async def test_replace_missing_or_colliding(recipes) -> None:
    await recipes.insert(recipe("A"))
    await recipes.insert(recipe("B"))
    with pytest.raises(NotFoundError):
        await recipes.replace("Nope", recipe("Nope"))
    with pytest.raises(ConflictError):
        await recipes.replace("A", recipe("B"))


@pytest.mark.asyncio
async def test_delete(recipes) -> None:
    await recipes.insert(recipe("Salad"))
    await recipes.delete("Salad")
    with pytest.raises(NotFoundError):
        await recipes.get("Salad")
    with pytest.raises(NotFoundError):
        await recipes.delete("Salad")


@pytest.mark.asyncio
async def test_returned_docs_are_copies(recipes) -> None:
    await recipes.insert(recipe("Stew"))
    got = await recipes.get("Stew")
    got.ingredients[0].name = "changed"
    again = await recipes.get("Stew")
    assert again.ingredients[0].name == "Flour"


@pytest_asyncio.fixture
async def mongo() -> MongoRecipeStore:
    client = AsyncMongoMockClient()
    col = client["recipe_cost_test"]["recipes"]
    await ensure_indexes(col)
    return MongoRecipeStore(col)


@pytest.mark.asyncio
async def test_mongo_id_is_object_id_string(mongo) -> None:
    saved = await mongo.insert(recipe("Bread"))
    assert ObjectId.is_valid(saved.id)
    raw = await mongo.col.find_one({"recipe_name": "Bread"})
    assert str(raw["_id"]) == saved.id
    assert "markup_multiplier" not in raw


@pytest.mark.asyncio
async def test_mongo_unique_index_backs_conflicts(mongo) -> None:
    info = await mongo.col.index_information()
    assert info["recipe_name_1"].get("unique") is True
    await mongo.insert(recipe("Bread"))
    with pytest.raises(ConflictError):
        await mongo.insert(recipe("Bread"))
    assert await mongo.col.count_documents({}) == 1
