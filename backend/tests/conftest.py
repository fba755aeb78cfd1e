import pytest
from fastapi.testclient import TestClient

from recipe_cost.core.config import Settings
from recipe_cost.db.store import InMemoryRecipeStore
from recipe_cost.main import create_app

API_KEY = "test-key"


def make_recipe(name: str = "Pancakes", servings: int = 2, **extra) -> dict:
    body = {
        "recipe_name": name,
        "servings": servings,
        "ingredients": [
            {"name": "Flour", "quantity": 2, "unit": "cup", "unit_cost": 1.5},
            {"name": "Egg", "quantity": 3, "unit": "pc", "unit_cost": 0.25},
        ],
    }
    body.update(extra)
    return body


@pytest.fixture
def settings() -> Settings:
    return Settings(API_KEY=API_KEY, MONGODB_URI=None, MAX_PAGE_LIMIT=50)


@pytest.fixture
def store() -> InMemoryRecipeStore:
    return InMemoryRecipeStore()


@pytest.fixture
def client(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as c:
        c.headers.update({"x-api-key": API_KEY})
        yield c
