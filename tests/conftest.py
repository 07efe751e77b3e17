from pathlib import Path

from databases import Database
import pytest
import pytest_asyncio

from db import create_db
from domain.models import Ingredient, NutritionFact, Recipe
from domain.repository import RecipeRepository


def db_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'foodora.db'}"


@pytest_asyncio.fixture
async def db(tmp_path: Path):
    database = Database(db_url(tmp_path))
    await database.connect()
    await create_db(database)
    yield database
    await database.disconnect()


@pytest.fixture
def repo(db: Database) -> RecipeRepository:
    return RecipeRepository(db)


@pytest.fixture
def pancakes() -> Recipe:
    return Recipe(
        id=1,
        title="Pancakes",
        servings=2,
        prep_minutes=5,
        cook_minutes=10,
        ready_minutes=15,
        image_url="https://example.com/pancakes.jpg",
        ingredients=[
            Ingredient(name="flour", amount=200, unit="g", original="200g flour"),
            Ingredient(name="egg", amount=2, original="2 eggs"),
            Ingredient(name="milk", amount=300, unit="ml", original="300ml milk"),
        ],
        nutrition={
            "Calories": NutritionFact(
                kind="Calories", amount=520, unit="kcal", percent_of_daily_needs=26
            ),
            "Protein": NutritionFact(
                kind="Protein", amount=18, unit="g", percent_of_daily_needs=36
            ),
        },
    )


@pytest.fixture
def omelette() -> Recipe:
    return Recipe(
        id=2,
        title="Omelette",
        servings=1,
        ingredients=[Ingredient(name="egg", amount=3, original="3 eggs")],
    )


@pytest.fixture
def soup() -> Recipe:
    return Recipe(id=3, title="Tomato soup", servings=4, ready_minutes=40)
