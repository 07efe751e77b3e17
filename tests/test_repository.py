import sqlite3

import pytest

from domain.models import Ingredient, NutritionFact, Recipe
from domain.repository import (
    ConstraintViolation,
    RecipeNotFound,
    RecipeRepository,
    is_identity_conflict,
)


def integrity_error(code: int) -> sqlite3.IntegrityError:
    error = sqlite3.IntegrityError("constraint failed")
    error.sqlite_errorcode = code
    return error


@pytest.mark.parametrize(
    "code,expected",
    (
        (sqlite3.SQLITE_CONSTRAINT_PRIMARYKEY, True),
        (sqlite3.SQLITE_CONSTRAINT_UNIQUE, True),
        (sqlite3.SQLITE_CONSTRAINT_NOTNULL, False),
        (sqlite3.SQLITE_CONSTRAINT_CHECK, False),
        (sqlite3.SQLITE_CONSTRAINT_FOREIGNKEY, False),
    ),
)
def test_is_identity_conflict(code: int, expected: bool) -> None:
    assert is_identity_conflict(integrity_error(code)) is expected


@pytest.mark.asyncio
async def test_get_recipe(repo: RecipeRepository) -> None:
    await repo.add_recipe(Recipe(id=1, title="Pancakes", servings=2))

    got = await repo.get_recipe(1)
    assert got.title == "Pancakes"
    assert got.servings == 2
    assert got.ingredients == []
    assert got.nutrition == {}

    with pytest.raises(RecipeNotFound):
        await repo.get_recipe(2)


@pytest.mark.asyncio
async def test_get_recipes_by_id(
    repo: RecipeRepository, pancakes: Recipe, omelette: Recipe, soup: Recipe
) -> None:
    for recipe in (pancakes, omelette, soup):
        await repo.add_recipe(recipe)

    got = await repo.get_recipes([pancakes.id, omelette.id])
    assert got == [pancakes, omelette]
    assert [i.name for i in got[0].ingredients] == ["flour", "egg", "milk"]
    assert list(got[0].nutrition) == ["Calories", "Protein"]


@pytest.mark.asyncio
async def test_get_recipes_collapses_duplicates_and_skips_unknown(
    repo: RecipeRepository, pancakes: Recipe, omelette: Recipe
) -> None:
    await repo.add_recipe(pancakes)
    await repo.add_recipe(omelette)

    got = await repo.get_recipes([omelette.id, 99, pancakes.id, omelette.id])
    assert [r.id for r in got] == [omelette.id, pancakes.id]
    assert await repo.get_recipes([]) == []
    assert await repo.get_recipes([42]) == []


@pytest.mark.asyncio
async def test_get_all_recipes(
    repo: RecipeRepository, pancakes: Recipe, omelette: Recipe, soup: Recipe
) -> None:
    assert await repo.get_recipes() == []
    for recipe in (soup, pancakes, omelette):
        await repo.add_recipe(recipe)

    assert await repo.get_recipes() == [pancakes, omelette, soup]


@pytest.mark.asyncio
async def test_add_recipe_twice(repo: RecipeRepository, pancakes: Recipe) -> None:
    await repo.add_recipe(pancakes)
    await repo.add_recipe(pancakes)

    assert await repo.get_recipes() == [pancakes]


@pytest.mark.asyncio
async def test_add_recipe_constraint_violation(repo: RecipeRepository) -> None:
    with pytest.raises(ConstraintViolation):
        await repo.add_recipe(Recipe(id=1, title="Negative", servings=-1))

    with pytest.raises(RecipeNotFound):
        await repo.get_recipe(1)


@pytest.mark.asyncio
async def test_add_recipe_is_all_or_nothing(repo: RecipeRepository) -> None:
    recipe = Recipe(
        id=1,
        title="Broken",
        ingredients=[
            Ingredient(name="salt"),
            Ingredient(name=None),  # pyright: ignore[reportArgumentType]
        ],
    )

    with pytest.raises(ConstraintViolation) as exc_info:
        await repo.add_recipe(recipe)
    assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)

    with pytest.raises(RecipeNotFound):
        await repo.get_recipe(1)
    assert await repo.ingredients.list_by_recipe(1) == []


@pytest.mark.parametrize(
    "recipe",
    (
        Recipe(id=1, title="Nameless", ingredients=[Ingredient(name="")]),
        Recipe(
            id=1,
            title="Kindless",
            nutrition={"": NutritionFact(kind="", amount=3)},
        ),
    ),
)
@pytest.mark.asyncio
async def test_add_recipe_rejects_bad_owned_rows(
    repo: RecipeRepository, recipe: Recipe
) -> None:
    with pytest.raises(ConstraintViolation):
        await repo.add_recipe(recipe)

    with pytest.raises(RecipeNotFound):
        await repo.get_recipe(1)


@pytest.mark.asyncio
async def test_remove_recipe(
    repo: RecipeRepository, pancakes: Recipe, omelette: Recipe
) -> None:
    await repo.add_recipe(pancakes)
    await repo.add_recipe(omelette)
    await repo.add_liked_recipe(pancakes.id)

    await repo.remove_recipe(pancakes)

    assert await repo.get_recipes() == [omelette]
    assert await repo.ingredients.list_by_recipe(pancakes.id) == []
    assert await repo.nutrition.list_by_recipe(pancakes.id) == {}
    assert await repo.is_liked_recipe(pancakes.id)


@pytest.mark.asyncio
async def test_remove_missing_recipe(repo: RecipeRepository, pancakes: Recipe) -> None:
    await repo.add_recipe(pancakes)

    await repo.remove_recipe(Recipe(id=7, title="Nothing"))

    assert await repo.get_recipes() == [pancakes]


@pytest.mark.asyncio
async def test_liked_recipe(repo: RecipeRepository, pancakes: Recipe) -> None:
    await repo.add_recipe(pancakes)
    assert not await repo.is_liked_recipe(pancakes.id)

    await repo.add_liked_recipe(pancakes.id)
    await repo.add_liked_recipe(pancakes.id)
    assert await repo.is_liked_recipe(pancakes.id)
    assert await repo.get_liked_recipes() == [pancakes]

    await repo.remove_liked_recipe(pancakes.id)
    assert not await repo.is_liked_recipe(pancakes.id)
    assert await repo.get_liked_recipes() == []

    await repo.remove_liked_recipe(pancakes.id)


@pytest.mark.asyncio
async def test_liked_recipes_without_recipe_row(
    repo: RecipeRepository, omelette: Recipe
) -> None:
    await repo.add_recipe(omelette)
    await repo.add_liked_recipe(404)
    await repo.add_liked_recipe(omelette.id)

    assert await repo.is_liked_recipe(404)
    assert await repo.get_liked_recipes() == [omelette]


@pytest.mark.asyncio
async def test_meal_plan_categories(repo: RecipeRepository, pancakes: Recipe) -> None:
    await repo.add_recipe(pancakes)
    assert not await repo.is_recipe_in_meal_plan(pancakes.id)

    await repo.add_recipe_to_meal_plan(pancakes.id, ["lunch", "breakfast"])
    assert set(
        await repo.get_category_names_for_recipe_in_meal_plan(pancakes.id)
    ) == {"breakfast", "lunch"}
    assert await repo.is_recipe_in_meal_plan(pancakes.id)

    await repo.add_recipe_to_meal_plan(pancakes.id, ["breakfast", "dinner"])
    assert await repo.get_category_names_for_recipe_in_meal_plan(pancakes.id) == [
        "breakfast",
        "dinner",
        "lunch",
    ]


@pytest.mark.asyncio
async def test_meal_plan_insert_is_atomic(repo: RecipeRepository) -> None:
    with pytest.raises(ConstraintViolation):
        await repo.add_recipe_to_meal_plan(1, ["breakfast", ""])

    assert not await repo.is_recipe_in_meal_plan(1)
    assert await repo.get_category_names_for_recipe_in_meal_plan(1) == []


@pytest.mark.asyncio
async def test_get_recipes_in_meal_plan(
    repo: RecipeRepository, pancakes: Recipe, omelette: Recipe, soup: Recipe
) -> None:
    for recipe in (pancakes, omelette, soup):
        await repo.add_recipe(recipe)
    assert await repo.get_recipes_in_meal_plan() == {}

    await repo.add_recipe_to_meal_plan(soup.id, ["lunch", "dinner"])
    await repo.add_recipe_to_meal_plan(pancakes.id, ["breakfast"])
    await repo.add_recipe_to_meal_plan(omelette.id, ["breakfast", "lunch"])

    got = await repo.get_recipes_in_meal_plan()
    assert list(got) == ["breakfast", "dinner", "lunch"]
    assert got["breakfast"] == [pancakes, omelette]
    assert got["dinner"] == [soup]
    assert got["lunch"] == [soup, omelette]


@pytest.mark.asyncio
async def test_remove_recipe_from_meal_plan(repo: RecipeRepository) -> None:
    await repo.add_recipe_to_meal_plan(1, ["breakfast", "lunch"])

    await repo.remove_recipe_from_meal_plan(1, "breakfast")
    assert await repo.get_category_names_for_recipe_in_meal_plan(1) == ["lunch"]

    await repo.remove_recipe_from_meal_plan(1, "breakfast")
    await repo.remove_recipe_from_meal_plan(1, "lunch")
    assert not await repo.is_recipe_in_meal_plan(1)
