import logging
import sqlite3
from typing import Any, Iterable

from databases import Database
from sqlalchemy import Insert, delete, literal_column, select

from db import liked_recipes, meal_plan, recipes
from domain.models import Recipe, Record
from domain.stores import IngredientStore, NutritionStore


logger = logging.getLogger(__name__)


# Extended result codes for a clash on the table's own primary or unique key.
IDENTITY_CONFLICTS = frozenset(
    {sqlite3.SQLITE_CONSTRAINT_PRIMARYKEY, sqlite3.SQLITE_CONSTRAINT_UNIQUE}
)


LIST_RECIPES = select(recipes).order_by(recipes.c.id)


LIST_LIKED_RECIPE_IDS = select(liked_recipes.c.recipe_id).order_by(
    liked_recipes.c.recipe_id
)


LIST_MEAL_PLAN = select(meal_plan.c.category_name, meal_plan.c.recipe_id).order_by(
    meal_plan.c.category_name, literal_column("rowid")
)


class RecipeNotFound(Exception):
    pass


class ConstraintViolation(Exception):
    """An integrity failure other than a duplicate of the row's own key."""


def is_identity_conflict(error: sqlite3.IntegrityError) -> bool:
    return error.sqlite_errorcode in IDENTITY_CONFLICTS


async def insert_once(db: Database, query: Insert, values: dict[str, Any]) -> bool:
    """Run an insert, treating a clash on the table's own key as a no-op.

    Returns whether a row was written. Any other integrity failure is raised as
    `ConstraintViolation`. Inside a transaction only the failed statement is
    undone, so a tolerated duplicate leaves the transaction usable.
    """
    try:
        await db.execute(query, values=values)  # pyright: ignore[reportUnknownMemberType]
    except sqlite3.IntegrityError as e:
        if not is_identity_conflict(e):
            raise ConstraintViolation(str(e)) from e
        logger.debug("Already stored in %s: %s", query.table, values)
        return False
    return True


class RecipeRepository:
    """Recipes plus the liked and meal plan relations over them.

    Ingredients and nutrition facts are read and written through the two
    stores, one lookup of each per recipe.
    """

    def __init__(
        self,
        db: Database,
        *,
        ingredients: IngredientStore | None = None,
        nutrition: NutritionStore | None = None,
    ) -> None:
        self.db = db
        self.ingredients = IngredientStore(db) if ingredients is None else ingredients
        self.nutrition = NutritionStore(db) if nutrition is None else nutrition

    async def _assemble(self, record: Record) -> Recipe:
        recipe_id = record["id"]
        ingredients = await self.ingredients.list_by_recipe(recipe_id)
        nutrition = await self.nutrition.list_by_recipe(recipe_id)
        return Recipe.from_record(record, ingredients=ingredients, nutrition=nutrition)

    async def get_recipes(self, ids: Iterable[int] | None = None) -> list[Recipe]:
        """All recipes, or those whose id is in `ids` in order of first mention."""
        if ids is None:
            result = await self.db.fetch_all(LIST_RECIPES)  # pyright: ignore[reportUnknownMemberType]
            return [await self._assemble(r) for r in result]

        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        query = select(recipes).where(recipes.c.id.in_(unique_ids))
        result = await self.db.fetch_all(query)  # pyright: ignore[reportUnknownMemberType]
        by_id = {r["id"]: r for r in result}
        return [await self._assemble(by_id[i]) for i in unique_ids if i in by_id]

    async def get_recipe(self, recipe_id: int) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            select(recipes).where(recipes.c.id == recipe_id)
        )

        if result is None:
            raise RecipeNotFound(f"{recipe_id}")

        return await self._assemble(result)

    async def add_recipe(self, recipe: Recipe) -> None:
        """Store the recipe row, its ingredients and its nutrition facts.

        All or nothing. An existing row with the same id is kept as it is while
        the ingredients and nutrition facts are replaced.
        """
        values = {
            "id": recipe.id,
            "title": recipe.title,
            "servings": recipe.servings,
            "prep_minutes": recipe.prep_minutes,
            "cook_minutes": recipe.cook_minutes,
            "ready_minutes": recipe.ready_minutes,
            "image_url": recipe.image_url,
        }
        async with self.db.transaction():
            created = await insert_once(self.db, recipes.insert(), values)
            try:
                await self.ingredients.save(recipe.ingredients, recipe.id)
                await self.nutrition.save(recipe.nutrition.values(), recipe.id)
            except sqlite3.IntegrityError as e:
                raise ConstraintViolation(str(e)) from e

        if created:
            logger.info("Added recipe %s", recipe.id)

    async def remove_recipe(self, recipe: Recipe) -> None:
        async with self.db.transaction():
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                delete(recipes).where(recipes.c.id == recipe.id)
            )
            await self.ingredients.remove(recipe.id)
            await self.nutrition.remove(recipe.id)
        logger.info("Removed recipe %s", recipe.id)

    async def get_liked_recipes(self) -> list[Recipe]:
        result = await self.db.fetch_all(LIST_LIKED_RECIPE_IDS)  # pyright: ignore[reportUnknownMemberType]
        return await self.get_recipes([r["recipe_id"] for r in result])

    async def is_liked_recipe(self, recipe_id: int) -> bool:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            select(liked_recipes).where(liked_recipes.c.recipe_id == recipe_id)
        )
        return result is not None

    async def add_liked_recipe(self, recipe_id: int) -> None:
        await insert_once(self.db, liked_recipes.insert(), {"recipe_id": recipe_id})

    async def remove_liked_recipe(self, recipe_id: int) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            delete(liked_recipes).where(liked_recipes.c.recipe_id == recipe_id)
        )

    async def get_recipes_in_meal_plan(self) -> dict[str, list[Recipe]]:
        result = await self.db.fetch_all(LIST_MEAL_PLAN)  # pyright: ignore[reportUnknownMemberType]

        recipe_ids: dict[str, list[int]] = {}
        for r in result:
            recipe_ids.setdefault(r["category_name"], []).append(r["recipe_id"])

        return {
            category: await self.get_recipes(ids)
            for category, ids in recipe_ids.items()
        }

    async def get_category_names_for_recipe_in_meal_plan(
        self, recipe_id: int
    ) -> list[str]:
        query = (
            select(meal_plan.c.category_name)
            .where(meal_plan.c.recipe_id == recipe_id)
            .order_by(meal_plan.c.category_name)
        )
        result = await self.db.fetch_all(query)  # pyright: ignore[reportUnknownMemberType]
        return [r["category_name"] for r in result]

    async def is_recipe_in_meal_plan(self, recipe_id: int) -> bool:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            select(meal_plan).where(meal_plan.c.recipe_id == recipe_id)
        )
        return result is not None

    async def add_recipe_to_meal_plan(
        self, recipe_id: int, category_names: Iterable[str]
    ) -> None:
        """Add the recipe under every category, or under none of them."""
        async with self.db.transaction():
            for category_name in category_names:
                await insert_once(
                    self.db,
                    meal_plan.insert(),
                    {"recipe_id": recipe_id, "category_name": category_name},
                )
        logger.info("Added recipe %s to the meal plan", recipe_id)

    async def remove_recipe_from_meal_plan(
        self, recipe_id: int, category_name: str
    ) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            delete(meal_plan).where(
                meal_plan.c.recipe_id == recipe_id,
                meal_plan.c.category_name == category_name,
            )
        )
