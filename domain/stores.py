"""Ingredient and nutrition rows, owned by a recipe and keyed by its id."""
import logging
from typing import Iterable

from databases import Database
from sqlalchemy import delete, literal_column, select

from db import ingredients, nutrition_facts
from domain.models import Ingredient, NutritionFact


logger = logging.getLogger(__name__)


class IngredientStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_by_recipe(self, recipe_id: int) -> list[Ingredient]:
        query = (
            select(ingredients)
            .where(ingredients.c.recipe_id == recipe_id)
            .order_by(ingredients.c.position)
        )
        result = await self.db.fetch_all(query)  # pyright: ignore[reportUnknownMemberType]
        return [Ingredient.from_record(r) for r in result]

    async def save(self, items: Iterable[Ingredient], recipe_id: int) -> None:
        """Replace the ingredients stored for `recipe_id`, keeping their order."""
        values = [
            {"recipe_id": recipe_id, "position": position, **ingredient.to_dict()}
            for position, ingredient in enumerate(items)
        ]
        async with self.db.transaction():
            await self.remove(recipe_id)
            if values:
                await self.db.execute_many(ingredients.insert(), values=values)
        logger.debug("Saved %d ingredients for recipe %s", len(values), recipe_id)

    async def remove(self, recipe_id: int) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            delete(ingredients).where(ingredients.c.recipe_id == recipe_id)
        )


class NutritionStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    async def list_by_recipe(self, recipe_id: int) -> dict[str, NutritionFact]:
        query = (
            select(nutrition_facts)
            .where(nutrition_facts.c.recipe_id == recipe_id)
            .order_by(literal_column("rowid"))
        )
        result = await self.db.fetch_all(query)  # pyright: ignore[reportUnknownMemberType]
        facts = [NutritionFact.from_record(r) for r in result]
        return {fact.kind: fact for fact in facts}

    async def save(self, items: Iterable[NutritionFact], recipe_id: int) -> None:
        """Replace the nutrition facts stored for `recipe_id`.

        A later fact of the same kind wins over an earlier one.
        """
        by_kind = {fact.kind: fact for fact in items}
        values = [{"recipe_id": recipe_id, **f.to_dict()} for f in by_kind.values()]
        async with self.db.transaction():
            await self.remove(recipe_id)
            if values:
                await self.db.execute_many(nutrition_facts.insert(), values=values)
        logger.debug("Saved %d nutrition facts for recipe %s", len(values), recipe_id)

    async def remove(self, recipe_id: int) -> None:
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            delete(nutrition_facts).where(nutrition_facts.c.recipe_id == recipe_id)
        )
