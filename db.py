from databases import Database
from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)
from sqlalchemy.schema import CreateTable


metadata = MetaData()


recipes = Table(
    "recipes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("title", String(256), nullable=False),
    Column("servings", Integer, nullable=False, default=0),
    Column("prep_minutes", Integer),
    Column("cook_minutes", Integer),
    Column("ready_minutes", Integer),
    Column("image_url", String(2048)),
    CheckConstraint("servings >= 0", name="servings_not_negative"),
)


ingredients = Table(
    "ingredients",
    metadata,
    Column("recipe_id", Integer, nullable=False),
    Column("position", Integer, nullable=False),
    Column("name", String(256), nullable=False),
    Column("amount", Float),
    Column("unit", String(64)),
    Column("original", String(512)),
    PrimaryKeyConstraint("recipe_id", "position"),
    CheckConstraint("name <> ''", name="ingredient_name_not_empty"),
)


nutrition_facts = Table(
    "nutrition_facts",
    metadata,
    Column("recipe_id", Integer, nullable=False),
    Column("kind", String(64), nullable=False),
    Column("amount", Float),
    Column("unit", String(16)),
    Column("percent_of_daily_needs", Float),
    PrimaryKeyConstraint("recipe_id", "kind"),
    CheckConstraint("kind <> ''", name="nutrition_kind_not_empty"),
)


liked_recipes = Table(
    "liked_recipes",
    metadata,
    Column("recipe_id", Integer, primary_key=True, autoincrement=False),
)


meal_plan = Table(
    "meal_plan",
    metadata,
    Column("recipe_id", Integer, nullable=False),
    Column("category_name", String(64), nullable=False),
    PrimaryKeyConstraint("recipe_id", "category_name"),
    CheckConstraint("category_name <> ''", name="category_name_not_empty"),
)


async def create_db(db: Database) -> None:
    for table in metadata.sorted_tables:
        await db.execute(  # pyright: ignore[reportUnknownMemberType]
            query=CreateTable(table, if_not_exists=True)
        )
