from typing import Any, Mapping, Self, TypeAlias


Record: TypeAlias = Mapping[str, Any]


class Ingredient:
    def __init__(
        self,
        *,
        name: str,
        amount: float = 0.0,
        unit: str = "",
        original: str = "",
    ) -> None:
        self.name = name
        self.amount = amount
        self.unit = unit
        self.original = original

    @classmethod
    def from_record(cls, record: Record) -> Self:
        return cls(
            name=record["name"],
            amount=record["amount"] or 0.0,
            unit=record["unit"] or "",
            original=record["original"] or "",
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        if not isinstance(data["name"], str):
            raise ValueError(f"Ingredient name must be a string, got {data['name']!r}")
        return cls(
            name=data["name"],
            amount=float(data.get("amount", 0.0)),
            unit=data.get("unit", ""),
            original=data.get("original", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "unit": self.unit,
            "original": self.original,
        }

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ingredient) and self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<Ingredient(name={self.name}, amount={self.amount}, unit={self.unit})>"


class NutritionFact:
    def __init__(
        self,
        *,
        kind: str,
        amount: float = 0.0,
        unit: str = "",
        percent_of_daily_needs: float = 0.0,
    ) -> None:
        self.kind = kind
        self.amount = amount
        self.unit = unit
        self.percent_of_daily_needs = percent_of_daily_needs

    @classmethod
    def from_record(cls, record: Record) -> Self:
        return cls(
            kind=record["kind"],
            amount=record["amount"] or 0.0,
            unit=record["unit"] or "",
            percent_of_daily_needs=record["percent_of_daily_needs"] or 0.0,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        if not isinstance(data["kind"], str):
            raise ValueError(f"Nutrient kind must be a string, got {data['kind']!r}")
        return cls(
            kind=data["kind"],
            amount=float(data.get("amount", 0.0)),
            unit=data.get("unit", ""),
            percent_of_daily_needs=float(data.get("percent_of_daily_needs", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "amount": self.amount,
            "unit": self.unit,
            "percent_of_daily_needs": self.percent_of_daily_needs,
        }

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NutritionFact) and self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<NutritionFact(kind={self.kind}, amount={self.amount}{self.unit})>"


class Recipe:
    """A recipe together with the ingredients and nutrition facts it owns."""

    def __init__(
        self,
        *,
        id: int,
        title: str,
        servings: int = 0,
        prep_minutes: int | None = None,
        cook_minutes: int | None = None,
        ready_minutes: int | None = None,
        image_url: str | None = None,
        ingredients: list[Ingredient] | None = None,
        nutrition: dict[str, NutritionFact] | None = None,
    ) -> None:
        self.id = id
        self.title = title
        self.servings = servings
        self.prep_minutes = prep_minutes
        self.cook_minutes = cook_minutes
        self.ready_minutes = ready_minutes
        self.image_url = image_url
        self.ingredients = [] if ingredients is None else ingredients
        self.nutrition = {} if nutrition is None else nutrition

    @classmethod
    def from_record(
        cls,
        record: Record,
        *,
        ingredients: list[Ingredient] | None = None,
        nutrition: dict[str, NutritionFact] | None = None,
    ) -> Self:
        """Decode a row of the recipes table. Does no I/O."""
        return cls(
            id=record["id"],
            title=record["title"],
            servings=record["servings"],
            prep_minutes=record["prep_minutes"],
            cook_minutes=record["cook_minutes"],
            ready_minutes=record["ready_minutes"],
            image_url=record["image_url"],
            ingredients=ingredients,
            nutrition=nutrition,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        nutrition = [NutritionFact.from_dict(n) for n in data.get("nutrition", [])]
        return cls(
            id=int(data["id"]),
            title=data["title"],
            servings=int(data.get("servings", 0)),
            prep_minutes=data.get("prep_minutes"),
            cook_minutes=data.get("cook_minutes"),
            ready_minutes=data.get("ready_minutes"),
            image_url=data.get("image_url"),
            ingredients=[Ingredient.from_dict(i) for i in data.get("ingredients", [])],
            nutrition={n.kind: n for n in nutrition},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "servings": self.servings,
            "prep_minutes": self.prep_minutes,
            "cook_minutes": self.cook_minutes,
            "ready_minutes": self.ready_minutes,
            "image_url": self.image_url,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "nutrition": [n.to_dict() for n in self.nutrition.values()],
        }

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Recipe) and self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title={self.title})>"
