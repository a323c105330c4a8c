# weekmenu/domain/entities.py
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Tuple

@dataclass(frozen=True)
class Ingredient:
    name: str
    quantity: str = ""
    unit: str = ""
    raw_text: str = ""

@dataclass(frozen=True)
class Recipe:
    url: str
    title: str
    tags: Tuple[str, ...] = ()
    prep_time: int | None = None
    is_favorite: bool = False
    ingredients: Tuple[Ingredient, ...] = ()
    image_url: str = ""
    servings: int = 4
    source: str = ""
    calories: int | None = None
    instructions: Tuple[str, ...] = ()

@dataclass(frozen=True)
class Bonus:
    product_name: str
    discount_label: str
    valid_from: date | None = None
    valid_until: date | None = None
    original_price: float | None = None
    bonus_price: float | None = None
    category: str = ""

    def is_valid_on(self, day: date) -> bool:
        if self.valid_from and day < self.valid_from:
            return False
        if self.valid_until and day > self.valid_until:
            return False
        return True

@dataclass(frozen=True)
class MenuSlot:
    day_of_week: int  # 0=monday ... 6=sunday
    recipe_url: str
    id: str | None = None
    reason: str = ""

@dataclass(frozen=True)
class MenuWeek:
    id: str | None
    week_start: date
    created_at: datetime
    slots: Tuple[MenuSlot, ...] = ()

    def __post_init__(self) -> None:
        days = [s.day_of_week for s in self.slots]
        if len(days) != len(set(days)):
            raise ValueError(f"Menu week {self.id} has more than one slot per day: {days}")

    def recipe_urls(self) -> List[str]:
        return [s.recipe_url for s in self.slots]

@dataclass(frozen=True)
class MenuSuggestion:
    day_of_week: int
    recipe: Recipe
    reason: str

@dataclass(frozen=True)
class IngredientLine:
    name: str
    quantity: str
    unit: str
    recipe_title: str

@dataclass(frozen=True)
class ShoppingItem:
    name: str
    display_name: str
    total_quantity: str
    unit: str
    category: str
    from_recipes: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "total_quantity": self.total_quantity,
            "unit": self.unit,
            "category": self.category,
            "from_recipes": list(self.from_recipes),
        }
