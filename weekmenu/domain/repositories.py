# weekmenu/domain/repositories.py
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, List, Protocol, Sequence

from weekmenu.domain.entities import Bonus, MenuSlot, MenuWeek, Recipe


class RecipeRepo(Protocol):
    def all(self) -> List[Recipe]: ...

    def by_url(self, url: str) -> Recipe | None: ...

    def by_urls(self, urls: Sequence[str]) -> List[Recipe]: ...

    def insert_many(self, recipes: Iterable[Recipe]) -> int: ...

    def delete_all(self) -> int: ...


class BonusRepo(Protocol):
    def all(self) -> List[Bonus]: ...

    def valid_on(self, day: date) -> List[Bonus]: ...

    def insert_many(self, bonuses: Iterable[Bonus]) -> int: ...

    def delete_all(self) -> int: ...


class MenuRepo(Protocol):
    def recent(self, n: int) -> List[MenuWeek]:
        """Most recently created weeks first."""
        ...

    def by_id(self, week_id: str) -> MenuWeek | None: ...

    def create_week(self, week_start: date, slots: Sequence[MenuSlot], created_at: datetime) -> MenuWeek: ...

    def slot_by_id(self, slot_id: str) -> tuple[MenuWeek, MenuSlot] | None: ...

    def update_slot_recipe(self, slot_id: str, recipe_url: str) -> None: ...

    def delete_slot(self, slot_id: str) -> None: ...

    def delete_slots_for_missing_recipes(self, known_urls: Iterable[str]) -> int: ...
