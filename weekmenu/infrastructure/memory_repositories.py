# weekmenu/infrastructure/memory_repositories.py
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from weekmenu.domain.entities import Bonus, MenuSlot, MenuWeek, Recipe
from weekmenu.domain.repositories import BonusRepo, MenuRepo, RecipeRepo


class InMemoryRecipeRepository(RecipeRepo):
    def __init__(self, recipes: Iterable[Recipe] = ()) -> None:
        self._data: Dict[str, Recipe] = {}
        self.insert_many(recipes)

    def all(self) -> List[Recipe]:
        return list(self._data.values())

    def by_url(self, url: str) -> Recipe | None:
        return self._data.get(url)

    def by_urls(self, urls: Sequence[str]) -> List[Recipe]:
        return [self._data[u] for u in dict.fromkeys(urls) if u in self._data]

    def insert_many(self, recipes: Iterable[Recipe]) -> int:
        n = 0
        for r in recipes:
            if r.url in self._data:
                raise ValueError(f"Duplicate recipe url: {r.url}")
            self._data[r.url] = r
            n += 1
        return n

    def delete_all(self) -> int:
        n = len(self._data)
        self._data.clear()
        return n


class InMemoryBonusRepository(BonusRepo):
    def __init__(self, bonuses: Iterable[Bonus] = ()) -> None:
        self._data: List[Bonus] = list(bonuses)

    def all(self) -> List[Bonus]:
        return list(self._data)

    def valid_on(self, day: date) -> List[Bonus]:
        return [b for b in self._data if b.is_valid_on(day)]

    def insert_many(self, bonuses: Iterable[Bonus]) -> int:
        before = len(self._data)
        self._data.extend(bonuses)
        return len(self._data) - before

    def delete_all(self) -> int:
        n = len(self._data)
        self._data.clear()
        return n


class InMemoryMenuRepository(MenuRepo):
    """Weeks ordered by created_at like the Mongo repository; ids are sequential strings."""

    def __init__(self) -> None:
        self._weeks: Dict[str, MenuWeek] = {}
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        return str(next(self._ids))

    def recent(self, n: int) -> List[MenuWeek]:
        # Newest created_at first, later insertion first on ties (as the Mongo sort on created_at, _id).
        ordered = sorted(enumerate(self._weeks.values()), key=lambda p: (p[1].created_at, p[0]), reverse=True)
        return [w for _, w in ordered][:n]

    def by_id(self, week_id: str) -> MenuWeek | None:
        return self._weeks.get(week_id)

    def create_week(self, week_start: date, slots: Sequence[MenuSlot], created_at: Optional[datetime] = None) -> MenuWeek:
        week = MenuWeek(
            id=self._next_id(),
            week_start=week_start,
            created_at=created_at or datetime.now(timezone.utc),
            slots=tuple(replace(s, id=self._next_id()) for s in slots),
        )
        self._weeks[week.id] = week
        return week

    def slot_by_id(self, slot_id: str) -> Tuple[MenuWeek, MenuSlot] | None:
        for week in self._weeks.values():
            for slot in week.slots:
                if slot.id == slot_id:
                    return week, slot
        return None

    def _replace_slots(self, week: MenuWeek, slots: Iterable[MenuSlot]) -> None:
        self._weeks[week.id] = replace(week, slots=tuple(slots))

    def update_slot_recipe(self, slot_id: str, recipe_url: str) -> None:
        found = self.slot_by_id(slot_id)
        if not found:
            raise LookupError(f"Menu slot not found: {slot_id}")
        week, _ = found
        self._replace_slots(
            week, (replace(s, recipe_url=recipe_url, reason="") if s.id == slot_id else s for s in week.slots)
        )

    def delete_slot(self, slot_id: str) -> None:
        found = self.slot_by_id(slot_id)
        if not found:
            raise LookupError(f"Menu slot not found: {slot_id}")
        week, _ = found
        self._replace_slots(week, (s for s in week.slots if s.id != slot_id))

    def delete_slots_for_missing_recipes(self, known_urls: Iterable[str]) -> int:
        known = set(known_urls)
        dropped = 0
        for week in list(self._weeks.values()):
            kept = [s for s in week.slots if s.recipe_url in known]
            dropped += len(week.slots) - len(kept)
            self._replace_slots(week, kept)
        return dropped
