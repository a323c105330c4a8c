"""
Shared fixtures: recipe/bonus factories and in-memory repositories.
Nothing here touches MongoDB.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

import pytest

from weekmenu.core.config import MenuSettings
from weekmenu.domain.entities import Bonus, Ingredient, Recipe
from weekmenu.infrastructure.memory_repositories import (
    InMemoryBonusRepository,
    InMemoryMenuRepository,
    InMemoryRecipeRepository,
)


class ZeroRandom:
    """Random source that removes the jitter term."""

    def random(self) -> float:
        return 0.0


def _make_recipe(
    url: str,
    title: Optional[str] = None,
    tags: Sequence[str] = (),
    prep_time: Optional[int] = None,
    is_favorite: bool = True,
    ingredients: Iterable[Tuple[str, str, str]] = (),
) -> Recipe:
    return Recipe(
        url=url,
        title=title or url,
        tags=tuple(tags),
        prep_time=prep_time,
        is_favorite=is_favorite,
        ingredients=tuple(Ingredient(name=n, quantity=q, unit=u) for n, q, u in ingredients),
    )


@pytest.fixture
def make_recipe():
    return _make_recipe


@pytest.fixture
def zero_random():
    return ZeroRandom()


@pytest.fixture
def settings():
    return MenuSettings()


@pytest.fixture
def recipe_pool():
    """20 favorites/discoveries without cuisine tags, so only recency limits selection."""
    return [
        _make_recipe(
            f"https://example.test/r{i}",
            title=f"Recept {i}",
            tags=("pasta",) if i % 2 else ("snel",),
            prep_time=15 + 5 * i,
            is_favorite=i % 3 != 0,
            ingredients=[("kipfilet", "300", "g"), ("rode ui, gesneden", "1", "stuk(s)")],
        )
        for i in range(20)
    ]


@pytest.fixture
def repos(recipe_pool):
    recipe_repo = InMemoryRecipeRepository(recipe_pool)
    bonus_repo = InMemoryBonusRepository(
        [Bonus(product_name="AH Kipfilet", discount_label="2e halve prijs")]
    )
    menu_repo = InMemoryMenuRepository()
    return recipe_repo, bonus_repo, menu_repo
