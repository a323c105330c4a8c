# weekmenu/application/shopping_list.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from weekmenu.domain.entities import IngredientLine, MenuWeek, Recipe, ShoppingItem
from weekmenu.domain.repositories import MenuRepo, RecipeRepo
from weekmenu.services.categories import categorize, category_rank
from weekmenu.services.text_utils import dutch_sort_key
from weekmenu.services.units import ParseFailure, normalize_ingredient_name, normalize_unit, parse_quantity

log = logging.getLogger("app.shopping_list")


@dataclass
class _Group:
    display_name: str
    unit: str
    category: str
    recipes: Dict[str, None] = field(default_factory=dict)  # ordered set
    total: float = 0.0
    parsed: int = 0
    has_unparseable_qty: bool = False


def format_quantity(total: float) -> str:
    """3.0 -> '3', 2.5 -> '2.5', 0.333 -> '0.3', 0.25 -> '0.3'"""
    if float(total).is_integer():
        return str(int(total))
    # Half-up on the exact binary value: 0.25 -> "0.3", 0.35 (0.3499...) -> "0.3"
    return str(Decimal(float(total)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate_shopping_list(lines: Iterable[IngredientLine]) -> List[ShoppingItem]:
    """
    Group ingredient lines on (normalized name, normalized unit) and sum their
    quantities. Unparseable quantities are left out of the sum; a group without
    any parseable quantity gets an empty total.
    """
    groups: Dict[Tuple[str, str], _Group] = {}

    for ing in lines:
        name = normalize_ingredient_name(ing.name)
        unit = normalize_unit(ing.unit)
        key = (name, unit)

        group = groups.get(key)
        if group is None:
            group = _Group(display_name=ing.name, unit=unit, category=categorize(name))
            groups[key] = group
        group.recipes[ing.recipe_title] = None

        qty = parse_quantity(ing.quantity)
        if qty is ParseFailure.UNPARSEABLE:
            group.has_unparseable_qty = True
            log.debug("Unparseable quantity %r for %r (%s)", ing.quantity, ing.name, ing.recipe_title)
        elif qty is not ParseFailure.ABSENT:
            group.total += qty
            group.parsed += 1

    items: List[ShoppingItem] = []
    for (name, unit), group in groups.items():
        items.append(
            ShoppingItem(
                name=name,
                display_name=group.display_name,
                total_quantity=format_quantity(group.total) if group.parsed else "",
                unit=unit,
                category=group.category,
                from_recipes=tuple(group.recipes),
            )
        )

    items.sort(key=lambda it: (category_rank(it.category), dutch_sort_key(it.name)))
    return items


def ingredient_lines(recipes: Iterable[Recipe]) -> List[IngredientLine]:
    return [
        IngredientLine(name=i.name, quantity=i.quantity, unit=i.unit, recipe_title=r.title)
        for r in recipes
        for i in r.ingredients
    ]


class ShoppingListBuilder:
    def __init__(self, recipe_repo: RecipeRepo, menu_repo: MenuRepo) -> None:
        self.recipe_repo = recipe_repo
        self.menu_repo = menu_repo

    def _resolve_week(self, week_id: Optional[str]) -> MenuWeek:
        if week_id:
            week = self.menu_repo.by_id(week_id)
        else:
            recent = self.menu_repo.recent(1)
            week = recent[0] if recent else None
        if week is None:
            raise LookupError(f"Menu week not found: {week_id or 'latest'}")
        return week

    def for_recipes(self, urls: Sequence[str]) -> List[ShoppingItem]:
        urls = [u.strip() for u in urls if u and u.strip()]
        if not urls:
            raise ValueError("recipe_urls is required")
        recipes = self.recipe_repo.by_urls(urls)
        missing = set(urls) - {r.url for r in recipes}
        if missing:
            log.warning("Skipping %d unknown recipe urls: %s", len(missing), sorted(missing))
        return aggregate_shopping_list(ingredient_lines(recipes))

    def for_week(self, week_id: Optional[str] = None) -> Tuple[MenuWeek, List[ShoppingItem]]:
        week = self._resolve_week(week_id)
        by_url = {r.url: r for r in self.recipe_repo.by_urls(week.recipe_urls())}
        # Slot order, one entry per slot even when a recipe appears twice.
        recipes = [by_url[s.recipe_url] for s in sorted(week.slots, key=lambda s: s.day_of_week) if s.recipe_url in by_url]
        return week, aggregate_shopping_list(ingredient_lines(recipes))
