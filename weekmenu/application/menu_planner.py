# weekmenu/application/menu_planner.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Protocol, Sequence

import numpy as np

from weekmenu.core.config import DAY_NAMES, MenuSettings
from weekmenu.domain.entities import Bonus, MenuSlot, MenuSuggestion, MenuWeek, Recipe
from weekmenu.domain.repositories import BonusRepo, MenuRepo, RecipeRepo
from weekmenu.services.bonus_matcher import BonusMatch, BonusMatcher
from weekmenu.services.taste_profile import TasteProfile, build_taste_profile

log = logging.getLogger("app.menu_planner")

REASON_FAVORITE = "Favorite"
REASON_TASTE = "Matches your taste"

CUISINE_TAGS: FrozenSet[str] = frozenset({
    "aziatisch", "italiaans", "grieks", "mexicaans", "indiaas",
    "thais", "japans", "koreaans", "frans", "marokkaans",
    "midden-oosters", "amerikaans", "mediterraan",
})


class RandomSource(Protocol):
    """Anything with random() -> float in [0, 1): numpy Generator, random.Random."""

    def random(self) -> float: ...


# ----------------------------
# Scoring
# ----------------------------
@dataclass(frozen=True)
class ScoredRecipe:
    recipe: Recipe
    score: float
    reason: str
    cuisine: str | None
    prep_time: int


def recent_recipe_urls(weeks: Iterable[MenuWeek]) -> FrozenSet[str]:
    return frozenset(url for w in weeks for url in w.recipe_urls())


def cuisine_of(tags: Sequence[str]) -> str | None:
    return next((t for t in tags if t in CUISINE_TAGS), None)


def _reason(recipe: Recipe, match: BonusMatch) -> str:
    if match.matched_ingredients > 0:
        bonus = f"Bonus: {match.first_label}"
        return f"{REASON_FAVORITE} + {bonus}" if recipe.is_favorite else bonus
    return REASON_FAVORITE if recipe.is_favorite else REASON_TASTE


def score_recipes(
    recipes: Sequence[Recipe],
    profile: TasteProfile,
    matcher: BonusMatcher,
    recent_urls: FrozenSet[str],
    rng: RandomSource,
    settings: MenuSettings,
) -> List[ScoredRecipe]:
    out: List[ScoredRecipe] = []
    for r in recipes:
        ing_names = [i.name.lower() for i in r.ingredients]

        tag_score = profile.affinity(r.tags)
        match = matcher.match(ing_names)
        bonus_score = match.matched_ingredients / len(ing_names) if ing_names else 0.0
        freshness = 0.0 if r.url in recent_urls else settings.freshness_bonus
        jitter = float(rng.random()) * settings.jitter_scale

        score = tag_score * settings.tag_weight + bonus_score * settings.bonus_weight + freshness + jitter
        out.append(
            ScoredRecipe(
                recipe=r,
                score=score,
                reason=_reason(r, match),
                cuisine=cuisine_of(r.tags),
                prep_time=r.prep_time if r.prep_time is not None else settings.default_prep_time,
            )
        )
    return out


# ----------------------------
# Diversity selection
# ----------------------------
@dataclass(frozen=True)
class SelectionState:
    selected: tuple = ()
    used_urls: FrozenSet[str] = frozenset()
    cuisine_counts: Dict[str, int] = field(default_factory=dict)


def can_select(state: SelectionState, item: ScoredRecipe, recent_urls: FrozenSet[str], cuisine_cap: int) -> bool:
    url = item.recipe.url
    if url in state.used_urls or url in recent_urls:
        return False
    if item.cuisine and state.cuisine_counts.get(item.cuisine, 0) >= cuisine_cap:
        return False
    return True


def with_selected(state: SelectionState, item: ScoredRecipe) -> SelectionState:
    counts = dict(state.cuisine_counts)
    if item.cuisine:
        counts[item.cuisine] = counts.get(item.cuisine, 0) + 1
    return SelectionState(
        selected=state.selected + (item,),
        used_urls=state.used_urls | {item.recipe.url},
        cuisine_counts=counts,
    )


def fill_slots(
    state: SelectionState,
    pool: Iterable[ScoredRecipe],
    limit: int,
    recent_urls: FrozenSet[str],
    cuisine_cap: int,
) -> SelectionState:
    for item in pool:
        if len(state.selected) >= limit:
            break
        if can_select(state, item, recent_urls, cuisine_cap):
            state = with_selected(state, item)
    return state


def select_diverse(scored: Sequence[ScoredRecipe], recent_urls: FrozenSet[str], settings: MenuSettings) -> List[ScoredRecipe]:
    """
    Favorites first (up to favorite_slots), then other recipes with favorites as
    fallback, both by descending score. Never backfills past the constraints.
    """
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)
    favorites = [s for s in ranked if s.recipe.is_favorite]
    others = [s for s in ranked if not s.recipe.is_favorite]

    state = fill_slots(
        SelectionState(), favorites, min(settings.favorite_slots, settings.menu_days), recent_urls, settings.cuisine_cap
    )
    state = fill_slots(state, [*others, *favorites], settings.menu_days, recent_urls, settings.cuisine_cap)
    return list(state.selected)


# ----------------------------
# Day assignment
# ----------------------------
def pick_day(prep_time: int, used_days: FrozenSet[int], settings: MenuSettings) -> int | None:
    weekdays = [d for d in settings.weekdays if d not in used_days]
    weekend = [d for d in settings.weekend if d not in used_days]
    preferred, fallback = (weekend, weekdays) if prep_time > settings.long_prep_threshold else (weekdays, weekend)
    if preferred:
        return preferred[0]
    return fallback[0] if fallback else None


def assign_days(selected: Sequence[ScoredRecipe], settings: MenuSettings) -> List[MenuSuggestion]:
    used: FrozenSet[int] = frozenset()
    result: List[MenuSuggestion] = []
    # Longest first so they claim the weekend.
    for item in sorted(selected, key=lambda s: s.prep_time, reverse=True):
        day = pick_day(item.prep_time, used, settings)
        if day is None:
            log.warning("No free day left for %s", item.recipe.url)
            continue
        result.append(MenuSuggestion(day_of_week=day, recipe=item.recipe, reason=item.reason))
        used = used | {day}
    result.sort(key=lambda s: s.day_of_week)
    return result


def generate_week_menu(
    recipes: Sequence[Recipe],
    bonuses: Sequence[Bonus],
    recent_weeks: Sequence[MenuWeek],
    rng: Optional[RandomSource] = None,
    settings: Optional[MenuSettings] = None,
) -> List[MenuSuggestion]:
    """
    Score every recipe against the taste profile and current bonuses, pick a
    diverse set for the week and spread it over the days. Pure apart from `rng`.
    """
    settings = settings or MenuSettings()
    recipes = list(recipes)
    if len(recipes) < settings.menu_days:
        return [MenuSuggestion(day_of_week=i, recipe=r, reason=REASON_FAVORITE) for i, r in enumerate(recipes)]

    rng = rng if rng is not None else np.random.default_rng()
    recent = recent_recipe_urls(recent_weeks)
    scored = score_recipes(recipes, build_taste_profile(recipes), BonusMatcher(bonuses), recent, rng, settings)
    selected = select_diverse(scored, recent, settings)
    if len(selected) < settings.menu_days:
        log.warning(
            "Only %d of %d recipes satisfy the diversity/recency constraints", len(selected), settings.menu_days
        )
    log.debug("Scored %d recipes, selected %d (recent excluded: %d)", len(scored), len(selected), len(recent))
    return assign_days(selected, settings)


# ----------------------------
# Menu service
# ----------------------------
def week_start_for(day: date) -> date:
    return day - timedelta(days=day.weekday())


def recipe_summary(r: Recipe) -> Dict[str, Any]:
    return {
        "url": r.url,
        "title": r.title,
        "image_url": r.image_url,
        "prep_time": r.prep_time,
        "servings": r.servings,
        "source": r.source,
        "is_favorite": r.is_favorite,
        "tags": list(r.tags),
    }


class MenuPlanner:
    """Week menu lifecycle: generate -> save -> view -> swap/remove slots."""

    def __init__(
        self,
        recipe_repo: RecipeRepo,
        bonus_repo: BonusRepo,
        menu_repo: MenuRepo,
        settings: Optional[MenuSettings] = None,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.recipe_repo = recipe_repo
        self.bonus_repo = bonus_repo
        self.menu_repo = menu_repo
        self.settings = settings or MenuSettings()
        self.rng = rng if rng is not None else np.random.default_rng()

    def generate(self, today: Optional[date] = None) -> List[MenuSuggestion]:
        today = today or date.today()
        return generate_week_menu(
            recipes=self.recipe_repo.all(),
            bonuses=self.bonus_repo.valid_on(today),
            recent_weeks=self.menu_repo.recent(self.settings.recent_weeks),
            rng=self.rng,
            settings=self.settings,
        )

    def save(self, suggestions: Sequence[MenuSuggestion], today: Optional[date] = None) -> MenuWeek:
        today = today or date.today()
        slots = [MenuSlot(day_of_week=s.day_of_week, recipe_url=s.recipe.url, reason=s.reason) for s in suggestions]
        week = self.menu_repo.create_week(week_start_for(today), slots, datetime.now(timezone.utc))
        log.info("Saved menu week %s (%s) with %d slots", week.id, week.week_start.isoformat(), len(slots))
        return week

    def generate_and_save(self, today: Optional[date] = None) -> MenuWeek:
        return self.save(self.generate(today), today)

    def current_week(self) -> MenuWeek | None:
        recent = self.menu_repo.recent(1)
        return recent[0] if recent else None

    def swap_slot(self, slot_id: str) -> MenuWeek:
        """Replace the slot's recipe with a random recipe not yet used in its week."""
        found = self.menu_repo.slot_by_id(slot_id)
        if not found:
            raise LookupError(f"Menu slot not found: {slot_id}")
        week, _ = found

        used = set(week.recipe_urls())
        available = [r for r in self.recipe_repo.all() if r.url not in used]
        if not available:
            log.warning("No unused recipe left to swap into slot %s", slot_id)
            return week

        idx = min(int(self.rng.random() * len(available)), len(available) - 1)
        new_url = available[idx].url
        self.menu_repo.update_slot_recipe(slot_id, new_url)
        log.info("Swapped slot %s to %s", slot_id, new_url)
        return self.menu_repo.by_id(week.id)

    def remove_slot(self, slot_id: str) -> MenuWeek:
        found = self.menu_repo.slot_by_id(slot_id)
        if not found:
            raise LookupError(f"Menu slot not found: {slot_id}")
        week, _ = found
        self.menu_repo.delete_slot(slot_id)
        return self.menu_repo.by_id(week.id)

    def describe_week(self, week: MenuWeek) -> Dict[str, Any]:
        by_url = {r.url: r for r in self.recipe_repo.by_urls(week.recipe_urls())}
        slots: List[Dict[str, Any]] = []
        for s in sorted(week.slots, key=lambda x: x.day_of_week):
            recipe = by_url.get(s.recipe_url)
            slots.append(
                {
                    "id": s.id,
                    "day_of_week": s.day_of_week,
                    "day_name": DAY_NAMES[s.day_of_week],
                    "reason": s.reason,
                    "recipe": recipe_summary(recipe) if recipe else None,
                }
            )
        return {
            "id": week.id,
            "week_start": week.week_start.isoformat(),
            "created_at": week.created_at.isoformat(),
            "slots": slots,
        }
