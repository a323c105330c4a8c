# weekmenu/infrastructure/seed.py
"""
Import scraper output into the store.

Reads from a data directory:
  ah-recipes.json, dm-recipes.json      favorites (required)
  ah-discover.json, dm-discover.json    discovered recipes (optional)
  ah-bonuses.json                       current bonuses (required)

Recipes and bonuses are replaced; menu weeks are kept, slots whose recipe
url disappeared are dropped.

Usage:
  weekmenu-seed --data-dir ./data
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

import ujson as json

from weekmenu.domain.entities import Bonus, Ingredient, Recipe
from weekmenu.domain.repositories import BonusRepo, MenuRepo, RecipeRepo
from weekmenu.infrastructure.mongo_repositories import parse_date
from weekmenu.services.text_utils import normalize_tags

log = logging.getLogger("infra.seed")

FAVORITE_FILES = ("ah-recipes.json", "dm-recipes.json")
DISCOVER_FILES = ("ah-discover.json", "dm-discover.json")
BONUS_FILE = "ah-bonuses.json"


@dataclass(frozen=True)
class SeedReport:
    recipes: int
    favorites: int
    discovered: int
    duplicates_skipped: int
    bonuses: int
    slots_dropped: int


def _load_json(path: str, required: bool = True) -> List[Dict[str, Any]]:
    if not os.path.exists(path):
        if required:
            raise FileNotFoundError(f"Seed file not found: {path}")
        log.info("Optional seed file missing, skipping: %s", path)
        return []
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list in {path}, got {type(data).__name__}")
    return data


def recipe_from_scraped(x: Dict[str, Any], is_favorite: bool) -> Recipe:
    prep = x.get("prepTime")
    cal = x.get("calories")
    return Recipe(
        url=str(x["url"]).strip(),
        title=str(x.get("title") or "").strip(),
        tags=normalize_tags(x.get("tags")),
        prep_time=int(prep) if prep not in (None, "") else None,
        is_favorite=is_favorite,
        ingredients=tuple(
            Ingredient(
                name=str(i.get("name") or "").strip(),
                quantity=str(i.get("quantity") or ""),
                unit=str(i.get("unit") or ""),
                raw_text=str(i.get("raw") or ""),
            )
            for i in (x.get("ingredients") or [])
        ),
        image_url=x.get("imageUrl") or "",
        servings=int(x.get("servings") or 4),
        source=x.get("source") or "",
        calories=int(cal) if cal not in (None, "") else None,
        instructions=tuple(str(s) for s in (x.get("instructions") or [])),
    )


def bonus_from_scraped(x: Dict[str, Any]) -> Bonus:
    return Bonus(
        product_name=str(x.get("productName") or "").strip(),
        discount_label=str(x.get("discountLabel") or "").strip(),
        valid_from=parse_date(x.get("validFrom")),
        valid_until=parse_date(x.get("validUntil")),
        original_price=x.get("originalPrice"),
        bonus_price=x.get("bonusPrice"),
        category=x.get("category") or "",
    )


def dedupe_recipes(
    favorites: Iterable[Dict[str, Any]], discovered: Iterable[Dict[str, Any]]
) -> Tuple[List[Recipe], int]:
    """Favorites first; a url seen before is skipped, so a favorite wins over a discovery."""
    seen: set = set()
    out: List[Recipe] = []
    skipped = 0
    for docs, is_fav in ((favorites, True), (discovered, False)):
        for x in docs:
            url = str(x.get("url") or "").strip()
            if not url:
                log.warning("Skipping scraped recipe without url: %r", x.get("title"))
                continue
            if url in seen:
                skipped += 1
                continue
            seen.add(url)
            out.append(recipe_from_scraped(x, is_favorite=is_fav))
    return out, skipped


def seed(data_dir: str, recipe_repo: RecipeRepo, bonus_repo: BonusRepo, menu_repo: MenuRepo) -> SeedReport:
    favorites = [x for name in FAVORITE_FILES for x in _load_json(os.path.join(data_dir, name))]
    discovered = [x for name in DISCOVER_FILES for x in _load_json(os.path.join(data_dir, name), required=False)]
    raw_bonuses = _load_json(os.path.join(data_dir, BONUS_FILE))

    recipes, skipped = dedupe_recipes(favorites, discovered)
    bonuses = [bonus_from_scraped(b) for b in raw_bonuses]

    recipe_repo.delete_all()
    bonus_repo.delete_all()
    try:
        recipe_repo.insert_many(recipes)
        bonus_repo.insert_many(bonuses)
    except Exception:
        log.error(
            "Insert failed after recipes and bonuses were deleted; the store is now empty or partial. "
            "Fix the data and run the seed again."
        )
        raise
    dropped = menu_repo.delete_slots_for_missing_recipes(r.url for r in recipes)

    n_fav = sum(1 for r in recipes if r.is_favorite)
    report = SeedReport(
        recipes=len(recipes),
        favorites=n_fav,
        discovered=len(recipes) - n_fav,
        duplicates_skipped=skipped,
        bonuses=len(bonuses),
        slots_dropped=dropped,
    )
    log.info(
        "Seed complete: %d recipes (%d fav, %d discover, %d duplicates skipped), %d bonuses, %d menu slots dropped",
        report.recipes, report.favorites, report.discovered, report.duplicates_skipped,
        report.bonuses, report.slots_dropped,
    )
    return report


def main() -> int:
    from dotenv import load_dotenv
    load_dotenv()
    from pymongo import MongoClient
    from weekmenu.core.config import (
        MONGO_BONUSES_COL, MONGO_DB, MONGO_MENUS_COL, MONGO_RECIPES_COL, MONGO_URI, Paths,
    )
    from weekmenu.infrastructure.mongo_repositories import (
        MongoBonusRepository, MongoMenuRepository, MongoRecipeRepository,
    )

    parser = argparse.ArgumentParser(description="Import scraped recipes and bonuses")
    parser.add_argument("--data-dir", default=Paths.DATA_DIR, help="Directory with scraper JSON output")
    args = parser.parse_args()

    client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=3000)
    try:
        db = client[MONGO_DB]
        recipe_repo = MongoRecipeRepository(db[MONGO_RECIPES_COL])
        menu_repo = MongoMenuRepository(db[MONGO_MENUS_COL])
        recipe_repo.ensure_indexes()
        menu_repo.ensure_indexes()
        seed(args.data_dir, recipe_repo, MongoBonusRepository(db[MONGO_BONUSES_COL]), menu_repo)
        return 0
    except (FileNotFoundError, ValueError) as e:
        log.error("Seed failed: %s", e)
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
