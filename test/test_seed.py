from datetime import date

import pytest
import ujson as json

from weekmenu.domain.entities import MenuSlot
from weekmenu.infrastructure.memory_repositories import (
    InMemoryBonusRepository,
    InMemoryMenuRepository,
    InMemoryRecipeRepository,
)
from weekmenu.infrastructure.seed import dedupe_recipes, recipe_from_scraped, seed


def scraped(url, title="Stamppot", **extra):
    doc = {
        "url": url,
        "title": title,
        "tags": ["Hollands", " hollands", "Snel"],
        "prepTime": 25,
        "servings": 2,
        "imageUrl": "https://img.test/x.jpg",
        "ingredients": [{"name": "boerenkool", "quantity": "500", "unit": "g", "raw": "500 g boerenkool"}],
    }
    doc.update(extra)
    return doc


def write(dir_, name, data):
    (dir_ / name).write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def data_dir(tmp_path):
    write(tmp_path, "ah-recipes.json", [scraped("https://ah.test/1"), scraped("https://ah.test/2")])
    write(tmp_path, "dm-recipes.json", [scraped("https://dm.test/1")])
    write(
        tmp_path,
        "ah-bonuses.json",
        [{"productName": "AH Boerenkool", "discountLabel": "1+1 gratis", "validFrom": "2026-10-12", "validUntil": "2026-10-18"}],
    )
    return tmp_path


@pytest.fixture
def stores():
    return InMemoryRecipeRepository(), InMemoryBonusRepository(), InMemoryMenuRepository()


def test_recipe_from_scraped():
    r = recipe_from_scraped(scraped(" https://ah.test/1 "), is_favorite=True)
    assert r.url == "https://ah.test/1"
    assert r.tags == ("hollands", "snel")
    assert r.prep_time == 25
    assert r.servings == 2
    assert r.ingredients[0].raw_text == "500 g boerenkool"


def test_recipe_without_prep_time():
    r = recipe_from_scraped(scraped("u", prepTime=None), is_favorite=False)
    assert r.prep_time is None


def test_dedupe_prefers_favorites():
    recipes, skipped = dedupe_recipes(
        [scraped("a"), scraped("b"), scraped("a")],
        [scraped("b"), scraped("c"), {"title": "no url"}],
    )
    assert [(r.url, r.is_favorite) for r in recipes] == [("a", True), ("b", True), ("c", False)]
    assert skipped == 2


def test_seed_without_discover_files(data_dir, stores):
    recipe_repo, bonus_repo, menu_repo = stores
    report = seed(str(data_dir), recipe_repo, bonus_repo, menu_repo)
    assert (report.recipes, report.favorites, report.discovered) == (3, 3, 0)
    assert report.bonuses == 1
    bonus = bonus_repo.all()[0]
    assert bonus.valid_from == date(2026, 10, 12)
    assert bonus_repo.valid_on(date(2026, 10, 20)) == []


def test_seed_with_discover_files(data_dir, stores):
    write(data_dir, "ah-discover.json", [scraped("https://ah.test/2"), scraped("https://ah.test/9")])
    recipe_repo, bonus_repo, menu_repo = stores
    report = seed(str(data_dir), recipe_repo, bonus_repo, menu_repo)
    assert report.recipes == 4
    assert report.discovered == 1
    assert report.duplicates_skipped == 1
    assert recipe_repo.by_url("https://ah.test/2").is_favorite


def test_reseed_replaces_and_drops_stale_slots(data_dir, stores):
    recipe_repo, bonus_repo, menu_repo = stores
    seed(str(data_dir), recipe_repo, bonus_repo, menu_repo)
    week = menu_repo.create_week(
        date(2026, 10, 12),
        [MenuSlot(0, "https://ah.test/1"), MenuSlot(1, "https://ah.test/2")],
    )

    write(data_dir, "ah-recipes.json", [scraped("https://ah.test/1")])
    report = seed(str(data_dir), recipe_repo, bonus_repo, menu_repo)

    assert report.recipes == 2
    assert report.slots_dropped == 1
    assert menu_repo.by_id(week.id).recipe_urls() == ["https://ah.test/1"]
    assert len(bonus_repo.all()) == 1


def test_missing_required_file(data_dir, stores):
    (data_dir / "ah-bonuses.json").unlink()
    with pytest.raises(FileNotFoundError):
        seed(str(data_dir), *stores)


def test_invalid_json(data_dir, stores):
    (data_dir / "dm-recipes.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        seed(str(data_dir), *stores)


def test_json_must_be_a_list(data_dir, stores):
    write(data_dir, "dm-recipes.json", {"url": "x"})
    with pytest.raises(ValueError):
        seed(str(data_dir), *stores)


def test_failed_insert_is_reported(data_dir, caplog):
    class BrokenRecipeRepository(InMemoryRecipeRepository):
        def insert_many(self, recipes):
            if list(recipes):
                raise ValueError("duplicate key")
            return 0

    recipe_repo = BrokenRecipeRepository()
    with caplog.at_level("ERROR", logger="infra.seed"):
        with pytest.raises(ValueError):
            seed(str(data_dir), recipe_repo, InMemoryBonusRepository(), InMemoryMenuRepository())
    assert "store is now empty" in caplog.text
    assert recipe_repo.all() == []
