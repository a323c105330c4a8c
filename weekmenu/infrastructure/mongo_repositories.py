# weekmenu/infrastructure/mongo_repositories.py
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Sequence, Tuple
import logging
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.errors import BulkWriteError
from bson import ObjectId
from weekmenu.domain.entities import Bonus, Ingredient, MenuSlot, MenuWeek, Recipe
from weekmenu.domain.repositories import BonusRepo, MenuRepo, RecipeRepo
from weekmenu.services.text_utils import normalize_tags

log = logging.getLogger("infra.mongo_repo")

def _as_str_id(v: Any) -> str:
    if isinstance(v, ObjectId):
        return str(v)
    return str(v)

def _opt_int(v: Any) -> int | None:
    if v is None or v == "":
        return None
    return int(v)

def _opt_float(v: Any) -> float | None:
    if v is None or v == "":
        return None
    return float(v)

def parse_date(v: Any) -> date | None:
    """ISO 'YYYY-MM-DD' (or datetime) -> date; empty -> None."""
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    return date.fromisoformat(str(v)[:10])


class MongoRecipeRepository(RecipeRepo):
    """
    Recipe repository backed by MongoDB. The recipe url is the identity
    (unique index, see ensure_indexes).
    """
    def __init__(self, col: Collection) -> None:
        self._col = col

    def ensure_indexes(self) -> None:
        self._col.create_index([("url", ASCENDING)], unique=True)

    def _parse_recipe(self, doc: Dict[str, Any]) -> Recipe:
        try:
            ingredients = tuple(
                Ingredient(
                    name=(i.get("name") or "").strip(),
                    quantity=str(i.get("quantity") or ""),
                    unit=str(i.get("unit") or ""),
                    raw_text=str(i.get("raw_text") or ""),
                )
                for i in (doc.get("ingredients") or [])
            )
            return Recipe(
                url=str(doc["url"]),
                title=(doc.get("title") or "").strip(),
                tags=normalize_tags(doc.get("tags")),
                prep_time=_opt_int(doc.get("prep_time")),
                is_favorite=bool(doc.get("is_favorite", False)),
                ingredients=ingredients,
                image_url=doc.get("image_url") or "",
                servings=int(doc.get("servings") or 4),
                source=doc.get("source") or "",
                calories=_opt_int(doc.get("calories")),
                instructions=tuple(doc.get("instructions") or []),
            )
        except Exception as e:
            log.exception("Invalid recipe document: %s", doc.get("_id"))
            raise ValueError(f"Invalid recipe document: {e}") from e

    @staticmethod
    def to_document(r: Recipe) -> Dict[str, Any]:
        return {
            "url": r.url,
            "title": r.title,
            "tags": list(r.tags),
            "prep_time": r.prep_time,
            "is_favorite": r.is_favorite,
            "ingredients": [
                {"name": i.name, "quantity": i.quantity, "unit": i.unit, "raw_text": i.raw_text}
                for i in r.ingredients
            ],
            "image_url": r.image_url,
            "servings": r.servings,
            "source": r.source,
            "calories": r.calories,
            "instructions": list(r.instructions),
        }

    def all(self) -> List[Recipe]:
        items = [self._parse_recipe(doc) for doc in self._col.find({})]
        if not items:
            log.warning("MongoRecipeRepository: recipes collection is empty")
        return items

    def by_url(self, url: str) -> Recipe | None:
        doc = self._col.find_one({"url": url})
        return self._parse_recipe(doc) if doc else None

    def by_urls(self, urls: Sequence[str]) -> List[Recipe]:
        wanted = list(dict.fromkeys(urls))
        found = {r.url: r for r in (self._parse_recipe(doc) for doc in self._col.find({"url": {"$in": wanted}}))}
        return [found[u] for u in wanted if u in found]

    def insert_many(self, recipes: Iterable[Recipe]) -> int:
        docs = [self.to_document(r) for r in recipes]
        if not docs:
            return 0
        try:
            res = self._col.insert_many(docs, ordered=False)
        except BulkWriteError as e:
            log.error("Recipe bulk insert failed: %s", e.details.get("writeErrors", [])[:3])
            raise ValueError(f"Recipe bulk insert failed: {e}") from e
        return len(res.inserted_ids)

    def delete_all(self) -> int:
        return self._col.delete_many({}).deleted_count


class MongoBonusRepository(BonusRepo):

    def __init__(self, col: Collection) -> None:
        self._col = col

    def _parse_bonus(self, x: Dict[str, Any]) -> Bonus:
        try:
            return Bonus(
                product_name=str(x.get("product_name") or "").strip(),
                discount_label=str(x.get("discount_label") or "").strip(),
                valid_from=parse_date(x.get("valid_from")),
                valid_until=parse_date(x.get("valid_until")),
                original_price=_opt_float(x.get("original_price")),
                bonus_price=_opt_float(x.get("bonus_price")),
                category=str(x.get("category") or ""),
            )
        except Exception as e:
            log.exception("Invalid bonus document: %s", x.get("_id"))
            raise ValueError(f"Invalid bonus document: {e}") from e

    @staticmethod
    def to_document(b: Bonus) -> Dict[str, Any]:
        return {
            "product_name": b.product_name,
            "discount_label": b.discount_label,
            "valid_from": b.valid_from.isoformat() if b.valid_from else None,
            "valid_until": b.valid_until.isoformat() if b.valid_until else None,
            "original_price": b.original_price,
            "bonus_price": b.bonus_price,
            "category": b.category,
        }

    def all(self) -> List[Bonus]:
        return [self._parse_bonus(doc) for doc in self._col.find({})]

    def valid_on(self, day: date) -> List[Bonus]:
        return [b for b in self.all() if b.is_valid_on(day)]

    def insert_many(self, bonuses: Iterable[Bonus]) -> int:
        docs = [self.to_document(b) for b in bonuses]
        if not docs:
            return 0
        return len(self._col.insert_many(docs).inserted_ids)

    def delete_all(self) -> int:
        return self._col.delete_many({}).deleted_count


class MongoMenuRepository(MenuRepo):
    """
    One document per week, slots embedded:
    {_id, week_start: 'YYYY-MM-DD', created_at, slots: [{id, day_of_week, recipe_url, reason}]}
    """
    def __init__(self, col: Collection) -> None:
        self._col = col

    def ensure_indexes(self) -> None:
        self._col.create_index([("created_at", DESCENDING)])
        self._col.create_index([("slots.id", ASCENDING)])

    def _parse_week(self, doc: Dict[str, Any]) -> MenuWeek:
        try:
            slots = tuple(
                MenuSlot(
                    day_of_week=int(s["day_of_week"]),
                    recipe_url=str(s["recipe_url"]),
                    id=str(s["id"]),
                    reason=str(s.get("reason") or ""),
                )
                for s in (doc.get("slots") or [])
            )
            return MenuWeek(
                id=_as_str_id(doc["_id"]),
                week_start=parse_date(doc["week_start"]),
                created_at=doc["created_at"],
                slots=slots,
            )
        except Exception as e:
            log.exception("Invalid menu week document: %s", doc.get("_id"))
            raise ValueError(f"Invalid menu week document: {e}") from e

    def recent(self, n: int) -> List[MenuWeek]:
        if n <= 0:
            return []
        cursor = self._col.find({}).sort([("created_at", DESCENDING), ("_id", DESCENDING)]).limit(n)
        return [self._parse_week(doc) for doc in cursor]

    def by_id(self, week_id: str) -> MenuWeek | None:
        if not ObjectId.is_valid(week_id):
            return None
        doc = self._col.find_one({"_id": ObjectId(week_id)})
        return self._parse_week(doc) if doc else None

    def create_week(self, week_start: date, slots: Sequence[MenuSlot], created_at: datetime) -> MenuWeek:
        doc = {
            "week_start": week_start.isoformat(),
            "created_at": created_at,
            "slots": [
                {"id": str(ObjectId()), "day_of_week": s.day_of_week, "recipe_url": s.recipe_url, "reason": s.reason}
                for s in slots
            ],
        }
        # validates one slot per day before anything is written
        self._parse_week({**doc, "_id": ObjectId()})
        res = self._col.insert_one(doc)
        doc["_id"] = res.inserted_id
        return self._parse_week(doc)

    def slot_by_id(self, slot_id: str) -> Tuple[MenuWeek, MenuSlot] | None:
        doc = self._col.find_one({"slots.id": slot_id})
        if not doc:
            return None
        week = self._parse_week(doc)
        slot = next(s for s in week.slots if s.id == slot_id)
        return week, slot

    def update_slot_recipe(self, slot_id: str, recipe_url: str) -> None:
        res = self._col.update_one(
            {"slots.id": slot_id},
            {"$set": {"slots.$.recipe_url": recipe_url, "slots.$.reason": ""}},
        )
        if res.matched_count == 0:
            raise LookupError(f"Menu slot not found: {slot_id}")

    def delete_slot(self, slot_id: str) -> None:
        res = self._col.update_one({"slots.id": slot_id}, {"$pull": {"slots": {"id": slot_id}}})
        if res.matched_count == 0:
            raise LookupError(f"Menu slot not found: {slot_id}")

    def delete_slots_for_missing_recipes(self, known_urls: Iterable[str]) -> int:
        known = set(known_urls)
        dropped = 0
        for doc in self._col.find({}, {"slots": 1}):
            slots = doc.get("slots") or []
            kept = [s for s in slots if s.get("recipe_url") in known]
            if len(kept) != len(slots):
                self._col.update_one({"_id": doc["_id"]}, {"$set": {"slots": kept}})
                dropped += len(slots) - len(kept)
        return dropped
