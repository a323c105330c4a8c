# weekmenu/core/config.py
from __future__ import annotations
from dataclasses import dataclass
import os
import logging

# Mongo settings
MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB: str = os.getenv("MONGO_DB", "weekmenu")
MONGO_RECIPES_COL: str = os.getenv("MONGO_RECIPES_COL", "recipes")
MONGO_BONUSES_COL: str = os.getenv("MONGO_BONUSES_COL", "bonuses")
MONGO_MENUS_COL: str = os.getenv("MONGO_MENUS_COL", "menu_weeks")

API_PORT: int = int(os.getenv("API_PORT", "8081"))

# Unset means a fresh entropy-seeded generator per process.
MENU_SEED: int | None = int(os.environ["MENU_SEED"]) if os.getenv("MENU_SEED") else None

DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@dataclass(frozen=True)
class MenuSettings:
    menu_days: int = int(os.getenv("MENU_DAYS", "7"))
    favorite_slots: int = int(os.getenv("MENU_FAVORITE_SLOTS", "4"))
    cuisine_cap: int = int(os.getenv("MENU_CUISINE_CAP", "2"))
    recent_weeks: int = int(os.getenv("MENU_RECENT_WEEKS", "2"))
    tag_weight: float = float(os.getenv("MENU_TAG_WEIGHT", "0.5"))
    bonus_weight: float = float(os.getenv("MENU_BONUS_WEIGHT", "0.3"))
    freshness_bonus: float = float(os.getenv("MENU_FRESHNESS_BONUS", "0.1"))
    jitter_scale: float = float(os.getenv("MENU_JITTER_SCALE", "0.1"))
    default_prep_time: int = int(os.getenv("MENU_DEFAULT_PREP_TIME", "30"))
    long_prep_threshold: int = int(os.getenv("MENU_LONG_PREP_THRESHOLD", "30"))
    weekdays: tuple = (0, 1, 2, 3, 4)
    weekend: tuple = (5, 6)


@dataclass(frozen=True)
class Paths:
    ROOT: str = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
    DATA_DIR: str = os.getenv("WEEKMENU_DATA_DIR", os.path.join(ROOT, "data"))

# Global logging (module-level loggers inherit this)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
LOGGER = logging.getLogger("weekmenu")
