# weekmenu/services/units.py
from __future__ import annotations

import enum
import re
from typing import Dict, Tuple

# ----------------------------
# Unit table
# ----------------------------
_UNIT_MAP: Dict[str, str] = {
    "el": "eetlepel",
    "eetlepel(s)": "eetlepel",
    "tl": "theelepel",
    "theelepel(s)": "theelepel",
    "ml": "ml",
    "l": "l",
    "cl": "cl",
    "dl": "dl",
    "g": "g",
    "kg": "kg",
    "stuk(s)": "stuk",
    "stuks": "stuk",
    "teen": "teentje",
    "tenen": "teentje",
    "teentje(s)": "teentje",
    "stengel": "stengel",
    "stengels": "stengel",
    "stengel(s)": "stengel",
    "takje(s)": "takje",
    "takjes": "takje",
    "bosje": "bosje",
    "bosje(s)": "bosje",
    "blikje": "blik",
    "blikjes": "blik",
    "blikken": "blik",
    "blik": "blik",
    "snufjes": "snufje",
    "snuifje(s)": "snufje",
    "snufje": "snufje",
    "plakje": "plakje",
    "plakjes": "plakje",
    "plakje(s)": "plakje",
    "zak": "zak",
    "pak": "pak",
    "bos": "bos",
    "krop": "krop",
    "kropjes": "krop",
    "handvol": "handvol",
}


def normalize_unit(unit: str | None) -> str:
    u = (unit or "").strip().lower()
    return _UNIT_MAP.get(u, u)


# ----------------------------
# Quantity parsing
# ----------------------------
class ParseFailure(enum.Enum):
    ABSENT = "absent"
    UNPARSEABLE = "unparseable"


# Ordered: a string holding several glyphs resolves to the first one listed.
FRACTIONS: Tuple[Tuple[str, float], ...] = (
    ("\u00bd", 0.5),   # ½
    ("\u00bc", 0.25),  # ¼
    ("\u00be", 0.75),  # ¾
    ("\u2153", 0.333), # ⅓
    ("\u2154", 0.667), # ⅔
)

_LEADING_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> float | None:
    # Reads "200g" as 200 and "1-2" as 1, like a lenient parseFloat.
    m = _LEADING_NUMBER_RE.match(text.replace(",", ".", 1))
    if not m:
        return None
    return float(m.group(0))


def parse_quantity(raw: str | None) -> float | ParseFailure:
    """
    Parse a scraped quantity string.

    "½" -> 0.5, "1½" -> 1.5, "0,5" -> 0.5, "" -> ParseFailure.ABSENT,
    "abc" -> ParseFailure.UNPARSEABLE.
    """
    if not raw or not raw.strip():
        return ParseFailure.ABSENT
    cleaned = raw.strip()

    for glyph, value in FRACTIONS:
        if cleaned == glyph:
            return value

    for glyph, value in FRACTIONS:
        if glyph in cleaned:
            prefix = cleaned.replace(glyph, "", 1).strip()
            if not prefix:
                return value
            base = _leading_float(prefix)
            if base is None:
                return ParseFailure.UNPARSEABLE
            return base + value

    num = _leading_float(cleaned)
    return ParseFailure.UNPARSEABLE if num is None else num


# ----------------------------
# Ingredient names
# ----------------------------
def normalize_ingredient_name(name: str | None) -> str:
    """'Rode ui, gesneden' -> 'rode ui'"""
    normalized = (name or "").lower().strip()
    comma_idx = normalized.find(",")
    if comma_idx > 0:
        normalized = normalized[:comma_idx].strip()
    return normalized
