# weekmenu/services/categories.py
from __future__ import annotations

from typing import Dict, List, Tuple

OTHER = "other"

# Priority order: the first category with a keyword contained in the name wins.
CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("vegetables", (
        "ui", "paprika", "tomaat", "wortel", "aardappel", "sla", "spinazie", "broccoli",
        "courgette", "aubergine", "bloemkool", "prei", "komkommer", "venkel", "champignon",
        "radijs", "knolselderij", "biet", "mais", "avocado", "bonen",
    )),
    ("fruit", ("appel", "citroen", "limoen", "sinaasappel", "banaan", "mango", "ananas")),
    ("dairy", (
        "melk", "kaas", "yoghurt", "room", "boter", "crème", "mascarpone", "ricotta",
        "mozzarella", "parmezaan", "feta", "ei",
    )),
    ("meat", ("kip", "gehakt", "varken", "rund", "spek", "ham", "worst", "lam", "steak", "filet")),
    ("fish", ("zalm", "kabeljauw", "garnaal", "tonijn", "vis", "scampi", "pangasius")),
    ("dry_goods", (
        "rijst", "pasta", "couscous", "noedel", "spaghetti", "penne", "mie", "bulgur",
        "quinoa", "linzen", "bloem", "suiker", "brood",
    )),
    ("spices", (
        "peper", "zout", "komijn", "paprikapoeder", "kurkuma", "kaneel", "nootmuskaat",
        "oregano", "basilicum", "tijm", "rozemarijn", "dille", "peterselie", "koriander",
        "bieslook",
    )),
    ("sauces", (
        "sojasaus", "olijfolie", "olie", "azijn", "ketjap", "sriracha", "tabasco", "mosterd",
        "mayonaise", "pesto", "tomatenpuree", "passata", "sambal", "hoisin", "gochujang",
    )),
]

CATEGORY_ORDER: Dict[str, int] = {name: i for i, (name, _) in enumerate(CATEGORIES)}
CATEGORY_ORDER[OTHER] = len(CATEGORIES)


def categorize(name: str) -> str:
    lower = (name or "").lower()
    for category, keywords in CATEGORIES:
        if any(k in lower for k in keywords):
            return category
    return OTHER


def category_rank(category: str) -> int:
    return CATEGORY_ORDER.get(category, CATEGORY_ORDER[OTHER])
