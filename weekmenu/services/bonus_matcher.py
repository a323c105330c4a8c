# weekmenu/services/bonus_matcher.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from weekmenu.domain.entities import Bonus
from weekmenu.services.text_utils import long_words

log = logging.getLogger("services.bonus_matcher")


@dataclass(frozen=True)
class BonusMatch:
    matched_ingredients: int = 0
    first_label: str | None = None


def _words_match(a: str, b: str) -> bool:
    return a == b or a.startswith(b) or b.startswith(a)


class BonusMatcher:
    """
    Word-based ingredient -> promotion matching.
    Both sides are split into words of 4+ characters; a word pair matches when
    one is a prefix of the other ("kip" never matches, "kipfilet" matches "kipfilets").
    """

    def __init__(self, bonuses: Sequence[Bonus]) -> None:
        self.bonuses = list(bonuses)
        self._words: List[Tuple[Bonus, List[str]]] = [(b, long_words(b.product_name)) for b in self.bonuses]
        log.debug("BonusMatcher indexed %d bonuses", len(self.bonuses))

    def first_match(self, ingredient_name: str) -> Bonus | None:
        ing_words = long_words(ingredient_name)
        if not ing_words:
            return None
        for bonus, product_words in self._words:
            if any(_words_match(iw, pw) for iw in ing_words for pw in product_words):
                return bonus
        return None

    def match(self, ingredient_names: Sequence[str]) -> BonusMatch:
        count = 0
        first_label: str | None = None
        for name in ingredient_names:
            bonus = self.first_match(name)
            if bonus is None:
                continue
            count += 1
            if first_label is None:
                first_label = bonus.discount_label
        return BonusMatch(matched_ingredients=count, first_label=first_label)
