# weekmenu/services/taste_profile.py
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Sequence

from weekmenu.domain.entities import Recipe


@dataclass(frozen=True)
class TasteProfile:
    frequencies: Dict[str, int] = field(default_factory=dict)
    max_frequency: int = 1

    def affinity(self, tags: Sequence[str]) -> float:
        """Mean tag frequency of `tags`, scaled to [0, 1] by the most frequent tag."""
        if not tags:
            return 0.0
        total = sum(self.frequencies.get(t, 0) for t in tags)
        return total / len(tags) / self.max_frequency


def build_taste_profile(recipes: Iterable[Recipe]) -> TasteProfile:
    freq: Counter = Counter()
    for r in recipes:
        if r.is_favorite:
            freq.update(r.tags)
    return TasteProfile(frequencies=dict(freq), max_frequency=max([1, *freq.values()]))
