import pytest

from weekmenu.domain.entities import Bonus
from weekmenu.services.bonus_matcher import BonusMatcher
from weekmenu.services.taste_profile import TasteProfile, build_taste_profile
from weekmenu.services.text_utils import dutch_sort_key, long_words, normalize_tags


class TestTasteProfile:

    def test_counts_only_favorites(self, make_recipe):
        profile = build_taste_profile(
            [
                make_recipe("a", tags=("italiaans", "pasta"), is_favorite=True),
                make_recipe("b", tags=("pasta",), is_favorite=True),
                make_recipe("c", tags=("thais", "pasta"), is_favorite=False),
            ]
        )
        assert profile.frequencies == {"italiaans": 1, "pasta": 2}
        assert profile.max_frequency == 2

    def test_no_favorites_keeps_normalizer_at_one(self, make_recipe):
        profile = build_taste_profile([make_recipe("a", tags=("x",), is_favorite=False)])
        assert profile.frequencies == {}
        assert profile.max_frequency == 1

    def test_affinity(self):
        profile = TasteProfile(frequencies={"pasta": 2, "italiaans": 1}, max_frequency=2)
        assert profile.affinity(["pasta", "snel"]) == pytest.approx(0.5)
        assert profile.affinity(["pasta"]) == pytest.approx(1.0)
        assert profile.affinity([]) == 0.0


class TestBonusMatcher:

    def test_prefix_match_both_directions(self):
        matcher = BonusMatcher([Bonus("AH Kipfilets", "2e halve prijs")])
        assert matcher.first_match("kipfilet") is not None
        assert BonusMatcher([Bonus("Kip", "1+1")]).first_match("kippenbouten") is None

    def test_short_words_ignored(self):
        matcher = BonusMatcher([Bonus("Olijfolie de luxe", "25% korting")])
        assert matcher.first_match("ui en de kip") is None

    def test_hyphens_split_words(self):
        matcher = BonusMatcher([Bonus("Rund-gehakt", "1+1 gratis")])
        assert matcher.first_match("gehakt") is not None

    def test_no_substring_in_the_middle(self):
        matcher = BonusMatcher([Bonus("Rundergehakt", "1+1 gratis")])
        assert matcher.first_match("gehakt") is None

    def test_counts_ingredients_and_keeps_first_label(self):
        matcher = BonusMatcher(
            [Bonus("Verse zalmfilet", "30% korting"), Bonus("Zalmfilet gerookt", "2 voor 5"), Bonus("Spinazie", "1+1")]
        )
        match = matcher.match(["zalmfilet", "verse spinazie", "rijst"])
        assert match.matched_ingredients == 2
        assert match.first_label == "30% korting"

    def test_no_bonuses(self):
        match = BonusMatcher([]).match(["zalmfilet"])
        assert match.matched_ingredients == 0
        assert match.first_label is None


class TestTextUtils:

    def test_long_words(self):
        assert long_words("Half-om-half gehakt de") == ["half", "half", "gehakt"]

    def test_dutch_sort_key_ignores_accents_and_case(self):
        assert sorted(["eend", "Éclair", "crème"], key=dutch_sort_key) == ["crème", "Éclair", "eend"]

    def test_normalize_tags(self):
        assert normalize_tags([" Italiaans", "italiaans", "", "Pasta"]) == ("italiaans", "pasta")
        assert normalize_tags(None) == ()
