"""
Tests for the Character Algorithm
=================================
"""

import pytest

from segment_diff.algorithms import CharacterAlgorithm
from segment_diff.inline_diff import character_diff, character_parts
from segment_diff.models import Category, ChangeType, DiffKind
from segment_diff.similarity import character_similarity


def rebuild(parts, keep):
    return ''.join(p.value for p in parts if p.type in (ChangeType.UNCHANGED, keep))


@pytest.fixture
def character(segmenter):
    return CharacterAlgorithm(Category.SENTENCE, segmenter)


class TestCharacterSimilarity:
    """Share of characters kept by a raw character diff."""

    def test_single_substitution(self):
        # c | a- u+ | t  -> 2 common of 4 diffed characters
        assert character_similarity("cat", "cut") == pytest.approx(0.5)

    def test_identical(self):
        assert character_similarity("same", "same") == 1.0

    def test_disjoint(self):
        assert character_similarity("aaa", "zzz") == 0.0

    def test_empty(self):
        assert character_similarity("", "abc") == 0.0
        assert character_similarity("abc", "") == 0.0


class TestCharacterParts:
    """Renderable character diff."""

    def test_parts_rebuild_both_sides(self):
        parts = character_parts("The cat sat.", "The cut sat.")
        assert rebuild(parts, ChangeType.DELETED) == "The cat sat."
        assert rebuild(parts, ChangeType.ADDED) == "The cut sat."

    def test_raw_diff_tuples(self):
        assert character_diff("abc", "abc") == [(0, "abc")]


class TestCharacterAlgorithm:
    """Exact pass, then character-similarity pairing."""

    def test_metadata(self, character):
        metadata = character.metadata
        assert (metadata.name, metadata.order, metadata.supports_fuzzy) == ("character", 4, False)

    def test_pairs_edited_sentence_regardless_of_fuzziness(self, character):
        result = character.compare("Keep this. The cat sat.", "Keep this. The cut sat.",
                                   {'fuzziness': 0})
        assert [(p.left, p.right) for p in result.matches.exact_matches] == [(0, 0)]
        assert [(p.left, p.right) for p in result.matches.fuzzy_matches] == [(1, 1)]
        assert result.matches.fuzzy_matches[0].similarity == pytest.approx(11 / 13)

        assert [(e.kind, e.value) for e in result.diff] == [
            (DiffKind.REMOVED, "The cat sat."),
            (DiffKind.ADDED, "The cut sat."),
        ]

    def test_character_diff_pairs(self, character):
        result = character.compare("The cat sat.", "The cut sat.")
        pairs = result.extensions['character_diff_pairs']
        assert len(pairs) == 1
        assert rebuild(pairs[0].parts, ChangeType.DELETED) == "The cat sat."
        assert rebuild(pairs[0].parts, ChangeType.ADDED) == "The cut sat."
        assert pairs[0].left.paragraph_index == 0

    def test_nothing_in_common_stays_unmatched(self, character):
        result = character.compare("aaa.", "zzz!")
        assert result.matches.fuzzy_matches == []
        assert result.extensions['character_diff_pairs'] == []
        assert {e.kind for e in result.diff} == {DiffKind.ADDED, DiffKind.REMOVED}

    def test_threshold_from_config(self, character, monkeypatch):
        from config_logging import reset_config
        monkeypatch.setenv('SD_CHARACTER_THRESHOLD', '0.9')
        reset_config()
        result = character.compare("The cat sat.", "The cut sat.")
        assert result.matches.fuzzy_matches == []
