"""
Tests for the Thomas (sequential) Algorithm
===========================================
Exact/fuzzy matching, diff assembly and positions.
"""

import pytest

from segment_diff.algorithms import ThomasAlgorithm
from segment_diff.models import Category, ChangeType, DiffKind, Side


def pairs(match_list):
    return [(p.left, p.right) for p in match_list]


@pytest.fixture
def thomas(segmenter):
    return ThomasAlgorithm(Category.PARAGRAPH, segmenter)


@pytest.fixture
def sentence_thomas(segmenter):
    return ThomasAlgorithm(Category.SENTENCE, segmenter)


LEFT = "Hello world.\nFoo bar."
RIGHT = "Hello world.\nFoo baz."


class TestExactOnly:
    """Fuzziness 0 with dissimilar edits."""

    def test_scenario_exact_only(self, thomas):
        result = thomas.compare(LEFT, RIGHT, {'fuzziness': 0})

        assert pairs(result.matches.exact_matches) == [(0, 0)]
        assert result.matches.fuzzy_matches == []
        assert result.matches.unmatched_left == {1}
        assert result.matches.unmatched_right == {1}

        removed = [e for e in result.diff if e.kind == DiffKind.REMOVED]
        added = [e for e in result.diff if e.kind == DiffKind.ADDED]
        assert [e.value for e in removed] == ["Foo bar."]
        assert [e.value for e in added] == ["Foo baz."]
        assert len(result.diff) == 2
        assert all(e.similarity is None for e in result.diff)

    def test_entry_positions(self, thomas):
        result = thomas.compare(LEFT, RIGHT)
        entry = next(e for e in result.diff if e.side == Side.RIGHT)
        assert (entry.start, entry.end, entry.paragraph_index) == (13, 21, 1)

    def test_no_fuzzy_extension_without_fuzzy_pairs(self, thomas):
        assert 'fuzzy_matched_pairs' not in thomas.compare(LEFT, RIGHT).extensions


class TestFuzzy:
    """Fuzzy pass with a loose threshold."""

    OPTIONS = {'fuzziness': 1.0, 'min_match': 0.2, 'max_match': 0.9}

    def test_scenario_fuzzy_pair(self, thomas):
        result = thomas.compare(LEFT, RIGHT, self.OPTIONS)

        assert pairs(result.matches.exact_matches) == [(0, 0)]
        assert pairs(result.matches.fuzzy_matches) == [(1, 1)]
        assert result.matches.fuzzy_matches[0].similarity == pytest.approx(1 / 3)
        assert result.matches.unmatched_left == set()
        assert result.matches.unmatched_right == set()

        assert [(e.kind, e.value) for e in result.diff] == [
            (DiffKind.REMOVED, "Foo bar."),
            (DiffKind.ADDED, "Foo baz."),
        ]
        assert all(e.similarity == pytest.approx(1 / 3) for e in result.diff)

    def test_word_diff_shows_single_token_change(self, thomas):
        result = thomas.compare(LEFT, RIGHT, self.OPTIONS)
        fuzzy_pairs = result.extensions['fuzzy_matched_pairs']
        assert len(fuzzy_pairs) == 1

        pair = fuzzy_pairs[0]
        assert pair.left.text == "Foo bar."
        assert pair.right.text == "Foo baz."
        assert [(p.type, p.value) for p in pair.changed_parts] == [
            (ChangeType.DELETED, "bar."),
            (ChangeType.ADDED, "baz."),
        ]

    def test_threshold_above_similarity_rejects(self, thomas):
        result = thomas.compare(LEFT, RIGHT, {'fuzziness': 1.0, 'min_match': 0.5})
        assert result.matches.fuzzy_matches == []

    def test_greedy_first_committed_wins(self, thomas):
        # Left 0 takes right 0 (its best); left 1 would have scored higher
        # against right 0 but it is already used.
        left = "a b c x\na b c d e"
        right = "a b c d\nq r s t"
        result = thomas.compare(left, right, {'fuzziness': 1.0, 'min_match': 0.1})
        assert pairs(result.matches.fuzzy_matches) == [(0, 0)]
        assert result.matches.unmatched_left == {1}

    def test_fuzzy_pass_scans_behind_cursor(self, thomas):
        left = "one two three\nalpha\nbeta"
        right = "one two four\nalpha\nbeta"
        result = thomas.compare(left, right, {'fuzziness': 1.0, 'min_match': 0.3})
        assert pairs(result.matches.exact_matches) == [(1, 1), (2, 2)]
        assert pairs(result.matches.fuzzy_matches) == [(0, 0)]


class TestOrderingLimit:
    """Cursor-forward exact pass."""

    LEFT = "A\nB\nC"
    RIGHT = "C\nA\nB"

    def test_exact_pass_is_forward_only(self, thomas):
        result = thomas.compare(self.LEFT, self.RIGHT, {'max_match': 1.0})
        assert pairs(result.matches.exact_matches) == [(0, 1), (1, 2)]
        assert result.matches.unmatched_left == {2}
        assert result.matches.unmatched_right == {0}
        assert [(e.kind, e.value) for e in result.diff] == [
            (DiffKind.ADDED, "C"),
            (DiffKind.REMOVED, "C"),
        ]

    def test_fuzzy_pass_recovers_reordered_duplicate(self, thomas):
        result = thomas.compare(self.LEFT, self.RIGHT, {'fuzziness': 0})
        assert pairs(result.matches.exact_matches) == [(0, 1), (1, 2)]
        assert pairs(result.matches.fuzzy_matches) == [(2, 0)]
        assert [(e.kind, e.value, e.similarity) for e in result.diff] == [
            (DiffKind.REMOVED, "C", 1.0),
            (DiffKind.ADDED, "C", 1.0),
        ]


class TestIdempotence:
    """Comparing a text with itself."""

    TEXT = "Title\nFirst paragraph here.\nSecond paragraph here.\nFirst paragraph here."

    def test_identical_texts_all_exact(self, thomas):
        result = thomas.compare(self.TEXT, self.TEXT, {'fuzziness': 0})
        assert result.diff == []
        assert pairs(result.matches.exact_matches) == [(i, i) for i in range(4)]
        assert result.matches.unmatched_left == set()
        assert result.matches.unmatched_right == set()

    def test_blank_lines_produce_no_entries(self, thomas):
        text = "One\n\nTwo\n   \nThree"
        result = thomas.compare(text, text)
        assert result.diff == []
        assert result.matches.unmatched_left == {1, 3}

    def test_sentence_level_identical(self, sentence_thomas):
        text = "One fish. Two fish.\nRed fish. Blue fish."
        result = sentence_thomas.compare(text, text)
        assert result.diff == []
        assert len(result.matches.exact_matches) == 4


class TestEdgeCases:
    """Empty and one-sided inputs."""

    def test_both_empty(self, thomas):
        result = thomas.compare("", "")
        assert result.diff == []
        assert result.matches.left_count == 0

    def test_left_empty(self, thomas):
        result = thomas.compare("", "New one\nNew two")
        assert [(e.kind, e.value) for e in result.diff] == [
            (DiffKind.ADDED, "New one"),
            (DiffKind.ADDED, "New two"),
        ]

    def test_right_empty(self, thomas):
        result = thomas.compare("Old one", "")
        assert [(e.kind, e.side) for e in result.diff] == [(DiffKind.REMOVED, Side.LEFT)]

    def test_crossing_fuzzy_pairs_terminate(self, thomas):
        left = "alpha beta gamma\ndelta epsilon zeta"
        right = "delta epsilon eta\nalpha beta theta"
        result = thomas.compare(left, right, {'fuzziness': 1.0, 'min_match': 0.3})
        assert pairs(result.matches.fuzzy_matches) == [(0, 1), (1, 0)]
        assert len(result.diff) == 4
        assert sum(1 for e in result.diff if e.kind == DiffKind.REMOVED) == 2


class TestSentencePositions:
    """Mapping sentences into selected-paragraph coordinates."""

    FULL_LEFT = ["Skip me.", "Alpha one. Beta two.", "Gamma three."]
    FULL_RIGHT = ["Skip me.", "Alpha one. Beta 2.", "Gamma three."]

    def options(self):
        return {
            'max_match': 1.0,
            'leftSelectedParagraphs': [1, 2],
            'rightSelectedParagraphs': [1, 2],
            'leftFullParagraphs': self.FULL_LEFT,
            'rightFullParagraphs': self.FULL_RIGHT,
        }

    def test_positions_use_document_paragraphs(self, sentence_thomas):
        result = sentence_thomas.compare("\n".join(self.FULL_LEFT[1:]),
                                         "\n".join(self.FULL_RIGHT[1:]), self.options())
        removed = next(e for e in result.diff if e.kind == DiffKind.REMOVED)
        added = next(e for e in result.diff if e.kind == DiffKind.ADDED)
        assert (removed.value, removed.paragraph_index, removed.start, removed.end) == \
            ("Beta two.", 1, 11, 20)
        assert (added.value, added.paragraph_index, added.start, added.end) == \
            ("Beta 2.", 1, 11, 18)

    def test_identity_map_keeps_repeated_phrase_offset(self, sentence_thomas):
        left = "Big cat ran. cat ran."
        right = "Big cat ran."
        plain = sentence_thomas.compare(left, right, {'max_match': 1.0})
        mapped = sentence_thomas.compare(left, right, {
            'max_match': 1.0,
            'left_selected_paragraphs': [0], 'left_full_paragraphs': [left],
            'right_selected_paragraphs': [0], 'right_full_paragraphs': [right],
        })
        assert [(e.value, e.start, e.end) for e in plain.diff] == [("cat ran.", 13, 21)]
        assert [(e.value, e.start, e.end) for e in mapped.diff] == [("cat ran.", 13, 21)]

    def test_mapped_offset_skips_unselected_paragraphs(self, sentence_thomas):
        full = ["Skip.", "Dog sat. Dog sat down.", "Dog sat."]
        result = sentence_thomas.compare("Dog sat. Dog sat down.\nDog sat.", "Dog sat.", {
            'max_match': 1.0,
            'left_selected_paragraphs': [1, 2], 'left_full_paragraphs': full,
        })
        # Second paragraph starts after "Dog sat. Dog sat down." plus the newline
        assert [(e.value, e.paragraph_index, e.start) for e in result.diff] == [
            ("Dog sat down.", 1, 9), ("Dog sat.", 2, 23)
        ]

    def test_matched_sentences_keyed_by_paragraph(self, sentence_thomas):
        result = sentence_thomas.compare("\n".join(self.FULL_LEFT[1:]),
                                         "\n".join(self.FULL_RIGHT[1:]), self.options())
        keys = [(m['left'].paragraph_index, m['left'].text) for m in result.extensions['matched_sentences']]
        assert keys == [(1, "Alpha one."), (2, "Gamma three.")]

    def test_sentence_info_per_selected_paragraph(self, sentence_thomas):
        result = sentence_thomas.compare("\n".join(self.FULL_LEFT[1:]),
                                         "\n".join(self.FULL_RIGHT[1:]), self.options())
        info = result.extensions['sentence_info']['left']
        assert sorted(info) == [1, 2]
        assert [s['text'] for s in info[1]] == ["Alpha one.", "Beta two."]

    def test_sentence_info_without_paragraph_map(self, sentence_thomas):
        result = sentence_thomas.compare("A one. B two.\n\nC three.", "A one.")
        info = result.extensions['sentence_info']['left']
        assert info[0] == [
            {'text': 'A one.', 'start': 0, 'end': 6},
            {'text': 'B two.', 'start': 7, 'end': 13},
        ]
        assert info[2] == [{'text': 'C three.', 'start': 0, 'end': 8}]

    def test_positions_without_paragraph_map(self, sentence_thomas):
        result = sentence_thomas.compare("A one. B two.", "A one.")
        entry = result.diff[0]
        assert (entry.value, entry.start, entry.paragraph_index) == ("B two.", 7, 0)


class TestResultShape:
    """DiffResult contents."""

    def test_metadata_and_stats(self, thomas):
        result = thomas.compare(LEFT, RIGHT)
        assert result.metadata.name == "thomas"
        assert result.metadata.order == 1
        assert result.stats == {'exact': 1, 'fuzzy': 0, 'added': 1, 'removed': 1, 'total_entries': 2}
        assert result.timestamp.endswith('Z')

    def test_to_dict_is_json_safe(self, sentence_thomas):
        import json
        result = sentence_thomas.compare("A one. B two.", "A one. B too.", {'fuzziness': 1.0, 'min_match': 0.2})
        payload = json.loads(json.dumps(result.to_dict()))
        assert payload['metadata']['name'] == 'thomas'
        assert payload['diff'][0]['kind'] == 'removed'
        assert '0' in payload['extensions']['sentence_info']['left']
        assert payload['extensions']['fuzzy_matched_pairs'][0]['left']['text'] == 'B two.'
