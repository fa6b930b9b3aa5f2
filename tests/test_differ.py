"""
Tests for the Segment Differ entry point
========================================
"""

import pytest

from config_logging import InvalidAlgorithmError, InvalidCategoryError, ProcessingError
from segment_diff import SegmentDiffer, compare_texts
from segment_diff.models import AlgorithmMetadata, Category, DiffKind


@pytest.fixture
def differ(registry):
    return SegmentDiffer(registry=registry)


class TestCompare:

    def test_dispatch_by_category_and_name(self, differ):
        result = differ.compare('sentence', 'character', "The cat sat.", "The cut sat.")
        assert result.metadata.name == 'character'
        assert 'character_diff_pairs' in result.extensions

    def test_category_enum(self, differ):
        result = differ.compare(Category.PARAGRAPH, 'patience', "a\nb", "a\nc")
        assert [(e.kind, e.value) for e in result.diff] == [
            (DiffKind.REMOVED, "b"), (DiffKind.ADDED, "c")
        ]

    def test_unknown_category(self, differ):
        with pytest.raises(InvalidCategoryError):
            differ.compare('word', 'thomas', "a", "b")

    def test_unknown_algorithm(self, differ):
        with pytest.raises(InvalidAlgorithmError) as exc_info:
            differ.compare('paragraph', 'levenshtein', "a", "b")
        assert exc_info.value.details['name'] == 'levenshtein'

    def test_unexpected_failure_becomes_processing_error(self, differ):
        class Exploding:
            def get_metadata(self):
                return AlgorithmMetadata('exploding', 'Exploding')

            def compare(self, left_text, right_text, options=None):
                raise KeyError('missing')

        differ.registry.register('paragraph', Exploding())
        with pytest.raises(ProcessingError):
            differ.compare('paragraph', 'exploding', "a", "b")

    def test_none_texts_treated_as_empty(self, differ):
        result = differ.compare('paragraph', 'thomas', None, "New")
        assert [e.value for e in result.diff] == ["New"]


class TestListing:

    def test_all_categories(self, differ):
        listing = differ.list_algorithms()
        assert listing['paragraph']['count'] == 2
        assert listing['sentence']['count'] == 4

    def test_one_category(self, differ):
        listing = differ.list_algorithms('sentence')
        assert list(listing) == ['sentence']
        assert [a['name'] for a in listing['sentence']['algorithms']] == [
            'thomas', 'levenshtein', 'character', 'patience'
        ]

    def test_invalid_category(self, differ):
        with pytest.raises(InvalidCategoryError):
            differ.list_algorithms('word')


def test_compare_texts_convenience():
    result = compare_texts("One.\nTwo.", "One.\nThree.", fuzziness=0)
    assert result.metadata.name == 'thomas'
    assert result.stats['exact'] == 1
