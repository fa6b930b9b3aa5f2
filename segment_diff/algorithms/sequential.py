"""
Thomas Algorithm
================
Sequential matching that preserves document order.

Exact pass: cursor-forward scan of the right segments. Fuzzy pass (only
when the threshold is below 1.0): every still-unmatched left segment
greedily takes its best unused right segment.
"""

from typing import Any, Dict, Sequence

from ..assembler import DiffAssembler
from ..inline_diff import get_word_diff
from ..matching import find_exact_matches_sequential, find_fuzzy_matches
from ..models import CompareOptions, MatchSet, Segment
from .base import DiffAlgorithm


class ThomasAlgorithm(DiffAlgorithm):
    """Sequential exact matching followed by greedy fuzzy matching."""

    NAME = "thomas"
    DISPLAY_NAME = "Thomas"
    SUPPORTS_FUZZY = True
    DESCRIPTION = "Sequential matching that preserves document order"
    ORDER = 1

    def match_segments(self, left: Sequence[Segment], right: Sequence[Segment],
                       threshold: float) -> MatchSet:
        matches = find_exact_matches_sequential(left, right)
        if threshold < 1.0:
            find_fuzzy_matches(left, right, matches, threshold)
        return matches

    def build_extensions(self, assembler: DiffAssembler, matches: MatchSet,
                         options: CompareOptions) -> Dict[str, Any]:
        if not matches.fuzzy_matches:
            return {}
        return {
            'fuzzy_matched_pairs': assembler.aligned_pairs(matches.fuzzy_matches, get_word_diff)
        }
