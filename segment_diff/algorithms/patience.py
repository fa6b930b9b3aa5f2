"""
Patience Algorithm
==================
Whole-segment array diff; segments inside equal runs are exact matches.
Finds moved and reordered blocks the forward-only scan misses. The
fuzzy pass is the same as Thomas's, over whatever the diff left.
"""

from typing import Any, Dict, List, Sequence, Tuple

from ..assembler import DiffAssembler
from ..inline_diff import get_word_diff
from ..matching import find_exact_matches_aligned, find_fuzzy_matches
from ..models import CompareOptions, DiffEntry, MatchSet, Segment
from .base import DiffAlgorithm, Runs


class PatienceAlgorithm(DiffAlgorithm):
    """Array-diff exact matching followed by greedy fuzzy matching."""

    NAME = "patience"
    DISPLAY_NAME = "Patience"
    SUPPORTS_FUZZY = True
    DESCRIPTION = "Detects moved blocks while preserving order"
    ORDER = 2

    def match_segments(self, left: Sequence[Segment], right: Sequence[Segment],
                       threshold: float) -> MatchSet:
        return self._match(left, right, threshold)[0]

    def _match(self, left: Sequence[Segment], right: Sequence[Segment],
               threshold: float) -> Tuple[MatchSet, Runs]:
        matches, runs = find_exact_matches_aligned(left, right)
        if threshold < 1.0:
            find_fuzzy_matches(left, right, matches, threshold)
        return matches, runs

    def assemble(self, assembler: DiffAssembler, runs: Runs) -> List[DiffEntry]:
        return assembler.assemble_aligned(runs or [])

    def build_extensions(self, assembler: DiffAssembler, matches: MatchSet,
                         options: CompareOptions) -> Dict[str, Any]:
        if not matches.fuzzy_matches:
            return {}
        return {
            'fuzzy_matched_pairs': assembler.aligned_pairs(matches.fuzzy_matches, get_word_diff)
        }
