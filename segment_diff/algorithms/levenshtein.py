"""
Levenshtein Algorithm
=====================
Thomas segment matching plus a word-level diff of every matched pair.
"""

from typing import Any, Dict

from ..assembler import DiffAssembler
from ..inline_diff import lookahead_word_diff
from ..models import CompareOptions, MatchSet
from .sequential import ThomasAlgorithm


class LevenshteinAlgorithm(ThomasAlgorithm):
    """Word-granularity edits inside matched segments."""

    NAME = "levenshtein"
    DISPLAY_NAME = "Levenshtein"
    SUPPORTS_FUZZY = True
    DESCRIPTION = "Word-level edits within matched sentences"
    ORDER = 3

    def build_extensions(self, assembler: DiffAssembler, matches: MatchSet,
                         options: CompareOptions) -> Dict[str, Any]:
        return {
            'word_diff': assembler.aligned_pairs(matches.pairs, lookahead_word_diff)
        }
