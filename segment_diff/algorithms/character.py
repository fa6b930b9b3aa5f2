"""
Character Algorithm
===================
Exact pass as in Thomas; the remaining segments are paired by the share
of characters a character diff keeps in common, against a fixed low
threshold, so almost every segment gets a character-level rendering.
"""

from typing import Any, Dict, Sequence

from config_logging import get_config

from ..assembler import DiffAssembler
from ..inline_diff import character_parts
from ..matching import find_exact_matches_sequential, find_fuzzy_matches
from ..models import CompareOptions, MatchSet, Segment
from ..similarity import character_similarity
from .base import DiffAlgorithm


class CharacterAlgorithm(DiffAlgorithm):
    """Character-diff pairing with a fixed acceptance threshold."""

    NAME = "character"
    DISPLAY_NAME = "Character"
    SUPPORTS_FUZZY = False
    DESCRIPTION = "Character-level differences between sentences"
    ORDER = 4

    def match_threshold(self, options: CompareOptions) -> float:
        return get_config().character_match_threshold

    def match_segments(self, left: Sequence[Segment], right: Sequence[Segment],
                       threshold: float) -> MatchSet:
        matches = find_exact_matches_sequential(left, right)
        return find_fuzzy_matches(left, right, matches, threshold, scorer=character_similarity)

    def build_extensions(self, assembler: DiffAssembler, matches: MatchSet,
                         options: CompareOptions) -> Dict[str, Any]:
        return {
            'character_diff_pairs': assembler.aligned_pairs(matches.fuzzy_matches, character_parts)
        }
