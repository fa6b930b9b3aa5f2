"""
Similarity Scoring
==================
Token-set (Jaccard) similarity, fuzziness-to-threshold conversion and
best-match search.

All functions are total: empty or token-less input scores 0.
"""

from collections import namedtuple
from typing import List, Optional, Sequence

from .inline_diff import character_diff

BestMatch = namedtuple('BestMatch', ['index', 'text', 'similarity'])


def extract_words(text: str) -> List[str]:
    """Lower-cased whitespace tokens."""
    if not text:
        return []
    return text.lower().split()


def similarity(text1: str, text2: str) -> float:
    """
    Jaccard similarity of the lower-cased word sets.

    Returns:
        |intersection| / |union|, or 0.0 when either side has no tokens
    """
    words1 = set(extract_words(text1))
    words2 = set(extract_words(text2))
    if not words1 or not words2:
        return 0.0
    return len(words1 & words2) / len(words1 | words2)


def paragraph_similarity(paragraph1: str, paragraph2: str) -> float:
    return similarity(paragraph1, paragraph2)


def are_similar(text1: str, text2: str, threshold: float) -> bool:
    return similarity(text1, text2) >= threshold


def best_match(text: str, candidates: Sequence[str], min_threshold: float = 0.5) -> Optional[BestMatch]:
    """
    Best scoring candidate at or above min_threshold.

    Strictly-greater comparison: the first candidate reaching the
    maximum wins ties. A zero score never matches.
    """
    best = None
    best_similarity = 0.0
    for index, candidate in enumerate(candidates):
        score = similarity(text, candidate)
        if score > best_similarity and score >= min_threshold:
            best_similarity = score
            best = BestMatch(index, candidate, score)
    return best


def weighted_similarity(text1: str, text2: str, position_weight: float,
                        position1: int, position2: int, total_items: int) -> float:
    """
    Blend text similarity with positional closeness.

    Args:
        position_weight: Share of the score taken by position (0-1)
        position1: Index of text1 in its sequence
        position2: Index of text2 in its sequence
        total_items: Sequence length used to scale the position distance
    """
    text_similarity = similarity(text1, text2)
    if position_weight == 0 or total_items == 0:
        return text_similarity

    max_diff = total_items - 1
    if max_diff <= 0:
        position_similarity = 1.0
    else:
        position_similarity = max(0.0, 1.0 - abs(position1 - position2) / max_diff)

    return text_similarity * (1 - position_weight) + position_similarity * position_weight


def threshold_from_fuzziness(fuzziness: float, min_match: float = 0.5, max_match: float = 0.9) -> float:
    """
    Convert the fuzziness dial into a similarity threshold.

    fuzziness 0 gives max_match (strict), 1 gives min_match (loosest).
    """
    if fuzziness != fuzziness:  # NaN counts as strict
        fuzziness = 0.0
    fuzziness = min(max(fuzziness, 0.0), 1.0)
    # max - f * (max - min), written so both endpoints come out exact
    return (1.0 - fuzziness) * max_match + fuzziness * min_match


def character_similarity(text1: str, text2: str) -> float:
    """
    Share of characters a character diff classifies as common.

    equal / (equal + deleted + inserted), 0.0 when either side is empty.
    """
    if not text1 or not text2:
        return 0.0

    common = 0
    total = 0
    for op, text in character_diff(text1, text2, cleanup=False):
        total += len(text)
        if op == 0:
            common += len(text)
    return common / total if total else 0.0
