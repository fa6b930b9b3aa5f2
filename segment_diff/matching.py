"""
Segment Matching Phases
=======================
Exact and fuzzy matching passes shared by the algorithms.

Each pass commits pairs into a MatchSet owned by the caller; nothing is
kept between calls.
"""

from typing import Callable, List, Sequence, Tuple

from config_logging import get_logger

from .inline_diff import DIFF_EQUAL, diff_sequences
from .models import MatchSet, Segment, segment_texts
from .similarity import similarity

logger = get_logger('segment_diff.matching')

Scorer = Callable[[str, str], float]


def find_exact_matches_sequential(left: Sequence[Segment], right: Sequence[Segment]) -> MatchSet:
    """
    Cursor-forward exact matching.

    Each non-blank left segment is looked up in the right segments from
    the right cursor onwards; a hit moves the cursor past the matched
    index, a miss leaves it in place. Exact matches therefore keep
    document order on both sides.
    """
    matches = MatchSet.unmatched(len(left), len(right))
    right_cursor = 0

    for left_index, segment in enumerate(left):
        if segment.is_blank:
            continue
        for right_index in range(right_cursor, len(right)):
            candidate = right[right_index]
            if candidate.is_blank or right_index not in matches.unmatched_right:
                continue
            if candidate.text == segment.text:
                matches.add_exact(left_index, right_index)
                right_cursor = right_index + 1
                break

    logger.debug("Sequential exact pass complete",
                 left=len(left), right=len(right), exact=len(matches.exact_matches))
    return matches


def find_exact_matches_aligned(left: Sequence[Segment],
                               right: Sequence[Segment]) -> Tuple[MatchSet, List[Tuple[int, List[str]]]]:
    """
    Exact matching by whole-segment array diff.

    Every non-blank segment inside an equal run is matched to its
    index-aligned counterpart.

    Returns:
        (matches, runs) where runs are the (op, segment texts) runs of
        the array diff, in document order
    """
    matches = MatchSet.unmatched(len(left), len(right))
    runs = diff_sequences(segment_texts(left), segment_texts(right))

    left_index = right_index = 0
    for op, texts in runs:
        count = len(texts)
        if op == DIFF_EQUAL:
            for offset in range(count):
                if not left[left_index + offset].is_blank:
                    matches.add_exact(left_index + offset, right_index + offset)
            left_index += count
            right_index += count
        elif op < 0:
            left_index += count
        else:
            right_index += count

    logger.debug("Aligned exact pass complete",
                 left=len(left), right=len(right), runs=len(runs),
                 exact=len(matches.exact_matches))
    return matches, runs


def find_fuzzy_matches(left: Sequence[Segment], right: Sequence[Segment], matches: MatchSet,
                       threshold: float, scorer: Scorer = similarity) -> MatchSet:
    """
    Greedy fuzzy pass over the segments left unmatched.

    Unmatched left segments are visited in document order; each takes
    the best scoring unused right segment with a score at or above
    threshold (first maximum wins). Committed pairs are never revisited.
    """
    for left_index in sorted(matches.unmatched_left):
        segment = left[left_index]
        if segment.is_blank:
            continue

        best_index = None
        best_score = 0.0
        for right_index in range(len(right)):
            if right_index not in matches.unmatched_right:
                continue
            candidate = right[right_index]
            if candidate.is_blank:
                continue
            score = scorer(segment.text, candidate.text)
            if score > best_score and score >= threshold:
                best_index = right_index
                best_score = score

        if best_index is not None:
            matches.add_fuzzy(left_index, best_index, best_score)

    logger.debug("Fuzzy pass complete", threshold=threshold, fuzzy=len(matches.fuzzy_matches))
    return matches
