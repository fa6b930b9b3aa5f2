"""
Diff Assembler
==============
Turns a MatchSet into a flat, positioned list of DiffEntry objects and
builds the per-pair payloads carried in DiffResult.extensions.
"""

from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config_logging import get_logger

from .inline_diff import DIFF_EQUAL, DIFF_DELETE
from .models import (
    AlignedPair, CompareOptions, DiffEntry, DiffKind, InlinePart, MatchPair,
    MatchSet, PairSide, Segment, SegmentKey, Side
)
from .segmenter import (
    find_paragraph_for_segment, global_position, global_position_for_paragraph, paragraph_starts
)

logger = get_logger('segment_diff.assembler')

InlineDiff = Callable[[str, str], List[InlinePart]]


class DiffAssembler:
    """
    Emits diff entries for one comparison.

    Exact pairs produce nothing; fuzzy pairs produce a Removed/Added pair
    tagged with their similarity; unmatched segments produce Removed
    (left) or Added (right). Blank segments never produce entries.

    When map_paragraphs is set and the options carry selected/full
    paragraph lists for a side, positions on that side are reported in
    the coordinates of the selected paragraphs joined by newlines.
    """

    def __init__(self, left: Sequence[Segment], right: Sequence[Segment], matches: MatchSet,
                 options: Optional[CompareOptions] = None, map_paragraphs: bool = False,
                 left_paragraphs: Optional[Sequence[str]] = None,
                 right_paragraphs: Optional[Sequence[str]] = None):
        self.segments = {Side.LEFT: left, Side.RIGHT: right}
        self.matches = matches
        self.options = options or CompareOptions()
        self.map_paragraphs = map_paragraphs
        self.paragraph_texts = {
            Side.LEFT: list(left_paragraphs or []),
            Side.RIGHT: list(right_paragraphs or []),
        }
        self.paragraph_starts = {side: paragraph_starts(texts)
                                 for side, texts in self.paragraph_texts.items()}
        self._exact_lefts = {p.left for p in matches.exact_matches}
        self._fuzzy_by_left = {p.left: p for p in matches.fuzzy_matches}
        self._fuzzy_by_right = {p.right: p for p in matches.fuzzy_matches}

    # -------------------------------------------------------------------------
    # Diff walks
    # -------------------------------------------------------------------------

    def assemble_sequential(self) -> List[DiffEntry]:
        """
        Lockstep walk over both sequences.

        Pairs whose right index lies ahead of or behind the cursor are
        emitted when their left segment is reached; indices already
        emitted are skipped.
        """
        left_count = self.matches.left_count
        right_count = self.matches.right_count
        left_to_right = self.matches.left_to_right
        right_to_left = self.matches.right_to_left

        diff = []
        emitted_left = set()
        emitted_right = set()
        l = r = 0

        while l < left_count or r < right_count:
            if l < left_count and l in emitted_left:
                l += 1
            elif r < right_count and r in emitted_right:
                r += 1
            elif l < left_count and r < right_count and left_to_right.get(l) == r:
                self._emit_pair(diff, l, r)
                emitted_left.add(l)
                emitted_right.add(r)
                l += 1
                r += 1
            elif r < right_count and r not in right_to_left:
                self._emit(diff, Side.RIGHT, r, DiffKind.ADDED)
                emitted_right.add(r)
                r += 1
            elif l < left_count and l not in left_to_right:
                self._emit(diff, Side.LEFT, l, DiffKind.REMOVED)
                emitted_left.add(l)
                l += 1
            elif l < left_count:
                target = left_to_right[l]
                self._emit_pair(diff, l, target)
                emitted_left.add(l)
                emitted_right.add(target)
                l += 1
            else:
                r += 1

        return diff

    def assemble_aligned(self, runs: Sequence[Tuple[int, Sequence[str]]]) -> List[DiffEntry]:
        """
        Walk the runs of a whole-segment array diff.

        Deleted runs report unmatched left segments; inserted runs report
        unmatched right segments and fuzzy pairs (at their right index).
        """
        diff = []
        l = r = 0
        for op, texts in runs:
            count = len(texts)
            if op == DIFF_EQUAL:
                l += count
                r += count
            elif op == DIFF_DELETE:
                for index in range(l, l + count):
                    if index in self.matches.unmatched_left:
                        self._emit(diff, Side.LEFT, index, DiffKind.REMOVED)
                l += count
            else:
                for index in range(r, r + count):
                    pair = self._fuzzy_by_right.get(index)
                    if pair is not None:
                        self._emit_pair(diff, pair.left, index)
                    elif index in self.matches.unmatched_right:
                        self._emit(diff, Side.RIGHT, index, DiffKind.ADDED)
                r += count
        return diff

    def _emit_pair(self, diff: List[DiffEntry], left_index: int, right_index: int):
        if left_index in self._exact_lefts:
            return
        pair = self._fuzzy_by_left[left_index]
        self._emit(diff, Side.LEFT, left_index, DiffKind.REMOVED, pair.similarity)
        self._emit(diff, Side.RIGHT, right_index, DiffKind.ADDED, pair.similarity)

    def _emit(self, diff: List[DiffEntry], side: Side, index: int, kind: DiffKind,
              similarity: Optional[float] = None):
        segment = self.segments[side][index]
        if segment.is_blank:
            return
        diff.append(self.entry(side, index, kind, similarity))

    def entry(self, side: Side, index: int, kind: DiffKind,
              similarity: Optional[float] = None) -> DiffEntry:
        segment = self.segments[side][index]
        paragraph_index, start = self.position(side, segment)
        return DiffEntry(
            value=segment.text,
            kind=kind,
            side=side,
            start=start,
            end=start + len(segment.text),
            paragraph_index=paragraph_index,
            similarity=similarity
        )

    # -------------------------------------------------------------------------
    # Positions
    # -------------------------------------------------------------------------

    def position(self, side: Side, segment: Segment) -> Tuple[int, int]:
        """(paragraph index, start offset) of a segment for the caller."""
        local_paragraph = segment.paragraph_index if segment.paragraph_index is not None else 0
        if not (self.map_paragraphs and self.options.has_paragraph_map(side)):
            return local_paragraph, segment.start

        selected = self.options.selected_paragraphs(side)
        full = self.options.full_paragraphs(side)
        if 0 <= local_paragraph < len(selected):
            paragraph_index = selected[local_paragraph]
            starts = self.paragraph_starts[side]
            if local_paragraph < len(starts):
                within = segment.start - starts[local_paragraph]
                full_text = full[paragraph_index] if 0 <= paragraph_index < len(full) else ''
                if within >= 0 and full_text[within:within + len(segment.text)] == segment.text:
                    base = global_position_for_paragraph(paragraph_index, selected, full)
                    return paragraph_index, base + within
        else:
            found = find_paragraph_for_segment(segment.text, selected, full)
            paragraph_index = found if found is not None else local_paragraph
        # Segment text not at its own offset in the full paragraph
        return paragraph_index, global_position(paragraph_index, segment.text, selected, full)

    def pair_side(self, side: Side, index: int) -> PairSide:
        segment = self.segments[side][index]
        paragraph_index, _ = self.position(side, segment)
        if self.map_paragraphs and self.options.has_paragraph_map(side):
            full = self.options.full_paragraphs(side)
            paragraph_text = full[paragraph_index] if 0 <= paragraph_index < len(full) else ''
        else:
            texts = self.paragraph_texts[side]
            paragraph_text = texts[paragraph_index] if 0 <= paragraph_index < len(texts) else segment.text
        return PairSide(segment.text, index, paragraph_index, paragraph_text)

    # -------------------------------------------------------------------------
    # Extension payloads
    # -------------------------------------------------------------------------

    def aligned_pairs(self, pairs: Sequence[MatchPair], inline_diff: InlineDiff) -> List[AlignedPair]:
        """Pairs with both sides located and their intra-segment diff."""
        aligned = []
        for pair in pairs:
            left = self.pair_side(Side.LEFT, pair.left)
            right = self.pair_side(Side.RIGHT, pair.right)
            aligned.append(AlignedPair(left, right, pair.similarity,
                                       inline_diff(left.text, right.text)))
        return aligned

    def matched_keys(self) -> List[Dict]:
        """Matched pairs keyed by (paragraph index, text) on both sides."""
        keys = []
        for pair in self.matches.pairs:
            left = self.pair_side(Side.LEFT, pair.left)
            right = self.pair_side(Side.RIGHT, pair.right)
            keys.append({
                'left': SegmentKey(left.paragraph_index, left.text),
                'right': SegmentKey(right.paragraph_index, right.text),
                'similarity': pair.similarity
            })
        return keys
