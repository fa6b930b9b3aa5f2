"""
Segment Diff Models v1.0.0
==========================
Data classes for segment matching and diff results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import List, Dict, Optional, Any, Set, Sequence

from config_logging import get_config, get_logger, MalformedOptionsError, ProcessingError

logger = get_logger('segment_diff.models')


class Category(str, Enum):
    """Granularity an algorithm operates at."""
    PARAGRAPH = 'paragraph'
    SENTENCE = 'sentence'


class DiffKind(str, Enum):
    """Kind of a renderable diff entry."""
    ADDED = 'added'
    REMOVED = 'removed'
    UNCHANGED = 'unchanged'


class Side(str, Enum):
    """Which document an entry belongs to."""
    LEFT = 'left'
    RIGHT = 'right'


class ChangeType(str, Enum):
    """Operation of an intra-segment (word or character) diff part."""
    UNCHANGED = 'unchanged'
    ADDED = 'added'
    DELETED = 'deleted'


@dataclass(frozen=True)
class Segment:
    """
    A contiguous slice of text (paragraph or sentence).

    Attributes:
        text: Segment text
        start: Offset of the first character in the segmented text
        end: Offset one past the last character (end - start == len(text))
        paragraph_index: Paragraph the segment belongs to, when known
    """
    text: str
    start: int
    end: int
    paragraph_index: Optional[int] = None

    def __post_init__(self):
        if self.end - self.start != len(self.text):
            raise ValueError(
                f"Segment offsets [{self.start}, {self.end}) do not span {len(self.text)} characters"
            )

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'text': self.text,
            'start': self.start,
            'end': self.end,
            'paragraph_index': self.paragraph_index
        }


@dataclass(frozen=True)
class SegmentKey:
    """Composite identity of a segment inside a document: (paragraph, text)."""
    paragraph_index: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {'paragraph_index': self.paragraph_index, 'text': self.text}


@dataclass(frozen=True)
class MatchPair:
    """A committed left/right correspondence."""
    left: int
    right: int
    similarity: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {'left': self.left, 'right': self.right, 'similarity': self.similarity}


@dataclass
class MatchSet:
    """
    Bookkeeping of exact/fuzzy/unmatched correspondences between two
    segment sequences.

    Every left index in [0, left_count) is in exactly one of the exact
    matches, the fuzzy matches or unmatched_left; likewise on the right.
    left_to_right and right_to_left are inverse maps over matched indices.
    """
    left_count: int = 0
    right_count: int = 0
    exact_matches: List[MatchPair] = field(default_factory=list)
    fuzzy_matches: List[MatchPair] = field(default_factory=list)
    unmatched_left: Set[int] = field(default_factory=set)
    unmatched_right: Set[int] = field(default_factory=set)
    left_to_right: Dict[int, int] = field(default_factory=dict)
    right_to_left: Dict[int, int] = field(default_factory=dict)

    @classmethod
    def unmatched(cls, left_count: int, right_count: int) -> 'MatchSet':
        """Start with every index on both sides unmatched."""
        return cls(
            left_count=left_count,
            right_count=right_count,
            unmatched_left=set(range(left_count)),
            unmatched_right=set(range(right_count)),
        )

    def add_exact(self, left: int, right: int) -> MatchPair:
        pair = MatchPair(left, right, 1.0)
        self._commit(pair)
        self.exact_matches.append(pair)
        return pair

    def add_fuzzy(self, left: int, right: int, similarity: float) -> MatchPair:
        pair = MatchPair(left, right, similarity)
        self._commit(pair)
        self.fuzzy_matches.append(pair)
        return pair

    def _commit(self, pair: MatchPair):
        if pair.left not in self.unmatched_left or pair.right not in self.unmatched_right:
            raise ValueError(f"Segment already matched: left={pair.left}, right={pair.right}")
        self.unmatched_left.discard(pair.left)
        self.unmatched_right.discard(pair.right)
        self.left_to_right[pair.left] = pair.right
        self.right_to_left[pair.right] = pair.left

    @property
    def pairs(self) -> List[MatchPair]:
        """All matches, exact first, each group in commit order."""
        return self.exact_matches + self.fuzzy_matches

    def verify(self):
        """Raise ProcessingError when the partition or bijection invariants fail."""
        problems = []
        for side, count, matched_key, unmatched, forward, backward in (
            ('left', self.left_count, 'left', self.unmatched_left,
             self.left_to_right, self.right_to_left),
            ('right', self.right_count, 'right', self.unmatched_right,
             self.right_to_left, self.left_to_right),
        ):
            matched = [getattr(p, matched_key) for p in self.pairs]
            if len(matched) != len(set(matched)):
                problems.append(f"{side} index matched more than once")
            if set(matched) & unmatched:
                problems.append(f"{side} index both matched and unmatched")
            if set(matched) | unmatched != set(range(count)):
                problems.append(f"{side} partitions do not cover [0, {count})")
            if any(backward.get(target) != source for source, target in forward.items()):
                problems.append(f"{side} match maps are not inverses")
        if len(self.left_to_right) != len(self.pairs):
            problems.append("match maps disagree with match lists")

        if problems:
            logger.error("MatchSet invariants violated", problems=problems)
            raise ProcessingError("Inconsistent match set: " + "; ".join(problems),
                                  stage='matching')

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'exact_matches': [p.to_dict() for p in self.exact_matches],
            'fuzzy_matches': [p.to_dict() for p in self.fuzzy_matches],
            'unmatched_left': sorted(self.unmatched_left),
            'unmatched_right': sorted(self.unmatched_right),
            'left_to_right': {str(k): v for k, v in sorted(self.left_to_right.items())},
            'right_to_left': {str(k): v for k, v in sorted(self.right_to_left.items())},
        }


@dataclass
class DiffEntry:
    """
    One renderable unit of change.

    Attributes:
        value: Segment text
        kind: Added, removed or unchanged
        side: Document the entry is drawn on
        start: Offset in the caller's (selected/concatenated) text space
        end: End offset in the same space
        paragraph_index: Paragraph the segment belongs to
        similarity: Set for the two halves of a fuzzy pair
    """
    value: str
    kind: DiffKind
    side: Side
    start: int
    end: int
    paragraph_index: int
    similarity: Optional[float] = None

    @property
    def added(self) -> bool:
        return self.kind == DiffKind.ADDED

    @property
    def removed(self) -> bool:
        return self.kind == DiffKind.REMOVED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'value': self.value,
            'kind': self.kind.value,
            'side': self.side.value,
            'start': self.start,
            'end': self.end,
            'paragraph_index': self.paragraph_index,
        }
        if self.similarity is not None:
            result['similarity'] = self.similarity
        return result


@dataclass(frozen=True)
class AlgorithmMetadata:
    """Descriptive data for a registered algorithm."""
    name: str
    display_name: str
    supports_fuzzy: bool = False
    description: str = ""
    order: int = 999

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'display_name': self.display_name,
            'supports_fuzzy': self.supports_fuzzy,
            'description': self.description,
            'order': self.order
        }


@dataclass(frozen=True)
class InlinePart:
    """A run of a word- or character-level diff inside a matched pair."""
    type: ChangeType
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type.value, 'value': self.value}


@dataclass(frozen=True)
class PairSide:
    """One half of an aligned pair with its paragraph context."""
    text: str
    index: int
    paragraph_index: Optional[int]
    paragraph_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'index': self.index,
            'paragraph_index': self.paragraph_index,
            'paragraph_text': self.paragraph_text
        }


@dataclass
class AlignedPair:
    """A matched segment pair with its intra-segment diff."""
    left: PairSide
    right: PairSide
    similarity: float
    parts: List[InlinePart] = field(default_factory=list)

    @property
    def changed_parts(self) -> List[InlinePart]:
        return [p for p in self.parts if p.type != ChangeType.UNCHANGED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'left': self.left.to_dict(),
            'right': self.right.to_dict(),
            'similarity': self.similarity,
            'parts': [p.to_dict() for p in self.parts]
        }


def _option(data: Dict[str, Any], snake: str, camel: str, default: Any) -> Any:
    if snake in data and data[snake] is not None:
        return data[snake]
    if camel in data and data[camel] is not None:
        return data[camel]
    return default


def _as_ratio(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                raise MalformedOptionsError(f"Option '{name}' must be a number", option=name)
        else:
            raise MalformedOptionsError(f"Option '{name}' must be a number", option=name)
    value = float(value)
    if value != value:  # NaN
        raise MalformedOptionsError(f"Option '{name}' must be a number", option=name)
    if value < 0.0 or value > 1.0:
        clamped = min(max(value, 0.0), 1.0)
        logger.warning(f"Clamping {name} from {value} to {clamped}", option=name)
        value = clamped
    return value


def _as_index_list(value: Any, name: str) -> List[int]:
    if not isinstance(value, (list, tuple)):
        raise MalformedOptionsError(f"Option '{name}' must be a list of integers", option=name)
    try:
        return [int(v) for v in value]
    except (TypeError, ValueError):
        raise MalformedOptionsError(f"Option '{name}' must be a list of integers", option=name)


def _as_text_list(value: Any, name: str) -> List[str]:
    if not isinstance(value, (list, tuple)):
        raise MalformedOptionsError(f"Option '{name}' must be a list of strings", option=name)
    return ['' if v is None else str(v) for v in value]


@dataclass
class CompareOptions:
    """
    Normalized options for a single compare() call.

    fuzziness, min_match and max_match are clamped into [0, 1] and
    min_match/max_match are swapped when given in the wrong order.
    The paragraph lists only drive position mapping for sentence-level
    algorithms.
    """
    fuzziness: float = 0.0
    min_match: float = 0.5
    max_match: float = 0.9
    left_selected_paragraphs: List[int] = field(default_factory=list)
    right_selected_paragraphs: List[int] = field(default_factory=list)
    left_full_paragraphs: List[str] = field(default_factory=list)
    right_full_paragraphs: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> 'CompareOptions':
        """Build options from a host dictionary (snake_case or camelCase keys)."""
        if data is None:
            data = {}
        if isinstance(data, CompareOptions):
            return data
        if not isinstance(data, dict):
            raise MalformedOptionsError("Options must be a mapping")

        config = get_config()
        fuzziness = _as_ratio(_option(data, 'fuzziness', 'fuzziness', config.default_fuzziness),
                              'fuzziness')
        min_match = _as_ratio(_option(data, 'min_match', 'minMatch', config.default_min_match),
                              'min_match')
        max_match = _as_ratio(_option(data, 'max_match', 'maxMatch', config.default_max_match),
                              'max_match')
        if min_match > max_match:
            logger.warning("min_match exceeds max_match; swapping",
                           min_match=min_match, max_match=max_match)
            min_match, max_match = max_match, min_match

        return cls(
            fuzziness=fuzziness,
            min_match=min_match,
            max_match=max_match,
            left_selected_paragraphs=_as_index_list(
                _option(data, 'left_selected_paragraphs', 'leftSelectedParagraphs', []),
                'left_selected_paragraphs'),
            right_selected_paragraphs=_as_index_list(
                _option(data, 'right_selected_paragraphs', 'rightSelectedParagraphs', []),
                'right_selected_paragraphs'),
            left_full_paragraphs=_as_text_list(
                _option(data, 'left_full_paragraphs', 'leftFullParagraphs', []),
                'left_full_paragraphs'),
            right_full_paragraphs=_as_text_list(
                _option(data, 'right_full_paragraphs', 'rightFullParagraphs', []),
                'right_full_paragraphs'),
        )

    def selected_paragraphs(self, side: Side) -> List[int]:
        return self.left_selected_paragraphs if side == Side.LEFT else self.right_selected_paragraphs

    def full_paragraphs(self, side: Side) -> List[str]:
        return self.left_full_paragraphs if side == Side.LEFT else self.right_full_paragraphs

    def has_paragraph_map(self, side: Side) -> bool:
        return bool(self.selected_paragraphs(side)) and bool(self.full_paragraphs(side))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fuzziness': self.fuzziness,
            'min_match': self.min_match,
            'max_match': self.max_match,
            'left_selected_paragraphs': list(self.left_selected_paragraphs),
            'right_selected_paragraphs': list(self.right_selected_paragraphs),
        }


@dataclass
class DiffResult:
    """
    Complete result of one compare() call.

    Attributes:
        diff: Flat list of positioned diff entries
        matches: Match bookkeeping between the two segment sequences
        metadata: Metadata of the algorithm that produced the result
        timestamp: Creation time (ISO format, UTC)
        extensions: Algorithm-specific payloads (fuzzy_matched_pairs,
                    word_diff, character_diff_pairs, sentence_info,
                    matched_sentences)
        stats: Counts of exact/fuzzy matches and added/removed entries
    """
    diff: List[DiffEntry]
    matches: MatchSet
    metadata: AlgorithmMetadata
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
    )
    extensions: Dict[str, Any] = field(default_factory=dict)
    stats: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        """Initialize stats if not provided."""
        if not self.stats:
            self.stats = {
                'exact': len(self.matches.exact_matches),
                'fuzzy': len(self.matches.fuzzy_matches),
                'added': sum(1 for e in self.diff if e.kind == DiffKind.ADDED),
                'removed': sum(1 for e in self.diff if e.kind == DiffKind.REMOVED),
                'total_entries': len(self.diff)
            }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'diff': [e.to_dict() for e in self.diff],
            'matches': self.matches.to_dict(),
            'metadata': self.metadata.to_dict(),
            'timestamp': self.timestamp,
            'extensions': {k: _serialize(v) for k, v in self.extensions.items()},
            'stats': self.stats
        }


def _serialize(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value


def segment_texts(segments: Sequence[Segment]) -> List[str]:
    return [s.text for s in segments]
