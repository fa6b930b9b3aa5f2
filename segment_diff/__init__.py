"""
Segment Diff Module v1.0.0
==========================
Paragraph and sentence matching engine for side-by-side document diffs.

Features:
- Paragraph and sentence segmentation with offsets
- Jaccard similarity with a fuzziness dial
- Thomas, Patience, Levenshtein and Character algorithms
- Algorithm registry ordered for display
- Word and character diffs inside matched pairs
"""

from .models import (
    AlgorithmMetadata,
    AlignedPair,
    Category,
    ChangeType,
    CompareOptions,
    DiffEntry,
    DiffKind,
    DiffResult,
    InlinePart,
    MatchPair,
    MatchSet,
    PairSide,
    Segment,
    SegmentKey,
    Side
)
from .segmenter import TextSegmenter
from .registry import AlgorithmRegistry, create_default_registry
from .differ import SegmentDiffer, compare_texts
from .routes import sd_blueprint

__version__ = "1.0.0"
__all__ = [
    'AlgorithmMetadata',
    'AlgorithmRegistry',
    'AlignedPair',
    'Category',
    'ChangeType',
    'CompareOptions',
    'DiffEntry',
    'DiffKind',
    'DiffResult',
    'InlinePart',
    'MatchPair',
    'MatchSet',
    'PairSide',
    'Segment',
    'SegmentDiffer',
    'SegmentKey',
    'Side',
    'TextSegmenter',
    'compare_texts',
    'create_default_registry',
    'sd_blueprint',
]
