"""
Diff Algorithm Contract v1.0.0
==============================
Defines the interface all segment diff algorithms implement.

Every algorithm exposes get_metadata() and compare(). compare() runs the
same pipeline for all variants; subclasses override the matching phase,
the diff walk and the extension payloads.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from config_logging import (
    get_logger, AlgorithmNotImplementedError, InvalidCategoryError
)

from ..assembler import DiffAssembler
from ..models import (
    AlgorithmMetadata, Category, CompareOptions, DiffEntry, DiffResult, MatchSet,
    Segment, Side
)
from ..segmenter import TextSegmenter, build_sentence_info, default_segmenter, paragraph_starts
from ..similarity import threshold_from_fuzziness

__version__ = "1.0.0"

logger = get_logger('segment_diff.algorithms')

Runs = Optional[List[Tuple[int, List[str]]]]


class DiffAlgorithm:
    """
    Base class for all diff algorithms.

    Subclasses set the metadata class attributes and implement
    match_segments(). The base match_segments() refuses to run, which is
    how placeholder variants are registered.
    """

    NAME = "base-algorithm"
    DISPLAY_NAME = "Base Algorithm"
    SUPPORTS_FUZZY = False
    DESCRIPTION = "Base diff algorithm"
    ORDER = 999

    def __init__(self, category: Any = Category.PARAGRAPH,
                 segmenter: Optional[TextSegmenter] = None, order: Optional[int] = None):
        """
        Args:
            category: 'paragraph' or 'sentence'
            segmenter: Segmenter to use; the configured default when None
            order: Display rank overriding the class default
        """
        try:
            self.category = Category(category)
        except ValueError:
            raise InvalidCategoryError(category)
        self._segmenter = segmenter
        self._order = self.ORDER if order is None else order
        self.metadata = self.get_metadata()

    @property
    def segmenter(self) -> TextSegmenter:
        if self._segmenter is None:
            self._segmenter = default_segmenter()
        return self._segmenter

    def get_metadata(self) -> AlgorithmMetadata:
        return AlgorithmMetadata(
            name=self.NAME,
            display_name=self.DISPLAY_NAME,
            supports_fuzzy=self.SUPPORTS_FUZZY,
            description=self.DESCRIPTION,
            order=self._order
        )

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def compare(self, left_text: str, right_text: str,
                options: Optional[Dict[str, Any]] = None) -> DiffResult:
        """
        Compare two texts.

        Args:
            left_text: Original text
            right_text: Revised text
            options: fuzziness, min_match, max_match and (sentence level)
                     the selected/full paragraph lists per side

        Returns:
            A complete DiffResult

        Raises:
            MalformedOptionsError: options cannot be normalized
            AlgorithmNotImplementedError: the algorithm is a placeholder
            ProcessingError: the match bookkeeping is inconsistent
        """
        validated = self.validate_options(options)
        threshold = self.match_threshold(validated)

        with logger.log_operation('compare', algorithm=self.metadata.name,
                                  category=self.category.value):
            left_segments, left_paragraphs = self.segment(left_text or '')
            right_segments, right_paragraphs = self.segment(right_text or '')
            logger.debug("Segmented texts", left=len(left_segments),
                         right=len(right_segments), threshold=threshold)

            matches, runs = self._match(left_segments, right_segments, threshold)
            matches.verify()

            assembler = DiffAssembler(
                left_segments, right_segments, matches, validated,
                map_paragraphs=self.category == Category.SENTENCE,
                left_paragraphs=left_paragraphs,
                right_paragraphs=right_paragraphs
            )
            diff = self.assemble(assembler, runs)

            extensions = self.build_extensions(assembler, matches, validated)
            if self.category == Category.SENTENCE:
                extensions['sentence_info'] = {
                    'left': self._sentence_info(Side.LEFT, left_segments, left_paragraphs, validated),
                    'right': self._sentence_info(Side.RIGHT, right_segments, right_paragraphs, validated),
                }
                extensions['matched_sentences'] = assembler.matched_keys()

            result = self.format_result(diff, matches, extensions)
            logger.info(f"{self.metadata.display_name} comparison complete", **result.stats)
            return result

    def validate_options(self, options: Optional[Dict[str, Any]]) -> CompareOptions:
        return CompareOptions.from_dict(options)

    def match_threshold(self, options: CompareOptions) -> float:
        return threshold_from_fuzziness(options.fuzziness, options.min_match, options.max_match)

    def segment(self, text: str) -> Tuple[List[Segment], List[str]]:
        """Segments for this category plus the paragraph texts they came from."""
        paragraphs = self.segmenter.split_paragraphs(text)
        paragraph_texts = [p.text for p in paragraphs]
        if self.category == Category.PARAGRAPH:
            return paragraphs, paragraph_texts
        return self.segmenter.split_sentences_by_paragraph(text), paragraph_texts

    def match_segments(self, left: Sequence[Segment], right: Sequence[Segment],
                       threshold: float) -> MatchSet:
        raise AlgorithmNotImplementedError(self.metadata.name)

    def _match(self, left: Sequence[Segment], right: Sequence[Segment],
               threshold: float) -> Tuple[MatchSet, Runs]:
        return self.match_segments(left, right, threshold), None

    def assemble(self, assembler: DiffAssembler, runs: Runs) -> List[DiffEntry]:
        return assembler.assemble_sequential()

    def build_extensions(self, assembler: DiffAssembler, matches: MatchSet,
                         options: CompareOptions) -> Dict[str, Any]:
        return {}

    def format_result(self, diff: List[DiffEntry], matches: MatchSet,
                      extensions: Optional[Dict[str, Any]] = None) -> DiffResult:
        return DiffResult(diff=diff, matches=matches, metadata=self.metadata,
                          extensions=extensions or {})

    def _sentence_info(self, side: Side, segments: Sequence[Segment],
                       paragraph_texts: Sequence[str], options: CompareOptions) -> Dict[int, List[Dict]]:
        if options.has_paragraph_map(side):
            return build_sentence_info(self.segmenter, options.selected_paragraphs(side),
                                       options.full_paragraphs(side))

        starts = paragraph_starts(paragraph_texts)
        info = {}
        for segment in segments:
            offset = starts[segment.paragraph_index]
            info.setdefault(segment.paragraph_index, []).append({
                'text': segment.text,
                'start': segment.start - offset,
                'end': segment.end - offset
            })
        return info

    def __repr__(self):
        return f"<{type(self).__name__} {self.category.value}:{self.metadata.name}>"
