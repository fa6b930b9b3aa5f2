"""
Text Segmenter v1.0.0
=====================
Splits raw text into paragraph and sentence segments with offsets.

Sentence boundaries come from a pluggable detector (spaCy by default);
a punctuation regex is used whenever the detector is missing, fails
or returns nothing.
"""

import re
from typing import Callable, Dict, List, Optional, Sequence

from config_logging import get_config, get_logger

from .models import Segment

logger = get_logger('segment_diff.segmenter')

# Run of non-terminators followed by one or more terminators
SENTENCE_PATTERN = re.compile(r'[^.!?]+[.!?]+')

SentenceDetector = Callable[[str], List[str]]


def normalize_line_endings(text: str) -> str:
    """Convert \\r\\n and lone \\r to \\n."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def regex_sentences(text: str) -> List[str]:
    """
    Split text on terminal punctuation.

    A trailing run without terminal punctuation is kept as the last
    sentence.
    """
    sentences = []
    last_end = 0
    for match in SENTENCE_PATTERN.finditer(text):
        sentences.append(match.group(0))
        last_end = match.end()

    remainder = text[last_end:]
    if remainder.strip():
        sentences.append(remainder)
    return sentences


class TextSegmenter:
    """
    Paragraph and sentence segmentation with offset tracking.

    Offsets always refer to the line-ending-normalized text.
    """

    def __init__(self, sentence_detector: Optional[SentenceDetector] = None):
        """
        Args:
            sentence_detector: Callable returning sentence strings for a
                               text, or None to use the regex rule only
        """
        self.sentence_detector = sentence_detector

    def split_paragraphs(self, text: str) -> List[Segment]:
        """
        Split text into one segment per line.

        Empty lines are kept so indices line up with line numbers.
        """
        if not text:
            return []

        normalized = normalize_line_endings(text)
        segments = []
        position = 0
        for index, line in enumerate(normalized.split('\n')):
            segments.append(Segment(line, position, position + len(line), index))
            position += len(line) + 1
        return segments

    def split_sentences(self, text: str, paragraph_index: Optional[int] = None,
                        base_offset: int = 0) -> List[Segment]:
        """
        Split text into sentence segments.

        Args:
            text: Text to split
            paragraph_index: Paragraph index stamped on every segment
            base_offset: Added to every offset (position of text in its
                         enclosing document)

        Returns:
            Sentence segments in document order, deduplicated by text
        """
        if not text or not text.strip():
            return []

        normalized = normalize_line_endings(text)
        raw = self._detect(normalized) or regex_sentences(normalized)

        # Dedup on the trimmed text: " A." and "A." are the same sentence
        seen = set()
        sentences = []
        for sentence in raw:
            trimmed = sentence.strip()
            if trimmed and trimmed not in seen:
                seen.add(trimmed)
                sentences.append(trimmed)

        if not sentences:
            sentences = [normalized.strip()]

        return self._locate(normalized, sentences, paragraph_index, base_offset)

    def split_sentences_by_paragraph(self, text: str) -> List[Segment]:
        """
        Split text into paragraphs, then each paragraph into sentences.

        Offsets are in whole-text coordinates and every segment carries
        the index of the paragraph it came from.
        """
        segments = []
        for paragraph in self.split_paragraphs(text):
            if paragraph.is_blank:
                continue
            segments.extend(self.split_sentences(
                paragraph.text,
                paragraph_index=paragraph.paragraph_index,
                base_offset=paragraph.start
            ))
        return segments

    def _detect(self, text: str) -> List[str]:
        if self.sentence_detector is None:
            return []
        try:
            return list(self.sentence_detector(text) or [])
        except Exception as e:
            logger.warning(f"Sentence detector failed, using regex fallback: {e}")
            return []

    @staticmethod
    def _locate(text: str, sentences: Sequence[str], paragraph_index: Optional[int],
                base_offset: int) -> List[Segment]:
        segments = []
        cursor = 0
        for sentence in sentences:
            start = text.find(sentence, cursor)
            if start == -1:
                start = text.find(sentence)
            if start == -1:
                start = cursor
            else:
                cursor = start + len(sentence)
            segments.append(Segment(
                sentence,
                base_offset + start,
                base_offset + start + len(sentence),
                paragraph_index
            ))
        return segments


def default_segmenter() -> TextSegmenter:
    """Build a segmenter with the configured sentence detector."""
    detector_name = get_config().sentence_detector
    if detector_name == 'spacy':
        from nlp.spacy import split_sentences as spacy_sentences
        return TextSegmenter(sentence_detector=spacy_sentences)
    return TextSegmenter(sentence_detector=None)


# =============================================================================
# POSITION RECONSTRUCTION
# =============================================================================

def paragraph_starts(paragraph_texts: Sequence[str]) -> List[int]:
    """Offset of every paragraph in the newline-joined text."""
    starts = []
    position = 0
    for text in paragraph_texts:
        starts.append(position)
        position += len(text) + 1
    return starts


def global_position_for_paragraph(paragraph_index: int, selected_paragraphs: Sequence[int],
                                  full_paragraphs: Sequence[str]) -> int:
    """
    Offset of a paragraph inside the concatenation of the selected
    paragraphs (joined by newlines).
    """
    position = 0
    for selected in selected_paragraphs:
        if selected == paragraph_index:
            break
        position += len(_paragraph_text(full_paragraphs, selected)) + 1
    return position


def global_position(paragraph_index: int, segment_text: str, selected_paragraphs: Sequence[int],
                    full_paragraphs: Sequence[str]) -> int:
    """Offset of a segment inside the concatenation of the selected paragraphs."""
    position = global_position_for_paragraph(paragraph_index, selected_paragraphs, full_paragraphs)
    within = _paragraph_text(full_paragraphs, paragraph_index).find(segment_text)
    if within > 0:
        position += within
    return position


def find_paragraph_for_segment(segment_text: str, selected_paragraphs: Sequence[int],
                               full_paragraphs: Sequence[str],
                               sentence_info: Optional[Dict[int, List[Dict]]] = None) -> Optional[int]:
    """
    Find the selected paragraph containing a segment.

    Falls back to the per-paragraph sentence map when no paragraph text
    contains the segment verbatim.
    """
    for paragraph_index in selected_paragraphs:
        if segment_text in _paragraph_text(full_paragraphs, paragraph_index):
            return paragraph_index

    if sentence_info:
        for paragraph_index, sentences in sentence_info.items():
            if any(s['text'] == segment_text for s in sentences):
                return paragraph_index
    return None


def build_sentence_info(segmenter: TextSegmenter, selected_paragraphs: Sequence[int],
                        full_paragraphs: Sequence[str]) -> Dict[int, List[Dict]]:
    """Sentences of every selected paragraph with paragraph-relative offsets."""
    info = {}
    for paragraph_index in selected_paragraphs:
        paragraph_text = _paragraph_text(full_paragraphs, paragraph_index)
        info[paragraph_index] = [
            {'text': s.text, 'start': s.start, 'end': s.end}
            for s in segmenter.split_sentences(paragraph_text)
        ]
    return info


def _paragraph_text(full_paragraphs: Sequence[str], paragraph_index: int) -> str:
    if 0 <= paragraph_index < len(full_paragraphs):
        return full_paragraphs[paragraph_index] or ''
    return ''
