"""
Segment Differ v1.0.0
=====================
Host-facing entry point: picks an algorithm from the registry and runs
the comparison.
"""

from typing import Any, Dict, Optional

from config_logging import get_logger, handle_errors, InvalidAlgorithmError, InvalidCategoryError

from .models import Category, DiffResult
from .registry import CATEGORIES, AlgorithmRegistry, create_default_registry
from .segmenter import TextSegmenter

logger = get_logger('segment_diff.differ')


class SegmentDiffer:
    """
    Paragraph and sentence comparison over a fixed algorithm registry.
    """

    def __init__(self, registry: Optional[AlgorithmRegistry] = None,
                 segmenter: Optional[TextSegmenter] = None):
        """
        Args:
            registry: Registry to use; the built-in algorithms when None
            segmenter: Segmenter shared by the built-in algorithms
        """
        self.registry = registry if registry is not None else create_default_registry(segmenter)

    @handle_errors(logger)
    def compare(self, category: Any, name: str, left_text: str, right_text: str,
                options: Optional[Dict[str, Any]] = None) -> DiffResult:
        """
        Compare two texts with a registered algorithm.

        Args:
            category: 'paragraph' or 'sentence'
            name: Algorithm name within the category
            left_text: Original text
            right_text: Revised text
            options: Comparison options (see CompareOptions)

        Returns:
            DiffResult

        Raises:
            InvalidCategoryError: unknown category
            InvalidAlgorithmError: no algorithm registered under name
        """
        key = category.value if isinstance(category, Category) else category
        if key not in CATEGORIES:
            raise InvalidCategoryError(category)

        algorithm = self.registry.get(key, name)
        if algorithm is None:
            logger.warning(f"Unknown {key} algorithm requested: {name}")
            raise InvalidAlgorithmError(f"Unknown {key} algorithm: {name}", name=name)

        logger.debug(f"Comparing with {key}:{name}",
                     left_length=len(left_text or ''), right_length=len(right_text or ''))
        return algorithm.compare(left_text, right_text, options)

    def list_algorithms(self, category: Optional[Any] = None) -> Dict[str, Any]:
        """Metadata per category, in display order."""
        if category is None:
            return self.registry.get_summary()
        key = category.value if isinstance(category, Category) else category
        if key not in CATEGORIES:
            raise InvalidCategoryError(category)
        return {
            key: {
                'count': len(self.registry.get_all(key)),
                'algorithms': [m.to_dict() for m in self.registry.get_metadata(key)]
            }
        }


# Convenience function
def compare_texts(left_text: str, right_text: str, category: str = 'paragraph',
                  name: str = 'thomas', **options) -> DiffResult:
    """
    Compare two texts with a fresh default differ.

    Args:
        left_text: Original text
        right_text: Revised text
        category: 'paragraph' or 'sentence'
        name: Algorithm name
        **options: Comparison options

    Returns:
        DiffResult
    """
    return SegmentDiffer().compare(category, name, left_text, right_text, options)


if __name__ == '__main__':
    # Demo/test
    print("Segment Differ")
    print("=" * 50)

    old_text = """1.0 INTRODUCTION
This document describes the system. The system shall meet all requirements.

2.0 REQUIREMENTS
The system shall log every request.
The system shall respond within two seconds."""

    new_text = """1.0 INTRODUCTION
This document describes the system architecture. The system shall meet all requirements.

2.0 REQUIREMENTS
The system shall respond within two seconds.
The system shall log every failed request."""

    differ = SegmentDiffer(segmenter=TextSegmenter())
    for category, name in (('paragraph', 'thomas'), ('paragraph', 'patience'),
                           ('sentence', 'levenshtein'), ('sentence', 'character')):
        result = differ.compare(category, name, old_text, new_text, {'fuzziness': 0.5})
        print(f"\n{category}:{name} -> {result.stats}")
        for entry in result.diff:
            marker = '+' if entry.added else '-'
            similarity = f" ({entry.similarity:.2f})" if entry.similarity is not None else ""
            print(f"  {marker} [{entry.start}:{entry.end}] {entry.value[:50]}{similarity}")
