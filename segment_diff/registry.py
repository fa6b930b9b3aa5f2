"""
Algorithm Registry
==================
Named algorithm instances per category (paragraph, sentence).

The host builds the registry once at startup from an explicit list;
lookups never raise on a miss.
"""

from typing import Any, Dict, List, Optional, Tuple

from config_logging import get_logger, InvalidAlgorithmError, InvalidCategoryError

from .models import AlgorithmMetadata, Category

logger = get_logger('segment_diff.registry')

DEFAULT_ORDER = 999

CATEGORIES = tuple(c.value for c in Category)


def _category_key(category: Any) -> Optional[str]:
    value = category.value if isinstance(category, Category) else category
    return value if value in CATEGORIES else None


class AlgorithmRegistry:
    """Registry for diff algorithms."""

    def __init__(self):
        # category -> name -> (algorithm, metadata captured at registration)
        self._entries: Dict[str, Dict[str, Tuple[Any, AlgorithmMetadata]]] = {
            c: {} for c in CATEGORIES
        }

    def register(self, category: Any, algorithm: Any):
        """
        Register an algorithm under its metadata name, replacing any
        algorithm already registered with that name.

        Raises:
            InvalidCategoryError: category is not paragraph or sentence
            InvalidAlgorithmError: algorithm lacks get_metadata()/compare()
        """
        key = _category_key(category)
        if key is None:
            raise InvalidCategoryError(category)

        if algorithm is None or not callable(getattr(algorithm, 'get_metadata', None)):
            raise InvalidAlgorithmError("Invalid algorithm: must have get_metadata() method")
        if not callable(getattr(algorithm, 'compare', None)):
            raise InvalidAlgorithmError("Invalid algorithm: must have compare() method")

        metadata = algorithm.get_metadata()
        if not isinstance(metadata, AlgorithmMetadata) or not metadata.name:
            raise InvalidAlgorithmError(
                "Invalid algorithm: get_metadata() must return AlgorithmMetadata with a name"
            )

        if metadata.name in self._entries[key]:
            logger.debug(f"Replacing {key} algorithm '{metadata.name}'")
        self._entries[key][metadata.name] = (algorithm, metadata)

    def get(self, category: Any, name: str) -> Optional[Any]:
        """Algorithm registered under name, or None."""
        key = _category_key(category)
        if key is None or name not in self._entries[key]:
            return None
        return self._entries[key][name][0]

    def get_all(self, category: Any) -> List[Any]:
        """Algorithms of a category, ascending by order (stable)."""
        return [algorithm for algorithm, _ in self._sorted(category)]

    def get_metadata(self, category: Any) -> List[AlgorithmMetadata]:
        return [metadata for _, metadata in self._sorted(category)]

    def clear(self):
        for entries in self._entries.values():
            entries.clear()

    def get_summary(self) -> Dict[str, Any]:
        return {
            category: {
                'count': len(self._entries[category]),
                'algorithms': [m.to_dict() for m in self.get_metadata(category)]
            }
            for category in CATEGORIES
        }

    def _sorted(self, category: Any) -> List[Tuple[Any, AlgorithmMetadata]]:
        key = _category_key(category)
        if key is None:
            return []
        return sorted(self._entries[key].values(), key=lambda entry: _order(entry[1]))


def _order(metadata: AlgorithmMetadata) -> int:
    return metadata.order if metadata.order is not None else DEFAULT_ORDER


def create_default_registry(segmenter=None) -> AlgorithmRegistry:
    """
    Registry with the built-in algorithms.

    Args:
        segmenter: Shared TextSegmenter; the configured default when None
    """
    from .algorithms import (
        CharacterAlgorithm, LevenshteinAlgorithm, PatienceAlgorithm, ThomasAlgorithm
    )

    registry = AlgorithmRegistry()
    registry.register(Category.PARAGRAPH, ThomasAlgorithm(Category.PARAGRAPH, segmenter))
    registry.register(Category.PARAGRAPH, PatienceAlgorithm(Category.PARAGRAPH, segmenter))

    registry.register(Category.SENTENCE, ThomasAlgorithm(Category.SENTENCE, segmenter))
    registry.register(Category.SENTENCE, LevenshteinAlgorithm(Category.SENTENCE, segmenter))
    registry.register(Category.SENTENCE, CharacterAlgorithm(Category.SENTENCE, segmenter))
    registry.register(Category.SENTENCE, PatienceAlgorithm(Category.SENTENCE, segmenter, order=5))

    logger.debug("Default registry created", summary=registry.get_summary())
    return registry
