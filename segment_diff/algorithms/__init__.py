"""
Segment Diff Algorithms
=======================
Concrete algorithms, listed explicitly (no discovery).
"""

from .base import DiffAlgorithm
from .sequential import ThomasAlgorithm
from .patience import PatienceAlgorithm
from .levenshtein import LevenshteinAlgorithm
from .character import CharacterAlgorithm

__all__ = [
    'DiffAlgorithm',
    'ThomasAlgorithm',
    'PatienceAlgorithm',
    'LevenshteinAlgorithm',
    'CharacterAlgorithm',
]
