"""
spaCy Sentence Detector
=======================
Module-level access to a shared SpacyAnalyzer.

Requires: pip install spacy
Optional: python -m spacy download en_core_web_sm
"""

from typing import Any, Dict, List

_analyzer = None


def get_analyzer():
    """Get the shared SpacyAnalyzer instance (lazy loaded)."""
    global _analyzer
    if _analyzer is None:
        from .analyzer import SpacyAnalyzer
        _analyzer = SpacyAnalyzer()
    return _analyzer


def reset_analyzer():
    """Drop the shared analyzer so the next call reloads (for testing)."""
    global _analyzer
    _analyzer = None


def is_loaded() -> bool:
    return _analyzer is not None


def get_status() -> Dict[str, Any]:
    return get_analyzer().get_status()


def split_sentences(text: str) -> List[str]:
    """Sentence detector callable for the segmenter."""
    return get_analyzer().split_sentences(text)
