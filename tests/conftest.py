"""
Shared fixtures for the SegmentDiff test suite.
"""

import os

# Regex sentence splitting keeps results independent of installed models
os.environ.setdefault('SD_SENTENCE_DETECTOR', 'regex')
os.environ.setdefault('SD_LOG_TO_FILE', 'false')
os.environ.setdefault('SD_LOG_LEVEL', 'WARNING')

import pytest

from config_logging import reset_config


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload configuration from the environment for every test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def segmenter():
    from segment_diff.segmenter import TextSegmenter
    return TextSegmenter()


@pytest.fixture
def registry(segmenter):
    from segment_diff.registry import create_default_registry
    return create_default_registry(segmenter)
