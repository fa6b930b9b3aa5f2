"""
Tests for spaCy NLP Module
==========================
Tests for the spaCy sentence boundary detector.
"""

import pytest

pytest.importorskip("spacy")

from nlp import config as nlp_config  # noqa: E402


@pytest.fixture
def analyzer(monkeypatch):
    """Analyzer on the blank pipeline so no model download is needed."""
    monkeypatch.setenv('NLP_SPACY_MODEL', 'no_such_model_for_tests')
    monkeypatch.setenv('NLP_SPACY_FALLBACK_MODELS', '')
    nlp_config.reset_config()
    from nlp.spacy import reset_analyzer
    from nlp.spacy.analyzer import SpacyAnalyzer
    reset_analyzer()
    yield SpacyAnalyzer()
    nlp_config.reset_config()
    reset_analyzer()


class TestSpacyAnalyzer:
    """Tests for SpacyAnalyzer class."""

    def test_blank_pipeline_with_sentencizer(self, analyzer):
        assert analyzer.is_available
        assert analyzer.model_name == "blank:en"
        assert 'sentencizer' in analyzer.get_status()['pipeline']

    def test_sentence_spans_have_offsets(self, analyzer):
        text = "The system shall log requests. It shall respond quickly!"
        spans = analyzer.sentence_spans(text)
        assert [s[0] for s in spans] == [
            "The system shall log requests.", "It shall respond quickly!"
        ]
        for sentence, start, end in spans:
            assert text[start:end] == sentence

    def test_empty_text(self, analyzer):
        assert analyzer.sentence_spans("") == []
        assert analyzer.split_sentences("") == []

    def test_disabled_integration(self, monkeypatch):
        monkeypatch.setenv('NLP_SPACY_ENABLED', 'false')
        nlp_config.reset_config()
        from nlp.spacy.analyzer import SpacyAnalyzer
        analyzer = SpacyAnalyzer()
        assert not analyzer.is_available
        assert analyzer.error == "spaCy integration disabled"
        assert analyzer.split_sentences("One. Two.") == []
        nlp_config.reset_config()


class TestSegmenterIntegration:
    """spaCy as the segmenter's sentence detector."""

    def test_detector_feeds_segmenter(self, analyzer):
        from segment_diff.segmenter import TextSegmenter
        segmenter = TextSegmenter(sentence_detector=analyzer.split_sentences)
        segments = segmenter.split_sentences("First point here. Second point here.")
        assert [s.text for s in segments] == ["First point here.", "Second point here."]

    def test_default_segmenter_uses_spacy(self, monkeypatch):
        from config_logging import reset_config
        from segment_diff.segmenter import default_segmenter
        monkeypatch.setenv('SD_SENTENCE_DETECTOR', 'spacy')
        reset_config()
        assert default_segmenter().sentence_detector is not None


class TestPackageStatus:
    """nlp.get_status() as reported by /api/health."""

    def test_status_does_not_load_pipeline(self, analyzer):
        import nlp
        status = nlp.get_status()
        assert status['enabled'] is True
        assert status['loaded'] is False
        assert status['available'] is None

    def test_status_with_load(self, analyzer):
        import nlp
        status = nlp.get_status(load=True)
        assert status['loaded'] is True
        assert status['available'] is True
        assert status['model'] == "blank:en"

    def test_disabled_never_loads(self, monkeypatch):
        import nlp
        from nlp.spacy import is_loaded, reset_analyzer
        monkeypatch.setenv('NLP_SPACY_ENABLED', 'false')
        nlp_config.reset_config()
        reset_analyzer()
        status = nlp.get_status(load=True)
        assert status['enabled'] is False
        assert not is_loaded()
        nlp_config.reset_config()
