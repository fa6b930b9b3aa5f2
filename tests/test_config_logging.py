"""
Tests for configuration, structured logging and the error taxonomy
=================================================================
"""

import json
import logging

import pytest

from config_logging import (
    AlgorithmNotImplementedError, AppConfig, DiffEngineError, InvalidCategoryError,
    JsonFormatter, ProcessingError, StructuredLogger, ValidationError, get_config,
    get_logger, handle_errors, reset_config
)


class TestAppConfig:

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv('SD_WORD_LOOKAHEAD', '7')
        monkeypatch.setenv('SD_SENTENCE_DETECTOR', 'REGEX')
        reset_config()
        config = get_config()
        assert config.word_lookahead == 7
        assert config.sentence_detector == 'regex'

    def test_config_is_cached(self):
        assert get_config() is get_config()

    def test_defaults_valid(self):
        assert AppConfig().validate() == (True, [])

    def test_invalid_values_reported(self):
        config = AppConfig(default_fuzziness=1.5, default_min_match=0.9, default_max_match=0.2,
                           word_lookahead=0, sentence_detector='nltk')
        is_valid, errors = config.validate()
        assert not is_valid
        assert len(errors) == 4

    def test_production_forces_debug_off(self, monkeypatch):
        monkeypatch.setenv('SD_ENV', 'production')
        config = AppConfig(debug=True)
        assert config.debug is False
        assert config.log_level == 'WARNING'


class TestStructuredLogger:

    def test_json_record(self, caplog):
        logger = get_logger('segment_diff.test')
        logger.logger.propagate = True
        StructuredLogger.set_correlation_id('abc123')
        with caplog.at_level(logging.WARNING, logger='segment_diff.test'):
            logger.warning("Something odd", segment_count=3)
        record = json.loads(caplog.records[-1].getMessage())
        assert record['message'] == "Something odd"
        assert record['segment_count'] == 3
        assert record['correlation_id'] == 'abc123'

    def test_log_operation_reraises(self):
        logger = get_logger('segment_diff.test')
        with pytest.raises(RuntimeError):
            with logger.log_operation('compare'):
                raise RuntimeError("boom")

    def test_json_formatter_plain_record(self):
        record = logging.LogRecord('x', logging.INFO, __file__, 1, "plain text", None, None)
        assert json.loads(JsonFormatter().format(record))['message'] == "plain text"


class TestErrors:

    def test_to_dict(self):
        payload = InvalidCategoryError('word').to_dict()
        assert payload['success'] is False
        assert payload['error']['code'] == 'INVALID_CATEGORY'
        assert payload['error']['details'] == {'category': 'word'}

    def test_status_codes(self):
        assert ValidationError("x").status_code == 400
        assert ProcessingError("x").status_code == 500
        assert AlgorithmNotImplementedError("patience").status_code == 501

    def test_handle_errors_wraps_value_error(self):
        @handle_errors()
        def bad():
            raise ValueError("nope")

        with pytest.raises(ValidationError):
            bad()

    def test_handle_errors_passes_engine_errors(self):
        @handle_errors()
        def bad():
            raise InvalidCategoryError('word')

        with pytest.raises(InvalidCategoryError):
            bad()

    def test_handle_errors_wraps_unexpected(self):
        @handle_errors()
        def bad():
            raise KeyError("k")

        with pytest.raises(ProcessingError) as exc_info:
            bad()
        assert isinstance(exc_info.value, DiffEngineError)
