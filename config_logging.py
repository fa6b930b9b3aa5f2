#!/usr/bin/env python3
"""
SegmentDiff Configuration & Logging Module
==========================================
Centralized configuration, structured logging, and the engine error taxonomy.

Version: 1.0.0
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_FUZZINESS = 0.0             # 0 = strict matching
DEFAULT_MIN_MATCH = 0.5             # Loosest similarity threshold
DEFAULT_MAX_MATCH = 0.9             # Strictest similarity threshold
DEFAULT_WORD_LOOKAHEAD = 5          # Tokens scanned ahead when resyncing a word diff
DEFAULT_CHARACTER_THRESHOLD = 0.1   # Fixed acceptance threshold for character matching
DEFAULT_MAX_TEXT_LENGTH = 2_000_000  # Characters per side accepted by the HTTP surface
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

__version__ = "1.0.0"
VERSION = __version__
APP_NAME = "SegmentDiff"

SENTENCE_DETECTORS = ('spacy', 'regex')

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Application configuration with local-only defaults."""

    # Server settings
    host: str = "127.0.0.1"  # Localhost only by default
    port: int = 5060
    debug: bool = False

    # Engine defaults
    default_fuzziness: float = DEFAULT_FUZZINESS
    default_min_match: float = DEFAULT_MIN_MATCH
    default_max_match: float = DEFAULT_MAX_MATCH
    word_lookahead: int = DEFAULT_WORD_LOOKAHEAD
    character_match_threshold: float = DEFAULT_CHARACTER_THRESHOLD
    diff_timeout: float = 0.0  # Seconds; 0 = no deadline for diff-match-patch
    sentence_detector: str = "spacy"  # Options: spacy, regex
    max_text_length: int = DEFAULT_MAX_TEXT_LENGTH

    # Paths
    base_dir: Path = field(default_factory=lambda: Path(__file__).parent)
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True

    def __post_init__(self):
        """Prepare directories and apply environment overrides."""
        if self.log_to_file:
            self.log_dir.mkdir(exist_ok=True)

        # Force debug=False in production environment
        if os.environ.get('SD_ENV', 'development').lower() == 'production':
            self.debug = False
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        return cls(
            host=os.environ.get('SD_HOST', '127.0.0.1'),
            port=int(os.environ.get('SD_PORT', '5060')),
            debug=os.environ.get('SD_DEBUG', 'false').lower() == 'true',
            default_fuzziness=float(os.environ.get('SD_FUZZINESS', str(DEFAULT_FUZZINESS))),
            default_min_match=float(os.environ.get('SD_MIN_MATCH', str(DEFAULT_MIN_MATCH))),
            default_max_match=float(os.environ.get('SD_MAX_MATCH', str(DEFAULT_MAX_MATCH))),
            word_lookahead=int(os.environ.get('SD_WORD_LOOKAHEAD', str(DEFAULT_WORD_LOOKAHEAD))),
            character_match_threshold=float(
                os.environ.get('SD_CHARACTER_THRESHOLD', str(DEFAULT_CHARACTER_THRESHOLD))
            ),
            diff_timeout=float(os.environ.get('SD_DIFF_TIMEOUT', '0')),
            sentence_detector=os.environ.get('SD_SENTENCE_DETECTOR', 'spacy').lower(),
            max_text_length=int(os.environ.get('SD_MAX_TEXT_LENGTH', str(DEFAULT_MAX_TEXT_LENGTH))),
            log_level=os.environ.get('SD_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('SD_LOG_FORMAT', 'json'),
            log_to_file=os.environ.get('SD_LOG_TO_FILE', 'false').lower() == 'true',
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if self.debug and os.environ.get('SD_ENV') == 'production':
            errors.append("Debug mode cannot be enabled in production")

        for name in ('default_fuzziness', 'default_min_match', 'default_max_match',
                     'character_match_threshold'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                errors.append(f"{name} must be between 0 and 1 (got {value})")

        if self.default_min_match > self.default_max_match:
            errors.append("default_min_match cannot exceed default_max_match")

        if self.word_lookahead < 1:
            errors.append("word_lookahead must be at least 1")

        if self.diff_timeout < 0:
            errors.append("diff_timeout cannot be negative")

        if self.sentence_detector not in SENTENCE_DETECTORS:
            errors.append(
                f"Invalid sentence_detector: {self.sentence_detector}. "
                f"Must be one of {', '.join(SENTENCE_DETECTORS)}"
            )

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # File handler with rotation
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            self.config.log_dir.mkdir(exist_ok=True)
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _build_log_record(self, level: str, message: str, **kwargs) -> Dict[str, Any]:
        """Build a structured log record."""
        return {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': level,
            'logger': self.name,
            'correlation_id': self.get_correlation_id(),
            'message': message,
            **kwargs
        }

    def _emit(self, level: int, level_name: str, message: str, exc_info: bool = False, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        if self.config.log_format == 'json':
            record = self._build_log_record(level_name, message, **kwargs)
            if exc_info:
                import traceback
                record['traceback'] = traceback.format_exc()
            self.logger.log(level, json.dumps(record, default=str), exc_info=exc_info)
        else:
            self.logger.log(level, message, exc_info=exc_info)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._emit(logging.DEBUG, 'DEBUG', message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._emit(logging.INFO, 'INFO', message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._emit(logging.WARNING, 'WARNING', message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._emit(logging.ERROR, 'ERROR', message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._emit(logging.CRITICAL, 'CRITICAL', message, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        # StructuredLogger already serialized the record
        if message.startswith('{') and not record.exc_info:
            return message

        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': message,
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


# Factory function for getting loggers
def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING UTILITIES
# =============================================================================

class DiffEngineError(Exception):
    """Base exception for SegmentDiff."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(DiffEngineError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class ProcessingError(DiffEngineError):
    """Comparison processing error."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR", status_code=500,
                         details={'stage': stage, **kwargs})


class InvalidCategoryError(DiffEngineError):
    """Algorithm category is neither 'paragraph' nor 'sentence'."""
    def __init__(self, category: Any, **kwargs):
        super().__init__(f"Invalid algorithm category: {category}", code="INVALID_CATEGORY",
                         status_code=400, details={'category': str(category), **kwargs})


class InvalidAlgorithmError(DiffEngineError):
    """Algorithm is unknown or does not honour the metadata/compare contract."""
    def __init__(self, message: str, name: Optional[str] = None, **kwargs):
        super().__init__(message, code="INVALID_ALGORITHM", status_code=400,
                         details={'name': name, **kwargs})


class AlgorithmNotImplementedError(DiffEngineError):
    """A registered algorithm refuses to run."""
    def __init__(self, name: str, **kwargs):
        super().__init__(f"Algorithm '{name}' is not implemented", code="NOT_IMPLEMENTED",
                         status_code=501, details={'name': name, **kwargs})


class MalformedOptionsError(DiffEngineError):
    """Comparison options that cannot be normalized."""
    def __init__(self, message: str, option: Optional[str] = None, **kwargs):
        super().__init__(message, code="MALFORMED_OPTIONS", status_code=400,
                         details={'option': option, **kwargs})


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator for standardized error handling."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except DiffEngineError:
                raise  # Re-raise our custom errors
            except (ValueError, TypeError) as e:
                _logger.error(f"Validation error: {e}", exc_info=True)
                raise ValidationError(str(e))
            except Exception as e:
                _logger.exception(f"Unexpected error in {func.__name__}: {e}")
                raise ProcessingError(f"An unexpected error occurred: {type(e).__name__}")
        return wrapper
    return decorator
