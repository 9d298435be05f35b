#!/usr/bin/env python3
"""
Version Diff Configuration & Logging Module
===========================================
Centralized configuration, structured logging, and error types for the
document version-diff engine.

Version: reads from version.json (module v1.0)
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable, Tuple
from pathlib import Path
from dataclasses import dataclass
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_ENGINE = "myers"             # Sequence differ used for lines and words
DEFAULT_CONTEXT_LINES = 3            # Unchanged lines kept around each change
DEFAULT_COLLAPSE_THRESHOLD = 6       # Unchanged runs longer than this collapse
DEFAULT_MAX_LINES = 20000            # Combined token cap before coarse replace
DEFAULT_MAX_EDIT_DISTANCE = 500      # Myers search depth before coarse replace
DEFAULT_MAX_SEARCH_STEPS = 2000000   # Myers probes + snake moves before coarse replace
DEFAULT_MAX_WORKERS = 1              # Field-level parallelism (1 = sequential)
KNOWN_ENGINES = ("myers", "dmp")
KNOWN_LOG_FORMATS = ("json", "text")


# =============================================================================
# VERSION - Read from version.json (Single Source of Truth)
# =============================================================================
def _load_version():
    """Load version from version.json file."""
    version_file = Path(__file__).parent / 'version.json'
    if version_file.exists():
        with open(version_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
            return data.get('version', '1.0.0')
    return '1.0.0'  # Fallback version

__version__ = _load_version()
VERSION = __version__
APP_NAME = "VersionDiff"


# =============================================================================
# ERROR HANDLING
# =============================================================================

class VersionDiffError(Exception):
    """Base exception for the version-diff engine."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to an error payload dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class InvalidInput(VersionDiffError):
    """A caller passed a value of the wrong type or out of range."""
    def __init__(self, message: str, parameter: Optional[str] = None, **kwargs):
        super().__init__(message, code="INVALID_INPUT",
                         details={'parameter': parameter, **kwargs})
        self.parameter = parameter


class ProcessingError(VersionDiffError):
    """Diff computation error."""
    def __init__(self, message: str, stage: Optional[str] = None, **kwargs):
        super().__init__(message, code="PROCESSING_ERROR",
                         details={'stage': stage, **kwargs})


# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}", parameter=name)


@dataclass
class DiffConfig:
    """Diff engine configuration with documented defaults."""

    # Engine
    engine: str = DEFAULT_ENGINE
    max_lines: int = DEFAULT_MAX_LINES
    max_edit_distance: int = DEFAULT_MAX_EDIT_DISTANCE
    max_workers: int = DEFAULT_MAX_WORKERS

    # Context collapsing
    context_lines: int = DEFAULT_CONTEXT_LINES
    collapse_threshold: int = DEFAULT_COLLAPSE_THRESHOLD

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # Options: json, text
    log_to_console: bool = True

    @classmethod
    def from_env(cls) -> 'DiffConfig':
        """Load configuration from environment variables."""
        return cls(
            engine=os.environ.get('VD_ENGINE', DEFAULT_ENGINE).strip().lower(),
            max_lines=_env_int('VD_MAX_LINES', DEFAULT_MAX_LINES),
            max_edit_distance=_env_int('VD_MAX_EDIT_DISTANCE', DEFAULT_MAX_EDIT_DISTANCE),
            max_workers=_env_int('VD_MAX_WORKERS', DEFAULT_MAX_WORKERS),
            context_lines=_env_int('VD_CONTEXT_LINES', DEFAULT_CONTEXT_LINES),
            collapse_threshold=_env_int('VD_COLLAPSE_THRESHOLD', DEFAULT_COLLAPSE_THRESHOLD),
            log_level=os.environ.get('VD_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('VD_LOG_FORMAT', 'text'),
            log_to_console=os.environ.get('VD_LOG_CONSOLE', 'true').lower() == 'true',
        )

    def validate(self) -> Tuple[bool, list]:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if self.engine not in KNOWN_ENGINES:
            errors.append(f"Unknown engine: {self.engine}. Must be one of {', '.join(KNOWN_ENGINES)}")

        if self.context_lines < 0:
            errors.append("context_lines must be >= 0")

        if self.collapse_threshold < 2 * self.context_lines:
            errors.append(
                f"collapse_threshold ({self.collapse_threshold}) must be at least "
                f"twice context_lines ({self.context_lines})"
            )

        if self.max_lines < 1:
            errors.append("max_lines must be >= 1")

        if self.max_edit_distance < 1:
            errors.append("max_edit_distance must be >= 1")

        if self.max_workers < 1:
            errors.append("max_workers must be >= 1")

        if self.log_format not in KNOWN_LOG_FORMATS:
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        if not hasattr(logging, self.log_level.upper()):
            errors.append(f"Invalid log_level: {self.log_level}")

        return (len(errors) == 0, errors)


# Global config instance
_config: Optional[DiffConfig] = None

def get_config() -> DiffConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = DiffConfig.from_env()
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

    def __init__(self, name: str, config: Optional[DiffConfig] = None):
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

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        """Emit a record; the JSON formatter picks kwargs up as fields."""
        if not self.logger.isEnabledFor(level):
            return
        extra = dict(kwargs)
        extra['correlation_id'] = self.get_correlation_id()
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.time() - start_time) * 1000
            self.debug(f"{operation} completed", operation=operation, status='completed',
                       duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    _RESERVED = frozenset((
        'name', 'msg', 'args', 'created', 'filename', 'funcName',
        'levelname', 'levelno', 'lineno', 'module', 'msecs',
        'pathname', 'process', 'processName', 'relativeCreated',
        'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
        'message', 'taskName'
    ))

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in self._RESERVED:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator that maps stray exceptions onto the VersionDiffError family."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except VersionDiffError:
                raise
            except (TypeError, ValueError) as e:
                _logger = logger or get_logger(func.__module__)
                _logger.error(f"Invalid input to {func.__name__}: {e}", exc_info=True)
                raise InvalidInput(str(e)) from e
            except Exception as e:
                _logger = logger or get_logger(func.__module__)
                _logger.exception(f"Unexpected error in {func.__name__}: {e}")
                raise ProcessingError(
                    f"An unexpected error occurred: {type(e).__name__}",
                    stage=func.__name__
                ) from e
        return wrapper
    return decorator
