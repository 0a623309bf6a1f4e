"""
Unified Logger System.

JSON-only structured logging for the deployment CLI and the runtime services.

Design Principles:
    - Strong typing with dataclasses (stdlib only)
    - Enum safety for categories
    - Component-specific loggers
    - Clean factory pattern

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Logging context dataclass
    ContextLoggerAdapter: Logger adapter that stamps a LogContext on every record
    ComponentConfig: Per-component logging settings
    JSONFormatter: Formatter emitting one JSON object per record
    LoggerFactory: Factory for creating loggers

Dependencies:
    Standard library only (logging, enum, dataclasses, json)
"""

from enum import Enum
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import sys
import os
import json


# ============================================================================
# COMPONENT TYPES - Aligned with layered architecture
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the layers of the deployment tool.

    Each layer has specific logging needs and levels.
    """
    SERVICE = "service"        # Business logic layer (reconciler, cleanup, export)
    REPOSITORY = "repository"  # Data access layer (msdb, audit log, output tables)
    SCHEMA = "schema"          # Script and DDL generation
    TRIGGER = "trigger"        # Entry point layer (CLI)
    VALIDATOR = "validator"    # Configuration validation
    JOB = "job"                # Scheduled job bodies run from Python


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# LOG CONTEXT - Correlation and tracking
# ============================================================================

@dataclass
class LogContext:
    """
    Context for log correlation across operations.

    A job run is identified by its job name, step and audit log id, plus
    the storage database it works in.
    """
    database: Optional[str] = None
    job_name: Optional[str] = None
    step_name: Optional[str] = None
    job_log_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'database': self.database,
                'job_name': self.job_name,
                'step_name': self.step_name,
                'job_log_id': self.job_log_id,
            }.items() if v is not None
        }


# ============================================================================
# COMPONENT CONFIGURATION - Per-component settings
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.

    Each component type can have different settings.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO
    enable_debug_context: bool = False
    max_message_length: int = 1000


# ============================================================================
# JSON FORMATTER - Structured logging
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs one JSON object per line so SQL Agent job history and log
    shippers can parse the output of manual runs.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info) if record.exc_info else None
            }

        if hasattr(record, 'extra_fields'):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


# ============================================================================
# CONTEXT ADAPTER - Per-run correlation
# ============================================================================

class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Adds a LogContext to the custom dimensions of every record.

    The context lives on the adapter, not on the shared logging.Logger, so
    two runs logging through the same component logger never see each
    other's job_log_id. Dimensions passed by the caller win over the context.
    """

    def __init__(self, logger: logging.Logger, context: LogContext):
        super().__init__(logger, context.to_dict())
        self.context = context

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        custom_dims = dict(self.extra)
        custom_dims.update(extra.get('custom_dimensions', {}))
        extra['custom_dimensions'] = custom_dims
        kwargs['extra'] = extra
        return msg, kwargs


def resolve_default_level() -> LogLevel:
    """
    Default level from the environment.

    DEBUG_LOGGING=true forces DEBUG; otherwise LOG_LEVEL is used, falling
    back to INFO for an unset or unknown value.
    """
    if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
        return LogLevel.DEBUG
    return LogLevel.__members__.get(os.getenv('LOG_LEVEL', 'INFO').strip().upper(), LogLevel.INFO)


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    This factory creates Python loggers configured for each
    component type with appropriate settings and context.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "Reconciler"
        )
        logger.info("Deploying FRK jobs")
    """

    _default_level = resolve_default_level()

    DEFAULT_CONFIGS = {
        ComponentType.SERVICE: ComponentConfig(
            component_type=ComponentType.SERVICE,
            log_level=_default_level
        ),
        ComponentType.REPOSITORY: ComponentConfig(
            component_type=ComponentType.REPOSITORY,
            log_level=_default_level,
            enable_debug_context=True
        ),
        ComponentType.SCHEMA: ComponentConfig(
            component_type=ComponentType.SCHEMA,
            log_level=_default_level
        ),
        ComponentType.TRIGGER: ComponentConfig(
            component_type=ComponentType.TRIGGER,
            log_level=_default_level
        ),
        ComponentType.VALIDATOR: ComponentConfig(
            component_type=ComponentType.VALIDATOR,
            log_level=_default_level
        ),
        ComponentType.JOB: ComponentConfig(
            component_type=ComponentType.JOB,
            log_level=_default_level
        ),
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> Union[logging.Logger, ContextLoggerAdapter]:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "Reconciler")
            context: Optional log context for correlation
            config: Optional custom configuration

        Returns:
            Configured Python logger, wrapped in a ContextLoggerAdapter
            when a context is given
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        logger_name = f"{component_type.value}.{name}"
        logger = logging.getLogger(logger_name)

        if isinstance(config.log_level, str):
            log_level = LogLevel.from_string(config.log_level).to_python_level()
        else:
            log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # Only one JSON handler per logger, however often create_logger is called
        has_json_handler = any(
            isinstance(h.formatter, JSONFormatter) for h in logger.handlers
        )
        if not has_json_handler:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(log_level)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        # Propagate so pytest's caplog and host log capture still see records
        logger.propagate = True

        if not hasattr(logger, '_component_wrapped'):
            original_log = logger._log

            def log_with_component(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
                """Wrapper to inject the component as custom dimensions."""
                if extra is None:
                    extra = {}

                custom_dims = {
                    'component_type': component_type.value,
                    'component_name': name
                }
                if 'custom_dimensions' in extra:
                    custom_dims.update(extra['custom_dimensions'])

                extra['custom_dimensions'] = custom_dims

                # +1 to account for this wrapper function
                original_log(level, msg, args, exc_info=exc_info, extra=extra,
                             stack_info=stack_info, stacklevel=stacklevel + 1)

            logger._log = log_with_component
            logger._component_wrapped = True

        if context is not None:
            return ContextLoggerAdapter(logger, context)
        return logger

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        job_name: Optional[str] = None,
        step_name: Optional[str] = None,
        job_log_id: Optional[int] = None,
        database: Optional[str] = None
    ) -> Union[logging.Logger, ContextLoggerAdapter]:
        """
        Create logger with job run context.

        Every call gets its own adapter; the underlying component logger is
        shared.

        Args:
            component_type: Type of component
            name: Component name
            job_name: Optional FRK job name
            step_name: Optional job step name
            job_log_id: Optional audit log id of the current run
            database: Optional target database

        Returns:
            ContextLoggerAdapter, or the plain logger when no context is given
        """
        context = LogContext(
            job_name=job_name,
            step_name=step_name,
            job_log_id=job_log_id,
            database=database
        ) if any(v is not None for v in (job_name, step_name, job_log_id, database)) else None

        return cls.create_logger(
            component_type=component_type,
            name=name,
            context=context
        )
