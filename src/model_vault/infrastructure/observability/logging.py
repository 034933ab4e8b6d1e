"""
Structured logging infrastructure for model-vault.
Provides consistent, machine-readable logs across the service.

Log Structure:
    {
        "app": "model-vault",          # Application identifier
        "layer": "processing",         # Architectural layer
        "component": "stream-pipeline",# Specific component/service
        "module": "...",               # Python module (optional)
        "file": "cube.obj",            # Domain context
        "event": "stream_completed",   # What happened
        ...
    }

Architectural Layers:
    - infrastructure: Cross-cutting (config, startup)
    - processing: Streaming transform (reader, classifier, pipeline)
    - storage: File store operations
    - api: REST API services
"""

import logging
import sys
from typing import Any, Literal, TextIO

import structlog
from structlog.types import EventDict

APP_NAME = "model-vault"

# Define valid architectural layers
Layer = Literal["infrastructure", "processing", "storage", "api"]


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add application-wide context to every log entry.

    Every entry carries the base 'app' identifier so logs can be filtered when
    aggregated with other services.
    """
    event_dict["app"] = APP_NAME
    return event_dict


def add_severity_level(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Add severity level for cloud logging compatibility.
    Maps Python log levels to standard severity levels (Cloud Logging, Stackdriver, etc.).
    """
    level = event_dict.get("level")
    if level:
        severity_map = {
            "debug": "DEBUG",
            "info": "INFO",
            "warning": "WARNING",
            "error": "ERROR",
            "critical": "CRITICAL",
        }
        event_dict["severity"] = severity_map.get(level, "INFO")
    return event_dict


def setup_logging(
    level: str = "INFO",
    json_logs: bool = True,
    include_timestamp: bool = True,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: If True, output JSON. If False, use human-readable format (dev mode).
        include_timestamp: Whether to include ISO timestamps in logs
        stream: Where log lines go (default: stdout)

    Usage:
        >>> from model_vault.infrastructure.observability import setup_logging
        >>> setup_logging(level="DEBUG", json_logs=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=log_level,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.root.setLevel(log_level)

    processors = [
        structlog.contextvars.merge_contextvars,  # Merge context variables
        add_app_context,  # Add app identifier
        structlog.stdlib.add_log_level,  # Add log level
        add_severity_level,  # Add severity (for cloud compatibility)
        structlog.stdlib.PositionalArgumentsFormatter(),  # Handle %s formatting
        structlog.processors.StackInfoRenderer(),  # Add stack traces when requested
        structlog.processors.format_exc_info,  # Format exceptions nicely
        structlog.processors.UnicodeDecoder(),  # Handle unicode
    ]

    # Add timestamp at the beginning if requested
    if include_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    # Choose output format based on environment
    if json_logs:
        # Production: JSON for log aggregation
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Development: Pretty console output with colors
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    # Configure structlog
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(
    name: str | None = None,
    layer: Layer | None = None,
    component: str | None = None,
    **initial_context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with architectural context.

    The logger stays lazy until its first use, so module-level loggers pick up
    the configuration installed later by setup_logging().

    Args:
        name: Logger name (typically __name__ of the calling module)
        layer: Architectural layer (infrastructure, processing, storage, api)
        component: Specific component/service within the layer
        **initial_context: Additional context key-value pairs to bind to logger

    Usage:
        >>> log = get_logger(__name__, layer="processing", component="stream-pipeline")
        >>> log.info("stream_completed", lines_read=1000)
    """
    context: dict[str, Any] = {}

    if layer:
        context["layer"] = layer

    if component:
        context["component"] = component

    if name:
        context["module"] = name

    context.update(initial_context)

    if name:
        return structlog.get_logger(name, **context)
    return structlog.get_logger(**context)


# ============================================================================
# Layer-Specific Logger Factories
# ============================================================================


def get_infrastructure_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for infrastructure layer (config loading, startup).

    Usage:
        >>> log = get_infrastructure_logger("config-loader")
        >>> log.info("config_loaded", env="dev")
    """
    return get_logger(
        "infrastructure",
        layer="infrastructure",
        component=component,
        **context,
    )


def get_processing_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for processing layer (line reader, classifier, pipeline).

    Usage:
        >>> log = get_processing_logger("stream-pipeline")
        >>> log.info("stream_completed", lines_read=42)
    """
    return get_logger(
        "processing",
        layer="processing",
        component=component,
        **context,
    )


def get_storage_logger(
    component: str,
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for storage layer.

    Usage:
        >>> log = get_storage_logger("local-file-store", root="files")
        >>> log.info("file_uploaded", name="cube.obj", size=1024)
    """
    return get_logger(
        "storage",
        layer="storage",
        component=component,
        **context,
    )


def get_api_logger(
    component: str = "fastapi",
    **context: Any,
) -> structlog.stdlib.BoundLogger:
    """
    Get a logger for API layer (REST API services).

    Usage:
        >>> log = get_api_logger()
        >>> log.info("request_received", method="GET", path="/health")
    """
    return get_logger(
        "api",
        layer="api",
        component=component,
        **context,
    )
