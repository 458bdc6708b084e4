"""Route retry diagnostics through structlog.

The engine logs with ``structlog.get_logger(__name__)`` and never
configures logging on import. Host applications that want to see retry
events call ``configure_logging()``; it reads RETRYABLE_LOG_LEVEL and
RETRYABLE_ENVIRONMENT and attaches one stderr handler to the
``retryable`` logger.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from retryable.config import Settings, settings as default_settings

LIBRARY_LOGGER = "retryable"


def add_library_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every log event with the emitting library."""
    event_dict["library"] = LIBRARY_LOGGER
    return event_dict


def _renderer(environment: str) -> structlog.types.Processor:
    if environment.lower() == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Attach a structlog-formatted stderr handler to the library logger.

    Args:
        settings: Source of LOG_LEVEL and ENVIRONMENT (module settings
            unless given)

    Returns:
        The configured ``retryable`` stdlib logger
    """
    settings = settings or default_settings
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_library_context,
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(settings.ENVIRONMENT), foreign_pre_chain=pre_chain
        )
    )

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    # Replace rather than stack handlers on reconfiguration
    library_logger.handlers.clear()
    library_logger.addHandler(handler)
    library_logger.setLevel(level)
    return library_logger
