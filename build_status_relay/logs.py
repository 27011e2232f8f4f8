import logging
import sys

import structlog


def configure_logging(level='INFO', json_format=True, output=sys.stderr):
    """Route structlog, and the google client libraries' stdlib logging, to ``output``."""

    level = logging.getLevelName(level) if isinstance(level, str) else level

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True)

    logging.basicConfig(format='%(message)s', stream=output, level=level)
