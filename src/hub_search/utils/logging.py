import structlog
import logging
import sys

def configure_logging(level=logging.INFO, cache=True):
    """Route structlog JSON to stderr at *level*.

    Pass ``cache=False`` for a provisional setup that a later call will replace;
    loggers first used under it pick up the later configuration.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # stdout carries the solution table
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=cache,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

def get_logger(name: str):
    return structlog.get_logger(name)
