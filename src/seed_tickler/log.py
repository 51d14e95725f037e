import logging
import sys

import structlog


def stderr_logger(*args) -> structlog.PrintLogger:
    """Bind to whatever sys.stderr is at call time so redirected streams are honoured."""
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    """Route structlog output to stderr so stdout only carries the report."""
    level = logging.DEBUG if verbose else logging.INFO
    renderer = (
        structlog.processors.JSONRenderer(indent=2)
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=stderr_logger,
        cache_logger_on_first_use=False,
    )
