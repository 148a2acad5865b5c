"""structlog setup for optguard.

Everything goes to stderr so command output on stdout stays pipeable.
Human mode renders through structlog's console renderer; ``--log-json``
switches to one JSON object per line. Stdlib loggers under ``optguard``
are routed through the same processor chain.
"""

from __future__ import annotations

import logging
import sys

import structlog

APP_LOGGER = "optguard"

# Third-party loggers kept at WARNING even in verbose mode.
NOISY_LOGGERS: tuple[str, ...] = ("sqlalchemy", "pluggy")


def _level_for(*, verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
) -> None:
    """Install the stderr handler and structlog processors.

    Safe to call repeatedly; the root handler is replaced, not stacked.
    *verbose* wins over *quiet* when both are set.
    """
    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(_level_for(verbose=verbose, quiet=quiet))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
