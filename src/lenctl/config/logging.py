"""structlog configuration for lenctl.

The domain layer logs through stdlib ``logging`` and attaches the
violation fields (``constraint``, ``by``, ``actual``, ``relative_to``,
``failure``) as record extras. The ProcessorFormatter bridge lifts those
extras into the event dict, so ``--log-json`` emits them as keys instead
of burying them in the message text.

Output goes to stderr: console-rendered by default, JSON lines with
``log_json``.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Record extras set by lenctl.domain; anything else on a record is ignored.
DOMAIN_FIELDS = ("constraint", "by", "actual", "relative_to", "failure")

_LENCTL_LOGGER = "lenctl"


def _base_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _renderer(log_json: bool) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib records from lenctl to one stderr handler.

    Args:
        verbose: Show DEBUG records from ``lenctl.*`` (every violation and
            operator failure the domain layer sees). Otherwise WARNING+.
        log_json: JSON lines instead of the console renderer. Exceptions
            logged with ``exc_info`` keep their notes in a traceback dict.

    Safe to call more than once; the root handler is replaced, not added.
    """
    base = _base_processors()
    tail: list[structlog.types.Processor] = [structlog.processors.StackInfoRenderer()]
    if log_json:
        tail.append(structlog.processors.dict_tracebacks)

    structlog.configure(
        processors=[*base, *tail, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[*base, structlog.stdlib.ExtraAdder(DOMAIN_FIELDS), *tail],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(_LENCTL_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
