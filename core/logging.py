"""
Monitor Logging

structlog setup for the monitor, the control API and the roster script.
Each cycle binds its run_id through contextvars, so every line the cycle
emits (including from extractors and the notifier) carries it.
"""

import logging
import sys
from typing import Any, Optional

import structlog


def add_service_info(service_name: str) -> structlog.typing.Processor:
    """Processor stamping `service` on every event."""

    def processor(
        logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict["service"] = service_name
        return event_dict

    return processor


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    service_name: str = "hoops-monitor",
) -> None:
    """
    Configure structlog once at process start.

    json_format=False gives the colored console renderer used when running
    the monitor by hand; JSON is for deployments that ship logs.
    """
    level = getattr(logging, log_level.upper())

    # tenacity and urllib3 log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_info(service_name),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def bind_cycle_context(**kwargs: Any) -> None:
    """Bind values (e.g. run_id) to every log line emitted in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_cycle_context() -> None:
    structlog.contextvars.clear_contextvars()
