"""
Structured logging for the approval policy service.

Every entry carries the service name, the request correlation id (bound by
``CorrelationMiddleware``) and the call site. Rule model events use dotted
names such as ``rule.decoded``, ``session.confirmed`` or ``policy.saved``:

{
    "ts": "2026-10-19T09:30:00.123456Z",
    "level": "info",
    "service": "approvals",
    "correlation_id": "uuid-v4",
    "event": "policy.saved",
    "module": "form",
    "function": "submit",
    "line": 212,
    "policy_id": "...",
    "operation": "update"
}
"""
import logging
from decimal import Decimal
from typing import Any

import orjson
import structlog
from structlog.processors import CallsiteParameter

# structlog's call site keys, renamed to the keys our dashboards query
_CALLSITE_KEYS = {"func_name": "function", "lineno": "line"}


def service_name_processor(service_name: str):
    """Build a processor stamping the service name on every entry."""

    def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return add_service_name


def rename_callsite_keys(logger: Any, method_name: str, event_dict: dict) -> dict:
    for key, renamed in _CALLSITE_KEYS.items():
        if key in event_dict:
            event_dict[renamed] = event_dict.pop(key)
    return event_dict


def _json_default(value: Any) -> Any:
    # Amounts are logged as exact strings, never as floats
    if isinstance(value, Decimal):
        return str(value)
    return repr(value)


def dumps(event_dict: dict, **kwargs) -> bytes:
    """orjson serializer for ``JSONRenderer``."""
    return orjson.dumps(event_dict, default=_json_default)


def setup_logging(json_output: bool = True, service_name: str = "approvals", level: str | int = logging.INFO):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs rendered with orjson. If False, use console format.
        service_name: Name of the service (for multi-service deployments).
        level: Minimum level emitted, as a number or a name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    shared_processors = [
        # Includes correlation_id bound by the middleware
        structlog.contextvars.merge_contextvars,
        service_name_processor(service_name),
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            [CallsiteParameter.MODULE, CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
        ),
        rename_callsite_keys,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer(serializer=dumps)]
        logger_factory = structlog.BytesLoggerFactory()
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]
        logger_factory = structlog.PrintLoggerFactory()

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
    )

    # Silence uvicorn's default logging to avoid duplicate logs
    logging.getLogger("uvicorn.error").handlers = []
    logging.getLogger("uvicorn.access").handlers = []


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
