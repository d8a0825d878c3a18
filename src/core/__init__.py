# Core infrastructure
from src.core.clock import Clock, SystemClock, ensure_utc_aware
from src.core.context import (
    clear_context,
    get_context,
    get_request_id,
    get_trace_id,
    get_user_id,
    set_request_id,
    set_trace_id,
    set_user_id,
)
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware


__all__ = [
    "Clock",
    "RequestContextMiddleware",
    "SystemClock",
    "clear_context",
    "configure_structlog",
    "ensure_utc_aware",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_trace_id",
    "get_user_id",
    "set_request_id",
    "set_trace_id",
    "set_user_id",
]
