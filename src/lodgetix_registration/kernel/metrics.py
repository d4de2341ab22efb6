"""
Prometheus metrics collection for the registration engine.

Provides observability into selection activity, draft persistence and
advisory order totals.
"""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from prometheus_client import Counter, Gauge, Histogram

# ============================================================================
# Selection Metrics
# ============================================================================

selection_commands_total = Counter(
    "lodgetix_selection_commands_total",
    "Total number of selection commands applied to a registration",
    ["command_type", "status"],  # status: success, failure
)

selection_command_duration_seconds = Histogram(
    "lodgetix_selection_command_duration_seconds",
    "Duration of selection command processing in seconds",
    ["command_type"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
)

order_subtotal = Gauge(
    "lodgetix_order_subtotal",
    "Advisory subtotal of the most recently recomputed order",
    ["registration_type"],
)

# ============================================================================
# Draft Persistence Metrics
# ============================================================================

draft_requests_total = Counter(
    "lodgetix_draft_requests_total",
    "Total number of draft API requests",
    ["operation", "status"],  # operation: save, load
)

draft_request_duration_seconds = Histogram(
    "lodgetix_draft_request_duration_seconds",
    "Duration of draft API requests in seconds",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# ============================================================================
# Helper Functions
# ============================================================================

P = ParamSpec("P")
R = TypeVar("R")


def track_draft_request(operation: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to track draft API request duration and outcome.

    Args:
        operation: "save" or "load"

    Returns:
        Decorated function that tracks duration and status
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            status = "success"
            try:
                return func(*args, **kwargs)
            except Exception:
                status = "failure"
                raise
            finally:
                draft_request_duration_seconds.labels(operation=operation).observe(
                    time.perf_counter() - start
                )
                draft_requests_total.labels(operation=operation, status=status).inc()

        return wrapper

    return decorator
