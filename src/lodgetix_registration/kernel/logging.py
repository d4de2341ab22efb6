"""
Structured logging for the registration engine

Every RegistrationSession pins its draft id as the correlation id and
binds the function id and registration type into the structlog context,
so one wizard run (selection commands, summary recomputation, draft saves
and loads) can be followed through the logs as a single thread.

Booking contact details (names, email, mobile) and API credentials are
scrubbed by a processor in the chain, so no call site can leak them by
accident. Console output in development, JSON lines when
ENVIRONMENT=production.
"""

import contextvars
import logging
import os
import secrets
import sys
import time
from collections.abc import Mapping
from typing import Any

import structlog

REDACTED = "***REDACTED***"

# Booking contact and payment fields never reach the logs
REDACTED_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "email",
        "mobile",
        "phone",
        "billing_details",
        "token",
        "secret",
        "api_key",
        "api_token",
        "authorization",
    }
)

correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


# ============================================================================
# Correlation
# ============================================================================


def generate_correlation_id() -> str:
    """Random id for log lines emitted outside any registration session"""
    return secrets.token_urlsafe(16)


def get_correlation_id() -> str:
    cid = correlation_id_var.get()
    if not cid:
        cid = generate_correlation_id()
        correlation_id_var.set(cid)
    return cid


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_var.set(correlation_id)


def bind_registration_context(
    draft_id: str,
    function_id: str | None = None,
    registration_type: str | None = None,
) -> None:
    """
    Tie subsequent log lines in this context to one registration

    The draft id doubles as the correlation id: it is the only identifier
    shared by the wizard, the draft API and support tickets.

    Args:
        draft_id: Draft the session saves to
        function_id: Function being registered for
        registration_type: Current mode value, when one is chosen
    """
    set_correlation_id(draft_id)
    structlog.contextvars.unbind_contextvars("function_id", "registration_type")
    context: dict[str, Any] = {"draft_id": draft_id}
    if function_id is not None:
        context["function_id"] = function_id
    if registration_type is not None:
        context["registration_type"] = registration_type
    structlog.contextvars.bind_contextvars(**context)


def add_correlation_id(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict["correlation_id"] = get_correlation_id()
    return event_dict


# ============================================================================
# Redaction
# ============================================================================


def redact_context(context: Mapping[str, Any]) -> dict[str, Any]:
    """
    Redact booking contact and credential fields from log context

    Nested mappings (a booking_contact dict, request headers) are scrubbed
    too. The input is never modified.

    Args:
        context: Dictionary of log context

    Returns:
        New dictionary with sensitive fields redacted

    Example:
        >>> redact_context({"email": "wm@lodge.org", "operation": "save_draft"})
        {'email': '***REDACTED***', 'operation': 'save_draft'}
    """
    redacted: dict[str, Any] = {}
    for key, value in context.items():
        if str(key).lower() in REDACTED_FIELDS:
            redacted[key] = REDACTED
        elif isinstance(value, Mapping):
            redacted[key] = redact_context(value)
        else:
            redacted[key] = value
    return redacted


def redact_pii(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor applying redact_context to every event"""
    return redact_context(event_dict)


# ============================================================================
# Configuration
# ============================================================================


def is_production() -> bool:
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


def configure_logging(
    *,
    json_output: bool = False,
    log_level: str = "INFO",
) -> None:
    """
    Configure structlog on top of the stdlib logging module

    Args:
        json_output: JSON lines (production) instead of coloured console output
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    level = getattr(logging, log_level.upper())

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    # The draft client logs its own requests
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_correlation_id,
        redact_pii,
    ]

    if json_output:
        renderers: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.ExceptionRenderer(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# ============================================================================
# Timed operations
# ============================================================================


class LogOperation:
    """
    Time a draft API call or other unit of work and log its outcome

    Outcome fields discovered inside the block (attendee count, draft
    version) are attached with annotate() and appear on the completion
    line. Failures carrying a retryable flag (PersistenceError) are logged
    as warnings when retryable and as errors otherwise.

    Example:
        >>> with LogOperation(logger, "save_draft", draft_id=draft_id) as op:
        ...     result = client.save_draft(draft_id, document)
        ...     op.annotate(attendee_count=result.attendee_count)
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.outcome: dict[str, Any] = {}
        self.start_time: float = 0.0

    def annotate(self, **fields: Any) -> None:
        self.outcome.update(fields)

    def __enter__(self) -> "LogOperation":
        self.start_time = time.perf_counter()
        self.logger.debug(
            f"{self.operation} started",
            operation=self.operation,
            **redact_context(self.context),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        duration_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
        fields = redact_context({**self.context, **self.outcome})

        if exc_type is None:
            self.logger.info(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=duration_ms,
                **fields,
            )
            return

        retryable = getattr(exc_val, "retryable", None)
        if retryable is not None:
            fields["retryable"] = retryable
        log = self.logger.warning if retryable else self.logger.error
        # Stack traces only in development
        log(
            f"{self.operation} failed",
            operation=self.operation,
            duration_ms=duration_ms,
            error=str(exc_val),
            error_type=exc_type.__name__,
            exc_info=not is_production(),
            **fields,
        )
