"""
Client Event Logger

DESIGN DECISION: Every significant state change of the reconciliation
layer goes through one logger. This provides:
1. Traceability of which page, which window, which generation
2. Visibility into responses dropped as stale
3. A record of writes rejected before they reached the server

The logger never raises: a broken log sink must not break a screen.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_client.config import get_settings
from finance_client.models.audit import (
    ClientEvent,
    ClientEventBuilder,
    ClientEventSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: Optional[str] = None) -> None:
    """Route the structured log to stderr; the level defaults to the app settings."""
    level = (level or get_settings().app.log_level).upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level))


class AuditLogger:
    """Central event logging service for the client."""

    def __init__(self, name: str = "finance_client"):
        self._logger = structlog.get_logger(name)

    def log(self, event: ClientEvent) -> bool:
        """
        Log an event at the level matching its severity.

        Returns False if the log sink failed.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity is ClientEventSeverity.ERROR:
                self._logger.error("client_event", **log_dict)
            elif event.severity is ClientEventSeverity.WARNING:
                self._logger.warning("client_event", **log_dict)
            elif event.severity is ClientEventSeverity.DEBUG:
                self._logger.debug("client_event", **log_dict)
            else:
                self._logger.info("client_event", **log_dict)
        except (OSError, ValueError, TypeError):
            return False
        return True

    def load_started(
        self,
        ledger: str,
        ledger_id: int,
        page: int,
        sequence: int,
        month: int,
        year: int,
    ) -> None:
        self.log(ClientEventBuilder.load_started(ledger, ledger_id, page, sequence, month, year))

    def page_loaded(
        self,
        ledger: str,
        ledger_id: int,
        page: int,
        item_count: int,
        total_pages: int,
    ) -> None:
        self.log(ClientEventBuilder.page_loaded(ledger, ledger_id, page, item_count, total_pages))

    def load_failed(self, ledger: str, ledger_id: int, page: int, error_message: str) -> None:
        self.log(ClientEventBuilder.load_failed(ledger, ledger_id, page, error_message))

    def load_more_dropped(self, ledger: str, ledger_id: int, reason: str) -> None:
        self.log(ClientEventBuilder.load_more_dropped(ledger, ledger_id, reason))

    def stale_response_discarded(
        self,
        ledger: str,
        ledger_id: int,
        response_sequence: int,
        current_sequence: int,
    ) -> None:
        self.log(ClientEventBuilder.stale_response_discarded(
            ledger, ledger_id, response_sequence, current_sequence
        ))

    def refresh_triggered(self, generation: int, subscriber_count: int) -> None:
        self.log(ClientEventBuilder.refresh_triggered(generation, subscriber_count))

    def refresh_subscriber_failed(self, generation: int, error_message: str) -> None:
        self.log(ClientEventBuilder.refresh_subscriber_failed(generation, error_message))

    def budget_loaded(self, is_configured: bool) -> None:
        self.log(ClientEventBuilder.budget_loaded(is_configured))

    def budget_load_failed(self, error_message: str) -> None:
        self.log(ClientEventBuilder.budget_load_failed(error_message))

    def projections_loaded(self, count: int) -> None:
        self.log(ClientEventBuilder.projections_loaded(count))

    def projections_load_failed(self, error_message: str) -> None:
        self.log(ClientEventBuilder.projections_load_failed(error_message))

    def write_succeeded(
        self,
        operation: str,
        correlation_id: UUID,
        entity_id: Optional[int] = None,
    ) -> None:
        self.log(ClientEventBuilder.write_succeeded(operation, correlation_id, entity_id))

    def write_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: UUID,
        status_code: Optional[int] = None,
    ) -> None:
        self.log(ClientEventBuilder.write_failed(
            operation, error_message, correlation_id, status_code
        ))

    def validation_rejected(
        self,
        operation: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        self.log(ClientEventBuilder.validation_rejected(operation, issues, correlation_id))

    def session_expired(self, status_code: int, path: str) -> None:
        self.log(ClientEventBuilder.session_expired(status_code, path))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., saving a form).
    """
    return uuid4()
