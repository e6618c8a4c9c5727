"""
Client Event Models

Every state change of the reconciliation layer worth debugging is
recorded as a typed event: pages loaded or lost, refresh signals,
writes and their outcomes, forms rejected before sending.

DESIGN DECISION: Events go to the structured log only. Nothing is
persisted on the device.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ClientEventType(str, Enum):
    """Types of events we record."""
    # Ledger paging
    LEDGER_LOAD_STARTED = "ledger_load_started"
    LEDGER_PAGE_LOADED = "ledger_page_loaded"
    LEDGER_LOAD_FAILED = "ledger_load_failed"
    LEDGER_LOAD_MORE_DROPPED = "ledger_load_more_dropped"
    STALE_RESPONSE_DISCARDED = "stale_response_discarded"

    # Invalidation
    REFRESH_TRIGGERED = "refresh_triggered"
    REFRESH_SUBSCRIBER_FAILED = "refresh_subscriber_failed"

    # Budget
    BUDGET_LOADED = "budget_loaded"
    BUDGET_LOAD_FAILED = "budget_load_failed"

    # Projections
    PROJECTIONS_LOADED = "projections_loaded"
    PROJECTIONS_LOAD_FAILED = "projections_load_failed"

    # Writes
    WRITE_SUCCEEDED = "write_succeeded"
    WRITE_FAILED = "write_failed"
    VALIDATION_REJECTED = "validation_rejected"

    # Session
    SESSION_EXPIRED = "session_expired"


class ClientEventSeverity(str, Enum):
    """Severity level for client events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClientEvent(BaseModel):
    """A single recorded event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow)

    event_type: ClientEventType
    severity: ClientEventSeverity = ClientEventSeverity.INFO

    # What the event is about, e.g. ("account", "12")
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one user action"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ClientEventBuilder:
    """
    Helper class to build events with common patterns.

    Usage:
        event = ClientEventBuilder.page_loaded("account", 3, 0, 10, 4)
        event = ClientEventBuilder.refresh_triggered(7)
    """

    @staticmethod
    def load_started(
        ledger: str,
        ledger_id: int,
        page: int,
        sequence: int,
        month: int,
        year: int,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.LEDGER_LOAD_STARTED,
            severity=ClientEventSeverity.DEBUG,
            entity_type=ledger,
            entity_id=str(ledger_id),
            description=f"Requesting page {page} of {month:02d}/{year}",
            details={"page": page, "sequence": sequence, "month": month, "year": year},
        )

    @staticmethod
    def page_loaded(
        ledger: str,
        ledger_id: int,
        page: int,
        item_count: int,
        total_pages: int,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.LEDGER_PAGE_LOADED,
            entity_type=ledger,
            entity_id=str(ledger_id),
            description=f"Page {page} loaded with {item_count} movements",
            details={
                "page": page,
                "item_count": item_count,
                "total_pages": total_pages,
            },
        )

    @staticmethod
    def load_failed(
        ledger: str,
        ledger_id: int,
        page: int,
        error_message: str,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.LEDGER_LOAD_FAILED,
            severity=ClientEventSeverity.WARNING,
            entity_type=ledger,
            entity_id=str(ledger_id),
            description=f"Page {page} failed to load",
            details={"page": page},
            error_message=error_message,
        )

    @staticmethod
    def load_more_dropped(
        ledger: str,
        ledger_id: int,
        reason: str,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.LEDGER_LOAD_MORE_DROPPED,
            severity=ClientEventSeverity.DEBUG,
            entity_type=ledger,
            entity_id=str(ledger_id),
            description=f"Load more ignored: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def stale_response_discarded(
        ledger: str,
        ledger_id: int,
        response_sequence: int,
        current_sequence: int,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.STALE_RESPONSE_DISCARDED,
            severity=ClientEventSeverity.DEBUG,
            entity_type=ledger,
            entity_id=str(ledger_id),
            description="Response for a superseded request discarded",
            details={
                "response_sequence": response_sequence,
                "current_sequence": current_sequence,
            },
        )

    @staticmethod
    def refresh_triggered(generation: int, subscriber_count: int) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.REFRESH_TRIGGERED,
            description=f"Refresh generation advanced to {generation}",
            details={"generation": generation, "subscribers": subscriber_count},
        )

    @staticmethod
    def refresh_subscriber_failed(generation: int, error_message: str) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.REFRESH_SUBSCRIBER_FAILED,
            severity=ClientEventSeverity.ERROR,
            description="A refresh subscriber raised",
            details={"generation": generation},
            error_message=error_message,
        )

    @staticmethod
    def budget_loaded(is_configured: bool) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.BUDGET_LOADED,
            entity_type="budget",
            description="Budget summary loaded",
            details={"is_configured": is_configured},
        )

    @staticmethod
    def budget_load_failed(error_message: str) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.BUDGET_LOAD_FAILED,
            severity=ClientEventSeverity.WARNING,
            entity_type="budget",
            description="Budget summary failed to load",
            error_message=error_message,
        )

    @staticmethod
    def projections_loaded(count: int) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.PROJECTIONS_LOADED,
            severity=ClientEventSeverity.DEBUG,
            entity_type="projection",
            description="Projections loaded",
            details={"count": count},
        )

    @staticmethod
    def projections_load_failed(error_message: str) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.PROJECTIONS_LOAD_FAILED,
            severity=ClientEventSeverity.WARNING,
            entity_type="projection",
            description="Projections failed to load",
            error_message=error_message,
        )

    @staticmethod
    def write_succeeded(
        operation: str,
        correlation_id: UUID,
        entity_id: Optional[int] = None,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.WRITE_SUCCEEDED,
            entity_type=operation,
            entity_id=str(entity_id) if entity_id is not None else None,
            correlation_id=correlation_id,
            description=f"{operation} accepted by the server",
        )

    @staticmethod
    def write_failed(
        operation: str,
        error_message: str,
        correlation_id: UUID,
        status_code: Optional[int] = None,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.WRITE_FAILED,
            severity=ClientEventSeverity.WARNING,
            entity_type=operation,
            correlation_id=correlation_id,
            description=f"{operation} rejected or unreachable",
            details={"status_code": status_code},
            error_message=error_message,
        )

    @staticmethod
    def validation_rejected(
        operation: str,
        issues: list[dict],
        correlation_id: UUID,
    ) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.VALIDATION_REJECTED,
            severity=ClientEventSeverity.INFO,
            entity_type=operation,
            correlation_id=correlation_id,
            description=f"{operation} rejected before sending with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def session_expired(status_code: int, path: str) -> ClientEvent:
        return ClientEvent(
            event_type=ClientEventType.SESSION_EXPIRED,
            severity=ClientEventSeverity.WARNING,
            description="Server rejected the session",
            details={"status_code": status_code, "path": path},
        )
