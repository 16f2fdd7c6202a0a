"""
Audit Models for CashTrack

Every state change and every degraded result is logged for audit purposes.
This provides:
1. Traceability of goal lifecycle changes
2. Visibility into when the insights panel fell back to canned messages
3. A record of which store fetches failed and why

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Refresh pipeline
    SNAPSHOT_COMPUTED = "snapshot_computed"
    STORE_FETCH_FAILED = "store_fetch_failed"
    REFRESH_SUPERSEDED = "refresh_superseded"

    # Insights
    INSIGHTS_GENERATED = "insights_generated"
    INSIGHTS_FALLBACK = "insights_fallback"

    # Savings goals
    GOAL_CREATED = "goal_created"
    GOAL_FEASIBILITY_WARNING = "goal_feasibility_warning"
    GOAL_AMOUNT_ADDED = "goal_amount_added"
    GOAL_COMPLETED = "goal_completed"
    GOAL_ACHIEVED = "goal_achieved"
    GOAL_NOT_ACHIEVED = "goal_not_achieved"

    # Restore
    BACKUP_RESTORED = "backup_restored"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'goal', 'snapshot', 'insights')"
    )
    entity_id: Optional[str] = None

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="Ties together the events of one refresh or goal operation"
    )

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
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
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.goal_achieved(goal_id, name, amount, correlation_id)
        event = AuditEventBuilder.insights_fallback(error, correlation_id)
    """

    @staticmethod
    def snapshot_computed(
        sequence: int,
        record_counts: dict[str, int],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_COMPUTED,
            entity_type="snapshot",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description=f"Snapshot #{sequence} computed",
            details={"record_counts": record_counts},
        )

    @staticmethod
    def refresh_superseded(
        sequence: int,
        latest_sequence: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFRESH_SUPERSEDED,
            severity=AuditSeverity.DEBUG,
            entity_type="snapshot",
            entity_id=str(sequence),
            correlation_id=correlation_id,
            description=f"Snapshot #{sequence} discarded, #{latest_sequence} is newer",
            details={"latest_sequence": latest_sequence},
        )

    @staticmethod
    def store_fetch_failed(
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            entity_id=collection,
            correlation_id=correlation_id,
            description=f"Fetching {collection} failed",
            error_message=error_message,
            details={"collection": collection},
        )

    @staticmethod
    def insights_generated(
        count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_GENERATED,
            entity_type="insights",
            correlation_id=correlation_id,
            description=f"Generated {count} insights",
            details={"count": count},
        )

    @staticmethod
    def insights_fallback(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="insights",
            correlation_id=correlation_id,
            description="Insight generation failed, fallback messages used",
            error_message=error_message,
        )

    @staticmethod
    def goal_created(
        goal_id: str,
        name: str,
        target_amount: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Savings goal created: {name}",
            details={"name": name, "target_amount": target_amount},
            is_user_action=True,
        )

    @staticmethod
    def goal_feasibility_warning(
        goal_id: str,
        target_amount: float,
        remaining_income: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_FEASIBILITY_WARNING,
            severity=AuditSeverity.WARNING,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal target exceeds remaining income",
            details={
                "target_amount": target_amount,
                "remaining_income": remaining_income,
            },
        )

    @staticmethod
    def goal_amount_added(
        goal_id: str,
        amount: float,
        saved_amount: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_AMOUNT_ADDED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Added {amount} to goal",
            details={"amount": amount, "saved_amount": saved_amount},
            is_user_action=True,
        )

    @staticmethod
    def goal_completed(
        goal_id: str,
        deadline: Optional[datetime],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_COMPLETED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal deadline reached, marked completed",
            details={"deadline": deadline.isoformat() if deadline else None},
        )

    @staticmethod
    def goal_achieved(
        goal_id: str,
        name: str,
        saved_amount: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_ACHIEVED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Goal achieved: {name}",
            details={"saved_amount": saved_amount},
            is_user_action=True,
        )

    @staticmethod
    def goal_not_achieved(
        goal_id: str,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_NOT_ACHIEVED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Goal not achieved: {name}",
            is_user_action=True,
        )

    @staticmethod
    def backup_restored(
        record_count: int,
        backup_date: Optional[datetime],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            entity_type="backup",
            correlation_id=correlation_id,
            description=f"Restored {record_count} records from backup",
            details={
                "record_count": record_count,
                "backup_date": backup_date.isoformat() if backup_date else None,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
