"""
Audit Logger

DESIGN DECISION: Every goal state change and every degraded result is logged.
This provides:
1. Traceability of the goal lifecycle
2. Visibility into fetch failures and insight fallbacks

The audit logger:
- Is async so it sits naturally in the refresh pipeline
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import structlog

from cashtrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from cashtrack.services.storage import AuditStorageInterface


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Audit persistence must not break the main flow
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    # -------------------------------------------------------------------------
    # Refresh pipeline
    # -------------------------------------------------------------------------

    async def log_snapshot_computed(
        self,
        sequence: int,
        record_counts: dict[str, int],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.snapshot_computed(
            sequence=sequence,
            record_counts=record_counts,
            correlation_id=correlation_id,
        ))

    async def log_refresh_superseded(
        self,
        sequence: int,
        latest_sequence: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.refresh_superseded(
            sequence=sequence,
            latest_sequence=latest_sequence,
            correlation_id=correlation_id,
        ))

    async def log_store_fetch_failed(
        self,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a collection fetch that failed after all retries."""
        await self.log(AuditEventBuilder.store_fetch_failed(
            collection=collection,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    # -------------------------------------------------------------------------
    # Insights
    # -------------------------------------------------------------------------

    async def log_insights_generated(self, count: int, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.insights_generated(
            count=count,
            correlation_id=correlation_id,
        ))

    async def log_insights_fallback(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that the fixed fallback messages were served."""
        await self.log(AuditEventBuilder.insights_fallback(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    # -------------------------------------------------------------------------
    # Savings goals
    # -------------------------------------------------------------------------

    async def log_goal_created(
        self,
        goal_id: str,
        name: str,
        target_amount: float,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_created(
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
            correlation_id=correlation_id,
        ))

    async def log_goal_feasibility_warning(
        self,
        goal_id: str,
        target_amount: float,
        remaining_income: float,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_feasibility_warning(
            goal_id=goal_id,
            target_amount=target_amount,
            remaining_income=remaining_income,
            correlation_id=correlation_id,
        ))

    async def log_goal_amount_added(
        self,
        goal_id: str,
        amount: float,
        saved_amount: float,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_amount_added(
            goal_id=goal_id,
            amount=amount,
            saved_amount=saved_amount,
            correlation_id=correlation_id,
        ))

    async def log_goal_completed(
        self,
        goal_id: str,
        deadline: Optional[datetime],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_completed(
            goal_id=goal_id,
            deadline=deadline,
            correlation_id=correlation_id,
        ))

    async def log_goal_achieved(
        self,
        goal_id: str,
        name: str,
        saved_amount: float,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_achieved(
            goal_id=goal_id,
            name=name,
            saved_amount=saved_amount,
            correlation_id=correlation_id,
        ))

    async def log_goal_not_achieved(
        self,
        goal_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.goal_not_achieved(
            goal_id=goal_id,
            name=name,
            correlation_id=correlation_id,
        ))

    # -------------------------------------------------------------------------
    # Restore and errors
    # -------------------------------------------------------------------------

    async def log_backup_restored(
        self,
        record_count: int,
        backup_date: Optional[datetime],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.backup_restored(
            record_count=record_count,
            backup_date=backup_date,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a refresh or a goal operation and pass it
    through all subsequent steps.
    """
    return uuid4()
