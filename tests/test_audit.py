"""Tests for the audit logger."""

from uuid import UUID

import pytest

from cashtrack.audit import AuditLogger, create_correlation_id
from cashtrack.models.audit import AuditEvent, AuditEventType, AuditSeverity
from cashtrack.services.storage import AuditStorageInterface, InMemoryAuditStorage


class BrokenAuditStorage(AuditStorageInterface):
    """Audit storage that always fails."""

    async def append_event(self, event: AuditEvent) -> bool:
        raise RuntimeError("disk full")

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return []


class TestAuditLogger:
    """Tests for local logging and persistence."""

    @pytest.mark.asyncio
    async def test_local_only(self):
        """Test logging without storage succeeds."""
        logger = AuditLogger()
        event = AuditEvent(event_type=AuditEventType.SYSTEM_ERROR, description="x")
        assert await logger.log(event) is True

    @pytest.mark.asyncio
    async def test_persists_events(self, audit_storage):
        """Test events reach the configured storage."""
        logger = AuditLogger(audit_storage)
        correlation_id = create_correlation_id()

        await logger.log_goal_created("g1", "Laptop", 60000, correlation_id)
        await logger.log_goal_amount_added("g1", 500, 15500, correlation_id)

        events = audit_storage.events
        assert [e.event_type for e in events] == [
            AuditEventType.GOAL_CREATED,
            AuditEventType.GOAL_AMOUNT_ADDED,
        ]
        assert all(e.correlation_id == correlation_id for e in events)

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_raise(self):
        """Test a failing storage only returns False."""
        logger = AuditLogger(BrokenAuditStorage())
        event = AuditEvent(event_type=AuditEventType.GOAL_CREATED, description="x")
        assert await logger.log(event) is False

    @pytest.mark.asyncio
    async def test_log_error(self, audit_storage):
        """Test system errors are logged with error severity."""
        await AuditLogger(audit_storage).log_error("ValueError", "bad input", {"field": "amount"})
        event = audit_storage.events[0]
        assert event.severity == AuditSeverity.ERROR
        assert event.details == {"field": "amount"}

    @pytest.mark.asyncio
    async def test_recent_events_newest_first(self):
        """Test recent events are returned newest first and limited."""
        storage = InMemoryAuditStorage()
        logger = AuditLogger(storage)
        for count in range(3):
            await logger.log_insights_generated(count, create_correlation_id())

        recent = await storage.get_recent_events(limit=2)

        assert len(recent) == 2
        assert recent[0].timestamp >= recent[1].timestamp

    def test_correlation_ids_are_unique(self):
        """Test each correlation id is new."""
        first, second = create_correlation_id(), create_correlation_id()
        assert isinstance(first, UUID)
        assert first != second
