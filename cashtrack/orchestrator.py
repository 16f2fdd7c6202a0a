"""
Main Orchestrator for CashTrack

This module ties the components together and defines the end-to-end flows:
1. Refresh (fetch all collections -> normalize -> aggregate -> dashboard + insights)
2. Insights (fetch the window -> rules -> messages, or the fallback list)
3. Restore (backup payload -> normalize -> replace store contents)

DESIGN DECISION: Fetch-all-then-compute.
The four collections are fetched concurrently, and only when all of them
have arrived is anything computed. Computation itself is synchronous and
pure, so it never interleaves with another refresh.

DESIGN DECISION: Last write wins.
Every refresh gets a sequence number when it starts. A refresh that
finishes after a newer one has already been applied is returned to its
caller marked stale and never replaces `latest`.
"""

import asyncio
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from cashtrack.aggregation import aggregate, build_dashboard, evaluate_goal_status
from cashtrack.audit import AuditLogger, create_correlation_id
from cashtrack.config import Settings, StoreSettings, get_settings
from cashtrack.insights import FALLBACK_INSIGHTS, build_insight_context, run_rules
from cashtrack.models.finance import (
    AggregateSnapshot,
    BackupContents,
    DashboardView,
    SavingsGoal,
)
from cashtrack.normalization import normalize_backup, normalize_goals, utc_now
from cashtrack.services.goals import GoalService, goal_to_record
from cashtrack.services.storage import (
    AuditStorageInterface,
    FinanceStoreInterface,
    InMemoryAuditStorage,
    InMemoryFinanceStore,
    RawRecord,
    StorageError,
)


logger = structlog.get_logger(__name__)


class StoreFetchError(StorageError):
    """A collection could not be fetched, even after retries."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"Failed to fetch {collection}: {message}")


class InvalidBackupError(ValueError):
    """A backup payload is missing its transaction or goal collections."""
    pass


class StoreData(BaseModel):
    """Raw collections as returned by the store."""

    income: list[Any] = Field(default_factory=list)
    expenses: list[Any] = Field(default_factory=list)
    savings: list[Any] = Field(default_factory=list)
    savings_goals: list[Any] = Field(default_factory=list)

    @property
    def record_counts(self) -> dict[str, int]:
        return {
            "income": len(self.income),
            "expenses": len(self.expenses),
            "savings": len(self.savings),
            "savings_goals": len(self.savings_goals),
        }


class RefreshResult(BaseModel):
    """Everything one refresh produced."""

    sequence: int
    computed_at: datetime
    snapshot: AggregateSnapshot
    dashboard: DashboardView
    insights: list[str] = Field(default_factory=list)
    goals: list[SavingsGoal] = Field(default_factory=list)
    stale: bool = Field(
        default=False,
        description="A newer refresh was applied before this one finished"
    )


# =============================================================================
# STORE FETCHES
# =============================================================================

async def fetch_collection(
    collection: str,
    fetch: Callable[[], Awaitable[list[RawRecord]]],
    settings: Optional[StoreSettings] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> list[RawRecord]:
    """
    Fetch one collection with exponential back-off retries.

    Raises:
        StoreFetchError: When every attempt failed
    """
    settings = settings or get_settings().store
    retrying = AsyncRetrying(
        stop=stop_after_attempt(settings.fetch_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.fetch_retry_multiplier,
            min=settings.fetch_retry_min_wait,
            max=settings.fetch_retry_max_wait,
        ),
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                return await fetch()
    except Exception as e:
        logger.error("store_fetch_failed", collection=collection, error=str(e))
        if audit_logger:
            await audit_logger.log_store_fetch_failed(
                collection=collection,
                error_message=str(e),
                correlation_id=correlation_id,
            )
        raise StoreFetchError(collection, str(e)) from e


async def fetch_all(
    store: FinanceStoreInterface,
    settings: Optional[StoreSettings] = None,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> StoreData:
    """Fetch the four collections concurrently; the first failure propagates."""
    income, expenses, savings, goals = await asyncio.gather(
        fetch_collection("income", store.fetch_income, settings, audit_logger, correlation_id),
        fetch_collection("expenses", store.fetch_expenses, settings, audit_logger, correlation_id),
        fetch_collection("savings", store.fetch_savings, settings, audit_logger, correlation_id),
        fetch_collection("savings_goals", store.fetch_savings_goals, settings, audit_logger, correlation_id),
    )
    return StoreData(income=income, expenses=expenses, savings=savings, savings_goals=goals)


# =============================================================================
# INSIGHTS
# =============================================================================

class InsightService:
    """
    Produces the insights panel.

    Never raises: any failure, fetching or deriving, yields the fixed
    fallback messages.
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger

    async def generate(
        self,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[str]:
        """Fetch current data and generate insights for the trailing window."""
        correlation_id = correlation_id or create_correlation_id()
        try:
            data = await fetch_all(
                self._store, self._settings.store, self._audit_logger, correlation_id
            )
        except Exception as e:
            return await self._fallback(e, correlation_id)
        return await self.derive(data, now, correlation_id)

    async def derive(
        self,
        data: StoreData,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[str]:
        """Generate insights from already fetched data."""
        correlation_id = correlation_id or create_correlation_id()
        try:
            ctx = build_insight_context(
                data.income,
                data.expenses,
                data.savings,
                data.savings_goals,
                now=now,
                settings=self._settings.insights,
            )
            insights = run_rules(ctx)
        except Exception as e:
            return await self._fallback(e, correlation_id)

        if self._audit_logger:
            await self._audit_logger.log_insights_generated(len(insights), correlation_id)
        return insights

    async def _fallback(self, error: Exception, correlation_id: UUID) -> list[str]:
        logger.warning("insights_fallback", error=str(error))
        if self._audit_logger:
            await self._audit_logger.log_insights_fallback(str(error), correlation_id)
        return list(FALLBACK_INSIGHTS)


# =============================================================================
# REFRESH
# =============================================================================

class FinanceRefresher:
    """
    Recomputes the snapshot, dashboard and insights from the store.

    Holds the most recently applied result in `latest`.
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        settings: Optional[Settings] = None,
        audit_logger: Optional[AuditLogger] = None,
        insight_service: Optional[InsightService] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._audit_logger = audit_logger
        self._insights = insight_service or InsightService(store, self._settings, audit_logger)
        self._sequence = 0
        self._applied_sequence = 0
        self.latest: Optional[RefreshResult] = None

    async def refresh(
        self,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RefreshResult:
        """
        Run one full refresh.

        Raises:
            StoreFetchError: If a collection could not be fetched
        """
        correlation_id = correlation_id or create_correlation_id()
        self._sequence += 1
        sequence = self._sequence
        now = now or utc_now()

        data = await fetch_all(
            self._store, self._settings.store, self._audit_logger, correlation_id
        )

        dashboard_settings = self._settings.dashboard
        snapshot = aggregate(data.income, data.expenses, data.savings, dashboard_settings)
        dashboard = build_dashboard(snapshot, dashboard_settings)
        goals = [
            goal.model_copy(update={"status": evaluate_goal_status(goal, now)})
            for goal in normalize_goals(data.savings_goals)
        ]
        insights = await self._insights.derive(data, now, correlation_id)

        result = RefreshResult(
            sequence=sequence,
            computed_at=now,
            snapshot=snapshot,
            dashboard=dashboard,
            insights=insights,
            goals=goals,
        )

        if sequence < self._applied_sequence:
            logger.info("refresh_superseded", sequence=sequence, latest=self._applied_sequence)
            if self._audit_logger:
                await self._audit_logger.log_refresh_superseded(
                    sequence, self._applied_sequence, correlation_id
                )
            return result.model_copy(update={"stale": True})

        self._applied_sequence = sequence
        self.latest = result
        if self._audit_logger:
            await self._audit_logger.log_snapshot_computed(
                sequence, data.record_counts, correlation_id
            )
        return result


# =============================================================================
# RESTORE
# =============================================================================

def _without_none(record: RawRecord) -> RawRecord:
    return {key: value for key, value in record.items() if value is not None}


BACKUP_COLLECTIONS = (
    ("income",),
    ("expenses",),
    ("savings",),
    ("savingsGoals", "savings_goals"),
)


def check_backup_format(payload: Any) -> None:
    """
    Reject a payload that does not carry all four collections as lists.

    Raises:
        InvalidBackupError: If the payload is not a backup document
    """
    if not isinstance(payload, Mapping):
        raise InvalidBackupError("Invalid backup file format: not an object")

    for names in BACKUP_COLLECTIONS:
        value = next((payload[name] for name in names if name in payload), None)
        if not isinstance(value, list):
            raise InvalidBackupError(
                f"Invalid backup file format: '{names[0]}' must be a list"
            )


async def restore_backup(
    store: FinanceStoreInterface,
    payload: Any,
    audit_logger: Optional[AuditLogger] = None,
    correlation_id: Optional[UUID] = None,
) -> BackupContents:
    """
    Replace the store's transactions and goals with a backup's contents.

    The payload is the decoded backup document. Records pass through the
    same normalization as live data before they are written. Profile and
    settings are returned for the caller to apply.

    Raises:
        InvalidBackupError: If the payload lacks any collection; the store
            is left untouched
    """
    check_backup_format(payload)
    correlation_id = correlation_id or create_correlation_id()
    contents = normalize_backup(payload)

    await store.reset()
    for income in contents.income:
        await store.add_income(_without_none(income.model_dump(include={"amount", "category", "timestamp"})))
    for expense in contents.expenses:
        await store.add_expense(_without_none(
            expense.model_dump(include={"amount", "category", "description", "timestamp"})
        ))
    for saving in contents.savings:
        await store.add_saving(_without_none(saving.model_dump(include={"amount", "description", "timestamp"})))
    for goal in contents.savings_goals:
        await store.add_goal(_without_none(goal_to_record(goal)))

    logger.info("backup_restored", record_count=contents.record_count)
    if audit_logger:
        await audit_logger.log_backup_restored(
            contents.record_count, contents.backup_date, correlation_id
        )
    return contents


# =============================================================================
# WIRING
# =============================================================================

class AppComponents(BaseModel):
    """Wired application services."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    store: FinanceStoreInterface
    audit_logger: AuditLogger
    refresher: FinanceRefresher
    insight_service: InsightService
    goal_service: GoalService


def create_app_components(
    store: Optional[FinanceStoreInterface] = None,
    settings: Optional[Settings] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Finance store; an empty in-memory store when None
        settings: Application settings; loaded from the environment when None
        audit_storage: Audit backend; an in-memory log when None
    """
    settings = settings or get_settings()
    store = store or InMemoryFinanceStore()
    if audit_storage is None:
        audit_storage = InMemoryAuditStorage()
    audit_logger = AuditLogger(audit_storage)

    insight_service = InsightService(store, settings, audit_logger)
    refresher = FinanceRefresher(store, settings, audit_logger, insight_service)
    goal_service = GoalService(store, audit_logger, settings.display)

    return AppComponents(
        store=store,
        audit_logger=audit_logger,
        refresher=refresher,
        insight_service=insight_service,
        goal_service=goal_service,
    )
