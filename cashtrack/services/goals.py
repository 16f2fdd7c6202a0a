"""
Savings Goal Lifecycle Service

Goal operations that touch the store: creation with a feasibility check,
lazy deadline evaluation, adding money, and closing a goal as achieved
or not achieved.

LIFECYCLE:
    create -> ONGOING
    ONGOING -> COMPLETED          deadline passed (evaluated when read)
    any -> ARCHIVED               user marks achieved, or saved >= target
    any -> NOT_ACHIEVED           user marks not achieved

Closing a goal moves its saved amount into the savings history and
removes the goal from the store. The returned model carries the final
status; the store no longer does.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import structlog

from cashtrack.aggregation import (
    check_goal_feasibility,
    deadline_from_duration,
    evaluate_goal_status,
    total_amount,
)
from cashtrack.audit import AuditLogger, create_correlation_id
from cashtrack.config import DisplaySettings, get_settings
from cashtrack.models.finance import (
    DurationType,
    FeasibilityCheck,
    GoalStatus,
    SavingsGoal,
)
from cashtrack.normalization import (
    normalize_expenses,
    normalize_goal,
    normalize_incomes,
    utc_now,
    validate_number,
)
from cashtrack.services.storage import FinanceStoreInterface, NotFoundError, RawRecord


logger = structlog.get_logger(__name__)


class InvalidAmountError(ValueError):
    """A goal amount that is missing, non-numeric or not positive."""
    pass


def goal_to_record(goal: SavingsGoal) -> RawRecord:
    """Store representation of a goal (store field names)."""
    return {
        "id": goal.id,
        "goalName": goal.name,
        "targetAmount": goal.target_amount,
        "savedAmount": goal.saved_amount,
        "durationType": goal.duration_type.value,
        "goalDeadline": goal.deadline,
        "status": goal.status.value,
        "timestamp": goal.timestamp,
    }


def _positive_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    amount = validate_number(value)
    if amount <= 0:
        raise InvalidAmountError(f"Amount must be a positive number, got {value!r}")
    return amount


class GoalService:
    """
    Savings goal operations over a finance store.

    Every operation is audited under a correlation id; callers may pass
    their own to tie a goal operation into a larger flow.
    """

    def __init__(
        self,
        store: FinanceStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        display: Optional[DisplaySettings] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._display = display or get_settings().display

    async def _load(self, goal_id: str) -> SavingsGoal:
        raw = await self._store.get_goal(goal_id)
        goal = normalize_goal(raw) if raw is not None else None
        if goal is None:
            raise NotFoundError(f"Savings goal not found: {goal_id}")
        return goal

    async def create_goal(
        self,
        name: str,
        target_amount: Any,
        saved_amount: Any = 0,
        duration_type: DurationType = DurationType.MONTHLY,
        deadline: Optional[datetime] = None,
        duration_months: Any = None,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SavingsGoal, FeasibilityCheck]:
        """
        Create a savings goal.

        The target is checked against current remaining income (all-time
        income minus expenses). An unachievable goal is STILL created; the
        check only produces a warning.

        Args:
            name: Goal name (required)
            target_amount: Positive target
            saved_amount: Amount already put aside
            duration_type: Pacing of the goal
            deadline: Explicit deadline; when None it is derived from
                duration_months (default 3 months from now)
            duration_months: Duration used when no deadline is given
            now: Reference time

        Returns:
            (stored goal, feasibility check)

        Raises:
            ValueError: If the name is blank
            InvalidAmountError: If the target is not a positive number
        """
        correlation_id = correlation_id or create_correlation_id()
        now = now or utc_now()

        name = (name or "").strip()
        if not name:
            raise ValueError("Goal name is required")
        target = _positive_amount(target_amount)

        income = normalize_incomes(await self._store.fetch_income())
        expenses = normalize_expenses(await self._store.fetch_expenses())
        feasibility = check_goal_feasibility(
            target,
            total_amount(income),
            total_amount(expenses),
            display=self._display,
        )

        goal = SavingsGoal(
            name=name,
            target_amount=target,
            saved_amount=max(0.0, validate_number(saved_amount)),
            duration_type=DurationType(duration_type),
            deadline=deadline or deadline_from_duration(duration_months, now),
            status=GoalStatus.ONGOING,
            timestamp=now,
        )
        goal_id = await self._store.add_goal(goal_to_record(goal))
        goal = goal.model_copy(update={"id": goal_id})

        logger.info("goal_created", goal_id=goal_id, achievable=feasibility.achievable)
        if self._audit_logger:
            await self._audit_logger.log_goal_created(
                goal_id=goal_id,
                name=goal.name,
                target_amount=goal.target_amount,
                correlation_id=correlation_id,
            )
            if not feasibility.achievable:
                await self._audit_logger.log_goal_feasibility_warning(
                    goal_id=goal_id,
                    target_amount=feasibility.target_amount,
                    remaining_income=feasibility.remaining_income,
                    correlation_id=correlation_id,
                )

        return goal, feasibility

    async def refresh_status(
        self,
        goal_id: str,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SavingsGoal:
        """
        Re-evaluate a goal against its deadline.

        An ongoing goal whose deadline has passed is persisted as completed.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        goal = await self._load(goal_id)
        status = evaluate_goal_status(goal, now)
        if status == goal.status:
            return goal

        await self._store.update_goal(goal_id, {"status": status.value})
        if self._audit_logger:
            await self._audit_logger.log_goal_completed(
                goal_id=goal_id,
                deadline=goal.deadline,
                correlation_id=correlation_id or create_correlation_id(),
            )
        return goal.model_copy(update={"status": status})

    async def refresh_all(self, now: Optional[datetime] = None) -> list[SavingsGoal]:
        """Re-evaluate every stored goal; returns the goals with current statuses."""
        goals = []
        for raw in await self._store.fetch_savings_goals():
            goal = normalize_goal(raw)
            if goal is None:
                continue
            goals.append(await self.refresh_status(goal.id, now))
        return goals

    async def add_amount(
        self,
        goal_id: str,
        amount: Any,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SavingsGoal:
        """
        Add money to a goal.

        When the new saved amount reaches the target the goal is achieved
        automatically and closed.

        Raises:
            NotFoundError: If the goal doesn't exist
            InvalidAmountError: If amount is not a positive number
        """
        correlation_id = correlation_id or create_correlation_id()
        value = _positive_amount(amount)
        goal = await self._load(goal_id)

        saved = goal.saved_amount + value
        await self._store.update_goal(goal_id, {"savedAmount": saved})
        goal = goal.model_copy(update={"saved_amount": saved})

        if self._audit_logger:
            await self._audit_logger.log_goal_amount_added(
                goal_id=goal_id,
                amount=value,
                saved_amount=saved,
                correlation_id=correlation_id,
            )

        if goal.target_amount > 0 and saved >= goal.target_amount:
            return await self._close(goal, GoalStatus.ARCHIVED, now, correlation_id, amount=saved)
        return goal

    async def mark_achieved(
        self,
        goal_id: str,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SavingsGoal:
        """Close a goal as achieved, moving its saved amount into savings."""
        goal = await self._load(goal_id)
        return await self._close(
            goal, GoalStatus.ARCHIVED, now, correlation_id or create_correlation_id(),
            amount=goal.saved_amount,
        )

    async def mark_not_achieved(
        self,
        goal_id: str,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> SavingsGoal:
        """Close a goal as not achieved; a zero-amount saving records the outcome."""
        goal = await self._load(goal_id)
        return await self._close(
            goal, GoalStatus.NOT_ACHIEVED, now, correlation_id or create_correlation_id(),
            amount=0.0,
        )

    async def _close(
        self,
        goal: SavingsGoal,
        status: GoalStatus,
        now: Optional[datetime],
        correlation_id: UUID,
        amount: float,
    ) -> SavingsGoal:
        label = "Goal achieved" if status == GoalStatus.ARCHIVED else "Goal not achieved"
        await self._store.add_saving({
            "amount": amount,
            "description": f"{label}: {goal.name}",
            "timestamp": now or utc_now(),
        })
        await self._store.delete_goal(goal.id)

        if self._audit_logger:
            if status == GoalStatus.ARCHIVED:
                await self._audit_logger.log_goal_achieved(
                    goal_id=goal.id,
                    name=goal.name,
                    saved_amount=goal.saved_amount,
                    correlation_id=correlation_id,
                )
            else:
                await self._audit_logger.log_goal_not_achieved(
                    goal_id=goal.id,
                    name=goal.name,
                    correlation_id=correlation_id,
                )

        return goal.model_copy(update={"status": status})
