"""
Normalization & Validation

Turns loosely-typed store records into safe, canonical models before any
arithmetic happens.

DESIGN DECISION: Normalization NEVER raises.
Every malformed value is replaced by a usable default:
- Non-numeric, NaN or infinite numbers -> the caller's default (0)
- Numbers outside the configured bound -> clamped to the bound
- Wrong collection types -> an empty collection
- Unparseable timestamps -> None

The clamp bound (default one billion) is a guard against pathological
inputs corrupting sums and charts. It is not a business rule and lives in
NormalizationSettings.

Callers that must tell "missing" apart from "zero" have to look at the raw
record before it gets here.
"""

import hashlib
import math
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable, Optional, TypeVar

import structlog

from cashtrack.config import NormalizationSettings, get_settings
from cashtrack.models.finance import (
    BackupContents,
    Category,
    CategoryType,
    DurationType,
    Expense,
    GoalStatus,
    Income,
    Saving,
    SavingsGoal,
)


logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Raw status strings written by older app versions and by backups
GOAL_STATUS_ALIASES = {
    "ongoing": GoalStatus.ONGOING,
    "completed": GoalStatus.COMPLETED,
    "archived": GoalStatus.ARCHIVED,
    "achieved": GoalStatus.ARCHIVED,
    "not achieved": GoalStatus.NOT_ACHIEVED,
    "not_achieved": GoalStatus.NOT_ACHIEVED,
}


def utc_now() -> datetime:
    """Current time as a naive UTC datetime (the engine's canonical form)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# PRIMITIVES
# =============================================================================

def validate_number(
    value: Any,
    default: float = 0,
    settings: Optional[NormalizationSettings] = None,
) -> float:
    """
    Coerce a value to a finite, bounded float.

    Returns `default` when the value is not numeric, NaN or infinite;
    otherwise clamps it to [-amount_bound, amount_bound].
    """
    bound = (settings or get_settings().normalization).amount_bound

    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float, Decimal)):
        try:
            num = float(value)
        except (OverflowError, ValueError):
            return default
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            num = float(text)
        except ValueError:
            return default
    else:
        return default

    if math.isnan(num) or math.isinf(num):
        return default

    return max(-bound, min(bound, num))


def validate_array(value: Any, default: Optional[list] = None) -> list:
    """Return the value as a list if it is one (or a tuple), else the default."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [] if default is None else default


def validate_object(value: Any, default: Optional[dict] = None) -> dict:
    """Return the value as a dict if it is a plain mapping, else the default."""
    if isinstance(value, Mapping):
        return dict(value)
    return {} if default is None else default


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a timestamp into a naive UTC datetime.

    Accepts datetimes (aware ones are converted to UTC), dates, ISO-8601
    strings (a trailing "Z" is allowed), epoch seconds, and store-native
    {"seconds": ..., "nanoseconds": ...} mappings.

    Returns None for anything it cannot read.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    if isinstance(value, date):
        return datetime.combine(value, time())

    if isinstance(value, (int, float)):
        return _from_epoch(float(value))

    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            extra = nanos / 1e9 if isinstance(nanos, (int, float)) else 0
            return _from_epoch(float(seconds) + extra)
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return parse_timestamp(datetime.fromisoformat(text))
        except ValueError:
            pass
        try:
            return _from_epoch(float(text))
        except ValueError:
            return None

    return None


def _from_epoch(seconds: float) -> Optional[datetime]:
    if math.isnan(seconds) or math.isinf(seconds):
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError):
        return None


def _pick(raw: Mapping, *keys: str) -> Any:
    """First non-None value among the given keys."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return None
    text = str(value).strip()
    return text or None


def _fallback_id(kind: str, raw: Mapping, position: int = 0) -> str:
    """
    Stable id for a record that arrives without one (backups carry no ids).

    Derived from the record kind, its position in its collection and its
    content, so normalizing the same input twice yields the same ids.
    """
    content = sorted((str(key), repr(value)) for key, value in raw.items())
    digest = hashlib.sha1(f"{kind}:{position}:{content}".encode("utf-8"))
    return digest.hexdigest()[:32]


def _record_id(raw: Mapping, kind: str, position: int) -> str:
    return _clean_text(raw.get("id")) or _fallback_id(kind, raw, position)


# =============================================================================
# RECORDS
# =============================================================================

def normalize_income(
    raw: Any,
    settings: Optional[NormalizationSettings] = None,
    position: int = 0,
) -> Optional[Income]:
    """Coerce one raw income record. Returns None if it is not a mapping."""
    if isinstance(raw, Income):
        return raw
    if not isinstance(raw, Mapping):
        return None

    return Income(
        id=_record_id(raw, "income", position),
        amount=validate_number(raw.get("amount"), settings=settings),
        category=_clean_text(raw.get("category")),
        timestamp=parse_timestamp(raw.get("timestamp")),
    )


def normalize_expense(
    raw: Any,
    settings: Optional[NormalizationSettings] = None,
    position: int = 0,
) -> Optional[Expense]:
    """Coerce one raw expense record. Returns None if it is not a mapping."""
    if isinstance(raw, Expense):
        return raw
    if not isinstance(raw, Mapping):
        return None

    return Expense(
        id=_record_id(raw, "expense", position),
        amount=validate_number(raw.get("amount"), settings=settings),
        category=_clean_text(raw.get("category")),
        description=_clean_text(raw.get("description")) or "",
        timestamp=parse_timestamp(raw.get("timestamp")),
    )


def normalize_saving(
    raw: Any,
    settings: Optional[NormalizationSettings] = None,
    position: int = 0,
) -> Optional[Saving]:
    """Coerce one raw savings-history record."""
    if isinstance(raw, Saving):
        return raw
    if not isinstance(raw, Mapping):
        return None

    return Saving(
        id=_record_id(raw, "saving", position),
        amount=validate_number(raw.get("amount"), settings=settings),
        description=_clean_text(raw.get("description")) or "",
        timestamp=parse_timestamp(raw.get("timestamp")),
    )


def normalize_goal_status(value: Any) -> GoalStatus:
    """Map a raw status string to GoalStatus; missing or unknown means ongoing."""
    if isinstance(value, GoalStatus):
        return value
    text = _clean_text(value)
    if text is None:
        return GoalStatus.ONGOING
    return GOAL_STATUS_ALIASES.get(text.lower(), GoalStatus.ONGOING)


def _duration_type(value: Any) -> DurationType:
    text = _clean_text(value)
    try:
        return DurationType(text.lower()) if text else DurationType.MONTHLY
    except ValueError:
        return DurationType.MONTHLY


def normalize_goal(
    raw: Any,
    settings: Optional[NormalizationSettings] = None,
    position: int = 0,
) -> Optional[SavingsGoal]:
    """
    Coerce one raw savings goal.

    Accepts the stored field names (goalName, targetAmount, savedAmount,
    durationType, goalDeadline), the creation-form names (name, amount)
    and snake_case names.
    """
    if isinstance(raw, SavingsGoal):
        return raw
    if not isinstance(raw, Mapping):
        return None

    return SavingsGoal(
        id=_record_id(raw, "goal", position),
        name=_clean_text(_pick(raw, "goalName", "name")) or "",
        target_amount=validate_number(
            _pick(raw, "targetAmount", "target_amount", "amount"), settings=settings
        ),
        saved_amount=validate_number(
            _pick(raw, "savedAmount", "saved_amount"), settings=settings
        ),
        duration_type=_duration_type(_pick(raw, "durationType", "duration_type")),
        deadline=parse_timestamp(_pick(raw, "goalDeadline", "deadline")),
        status=normalize_goal_status(raw.get("status")),
        timestamp=parse_timestamp(raw.get("timestamp")),
    )


def normalize_category(raw: Any, position: int = 0) -> Optional[Category]:
    """
    Coerce one raw category.

    Categories without a recognizable type or with a blank name are dropped.
    """
    if isinstance(raw, Category):
        return raw
    if not isinstance(raw, Mapping):
        return None

    name = _clean_text(raw.get("name"))
    type_text = _clean_text(raw.get("type"))
    if not name or not type_text:
        return None
    try:
        category_type = CategoryType(type_text.lower())
    except ValueError:
        return None

    return Category(
        id=_record_id(raw, "category", position),
        type=category_type,
        name=name,
        created_at=parse_timestamp(_pick(raw, "createdAt", "created_at", "timestamp")),
    )


# =============================================================================
# COLLECTIONS
# =============================================================================

def _normalize_all(
    raw: Any,
    normalizer: Callable[[Any, int], Optional[T]],
    label: str,
) -> list[T]:
    items = validate_array(raw)
    records = []
    for position, item in enumerate(items):
        record = normalizer(item, position)
        if record is None:
            logger.debug("record_dropped", collection=label, value_type=type(item).__name__)
            continue
        records.append(record)
    return records


def normalize_incomes(raw: Any, settings: Optional[NormalizationSettings] = None) -> list[Income]:
    return _normalize_all(raw, lambda r, i: normalize_income(r, settings, i), "income")


def normalize_expenses(raw: Any, settings: Optional[NormalizationSettings] = None) -> list[Expense]:
    return _normalize_all(raw, lambda r, i: normalize_expense(r, settings, i), "expenses")


def normalize_savings(raw: Any, settings: Optional[NormalizationSettings] = None) -> list[Saving]:
    return _normalize_all(raw, lambda r, i: normalize_saving(r, settings, i), "savings")


def normalize_goals(raw: Any, settings: Optional[NormalizationSettings] = None) -> list[SavingsGoal]:
    return _normalize_all(raw, lambda r, i: normalize_goal(r, settings, i), "savings_goals")


def normalize_categories(raw: Any) -> list[Category]:
    return _normalize_all(raw, normalize_category, "categories")


def normalize_backup(
    payload: Any,
    settings: Optional[NormalizationSettings] = None,
) -> BackupContents:
    """
    Normalize a decoded backup payload.

    Restored records go through exactly the same coercion as live data.
    A payload that is not a mapping yields an empty BackupContents.
    """
    data = validate_object(payload)

    return BackupContents(
        income=normalize_incomes(data.get("income"), settings),
        expenses=normalize_expenses(data.get("expenses"), settings),
        savings=normalize_savings(data.get("savings"), settings),
        savings_goals=normalize_goals(_pick(data, "savingsGoals", "savings_goals"), settings),
        settings=validate_object(data.get("settings")),
        profile=validate_object(data.get("profile")),
        backup_date=parse_timestamp(_pick(data, "backupDate", "backup_date")),
        app_version=_clean_text(_pick(data, "appVersion", "app_version")),
    )
