# FILE: medvanta/backend/programs/completion.py

"""
COMPLETION TRACKING

Pure helpers over the completion log stored on a program assignment.

The log is a list of weeks, each a list of days; a day is either null
(not started) or an object:

    {"status": "complete" | "incomplete", "started_at": str,
     "total_sets": int, "current_set": int, "completed_at": str | null}

Stored logs are loosely typed JSON, so parsing never raises: malformed
weeks become empty lists and malformed days become None.
"""

import math
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from django.utils import timezone

from programs.schedule import iter_days

DAYS_PER_WEEK = 7

STATUS_COMPLETE = "complete"
STATUS_INCOMPLETE = "incomplete"

RED = (239, 68, 68)
GREEN = (34, 197, 94)


@dataclass
class CompletionDay:
    """Progress recorded for one scheduled day"""
    status: str
    started_at: str = ""
    total_sets: int = 0
    current_set: int = 0
    completed_at: Optional[str] = None

    def to_dict(self):
        return asdict(self)


def _round(value: float) -> int:
    """Round half up, the way progress percentages are shown to admins."""
    return int(math.floor(value + 0.5))


def _as_int(value) -> int:
    if not value:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return int(number)


def _parse_day(raw) -> Optional[CompletionDay]:
    if not raw or not isinstance(raw, dict):
        return None
    status = raw.get("status")
    if status not in (STATUS_COMPLETE, STATUS_INCOMPLETE):
        return None
    completed_at = raw.get("completed_at")
    return CompletionDay(
        status=status,
        started_at=str(raw.get("started_at") or ""),
        total_sets=_as_int(raw.get("total_sets")),
        current_set=_as_int(raw.get("current_set")),
        completed_at=str(completed_at) if completed_at else None,
    )


def parse_completion(raw) -> List[List[Optional[CompletionDay]]]:
    if not raw or not isinstance(raw, list):
        return []
    return [
        [_parse_day(day) for day in week] if isinstance(week, list) else []
        for week in raw
    ]


def serialize_completion(parsed) -> list:
    return [
        [day.to_dict() if day is not None else None for day in week]
        for week in parsed
    ]


def completion_day(parsed, week_index: int, day_index: int) -> Optional[CompletionDay]:
    if 0 <= week_index < len(parsed) and 0 <= day_index < len(parsed[week_index]):
        return parsed[week_index][day_index]
    return None


# =============================================================================
# DATE ARITHMETIC
# =============================================================================

def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def _today(today=None) -> date:
    return _as_date(today) if today is not None else timezone.localdate()


def day_date(start_date, week_index: int, day_index: int) -> date:
    return _as_date(start_date) + timedelta(days=week_index * DAYS_PER_WEEK + day_index)


def end_date_for(start_date, weeks: int) -> date:
    return _as_date(start_date) + timedelta(days=weeks * DAYS_PER_WEEK)


def current_week_day(start_date, weeks: int, today=None) -> Optional[Tuple[int, int]]:
    """
    1-based (week, day) of the program on the given day.

    None before the start date; pinned to the last day once the program ended.
    """
    elapsed = (_today(today) - _as_date(start_date)).days
    if elapsed < 0 or weeks <= 0:
        return None
    elapsed = min(elapsed, weeks * DAYS_PER_WEEK - 1)
    return elapsed // DAYS_PER_WEEK + 1, elapsed % DAYS_PER_WEEK + 1


# =============================================================================
# PERCENTAGES
# =============================================================================

def day_completion(day: Optional[CompletionDay]) -> int:
    if day is None:
        return 0
    if day.status == STATUS_COMPLETE:
        return 100
    if day.total_sets == 0:
        return 0
    return _round(day.current_set / day.total_sets * 100)


def overall_completion(start_date, weeks: int, today=None) -> int:
    """Share of the program's calendar that has elapsed, 0-100."""
    total_days = weeks * DAYS_PER_WEEK
    if total_days <= 0:
        return 0
    elapsed = (_today(today) - _as_date(start_date)).days
    return _round(min(max(elapsed / total_days * 100, 0), 100))


def progress_color(percentage: float) -> str:
    """Interpolate red (0%) to green (100%) as a CSS rgb() string."""
    ratio = min(max(percentage, 0), 100) / 100
    r, g, b = (
        _round(low + (high - low) * ratio)
        for low, high in zip(RED, GREEN)
    )
    return f"rgb({r}, {g}, {b})"


def compliance(raw_completion, schedule, start_date, today=None) -> Optional[int]:
    """
    Mean completion of the scheduled days that are already due.

    Days with no items are rest days and do not count. Returns None when
    nothing was due yet.
    """
    parsed = parse_completion(raw_completion)
    today = _today(today)
    scores = [
        day_completion(completion_day(parsed, week_index, day_index))
        for week_index, day_index, items in iter_days(schedule)
        if items and day_date(start_date, week_index, day_index) <= today
    ]
    if not scores:
        return None
    return _round(sum(scores) / len(scores))


def record_progress(raw_completion, week_index: int, day_index: int,
                    current_set: int, total_sets: int, now=None) -> list:
    """
    Return a new completion log with one day updated.

    The first write keeps started_at; reaching total_sets marks the day
    complete and stamps completed_at.
    """
    now = now or timezone.now()
    parsed = parse_completion(raw_completion)
    while len(parsed) <= week_index:
        parsed.append([])
    week = parsed[week_index]
    while len(week) <= day_index:
        week.append(None)

    existing = week[day_index]
    current_set = max(0, min(current_set, total_sets)) if total_sets > 0 else max(0, current_set)
    done = total_sets > 0 and current_set >= total_sets

    week[day_index] = CompletionDay(
        status=STATUS_COMPLETE if done else STATUS_INCOMPLETE,
        started_at=existing.started_at if existing and existing.started_at else now.isoformat(),
        total_sets=total_sets,
        current_set=current_set,
        completed_at=now.isoformat() if done else None,
    )
    return serialize_completion(parsed)
