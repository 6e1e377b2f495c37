# FILE: medvanta/backend/programs/schedule.py

"""
WORKOUT SCHEDULE STRUCTURE

A schedule is a list of weeks; each week holds exactly seven days; each
day is an ordered list of items {"id": str, "type": "exercise_template" | "group"}.

Clients may also send days in the wrapped form {"exercises": [...]};
both forms normalize to the flat list.
"""

import copy
from typing import Iterator, List, Tuple

from django.conf import settings

from core.exceptions import ScheduleException
from core.hashing import content_hash

ITEM_EXERCISE_TEMPLATE = "exercise_template"
ITEM_GROUP = "group"
ITEM_TYPES = (ITEM_EXERCISE_TEMPLATE, ITEM_GROUP)


def days_per_week() -> int:
    return settings.PROGRAM_CONFIG["DAYS_PER_WEEK"]


def empty_week() -> List[list]:
    return [[] for _ in range(days_per_week())]


def _day_items(day) -> list:
    if day is None:
        return []
    if isinstance(day, dict):
        day = day.get("exercises")
        if day is None:
            return []
    if not isinstance(day, (list, tuple)):
        raise ScheduleException("Each schedule day must be a list of items.")
    return list(day)


def _normalize_item(item) -> dict:
    if not isinstance(item, dict):
        raise ScheduleException("Schedule items must be objects with id and type.")
    item_type = item.get("type")
    item_id = item.get("id")
    if item_type not in ITEM_TYPES:
        raise ScheduleException(f"Unknown schedule item type: {item_type!r}")
    if not item_id or not isinstance(item_id, str):
        raise ScheduleException("Schedule items need a string id.")
    return {"id": item_id, "type": item_type}


def normalize_day(day) -> List[dict]:
    return [_normalize_item(item) for item in _day_items(day)]


def normalize_schedule(raw) -> List[List[List[dict]]]:
    """
    Normalize a client schedule to weeks of exactly seven flat days.

    An empty or missing schedule becomes a single week of empty days.
    Extra days beyond the seventh are dropped.
    """
    if not raw:
        return [empty_week()]
    if not isinstance(raw, (list, tuple)):
        raise ScheduleException("A schedule must be a list of weeks.")

    weeks = []
    for week in raw:
        if week is None:
            week = []
        if not isinstance(week, (list, tuple)):
            raise ScheduleException("Each schedule week must be a list of days.")
        weeks.append([
            normalize_day(week[day_index] if day_index < len(week) else None)
            for day_index in range(days_per_week())
        ])
    return weeks


def schedule_hash(schedule) -> str:
    return content_hash(normalize_schedule(schedule))


def merge_with_override(base, override) -> list:
    """
    Overlay a patient override on a base schedule.

    An override day replaces the base day only when it holds at least one
    item; empty override days leave the base untouched. The base grows
    with empty weeks and days where the override reaches past it.
    """
    if not base:
        return normalize_schedule(override) if override else []
    if not override:
        return copy.deepcopy(base)

    merged = normalize_schedule(base)
    for week_index, override_week in enumerate(override):
        if not override_week:
            continue
        for day_index, override_day in enumerate(override_week):
            items = normalize_day(override_day)
            if not items:
                continue
            while len(merged) <= week_index:
                merged.append(empty_week())
            while len(merged[week_index]) <= day_index:
                merged[week_index].append([])
            merged[week_index][day_index] = items
    return merged


def iter_days(schedule) -> Iterator[Tuple[int, int, List[dict]]]:
    """Yield (week_index, day_index, items) for every day of a stored schedule."""
    for week_index, week in enumerate(schedule or []):
        for day_index, day in enumerate(week or []):
            yield week_index, day_index, _day_items(day)


def referenced_ids(schedule) -> Tuple[List[str], List[str]]:
    """Distinct (exercise_template_ids, group_ids) in first-seen order."""
    template_ids, group_ids = {}, {}
    for _, _, items in iter_days(schedule):
        for item in items:
            if not isinstance(item, dict):
                continue
            if item.get("type") == ITEM_EXERCISE_TEMPLATE:
                template_ids[item.get("id")] = None
            elif item.get("type") == ITEM_GROUP:
                group_ids[item.get("id")] = None
    return list(template_ids), list(group_ids)

