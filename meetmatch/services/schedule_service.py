# meetmatch/services/schedule_service.py
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from meetmatch.config import get_settings
from meetmatch.services.busy_interval_service import load_busy_by_participant
from meetmatch.services.free_slot_service import (
    DisplaySlot,
    FreeSlotGroup,
    aggregate_free_slots,
    aggregate_week,
    build_display_slots,
    week_days,
)
from meetmatch.services.slot_engine import Suggestion, find_optimal_time_slots
from meetmatch.services.time_utils import TimeWindow


@dataclass
class DaySchedule:
    day: date
    participants: List[str]
    suggestions: List[Suggestion]
    display_slots: List[DisplaySlot]
    free_slot_groups: List[FreeSlotGroup]


@dataclass
class WeekSchedule:
    week_start: date
    participants: List[str]
    suggestions: List[Suggestion]
    free_slot_groups: Dict[str, List[FreeSlotGroup]]


def _day_bounds(first: date, last: date):
    return datetime.combine(first, time.min), datetime.combine(last + timedelta(days=1), time.min)


def plan_day(
    db: Session,
    *,
    target_date: date,
    window: TimeWindow,
    duration_minutes: int,
    max_suggestions: int,
    participant_ids: Optional[Sequence[str]] = None,
) -> DaySchedule:
    """
    Everything the day view needs for the stored participants:
    ranked suggestions, the annotated grid (suggested cells marked) and
    the free groups left over.
    """
    settings = get_settings()
    time_min, time_max = _day_bounds(target_date, target_date)
    busy = load_busy_by_participant(db, time_min, time_max, participant_ids)

    suggestions = find_optimal_time_slots(
        busy,
        duration_minutes,
        window,
        target_date,
        max_suggestions,
        step_minutes=settings.CANDIDATE_STEP_MINUTES,
    )
    slots = build_display_slots(
        busy,
        window,
        target_date,
        grid_step_minutes=settings.DISPLAY_GRID_MINUTES,
        suggestions=suggestions,
    )
    groups = aggregate_free_slots(
        slots,
        min_duration_minutes=settings.MIN_FREE_SLOT_MINUTES,
        grid_step_minutes=settings.DISPLAY_GRID_MINUTES,
    )
    return DaySchedule(
        day=target_date,
        participants=list(busy),
        suggestions=suggestions,
        display_slots=slots,
        free_slot_groups=groups,
    )


def plan_week(
    db: Session,
    *,
    target_date: date,
    window: TimeWindow,
    duration_minutes: int,
    max_suggestions: int,
    participant_ids: Optional[Sequence[str]] = None,
) -> WeekSchedule:
    """
    Suggestions are ranked for `target_date` only; free groups are
    computed for every day of its Monday-starting week.
    """
    settings = get_settings()
    days = week_days(target_date)
    time_min, time_max = _day_bounds(days[0], days[-1])
    busy = load_busy_by_participant(db, time_min, time_max, participant_ids)

    suggestions = find_optimal_time_slots(
        busy,
        duration_minutes,
        window,
        target_date,
        max_suggestions,
        step_minutes=settings.CANDIDATE_STEP_MINUTES,
    )
    groups = aggregate_week(
        busy,
        window,
        target_date,
        min_duration_minutes=settings.MIN_FREE_SLOT_MINUTES,
        grid_step_minutes=settings.DISPLAY_GRID_MINUTES,
        suggestions=suggestions,
    )
    return WeekSchedule(
        week_start=days[0],
        participants=list(busy),
        suggestions=suggestions,
        free_slot_groups=groups,
    )
