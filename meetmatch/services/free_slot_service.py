# meetmatch/services/free_slot_service.py
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Sequence

from meetmatch.services.slot_engine import Suggestion
from meetmatch.services.time_utils import (
    BusyInterval,
    InvalidParameters,
    TimeWindow,
    has_conflict,
    validate_intervals,
    validate_window,
)

logger = logging.getLogger(__name__)

DISPLAY_GRID_MINUTES = 30


@dataclass
class DisplaySlot:
    time: datetime
    available_count: int
    total_participants: int
    is_suggested: bool = False

    @property
    def is_fully_free(self) -> bool:
        return self.total_participants > 0 and self.available_count == self.total_participants


@dataclass
class FreeSlotGroup:
    start_time: datetime
    end_time: datetime
    duration: int  # minutes
    slots: List[DisplaySlot] = field(default_factory=list)


def _validate_grid(grid_step_minutes: int) -> None:
    if grid_step_minutes <= 0:
        raise InvalidParameters("grid_step_minutes must be positive")


def build_display_slots(
    busy_by_participant: Dict[str, Sequence[BusyInterval]],
    window: TimeWindow,
    day: date,
    grid_step_minutes: int = DISPLAY_GRID_MINUTES,
    suggestions: Iterable[Suggestion] = (),
) -> List[DisplaySlot]:
    """
    Annotate one day's grid cells with how many participants are free.

    Cells start at window.start and are kept while the whole cell fits
    inside the window. A participant is busy in a cell when any of their
    intervals overlaps [cell, cell + step), the same test the engine uses,
    so a fully free cell never disagrees with a 100-score suggestion.

    A cell is marked suggested when a suggestion starts exactly at it.
    """
    validate_window(window)
    _validate_grid(grid_step_minutes)
    validate_intervals(busy_by_participant)

    window_start, window_end = window.anchor(day)
    step = timedelta(minutes=grid_step_minutes)
    total = len(busy_by_participant)
    suggested_starts = {s.start_time for s in suggestions}

    slots: List[DisplaySlot] = []
    t = window_start
    while t + step <= window_end:
        busy_count = sum(
            1
            for intervals in busy_by_participant.values()
            if has_conflict(t, t + step, intervals)
        )
        slots.append(
            DisplaySlot(
                time=t,
                available_count=total - busy_count,
                total_participants=total,
                is_suggested=t in suggested_starts,
            )
        )
        t += step

    return slots


def _close_run(
    run: List[DisplaySlot],
    *,
    min_duration_minutes: int,
    grid_step_minutes: int,
    groups: List[FreeSlotGroup],
) -> None:
    if not run:
        return
    duration = len(run) * grid_step_minutes
    if duration < min_duration_minutes:
        # Too short to be useful
        return
    groups.append(
        FreeSlotGroup(
            start_time=run[0].time,
            end_time=run[-1].time + timedelta(minutes=grid_step_minutes),
            duration=duration,
            slots=list(run),
        )
    )


def aggregate_free_slots(
    display_slots: Sequence[DisplaySlot],
    min_duration_minutes: int,
    grid_step_minutes: int = DISPLAY_GRID_MINUTES,
) -> List[FreeSlotGroup]:
    """
    Merge consecutive fully-free display slots of one day into groups.

    Suggested slots break a run even when everyone is free there, so the
    grid does not highlight the same time twice. Runs shorter than
    `min_duration_minutes` are dropped.
    """
    _validate_grid(grid_step_minutes)
    if min_duration_minutes < 0:
        raise InvalidParameters("min_duration_minutes must not be negative")

    groups: List[FreeSlotGroup] = []
    run: List[DisplaySlot] = []

    for slot in display_slots:
        if slot.is_fully_free and not slot.is_suggested:
            run.append(slot)
            continue
        _close_run(
            run,
            min_duration_minutes=min_duration_minutes,
            grid_step_minutes=grid_step_minutes,
            groups=groups,
        )
        run = []

    # Handle last run
    _close_run(
        run,
        min_duration_minutes=min_duration_minutes,
        grid_step_minutes=grid_step_minutes,
        groups=groups,
    )
    return groups


def week_days(anchor: date) -> List[date]:
    """The seven dates of the Monday-starting week containing `anchor`."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def aggregate_week(
    busy_by_participant: Dict[str, Sequence[BusyInterval]],
    window: TimeWindow,
    anchor: date,
    min_duration_minutes: int,
    grid_step_minutes: int = DISPLAY_GRID_MINUTES,
    suggestions: Iterable[Suggestion] = (),
) -> Dict[str, List[FreeSlotGroup]]:
    """
    Free groups for each day of the week containing `anchor`, keyed by
    ISO date. Each day is aggregated on its own, so runs never cross
    midnight.
    """
    suggestions = list(suggestions)
    result: Dict[str, List[FreeSlotGroup]] = {}
    for day in week_days(anchor):
        slots = build_display_slots(
            busy_by_participant,
            window,
            day,
            grid_step_minutes=grid_step_minutes,
            suggestions=suggestions,
        )
        result[day.isoformat()] = aggregate_free_slots(
            slots,
            min_duration_minutes=min_duration_minutes,
            grid_step_minutes=grid_step_minutes,
        )

    logger.debug(
        "aggregated week of %s: %d groups",
        anchor.isoformat(),
        sum(len(g) for g in result.values()),
    )
    return result
