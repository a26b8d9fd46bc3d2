# meetmatch/services/slot_engine.py
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence

from meetmatch.services.time_utils import (
    BusyInterval,
    InvalidParameters,
    TimeWindow,
    has_conflict,
    validate_intervals,
    validate_window,
)

logger = logging.getLogger(__name__)

CANDIDATE_STEP_MINUTES = 15


@dataclass
class Suggestion:
    start_time: datetime
    end_time: datetime
    available_users: List[str] = field(default_factory=list)
    conflict_users: List[str] = field(default_factory=list)
    score: float = 0.0


def _compute_slot_score(*, available_count: int, participants_count: int) -> float:
    """
    Score = percentage of participants free for the slot.

    With no participants there is nothing to match, so every slot is 0
    rather than a perfect 100.
    """
    if participants_count <= 0:
        return 0.0
    return available_count / participants_count * 100


def _classify(
    slot_start: datetime,
    slot_end: datetime,
    busy_by_participant: Dict[str, Sequence[BusyInterval]],
):
    available: List[str] = []
    conflicts: List[str] = []
    for participant_id, intervals in busy_by_participant.items():
        if has_conflict(slot_start, slot_end, intervals):
            conflicts.append(participant_id)
        else:
            available.append(participant_id)
    return available, conflicts


def find_optimal_time_slots(
    busy_by_participant: Dict[str, Sequence[BusyInterval]],
    duration_minutes: int,
    window: TimeWindow,
    target_date: date,
    max_suggestions: int = 5,
    *,
    step_minutes: int = CANDIDATE_STEP_MINUTES,
) -> List[Suggestion]:
    """
    Rank candidate meeting slots on `target_date` inside `window`.

    Strategy:
      - Candidates start at window.start and step by `step_minutes`
        (15 by default) while start + duration fits before window.end
      - A participant conflicts with a candidate if any of their busy
        intervals overlaps it (half-open test)
      - Score = available / total * 100 (0 when nobody is passed in)
      - Every candidate is kept, sorted by score desc, then start asc
      - The first `max_suggestions` are returned

    Raises InvalidParameters before scanning when the input is malformed.
    """
    validate_window(window)
    if duration_minutes <= 0:
        raise InvalidParameters("duration_minutes must be positive")
    if max_suggestions < 0:
        raise InvalidParameters("max_suggestions must not be negative")
    if step_minutes <= 0:
        raise InvalidParameters("step_minutes must be positive")
    validate_intervals(busy_by_participant)

    window_start, window_end = window.anchor(target_date)
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=step_minutes)
    total = len(busy_by_participant)

    suggestions: List[Suggestion] = []

    t = window_start
    while t + duration <= window_end:
        slot_start = t
        slot_end = t + duration

        available, conflicts = _classify(slot_start, slot_end, busy_by_participant)
        suggestions.append(
            Suggestion(
                start_time=slot_start,
                end_time=slot_end,
                available_users=available,
                conflict_users=conflicts,
                score=_compute_slot_score(
                    available_count=len(available),
                    participants_count=total,
                ),
            )
        )
        t += step

    logger.debug(
        "scanned %d candidates for %d participants on %s",
        len(suggestions),
        total,
        target_date.isoformat(),
    )

    # Tie-breaker: earliest start_time
    suggestions.sort(key=lambda s: (-s.score, s.start_time))
    return suggestions[:max_suggestions]
