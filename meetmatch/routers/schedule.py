# meetmatch/routers/schedule.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from meetmatch.config import get_settings
from meetmatch.db.session import get_db
from meetmatch.schemas.scheduling import (
    DayScheduleOut,
    DisplaySlotOut,
    FreeSlotGroupOut,
    FreeSlotRequest,
    SuggestionOut,
    SuggestionRequest,
    WeekScheduleOut,
)
from meetmatch.services.free_slot_service import DisplaySlot, aggregate_free_slots
from meetmatch.services.schedule_service import plan_day, plan_week
from meetmatch.services.slot_engine import find_optimal_time_slots
from meetmatch.services.time_utils import BusyInterval, InvalidParameters, TimeWindow

router = APIRouter(prefix="/schedule", tags=["schedule"])


def _check_duration(duration_minutes: int) -> None:
    settings = get_settings()
    if not settings.MIN_DURATION_MINUTES <= duration_minutes <= settings.MAX_DURATION_MINUTES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"duration_minutes must be between {settings.MIN_DURATION_MINUTES} "
                f"and {settings.MAX_DURATION_MINUTES}"
            ),
        )


def _window(start: Optional[str], end: Optional[str]) -> TimeWindow:
    settings = get_settings()
    try:
        return TimeWindow.from_strings(
            start or settings.DEFAULT_WINDOW_START,
            end or settings.DEFAULT_WINDOW_END,
        )
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))


def _suggestion_out(s) -> SuggestionOut:
    return SuggestionOut(
        start_time=s.start_time,
        end_time=s.end_time,
        available_users=s.available_users,
        conflict_users=s.conflict_users,
        score=s.score,
    )


def _group_out(g) -> FreeSlotGroupOut:
    return FreeSlotGroupOut(start_time=g.start_time, end_time=g.end_time, duration=g.duration)


@router.post("/suggestions", response_model=List[SuggestionOut])
def suggest_time_slots(req: SuggestionRequest) -> List[SuggestionOut]:
    """
    Rank meeting slots for an explicit set of busy intervals.

    Example input:
      {
        "busy_by_participant": {
          "a@example.com": [{"start": "2025-01-06T09:00:00", "end": "2025-01-06T09:30:00"}],
          "b@example.com": []
        },
        "target_date": "2025-01-06",
        "duration_minutes": 30,
        "time_range": {"start": "09:00", "end": "10:00"},
        "max_suggestions": 1
      }
    """
    settings = get_settings()
    _check_duration(req.duration_minutes)
    window = (
        _window(req.time_range.start, req.time_range.end)
        if req.time_range
        else _window(None, None)
    )
    busy = {
        participant_id: [BusyInterval(start=iv.start, end=iv.end) for iv in intervals]
        for participant_id, intervals in req.busy_by_participant.items()
    }
    max_suggestions = (
        req.max_suggestions
        if req.max_suggestions is not None
        else settings.DEFAULT_MAX_SUGGESTIONS
    )

    try:
        suggestions = find_optimal_time_slots(
            busy,
            req.duration_minutes,
            window,
            req.target_date,
            max_suggestions,
            step_minutes=settings.CANDIDATE_STEP_MINUTES,
        )
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [_suggestion_out(s) for s in suggestions]


@router.post("/free-slots", response_model=List[FreeSlotGroupOut])
def group_free_slots(req: FreeSlotRequest) -> List[FreeSlotGroupOut]:
    """
    Merge one day's annotated grid cells into contiguous fully-free groups.
    Cells must be sent in chronological order.
    """
    settings = get_settings()
    slots = [
        DisplaySlot(
            time=s.time,
            available_count=s.available_count,
            total_participants=s.total_participants,
            is_suggested=s.is_suggested,
        )
        for s in req.display_slots
    ]
    try:
        groups = aggregate_free_slots(
            slots,
            min_duration_minutes=(
                req.min_duration_minutes
                if req.min_duration_minutes is not None
                else settings.MIN_FREE_SLOT_MINUTES
            ),
            grid_step_minutes=(
                req.grid_step_minutes
                if req.grid_step_minutes is not None
                else settings.DISPLAY_GRID_MINUTES
            ),
        )
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return [_group_out(g) for g in groups]


@router.get("/day", response_model=DayScheduleOut)
def get_day_schedule(
        target_date: date = Query(..., alias="date"),
        start: Optional[str] = None,
        end: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        max_suggestions: Optional[int] = Query(default=None, ge=0),
        participant: Optional[List[str]] = Query(default=None),
        db: Session = Depends(get_db),
) -> DayScheduleOut:
    """
    Suggestions, annotated grid and free groups for the stored
    participants (all of them unless `participant` is repeated).
    """
    settings = get_settings()
    if duration_minutes is None:
        duration_minutes = settings.DEFAULT_DURATION_MINUTES
    _check_duration(duration_minutes)
    window = _window(start, end)

    try:
        day = plan_day(
            db,
            target_date=target_date,
            window=window,
            duration_minutes=duration_minutes,
            max_suggestions=(
                max_suggestions
                if max_suggestions is not None
                else settings.DEFAULT_MAX_SUGGESTIONS
            ),
            participant_ids=participant,
        )
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DayScheduleOut(
        day=day.day,
        participants=day.participants,
        suggestions=[_suggestion_out(s) for s in day.suggestions],
        display_slots=[
            DisplaySlotOut(
                time=s.time,
                available_count=s.available_count,
                total_participants=s.total_participants,
                is_suggested=s.is_suggested,
                is_fully_free=s.is_fully_free,
            )
            for s in day.display_slots
        ],
        free_slot_groups=[_group_out(g) for g in day.free_slot_groups],
    )


@router.get("/week", response_model=WeekScheduleOut)
def get_week_schedule(
        target_date: date = Query(..., alias="date"),
        start: Optional[str] = None,
        end: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        max_suggestions: Optional[int] = Query(default=None, ge=0),
        participant: Optional[List[str]] = Query(default=None),
        db: Session = Depends(get_db),
) -> WeekScheduleOut:
    settings = get_settings()
    if duration_minutes is None:
        duration_minutes = settings.DEFAULT_DURATION_MINUTES
    _check_duration(duration_minutes)
    window = _window(start, end)

    try:
        week = plan_week(
            db,
            target_date=target_date,
            window=window,
            duration_minutes=duration_minutes,
            max_suggestions=(
                max_suggestions
                if max_suggestions is not None
                else settings.DEFAULT_MAX_SUGGESTIONS
            ),
            participant_ids=participant,
        )
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return WeekScheduleOut(
        week_start=week.week_start,
        participants=week.participants,
        suggestions=[_suggestion_out(s) for s in week.suggestions],
        free_slot_groups={
            day: [_group_out(g) for g in groups]
            for day, groups in week.free_slot_groups.items()
        },
    )
