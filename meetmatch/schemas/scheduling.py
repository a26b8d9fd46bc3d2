# meetmatch/schemas/scheduling.py
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from meetmatch.config import get_settings
from meetmatch.services.time_utils import InvalidParameters, parse_hhmm, to_reference_time


def reference_local(value: datetime) -> datetime:
    """Drop any UTC offset by converting to the reference calendar's local time."""
    return to_reference_time(value, get_settings().REFERENCE_TIMEZONE)


class TimeRange(BaseModel):
    start: str = Field(description="HH:MM")
    end: str = Field(description="HH:MM")

    @model_validator(mode="after")
    def check_start_before_end(self) -> "TimeRange":
        try:
            start, end = parse_hhmm(self.start), parse_hhmm(self.end)
        except InvalidParameters as e:
            raise ValueError(str(e)) from e
        if start >= end:
            raise ValueError("time range start must be before end")
        return self


class BusyIntervalIn(BaseModel):
    start: datetime
    end: datetime
    summary: Optional[str] = None

    @field_validator("start", "end")
    def to_reference_local(cls, v: datetime) -> datetime:
        return reference_local(v)

    @model_validator(mode="after")
    def check_end_after_start(self) -> "BusyIntervalIn":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class SuggestionRequest(BaseModel):
    busy_by_participant: Dict[str, List[BusyIntervalIn]]
    target_date: date
    duration_minutes: int
    time_range: Optional[TimeRange] = None
    max_suggestions: Optional[int] = None

    @field_validator("duration_minutes")
    def validate_duration(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("duration_minutes must be positive")
        return v

    @field_validator("max_suggestions")
    def validate_max_suggestions(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("max_suggestions must not be negative")
        return v


class SuggestionOut(BaseModel):
    start_time: datetime
    end_time: datetime
    available_users: List[str]
    conflict_users: List[str]
    score: float


class DisplaySlotIn(BaseModel):
    time: datetime
    available_count: int = Field(ge=0)
    total_participants: int = Field(ge=0)
    is_suggested: bool = False

    @model_validator(mode="after")
    def check_counts(self) -> "DisplaySlotIn":
        if self.available_count > self.total_participants:
            raise ValueError("available_count cannot exceed total_participants")
        return self


class DisplaySlotOut(BaseModel):
    time: datetime
    available_count: int
    total_participants: int
    is_suggested: bool
    is_fully_free: bool


class FreeSlotRequest(BaseModel):
    display_slots: List[DisplaySlotIn]
    min_duration_minutes: Optional[int] = None
    grid_step_minutes: Optional[int] = None


class FreeSlotGroupOut(BaseModel):
    start_time: datetime
    end_time: datetime
    duration: int


class DayScheduleOut(BaseModel):
    day: date
    participants: List[str]
    suggestions: List[SuggestionOut]
    display_slots: List[DisplaySlotOut]
    free_slot_groups: List[FreeSlotGroupOut]


class WeekScheduleOut(BaseModel):
    week_start: date
    participants: List[str]
    suggestions: List[SuggestionOut]
    free_slot_groups: Dict[str, List[FreeSlotGroupOut]]
