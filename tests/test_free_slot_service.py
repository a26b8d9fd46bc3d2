# tests/test_free_slot_service.py
from datetime import date, datetime, timedelta

import pytest

from meetmatch.services.free_slot_service import (
    DisplaySlot,
    aggregate_free_slots,
    aggregate_week,
    build_display_slots,
    week_days,
)
from meetmatch.services.slot_engine import find_optimal_time_slots
from meetmatch.services.time_utils import BusyInterval, InvalidParameters, TimeWindow

DAY = date(2025, 1, 6)


def _grid(pattern, start=datetime(2025, 1, 6, 9, 0), step=30):
    """Build display slots from a string like "FF.FFF" (F = everyone free)."""
    return [
        DisplaySlot(
            time=start + timedelta(minutes=step * i),
            available_count=2 if c == "F" else 1,
            total_participants=2,
        )
        for i, c in enumerate(pattern)
    ]


def test_busy_slot_splits_day_into_two_groups():
    slots = _grid("FF.FFF")

    groups = aggregate_free_slots(slots, min_duration_minutes=60, grid_step_minutes=30)

    assert len(groups) == 2
    assert groups[0].start_time == datetime(2025, 1, 6, 9, 0)
    assert groups[0].end_time == datetime(2025, 1, 6, 10, 0)
    assert groups[0].duration == 60
    assert groups[1].start_time == datetime(2025, 1, 6, 10, 30)
    assert groups[1].end_time == datetime(2025, 1, 6, 12, 0)
    assert groups[1].duration == 90
    assert len(groups[1].slots) == 3


def test_short_runs_are_dropped():
    slots = _grid("F.FF.F")

    groups = aggregate_free_slots(slots, min_duration_minutes=60, grid_step_minutes=30)

    assert [(g.start_time.strftime("%H:%M"), g.duration) for g in groups] == [("10:00", 60)]


def test_min_duration_below_grid_step_still_needs_one_free_slot():
    groups = aggregate_free_slots(_grid(".F."), min_duration_minutes=10, grid_step_minutes=30)
    assert [(g.start_time.strftime("%H:%M"), g.duration) for g in groups] == [("09:30", 30)]

    assert aggregate_free_slots(_grid("..."), min_duration_minutes=0, grid_step_minutes=30) == []


def test_all_free_day_is_one_group_and_all_busy_day_is_none():
    free = aggregate_free_slots(_grid("FFFFFF"), min_duration_minutes=30, grid_step_minutes=30)
    assert len(free) == 1
    assert free[0].start_time == datetime(2025, 1, 6, 9, 0)
    assert free[0].end_time == datetime(2025, 1, 6, 12, 0)
    assert free[0].duration == 180

    assert aggregate_free_slots(_grid("......"), min_duration_minutes=30, grid_step_minutes=30) == []


def test_suggested_slot_breaks_free_run():
    slots = _grid("FFFF")
    slots[1].is_suggested = True

    groups = aggregate_free_slots(slots, min_duration_minutes=30, grid_step_minutes=30)

    assert [(g.start_time.strftime("%H:%M"), g.end_time.strftime("%H:%M")) for g in groups] == [
        ("09:00", "09:30"),
        ("10:00", "11:00"),
    ]


def test_zero_participants_is_never_fully_free():
    slot = DisplaySlot(time=datetime(2025, 1, 6, 9, 0), available_count=0, total_participants=0)
    assert slot.is_fully_free is False
    assert aggregate_free_slots([slot], min_duration_minutes=0, grid_step_minutes=30) == []


def test_groups_are_ordered_and_disjoint():
    groups = aggregate_free_slots(
        _grid("FF.F.FFF..FF"), min_duration_minutes=30, grid_step_minutes=30
    )

    for prev, nxt in zip(groups, groups[1:]):
        assert prev.end_time < nxt.start_time
    assert all(g.duration >= 30 for g in groups)


def test_invalid_grid_parameters_are_rejected():
    with pytest.raises(InvalidParameters):
        aggregate_free_slots(_grid("FF"), min_duration_minutes=30, grid_step_minutes=0)
    with pytest.raises(InvalidParameters):
        aggregate_free_slots(_grid("FF"), min_duration_minutes=-1, grid_step_minutes=30)


def test_build_display_slots_counts_overlapping_busy_participants():
    busy = {
        "alice": [BusyInterval(datetime(2025, 1, 6, 10, 0), datetime(2025, 1, 6, 10, 45))],
        "bob": [],
    }
    window = TimeWindow.from_strings("09:00", "12:00")

    slots = build_display_slots(busy, window, DAY, grid_step_minutes=30)

    assert [s.time.strftime("%H:%M") for s in slots] == [
        "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    ]
    assert [s.available_count for s in slots] == [2, 2, 1, 1, 2, 2]
    assert all(s.total_participants == 2 for s in slots)

    groups = aggregate_free_slots(slots, min_duration_minutes=30, grid_step_minutes=30)
    assert [(g.start_time.strftime("%H:%M"), g.end_time.strftime("%H:%M")) for g in groups] == [
        ("09:00", "10:00"),
        ("11:00", "12:00"),
    ]


def test_build_display_slots_marks_suggested_starts():
    busy = {"alice": []}
    window = TimeWindow.from_strings("09:00", "11:00")
    suggestions = find_optimal_time_slots(busy, 60, window, DAY, max_suggestions=1)

    slots = build_display_slots(busy, window, DAY, suggestions=suggestions)

    assert [s.is_suggested for s in slots] == [True, False, False, False]


def test_build_display_slots_drops_partial_last_cell():
    window = TimeWindow.from_strings("09:00", "10:15")

    slots = build_display_slots({"a": []}, window, DAY, grid_step_minutes=30)

    assert [s.time.strftime("%H:%M") for s in slots] == ["09:00", "09:30"]


def test_fully_free_cells_agree_with_perfect_engine_scores():
    busy = {
        "alice": [BusyInterval(datetime(2025, 1, 6, 9, 15), datetime(2025, 1, 6, 9, 50))],
        "bob": [BusyInterval(datetime(2025, 1, 6, 11, 0), datetime(2025, 1, 6, 11, 30))],
    }
    window = TimeWindow.from_strings("09:00", "12:00")

    slots = build_display_slots(busy, window, DAY, grid_step_minutes=30)
    ranked = find_optimal_time_slots(busy, 30, window, DAY, max_suggestions=100)
    score_by_start = {s.start_time: s.score for s in ranked}

    for slot in slots:
        assert slot.is_fully_free == (score_by_start[slot.time] == 100)


def test_week_days_start_on_monday():
    days = week_days(date(2025, 1, 8))

    assert days[0] == date(2025, 1, 6)
    assert days[-1] == date(2025, 1, 12)
    assert len(days) == 7
    assert week_days(date(2025, 1, 12)) == days


def test_aggregate_week_groups_each_day_separately():
    busy = {"alice": []}
    window = TimeWindow.from_strings("09:00", "11:00")
    wednesday = date(2025, 1, 8)
    suggestions = find_optimal_time_slots(busy, 60, window, wednesday, max_suggestions=1)

    week = aggregate_week(
        busy,
        window,
        wednesday,
        min_duration_minutes=30,
        suggestions=suggestions,
    )

    assert list(week) == [d.isoformat() for d in week_days(wednesday)]
    for day_key, groups in week.items():
        if day_key == "2025-01-08":
            # 09:00 is the top suggestion, so the run starts after it
            assert [(g.start_time.strftime("%H:%M"), g.duration) for g in groups] == [("09:30", 90)]
        else:
            assert len(groups) == 1
            assert groups[0].start_time.date().isoformat() == day_key
            assert groups[0].duration == 120
