# scripts/find_meeting_times.py
"""
Print ranked meeting times for the participants stored in the DB.

Busy intervals are expected to have been synced already (see the
PUT /participants/{id}/busy-intervals endpoint); this script only reads.

Usage:
    python -m scripts.find_meeting_times --date 2025-01-06 --duration 30
"""

from __future__ import annotations

import argparse
from datetime import date

from meetmatch.config import get_settings
from meetmatch.db.session import SessionLocal, engine
from meetmatch.models import Base
from meetmatch.services.schedule_service import plan_day
from meetmatch.services.time_utils import TimeWindow


def run_once(
    target_date: date,
    window: TimeWindow,
    duration_minutes: int,
    max_suggestions: int,
    participant_ids: list[str] | None = None,
) -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        day = plan_day(
            db,
            target_date=target_date,
            window=window,
            duration_minutes=duration_minutes,
            max_suggestions=max_suggestions,
            participant_ids=participant_ids,
        )
    finally:
        db.close()

    if not day.participants:
        print("[find_meeting_times] No participants stored; nothing to match")
        return

    print(f"[find_meeting_times] {target_date.isoformat()} for {', '.join(day.participants)}")
    for i, s in enumerate(day.suggestions, start=1):
        line = (
            f"{i}. {s.start_time:%H:%M}-{s.end_time:%H:%M} "
            f"score={s.score:.0f} available={len(s.available_users)}/{len(day.participants)}"
        )
        if s.conflict_users:
            line += f" conflicts={','.join(s.conflict_users)}"
        print(line)

    for g in day.free_slot_groups:
        print(f"   free {g.start_time:%H:%M}-{g.end_time:%H:%M} ({g.duration} min)")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        required=True,
        help="Target day, YYYY-MM-DD",
    )
    parser.add_argument("--start", default=settings.DEFAULT_WINDOW_START, help="Window start HH:MM")
    parser.add_argument("--end", default=settings.DEFAULT_WINDOW_END, help="Window end HH:MM")
    parser.add_argument(
        "--duration",
        type=int,
        default=settings.DEFAULT_DURATION_MINUTES,
        help="Meeting length in minutes",
    )
    parser.add_argument(
        "--max",
        type=int,
        default=settings.DEFAULT_MAX_SUGGESTIONS,
        help="How many suggestions to print",
    )
    parser.add_argument(
        "--participant",
        action="append",
        default=None,
        help="Restrict to this participant id (repeatable)",
    )
    args = parser.parse_args()
    run_once(
        target_date=args.date,
        window=TimeWindow.from_strings(args.start, args.end),
        duration_minutes=args.duration,
        max_suggestions=args.max,
        participant_ids=args.participant,
    )


if __name__ == "__main__":
    main()
