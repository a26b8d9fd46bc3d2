# meetmatch/services/busy_interval_service.py
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from meetmatch.models.busy_interval import BusyIntervalRecord
from meetmatch.models.participant import Participant
from meetmatch.services.participant_service import get_participant
from meetmatch.services.time_utils import BusyInterval, InvalidParameters

logger = logging.getLogger(__name__)


def record_busy_intervals(
    db: Session,
    *,
    participant_id: str,
    intervals: Iterable[Tuple[datetime, datetime, Optional[str]]],
    time_min: datetime,
    time_max: datetime,
) -> List[BusyIntervalRecord]:
    """
    Store a participant's busy intervals synced for [time_min, time_max).

    Behavior:
    - Removes stored intervals for that participant overlapping the sync
      window, so the new set "replaces" the old one for that period.
    - Inserts a row per (start, end, summary) in `intervals`.

    Returns the newly created rows.
    """
    intervals = list(intervals)
    stamps = [time_min, time_max] + [t for start, end, _ in intervals for t in (start, end)]
    if any(t.tzinfo is not None for t in stamps):
        raise InvalidParameters("datetimes must be naive reference-local time")

    if time_max <= time_min:
        raise InvalidParameters("time_max must be after time_min")

    for start, end, _summary in intervals:
        if end <= start:
            raise InvalidParameters("end_time must be after start_time")

    get_participant(db, participant_id)

    # Remove existing intervals in the sync window for idempotency
    db.query(BusyIntervalRecord).filter(
        BusyIntervalRecord.participant_id == participant_id,
        BusyIntervalRecord.start_time < time_max,
        BusyIntervalRecord.end_time > time_min,
    ).delete(synchronize_session=False)
    db.commit()

    created: List[BusyIntervalRecord] = []

    for start, end, summary in intervals:
        row = BusyIntervalRecord(
            participant_id=participant_id,
            start_time=start,
            end_time=end,
            summary=summary,
        )
        db.add(row)
        created.append(row)

    db.commit()
    for row in created:
        db.refresh(row)

    logger.info(
        "stored %d busy intervals for %s in [%s, %s)",
        len(created),
        participant_id,
        time_min.isoformat(),
        time_max.isoformat(),
    )
    return created


def list_busy_intervals(
    db: Session,
    participant_id: str,
    time_min: Optional[datetime] = None,
    time_max: Optional[datetime] = None,
) -> List[BusyIntervalRecord]:
    get_participant(db, participant_id)

    query = db.query(BusyIntervalRecord).filter(
        BusyIntervalRecord.participant_id == participant_id
    )
    if time_max is not None:
        query = query.filter(BusyIntervalRecord.start_time < time_max)
    if time_min is not None:
        query = query.filter(BusyIntervalRecord.end_time > time_min)
    return query.order_by(BusyIntervalRecord.start_time.asc()).all()


def load_busy_by_participant(
    db: Session,
    time_min: datetime,
    time_max: datetime,
    participant_ids: Optional[Sequence[str]] = None,
) -> Dict[str, List[BusyInterval]]:
    """
    Build the complete {participant_id: [BusyInterval, ...]} mapping the
    engine consumes for [time_min, time_max).

    Every selected participant gets an entry, an empty list when nothing
    is stored, so "no events" always means "fully available".
    """
    query = db.query(Participant)
    if participant_ids is not None:
        query = query.filter(Participant.id.in_(list(participant_ids)))
    participants = query.order_by(Participant.created_at.asc(), Participant.id.asc()).all()

    busy: Dict[str, List[BusyInterval]] = {p.id: [] for p in participants}
    if not busy:
        return busy

    rows = (
        db.query(BusyIntervalRecord)
        .filter(
            BusyIntervalRecord.participant_id.in_(list(busy)),
            BusyIntervalRecord.start_time < time_max,
            BusyIntervalRecord.end_time > time_min,
        )
        .order_by(BusyIntervalRecord.start_time.asc())
        .all()
    )
    for row in rows:
        busy[row.participant_id].append(BusyInterval(start=row.start_time, end=row.end_time))

    return busy
