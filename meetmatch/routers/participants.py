# meetmatch/routers/participants.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.orm import Session

from meetmatch.db.session import get_db
from meetmatch.schemas.scheduling import BusyIntervalIn, reference_local
from meetmatch.services.busy_interval_service import (
    list_busy_intervals,
    record_busy_intervals,
)
from meetmatch.services.participant_service import (
    DuplicateParticipant,
    ParticipantNotFound,
    add_participant,
    list_participants,
    remove_participant,
)
from meetmatch.services.time_utils import InvalidParameters

router = APIRouter()


class ParticipantCreate(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


class BusyIntervalSync(BaseModel):
    time_min: datetime
    time_max: datetime
    intervals: List[BusyIntervalIn]

    @field_validator("time_min", "time_max")
    def to_reference_local(cls, v: datetime) -> datetime:
        return reference_local(v)

    @model_validator(mode="after")
    def check_window(self) -> "BusyIntervalSync":
        if self.time_max <= self.time_min:
            raise ValueError("time_max must be after time_min")
        return self


def _participant_dict(p) -> Dict[str, Any]:
    return {
        "id": p.id,
        "email": p.email,
        "name": p.name,
    }


def _interval_dict(row) -> Dict[str, Any]:
    return {
        "id": row.id,
        "start_time": row.start_time.isoformat(),
        "end_time": row.end_time.isoformat(),
        "summary": row.summary,
    }


@router.post("", status_code=201)
def create_participant(
        payload: ParticipantCreate,
        db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        participant = add_participant(
            db,
            participant_id=payload.id,
            name=payload.name,
            email=payload.email,
        )
    except DuplicateParticipant as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _participant_dict(participant)


@router.get("")
def get_participants(db: Session = Depends(get_db)) -> Dict[str, Any]:
    return {"participants": [_participant_dict(p) for p in list_participants(db)]}


@router.delete("/{participant_id}", status_code=204)
def delete_participant(
        participant_id: str,
        db: Session = Depends(get_db),
) -> None:
    try:
        remove_participant(db, participant_id)
    except ParticipantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{participant_id}/busy-intervals")
def sync_busy_intervals(
        participant_id: str,
        payload: BusyIntervalSync,
        db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Replace the participant's busy intervals for [time_min, time_max).

    This is where a calendar provider hands over already-expanded events
    for a period; intervals outside the period are left alone.
    """
    try:
        created = record_busy_intervals(
            db,
            participant_id=participant_id,
            intervals=[(iv.start, iv.end, iv.summary) for iv in payload.intervals],
            time_min=payload.time_min,
            time_max=payload.time_max,
        )
    except ParticipantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "participant_id": participant_id,
        "busy_intervals": [_interval_dict(row) for row in created],
    }


@router.get("/{participant_id}/busy-intervals")
def get_busy_intervals(
        participant_id: str,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
        db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        rows = list_busy_intervals(
            db,
            participant_id,
            reference_local(time_min) if time_min is not None else None,
            reference_local(time_max) if time_max is not None else None,
        )
    except ParticipantNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidParameters as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "participant_id": participant_id,
        "busy_intervals": [_interval_dict(row) for row in rows],
    }
