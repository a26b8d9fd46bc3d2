# meetmatch/services/participant_service.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from meetmatch.models.participant import Participant

logger = logging.getLogger(__name__)


class ParticipantNotFound(ValueError):
    pass


class DuplicateParticipant(ValueError):
    pass


def add_participant(
    db: Session,
    *,
    participant_id: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> Participant:
    """
    Register a team member.

    When no name is given we fall back to the email, then the id,
    the same way a signed-in calendar account is labelled.
    """
    if db.get(Participant, participant_id) is not None:
        raise DuplicateParticipant(f"participant {participant_id!r} already exists")

    participant = Participant(
        id=participant_id,
        email=email,
        name=name or email or participant_id,
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)

    logger.info("added participant %s", participant_id)
    return participant


def list_participants(db: Session) -> List[Participant]:
    return db.query(Participant).order_by(Participant.created_at.asc(), Participant.id.asc()).all()


def get_participant(db: Session, participant_id: str) -> Participant:
    participant = db.get(Participant, participant_id)
    if participant is None:
        raise ParticipantNotFound(f"participant {participant_id!r} not found")
    return participant


def remove_participant(db: Session, participant_id: str) -> None:
    """Remove a participant together with their stored busy intervals."""
    participant = get_participant(db, participant_id)
    db.delete(participant)
    db.commit()

    logger.info("removed participant %s", participant_id)
