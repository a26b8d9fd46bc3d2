# meetmatch/models/participant.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from meetmatch.models.base import Base


class Participant(Base):
    """
    A team member whose calendar takes part in matching.

    `id` is the opaque participant identifier (usually the calendar
    account's email address); the engine only uses it as a key/label.
    """

    __tablename__ = "participants"

    id = Column(String(255), primary_key=True, index=True)
    email = Column(String(255), nullable=True)
    name = Column(String(255), nullable=False)

    # naive UTC, like the other stored datetimes
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        nullable=False,
    )

    busy_intervals = relationship(
        "BusyIntervalRecord",
        back_populates="participant",
        cascade="all, delete-orphan",
    )
