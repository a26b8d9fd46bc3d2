# meetmatch/models/busy_interval.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from meetmatch.models.base import Base


class BusyIntervalRecord(Base):
    """
    One stored busy interval [start_time, end_time) for a participant,
    as synced from their calendar provider.

    Recurring events are expected to be expanded before they land here.
    """

    __tablename__ = "busy_intervals"

    id = Column(Integer, primary_key=True, index=True)

    participant_id = Column(
        String(255),
        ForeignKey("participants.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Event title from the calendar (optional)
    summary = Column(String, nullable=True)

    # naive UTC, like the other stored datetimes
    created_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        nullable=False,
    )

    participant = relationship("Participant", back_populates="busy_intervals")
