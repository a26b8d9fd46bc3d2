# meetmatch/models/__init__.py
from meetmatch.models.base import Base  # noqa: F401

from meetmatch.models.participant import Participant  # noqa: F401
from meetmatch.models.busy_interval import BusyIntervalRecord  # noqa: F401
