from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class QueueEntry:
    """A user's recorded position in an attraction's admission line."""

    id: int
    attraction_id: int
    user_id: int
    entered_at: datetime
