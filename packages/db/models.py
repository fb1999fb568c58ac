"""SQLModel table definitions for the park admission data layer."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, Integer, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class TicketTable(SQLModel, table=True):
    """Issued credentials and their remaining entitlement."""

    __tablename__ = "tickets"
    __table_args__ = (
        CheckConstraint("kind IN ('limited', 'daily', 'annual')", name="ck_tickets_kind"),
        CheckConstraint("remaining_uses IS NULL OR remaining_uses >= 0", name="ck_tickets_remaining_uses"),
        CheckConstraint(
            "(kind = 'limited' AND remaining_uses IS NOT NULL AND valid_until IS NULL) "
            "OR (kind <> 'limited' AND remaining_uses IS NULL AND valid_until IS NOT NULL)",
            name="ck_tickets_entitlement",
        ),
    )

    id: str = Field(primary_key=True, index=True)
    owner_id: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    kind: str = Field(sa_column=Column(String(20), nullable=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    valid_until: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    remaining_uses: int | None = Field(default=None, sa_column=Column(Integer, nullable=True))


class QueueEntryTable(SQLModel, table=True):
    """Recorded positions of users in attraction queues."""

    __tablename__ = "queue_entries"
    __table_args__ = (UniqueConstraint("attraction_id", "user_id", name="uq_queue_entries_attraction_user"),)

    id: int | None = Field(default=None, primary_key=True)
    attraction_id: int = Field(sa_column=Column(Integer, nullable=False, index=True))
    user_id: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    entered_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


def ensure_datetime(value: datetime | None) -> datetime:
    """Attach UTC to naive timestamps read back from backends without timezone support."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise TypeError("Expected datetime value from database")
