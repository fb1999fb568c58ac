from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Mapping


class TicketKind(str, Enum):
    """Entitlement policies a ticket can be issued under."""

    LIMITED = "limited"
    DAILY = "daily"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value: str) -> TicketKind:
        """Accept canonical names as well as the box-office aliases."""

        normalized = (value or "").strip().lower()
        kind = _ALIASES.get(normalized)
        if kind is None:
            raise ValueError(f"Unknown ticket kind: {value!r}")
        return kind


_ALIASES: Mapping[str, TicketKind] = {
    "limited": TicketKind.LIMITED,
    "limitado": TicketKind.LIMITED,
    "daily": TicketKind.DAILY,
    "diario": TicketKind.DAILY,
    "diário": TicketKind.DAILY,
    "annual": TicketKind.ANNUAL,
    "anual": TicketKind.ANNUAL,
}


class EntitlementPolicy:
    """Compute and check the entitlement attached to each ticket kind.

    Limited tickets carry a use counter and no validity window; daily and
    annual tickets carry a validity window and no counter.
    """

    _VALIDITY: Mapping[TicketKind, timedelta] = {
        TicketKind.DAILY: timedelta(days=1),
        TicketKind.ANNUAL: timedelta(days=365),
    }

    @classmethod
    def initial_entitlement(
        cls,
        kind: TicketKind,
        *,
        issued_at: datetime,
        initial_uses: int | None = None,
    ) -> tuple[datetime | None, int | None]:
        """Return ``(valid_until, remaining_uses)`` for a newly issued ticket."""

        if kind is TicketKind.LIMITED:
            if initial_uses is None or initial_uses <= 0:
                raise ValueError("Limited tickets require a positive number of uses")
            return None, initial_uses
        return issued_at + cls._VALIDITY[kind], None

    @classmethod
    def within_window(cls, valid_until: datetime | None, now: datetime) -> bool:
        if valid_until is None:
            return False
        return now <= valid_until
