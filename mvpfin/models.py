"""Domain types shared across MVPfin."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class DayType(str, Enum):
    """Kind of service a report refers to. Values are the display labels."""

    SUNDAY = "Domingo"
    WEDNESDAY = "Quarta-feira"
    KINGDOM_SCHOOL = "Escola do Reino"
    OTHER = "Outros"


@dataclass(frozen=True)
class EntryMarker:
    """A category of financial entry (Pix, card, tithe, ...)."""

    key: str
    label: str
    icon: str | None = None
    order: int = 0


@dataclass(frozen=True)
class User:
    """An application account. Credentials stay inside the record store."""

    id: int
    name: str
    username: str
    role: str = "user"
    created_at: str = ""
    has_password: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class ReportState:
    """Draft financial report for one service."""

    date: date
    day_type: DayType = DayType.SUNDAY
    other_day_description: str = ""
    service_name: str = ""
    responsible: str = ""
    entries: dict[str, bool] = field(default_factory=dict)
    values: dict[str, Decimal] = field(default_factory=dict)
