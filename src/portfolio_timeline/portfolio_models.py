from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date


class Role(enum.IntEnum):
    """User role as stored upstream; unknown integers fall back to USER."""

    USER = 0
    ADMIN = 1

    @classmethod
    def from_value(cls, value: int) -> "Role":
        return cls.ADMIN if value == 1 else cls.USER

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name.capitalize()


class IntervalStatus(enum.Enum):
    """Derived project state. Selects a render style only, never a lane."""

    ACTIVE = "active"
    OVERDUE = "overdue"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Interval:
    """
    Date range laid out on the timeline.

    `start` and `end` are both inclusive; `end` is the planned end used for
    layout. `actual_end` marks the interval completed.
    """

    id: str
    start: date
    end: date
    label: str
    actual_end: date | None = None

    @property
    def is_completed(self) -> bool:
        return self.actual_end is not None

    @property
    def layout_end(self) -> date:
        """End used for lane packing; a reversed range collapses onto `start`."""
        return self.end if self.end >= self.start else self.start

    def status(self, today: date) -> IntervalStatus:
        """Classify against an explicit `today`; completed intervals are never overdue."""
        if self.actual_end is not None:
            return IntervalStatus.COMPLETED
        if today > self.end:
            return IntervalStatus.OVERDUE
        return IntervalStatus.ACTIVE


@dataclass
class ProjectRecord:
    """Project as delivered by the portfolio source."""

    id: str
    client_id: str
    start_date: date
    planned_end_date: date
    manager_id: str
    name: str | None = None
    actual_end_date: date | None = None

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Project"

    @property
    def duration_days(self) -> int:
        """Planned length in days (end minus start, not inclusive of the last day)."""
        return (self.planned_end_date - self.start_date).days

    @property
    def is_completed(self) -> bool:
        return self.actual_end_date is not None

    def is_overdue(self, today: date) -> bool:
        """Past its planned end date and not completed."""
        if self.is_completed:
            return False
        return today > self.planned_end_date

    def to_interval(self) -> Interval:
        return Interval(
            id=self.id,
            start=self.start_date,
            end=self.planned_end_date,
            label=self.display_name,
            actual_end=self.actual_end_date,
        )


@dataclass
class ClientRecord:
    id: str
    name: str | None = None
    address: str | None = None
    projects_total: int = 0
    projects_completed: int = 0

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Client"


@dataclass
class UserRecord:
    id: str
    name: str | None = None
    login: str | None = None
    role: Role = Role.USER

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed User"


@dataclass
class Portfolio:
    """Root container for one data snapshot."""

    projects: list[ProjectRecord] = field(default_factory=list)
    clients: list[ClientRecord] = field(default_factory=list)
    users: list[UserRecord] = field(default_factory=list)

    def intervals(self) -> list[Interval]:
        """Intervals in project input order."""
        return [project.to_interval() for project in self.projects]
