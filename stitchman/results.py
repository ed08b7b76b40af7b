"""
Stitchman Result Types.

Immutable snapshots of ledger rows and the derived metric structures.
Nothing here is persisted: metrics are recomputed on every query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stitchman.models import Order, Sewer


@dataclass(frozen=True)
class OrderSnapshot:
    """Point-in-time copy of one order row."""

    id: int
    order_number: str
    wallet_type: str
    points: int
    status: str
    claimed_by_id: int | None
    claimed_at: datetime | None
    completed_at: datetime | None
    voided_at: datetime | None
    created_at: datetime
    orderer_name: str = ""

    @classmethod
    def from_order(cls, order: Order) -> OrderSnapshot:
        return cls(
            id=order.pk,
            order_number=order.order_number,
            wallet_type=order.wallet_type,
            points=order.points,
            status=order.status,
            claimed_by_id=order.claimed_by_id,
            claimed_at=order.claimed_at,
            completed_at=order.completed_at,
            voided_at=order.voided_at,
            created_at=order.created_at,
            orderer_name=order.orderer_name,
        )


@dataclass(frozen=True)
class SewerSnapshot:
    """Point-in-time copy of one sewer row."""

    id: int
    name: str
    is_active: bool

    @classmethod
    def from_sewer(cls, sewer: Sewer) -> SewerSnapshot:
        return cls(id=sewer.pk, name=sewer.name, is_active=sewer.is_active)


@dataclass(frozen=True)
class LedgerSnapshot:
    """Orders and sewers read together."""

    orders: tuple[OrderSnapshot, ...]
    sewers: tuple[SewerSnapshot, ...]
    taken_at: datetime


@dataclass
class SewerSummary:
    """Performance of one sewer over a date range."""

    sewer_id: int
    sewer_name: str
    completed_count: int = 0
    total_points: int = 0
    average_points: float = 0
    rank: int = 0


@dataclass
class SewerDayStat:
    """One sewer's completions on one day (a DailyMetric)."""

    sewer_id: int
    sewer_name: str
    date: date
    total_points: int
    orders_completed: int


@dataclass
class DayBucket:
    """
    All completions on one calendar day.

    ``stats`` only lists sewers who completed something that day; an
    empty list is a "no activity" day.
    """

    date: date
    stats: list[SewerDayStat] = field(default_factory=list)

    @property
    def total_points(self) -> int:
        return sum(s.total_points for s in self.stats)

    @property
    def orders_completed(self) -> int:
        return sum(s.orders_completed for s in self.stats)

    @property
    def has_activity(self) -> bool:
        return len(self.stats) > 0


@dataclass
class DashboardStats:
    """
    Manager overview counters.

    ``estimated_hours`` is a capacity estimate from open points, not a
    delivery commitment.
    """

    total_orders: int
    completed_orders: int
    active_orders: int
    open_points: int
    estimated_hours: int
    active_sewers: int


@dataclass
class SewerOverview:
    """What one sewer sees about their own work in a date range."""

    summary: SewerSummary
    in_progress_count: int
    days: list[SewerDayStat] = field(default_factory=list)
