"""Reporting windows and period-over-period comparison."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from cellar.errors import InvalidError
from cellar.order.order import Order, OrderStatus
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all

TIMEFRAME_DAYS = {"week": 7, "month": 30, "quarter": 90, "year": 365}
DEFAULT_DAYS = 30


@dataclass(frozen=True)
class Period:
    start: datetime
    end: datetime
    label: str = "custom"

    def previous(self) -> "Period":
        """The window of equal length immediately before this one."""
        return Period(start=self.start - (self.end - self.start), end=self.start, label=f"previous_{self.label}")

    def contains(self, moment) -> bool:
        moment = ensure_utc(moment)
        return moment is not None and self.start <= moment <= self.end

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat(), "timeframe": self.label}


def resolve_period(timeframe=None, start=None, end=None, now=None) -> Period:
    now = ensure_utc(now) if now else datetime.now(UTC)
    if start and end:
        start, end = ensure_utc(start), ensure_utc(end)
        if start >= end:
            raise InvalidError("Start date must be before end date")
        return Period(start=start, end=end)

    if timeframe == "today":
        return Period(start=now.replace(hour=0, minute=0, second=0, microsecond=0), end=now, label="today")

    days = TIMEFRAME_DAYS.get(timeframe, DEFAULT_DAYS)
    return Period(start=now - timedelta(days=days), end=now, label=timeframe if timeframe in TIMEFRAME_DAYS else "month")


def growth_percentage(base, new):
    """Percentage change from ``base`` to ``new``; None when there is no base."""
    if not base:
        return None
    return round((new - base) / base * 100, 2)


def orders_in(period: Period, include_cancelled=False) -> list:
    orders = [o for o in find_all(Order) if period.contains(o.created_at)]
    if not include_cancelled:
        orders = [o for o in orders if o.status != OrderStatus.CANCELLED.value]
    return orders
