"""
Sales analytics for the owner dashboard.

Pure functions over ``OrderPoint`` records so that bucketing can be tested
with a fixed ``now``. Buckets are calendar slots ending at ``now``: the last
24 clock hours, the last 7 dates, 4 weeks back, or the last 12 months. The
window starts at the oldest slot, so every point inside it has exactly one
bucket.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Hashable, Iterable, Optional

from ...seed import ORDER_METHODS

PERIODS = ("daily", "weekly", "monthly", "yearly")
MONTHLY_WINDOW_DAYS = 30

WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


@dataclass(frozen=True)
class OrderPoint:
    at: datetime
    amount: Optional[float]
    method_code: str
    customer_key: str


def customer_key(customer_id: Optional[int], name: Optional[str], contact: Optional[str]) -> str:
    """Registered customers are keyed by id, walk-ins by name and contact"""
    if customer_id is not None:
        return f"user:{customer_id}"
    return f"walkin:{(name or '').strip().lower()}|{(contact or '').strip()}"


def _months_back(now: datetime, count: int) -> list[tuple[int, int]]:
    """(year, month) pairs for the last ``count`` months, oldest first, ending with now's month"""
    months = []
    year, month = now.year, now.month
    for _ in range(count):
        months.append((year, month))
        year, month = (year, month - 1) if month > 1 else (year - 1, 12)
    return months[::-1]


def _slots(period: str, now: datetime) -> tuple[list[Hashable], list[str], Callable[[datetime], Hashable]]:
    """Slot keys (oldest first), their labels, and the function mapping a timestamp to a slot key"""
    if period == "daily":
        current = now.replace(minute=0, second=0, microsecond=0)
        keys = [current - timedelta(hours=23 - i) for i in range(24)]
        labels = [f"{k.hour:02d}:00" for k in keys]
        return keys, labels, lambda at: at.replace(minute=0, second=0, microsecond=0)
    if period == "weekly":
        today = now.date()
        keys = [today - timedelta(days=6 - i) for i in range(7)]
        # date.weekday() is Monday based
        labels = [WEEKDAY_LABELS[(k.weekday() + 1) % 7] for k in keys]
        return keys, labels, lambda at: at.date()
    if period == "monthly":
        keys = [0, 1, 2, 3]
        labels = [f"W{i}" for i in range(1, 5)]
        return keys, labels, lambda at: 3 - min(3, (now - at).days // 7)
    if period == "yearly":
        keys = _months_back(now, 12)
        labels = [MONTH_LABELS[month - 1] for _, month in keys]
        return keys, labels, lambda at: (at.year, at.month)
    raise ValueError(f"Unknown period: {period}")


def window_start(period: str, now: datetime) -> datetime:
    """Start of the oldest bucket of the period"""
    if period == "daily":
        return now.replace(minute=0, second=0, microsecond=0) - timedelta(hours=23)
    if period == "weekly":
        return datetime.combine(now.date() - timedelta(days=6), datetime.min.time())
    if period == "monthly":
        return now - timedelta(days=MONTHLY_WINDOW_DAYS)
    if period == "yearly":
        year, month = _months_back(now, 12)[0]
        return datetime(year, month, 1)
    raise ValueError(f"Unknown period: {period}")


def bucket_labels(period: str, now: datetime) -> list[str]:
    return _slots(period, now)[1]


def bucket_index(period: str, at: datetime, now: datetime) -> Optional[int]:
    """Position of ``at`` among the period's buckets, or None when it falls outside them"""
    keys, _, key_of = _slots(period, now)
    if at > now:
        return None
    try:
        return keys.index(key_of(at))
    except ValueError:
        return None


def _assign(period: str, points: Iterable[OrderPoint], now: datetime):
    keys, labels, key_of = _slots(period, now)
    positions = {key: i for i, key in enumerate(keys)}
    assigned = []
    for point in points:
        index = positions.get(key_of(point.at)) if point.at <= now else None
        if index is not None:
            assigned.append((index, point))
    return labels, assigned


def chart_data(period: str, points: Iterable[OrderPoint], now: datetime) -> list[dict]:
    labels, assigned = _assign(period, points, now)
    buckets = [{"label": label, "sales": 0.0, "orders": 0} for label in labels]
    for index, point in assigned:
        bucket = buckets[index]
        bucket["orders"] += 1
        if point.amount is not None:
            bucket["sales"] = round(bucket["sales"] + point.amount, 2)
    return buckets


def customer_growth(period: str, points: Iterable[OrderPoint], returning_keys: set, now: datetime) -> list[dict]:
    """
    New vs returning customers per bucket.

    A customer counts once per bucket. They are returning when ``returning_keys``
    (customers with an order before the window) contains them.
    """
    labels, assigned = _assign(period, points, now)
    seen = [set() for _ in labels]
    for index, point in assigned:
        seen[index].add(point.customer_key)

    growth = []
    for label, keys in zip(labels, seen):
        returning = len(keys & returning_keys)
        growth.append({"label": label, "new": len(keys) - returning, "returning": returning})
    return growth


def method_distribution(points: Iterable[OrderPoint]) -> list[dict]:
    counts = {code: 0 for code in ORDER_METHODS}
    for point in points:
        if point.method_code in counts:
            counts[point.method_code] += 1
    return [{"name": label, "value": counts[code]} for code, label in ORDER_METHODS.items()]


def totals(points: Iterable[OrderPoint]) -> dict:
    points = list(points)
    return {
        "totalSales": round(sum(p.amount for p in points if p.amount is not None), 2),
        "totalOrders": len(points),
        "uniqueCustomers": len({p.customer_key for p in points}),
    }


def summarize(period: str, points: list[OrderPoint], returning_keys: set, now: datetime) -> dict:
    start = window_start(period, now)
    points = [p for p in points if start <= p.at <= now]
    return {
        "period": period,
        "chartData": chart_data(period, points, now),
        "customerGrowth": customer_growth(period, points, returning_keys, now),
        "methodDistribution": method_distribution(points),
        "totals": totals(points),
    }
