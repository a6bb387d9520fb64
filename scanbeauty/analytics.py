"""
Lead analytics for the admin dashboard.

Aggregation runs in Python over the lead rows; the volumes of a single
brand funnel don't call for anything heavier.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from scanbeauty.recommender import rules

AGE_GROUPS = ("18-25", "26-35", "36-45", "46-55", "56+")


class LeadLike(Protocol):
    created_at: Optional[datetime]
    skin_type: Optional[str]
    age: Optional[int]
    concerns: Optional[list[str]]


class NamedCount(BaseModel):
    name: str
    count: int


class DashboardStats(BaseModel):
    total_leads: int = 0
    today_leads: int = 0
    last_30_days: int = 0
    previous_30_days: int = 0
    growth_rate: int = 0
    skin_types: list[NamedCount] = Field(default_factory=list)
    top_concerns: list[NamedCount] = Field(default_factory=list)
    age_distribution: list[NamedCount] = Field(default_factory=list)
    daily_trend: list[NamedCount] = Field(default_factory=list)


def age_group(age: Optional[int]) -> Optional[str]:
    if age is None or age < 18:
        return None
    if age <= 25:
        return "18-25"
    if age <= 35:
        return "26-35"
    if age <= 45:
        return "36-45"
    if age <= 55:
        return "46-55"
    return "56+"


def growth_rate(current: int, previous: int) -> int:
    """Percent change; 0 when there is nothing to compare against."""
    if previous <= 0:
        return 0
    return round((current - previous) / previous * 100)


def top_counts(values: Iterable[str], limit: Optional[int] = None) -> list[NamedCount]:
    counts = Counter(v for v in values if v)
    return [NamedCount(name=name, count=count) for name, count in counts.most_common(limit)]


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def build_dashboard_stats(
    leads: Sequence[LeadLike],
    now: Optional[datetime] = None,
    trend_days: int = 30,
    concern_limit: int = 8,
) -> DashboardStats:
    now = _aware(now or datetime.now(timezone.utc))
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    last_30 = now - timedelta(days=30)
    last_60 = now - timedelta(days=60)
    trend_start = today - timedelta(days=trend_days - 1)

    created = [_aware(lead.created_at) for lead in leads if lead.created_at]
    current = sum(1 for ts in created if ts >= last_30)
    previous = sum(1 for ts in created if last_60 <= ts < last_30)

    trend = Counter(ts.strftime("%Y-%m-%d") for ts in created if ts >= trend_start)

    ages = Counter(age_group(lead.age) for lead in leads)

    return DashboardStats(
        total_leads=len(leads),
        today_leads=sum(1 for ts in created if ts >= today),
        last_30_days=current,
        previous_30_days=previous,
        growth_rate=growth_rate(current, previous),
        skin_types=top_counts(lead.skin_type for lead in leads),
        top_concerns=top_counts(
            (c for lead in leads for c in sorted(rules.effective_concerns(lead.concerns))),
            concern_limit,
        ),
        age_distribution=[NamedCount(name=g, count=ages.get(g, 0)) for g in AGE_GROUPS],
        daily_trend=[NamedCount(name=day, count=trend[day]) for day in sorted(trend)],
    )
