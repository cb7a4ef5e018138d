from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, DefaultDict, Dict, Iterable, List, Optional

from app.domain.models import Snapshot

OTHER = "Other"

KeyFn = Callable[[Snapshot], str]


def _or_other(val: Optional[str]) -> str:
    return val or OTHER


def by_owner(snap: Snapshot) -> str:
    inv = snap.investment
    owner = inv.owner if inv else None
    return _or_other(owner.name if owner else None)


def by_owner_platform(snap: Snapshot) -> str:
    platform = snap.investment.platform if snap.investment else None
    return f"{by_owner(snap)} / {_or_other(platform)}"


def by_category(snap: Snapshot) -> str:
    return _or_other(snap.investment.l1_category if snap.investment else None)


def by_country(snap: Snapshot) -> str:
    return _or_other(snap.investment.country if snap.investment else None)


def by_currency(snap: Snapshot) -> str:
    return _or_other(snap.investment.currency if snap.investment else None)


GROUPINGS: Dict[str, KeyFn] = {
    "owner": by_owner,
    "owner_platform": by_owner_platform,
    "category": by_category,
    "country": by_country,
    "currency": by_currency,
}


def grouped_time_series(snapshots: Iterable[Snapshot], key_fn: KeyFn) -> Dict[str, Any]:
    """
    Sum balance_usd per group per snapshot date.

    The date axis is the union of every date in the input, ascending. Each point
    carries a value for every group, 0.0 where the group has nothing that day,
    so chart series stay continuous.
    """
    sums: Dict[str, DefaultDict[str, float]] = {}
    all_dates = set()
    for snap in snapshots:
        day = snap.snapshot_date.isoformat()
        group = key_fn(snap)
        sums.setdefault(group, defaultdict(float))[day] += float(snap.balance_usd or 0.0)
        all_dates.add(day)

    dates = sorted(all_dates)
    points: List[Dict[str, Any]] = []
    for day in dates:
        point: Dict[str, Any] = {"date": day}
        for group, by_day in sums.items():
            point[group] = by_day.get(day, 0.0)
        points.append(point)

    return {"dates": dates, "groups": list(sums.keys()), "points": points}
