from __future__ import annotations

from typing import Dict, Iterable, List

from app.domain.models import Snapshot

OTHER = "Other"

# label -> Investment attribute
BREAKDOWN_ATTRIBUTES: Dict[str, str] = {
    "asset_class": "l1_category",
    "sub_category": "l2_category",
    "country": "country",
    "currency": "currency",
}


def breakdown_by(positions: Iterable[Snapshot], attribute: str) -> List[Dict]:
    """
    Sum balance_usd by an Investment attribute over already-deduplicated positions.
    Missing values land in "Other". Sorted by value, largest first; pct is 0 for
    every bucket when the grand total is 0.
    """
    totals: Dict[str, float] = {}
    for p in positions:
        label = getattr(p.investment, attribute, None) if p.investment else None
        label = label or OTHER
        totals[label] = totals.get(label, 0.0) + float(p.balance_usd or 0.0)

    grand_total = sum(totals.values())
    rows = [
        {
            "name": name,
            "value": value,
            "pct": (value / grand_total) * 100.0 if grand_total else 0.0,
        }
        for name, value in totals.items()
    ]
    rows.sort(key=lambda r: r["value"], reverse=True)
    return rows
