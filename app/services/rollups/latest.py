from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from app.domain.models import Snapshot

log = logging.getLogger(__name__)


def latest_by_investment(snapshots: Iterable[Snapshot]) -> Dict[str, Snapshot]:
    """
    Most recent snapshot per investment, in descending date order.

    Two snapshots for the same investment and date should not exist (the table is
    unique on that pair); when they do, the higher balance_usd wins and the
    duplicate is logged.
    """
    ordered = sorted(
        snapshots,
        key=lambda s: (s.snapshot_date, s.balance_usd),
        reverse=True,
    )
    latest: Dict[str, Snapshot] = {}
    for snap in ordered:
        kept = latest.get(snap.investment_id)
        if kept is None:
            latest[snap.investment_id] = snap
            continue
        if kept.snapshot_date == snap.snapshot_date:
            log.warning(
                "duplicate snapshot investment_id=%s date=%s kept=%s dropped=%s",
                snap.investment_id,
                snap.snapshot_date.isoformat(),
                kept.balance_usd,
                snap.balance_usd,
            )
    return latest


def latest_positions(snapshots: Iterable[Snapshot]) -> List[Snapshot]:
    return list(latest_by_investment(snapshots).values())


def portfolio_total(positions: Iterable[Snapshot]) -> float:
    return sum(float(p.balance_usd or 0.0) for p in positions)
