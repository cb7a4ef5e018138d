from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from app.domain.models import ExternalFundRecord, Owner, Snapshot
from app.services.fund_matcher import DEFAULT_PREFIX_LEN, dedupe_by_fund_name, match_fund, net_yield
from app.services.rollups import (
    BREAKDOWN_ATTRIBUTES,
    GROUPINGS,
    breakdown_by,
    grouped_time_series,
    latest_positions,
    portfolio_total,
)

DEFAULT_MATCH_COUNTRY = "Colombia"


def _owner_of(snap: Snapshot) -> Optional[Owner]:
    return snap.investment.owner if snap.investment else None


def build_overview(
    people: Sequence[Owner],
    snapshots: Sequence[Snapshot],
    latest_date: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Current total per person over the latest snapshot of each investment.
    People with no holdings are still listed with a zero total.
    """
    positions = latest_positions(snapshots)

    per_person: Dict[str, Dict[str, Any]] = {}
    for p in positions:
        owner = _owner_of(p)
        if owner is None:
            continue
        row = per_person.setdefault(
            owner.slug, {"name": owner.name, "slug": owner.slug, "total_usd": 0.0, "investments": 0}
        )
        row["total_usd"] += float(p.balance_usd or 0.0)
        row["investments"] += 1

    members = [
        per_person.get(person.slug)
        or {"name": person.name, "slug": person.slug, "total_usd": 0.0, "investments": 0}
        for person in people
    ]

    return {
        "latest_snapshot_date": latest_date.isoformat() if latest_date else None,
        "total_usd": portfolio_total(positions),
        "investment_count": len(positions),
        "member_count": len(per_person),
        "members": members,
    }


def _fund_annotation(
    snap: Snapshot,
    fund_records: Sequence[ExternalFundRecord],
    prefix_len: int,
    country: str,
) -> Dict[str, Any]:
    inv = snap.investment
    match = None
    if inv is not None and inv.country == country:
        match = match_fund(inv.name, fund_records, prefix_len=prefix_len)
    if match is None:
        return {"fund_match": None, "apy_gross_pct": None, "apy_net_pct": None}
    gross = match.annual_return
    return {
        "fund_match": match.to_dict(),
        "apy_gross_pct": gross,
        "apy_net_pct": net_yield(gross, inv.expense_ratio),
    }


def build_person_view(
    person: Owner,
    snapshots: Sequence[Snapshot],
    fund_records: Sequence[ExternalFundRecord] = (),
    prefix_len: int = DEFAULT_PREFIX_LEN,
    country: str = DEFAULT_MATCH_COUNTRY,
) -> Dict[str, Any]:
    """
    Latest positions for one person, largest first, each with its share of the
    person's total and, for funds in `country`, the matched SODA3 yield.
    """
    positions = sorted(latest_positions(snapshots), key=lambda s: s.balance_usd, reverse=True)
    total = portfolio_total(positions)

    rows: List[Dict[str, Any]] = []
    for p in positions:
        inv = p.investment
        row = {
            "investment_id": p.investment_id,
            "investment_name": inv.name if inv else None,
            "platform": inv.platform if inv else None,
            "l1_category": inv.l1_category if inv else None,
            "l2_category": inv.l2_category if inv else None,
            "country": inv.country if inv else None,
            "currency": inv.currency if inv else p.currency_original,
            "ter": inv.expense_ratio if inv else 0.0,
            "balance_original": p.balance_original,
            "balance_usd": p.balance_usd,
            "snapshot_date": p.snapshot_date.isoformat(),
            "portfolio_pct": (p.balance_usd / total) * 100.0 if total else 0.0,
        }
        row.update(_fund_annotation(p, fund_records, prefix_len, country))
        rows.append(row)

    return {
        "person": {"id": person.id, "name": person.name, "slug": person.slug},
        "total_usd": total,
        "categories": breakdown_by(positions, "l1_category"),
        "investments": rows,
    }


def build_exposure(snapshots: Sequence[Snapshot], member_slug: Optional[str] = None) -> Dict[str, Any]:
    positions = latest_positions(snapshots)
    if member_slug:
        positions = [p for p in positions if getattr(_owner_of(p), "slug", None) == member_slug]
    return {
        "member": member_slug,
        "total_usd": portfolio_total(positions),
        "breakdowns": {label: breakdown_by(positions, attr) for label, attr in BREAKDOWN_ATTRIBUTES.items()},
    }


def build_history(
    people: Sequence[Owner],
    snapshots: Sequence[Snapshot],
    grouping: str = "owner",
) -> Dict[str, Any]:
    if grouping not in GROUPINGS:
        raise ValueError(f"unknown grouping {grouping!r}; expected one of {sorted(GROUPINGS)}")
    series = grouped_time_series(snapshots, GROUPINGS[grouping])
    series["grouping"] = grouping
    if grouping != "owner":
        series["series_names"] = list(series["groups"])
        return series

    # legend follows the people list; members without snapshots still get a zero series
    names = [p.name for p in people]
    names += [g for g in series["groups"] if g not in names]
    for point in series["points"]:
        for name in names:
            point.setdefault(name, 0.0)
    series["groups"] = names
    series["series_names"] = names
    return series


def build_fund_list(records: Sequence[ExternalFundRecord]) -> List[Dict[str, Any]]:
    return [
        {"name": r.fund_name, "entity": r.entity_name, "current_apy": r.annual_return}
        for r in dedupe_by_fund_name(records)
    ]
