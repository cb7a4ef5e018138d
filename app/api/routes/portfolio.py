from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.infra.settings import settings
from app.services import queries
from app.services.funds import fetch_latest_records
from app.services.portfolio import build_exposure, build_history, build_overview, build_person_view
from app.services.rollups import GROUPINGS

router = APIRouter(prefix="/api/v1/portfolio", tags=["portfolio"])


@router.get("/overview", summary="Current totals per family member")
def get_overview(db: Session = Depends(get_db)) -> Dict[str, Any]:
    people = queries.get_people(db)
    snapshots = queries.get_snapshots(db)
    latest_date = queries.get_latest_snapshot_date(db)
    return build_overview(people, snapshots, latest_date)


@router.get("/people/{slug}", summary="One member's positions with SODA3 yields")
def get_person(slug: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    person = queries.get_person_by_slug(db, slug)
    if person is None:
        raise HTTPException(status_code=404, detail=f"person {slug!r} not found")
    snapshots = queries.get_snapshots(db, person_id=person.id)
    fund_records = fetch_latest_records()
    return build_person_view(
        person,
        snapshots,
        fund_records,
        prefix_len=settings.soda3_match_prefix_len,
        country=settings.soda3_match_country,
    )


@router.get("/exposure", summary="Asset class / sub-category / country / currency breakdowns")
def get_exposure(
    member: Optional[str] = Query(
        default=None,
        description="Member slug. If omitted, covers the whole family.",
    ),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    snapshots = queries.get_snapshots(db)
    return build_exposure(snapshots, member_slug=member)


@router.get("/history", summary="Balance time series for charting")
def get_history(
    group_by: str = Query(
        default="owner",
        description=f"One of: {', '.join(GROUPINGS)}",
    ),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    if group_by not in GROUPINGS:
        raise HTTPException(status_code=422, detail=f"group_by must be one of {list(GROUPINGS)}")
    people = queries.get_people(db)
    snapshots = queries.get_snapshots(db, ascending=True)
    return build_history(people, snapshots, grouping=group_by)
