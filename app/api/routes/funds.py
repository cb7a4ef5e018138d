from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Query

from app.services.fund_matcher import search_funds
from app.services.funds import fetch_fund_history, fetch_fund_list
from app.services.portfolio import build_fund_list

router = APIRouter(prefix="/api/v1/funds", tags=["funds"])


@router.get("/", summary="Colombian FIC funds on the latest cut date")
def list_funds(
    q: Optional[str] = Query(default=None, description="Case-insensitive filter on fund or entity name."),
) -> Dict[str, Any]:
    records = search_funds(fetch_fund_list(), q)
    funds = build_fund_list(records)
    return {"count": len(funds), "funds": funds}


@router.get("/history", summary="Last 12 months of one fund, one point per month")
def fund_history(
    fund: str = Query(..., min_length=1, description="Exact SODA3 fund name (nombre_patrimonio)."),
) -> Dict[str, Any]:
    records = fetch_fund_history(fund)
    return {
        "fund": fund,
        "points": [
            {
                "date": r.as_of_date,
                "apy": r.annual_return,
                "monthly": r.monthly_return,
                "daily": r.daily_return,
                "unit_value": r.unit_value,
            }
            for r in records
        ],
    }
