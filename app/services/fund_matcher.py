from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from app.domain.models import ExternalFundRecord

# Both names are cut to this many characters before the containment test.
DEFAULT_PREFIX_LEN = 15


def parse_rate(val: Any) -> float:
    """
    Parse a SODA3 numeric string. Missing or malformed values become 0.0,
    which means a real 0% return and "could not parse" look the same.
    """
    try:
        f = float(val)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(f):
        return 0.0
    return f


def match_fund(
    investment_name: str,
    candidates: Sequence[ExternalFundRecord],
    prefix_len: int = DEFAULT_PREFIX_LEN,
) -> Optional[ExternalFundRecord]:
    """
    Return the first candidate whose name prefix is contained in the investment
    name, or whose full name contains the investment name prefix. Case-insensitive.

    First match wins, not best match: with several share classes of the same
    fund in `candidates`, input order decides which one comes back.
    """
    name_lc = (investment_name or "").lower()
    name_prefix = name_lc[:prefix_len]
    for record in candidates:
        fund_lc = (record.fund_name or "").lower()
        if fund_lc[:prefix_len] in name_lc or name_prefix in fund_lc:
            return record
    return None


def net_yield(gross: Optional[float], expense_ratio: Optional[float]) -> Optional[float]:
    if gross is None:
        return None
    return gross - (expense_ratio or 0.0)


def dedupe_by_fund_name(records: Sequence[ExternalFundRecord]) -> List[ExternalFundRecord]:
    seen: Dict[str, ExternalFundRecord] = {}
    for r in records:
        if r.fund_name not in seen:
            seen[r.fund_name] = r
    return list(seen.values())


def search_funds(records: Sequence[ExternalFundRecord], query: Optional[str]) -> List[ExternalFundRecord]:
    if not query:
        return list(records)
    q = query.lower()
    return [r for r in records if q in r.fund_name.lower() or q in r.entity_name.lower()]


def sample_last_per_month(records: Sequence[ExternalFundRecord]) -> List[ExternalFundRecord]:
    """
    Expects records in ascending date order; keeps the last one seen for each YYYY-MM.
    """
    monthly: Dict[str, ExternalFundRecord] = {}
    for r in records:
        month_key = (r.as_of_date or "")[:7]
        monthly[month_key] = r
    return list(monthly.values())
