from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import date, timedelta
from typing import ContextManager, List, Optional

import httpx

from app.domain.models import ExternalFundRecord
from app.services.fund_matcher import sample_last_per_month
from app.services.soda3_client import Soda3Client

log = logging.getLogger(__name__)

# Soft-fail wrappers: an unreachable SODA3 or a garbled payload means "no fund data", never a 500.


def _client_scope(client: Optional[Soda3Client]) -> ContextManager[Soda3Client]:
    # a caller-supplied client stays open; one we create is closed after use
    return nullcontext(client) if client is not None else Soda3Client()


def fetch_latest_records(client: Optional[Soda3Client] = None) -> List[ExternalFundRecord]:
    try:
        with _client_scope(client) as c:
            return c.get_latest_records()
    except (httpx.HTTPError, ValueError) as e:
        log.warning("SODA3 latest records fetch failed: %s", e)
        return []


def fetch_fund_list(client: Optional[Soda3Client] = None) -> List[ExternalFundRecord]:
    """Every fund reported on the most recent cut date."""
    try:
        with _client_scope(client) as c:
            latest = c.get_latest_cut_date()
            if not latest:
                return []
            return c.get_funds_for_date(latest)
    except (httpx.HTTPError, ValueError) as e:
        log.warning("SODA3 fund list fetch failed: %s", e)
        return []


def fetch_fund_history(
    fund_name: str,
    client: Optional[Soda3Client] = None,
    today: Optional[date] = None,
    days_back: int = 365,
) -> List[ExternalFundRecord]:
    """Last year of one fund, one record per month (the last of each month)."""
    since = (today or date.today()) - timedelta(days=days_back)
    try:
        with _client_scope(client) as c:
            records = c.get_fund_history(fund_name, since)
    except (httpx.HTTPError, ValueError) as e:
        log.warning("SODA3 history fetch failed fund=%r: %s", fund_name, e)
        return []
    return sample_last_per_month(records)
