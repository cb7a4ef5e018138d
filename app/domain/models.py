from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Owner:
    id: str
    name: str
    slug: str


@dataclass(frozen=True)
class Investment:
    id: str
    owner_id: str
    name: str
    platform: str
    l1_category: Optional[str] = None
    l2_category: Optional[str] = None
    country: Optional[str] = None
    currency: str = "USD"
    expense_ratio: float = 0.0  # TER, percent
    is_active: bool = True
    owner: Optional[Owner] = None


@dataclass(frozen=True)
class Snapshot:
    """A dated balance for one investment, already converted to USD upstream."""

    investment_id: str
    snapshot_date: date
    balance_original: float
    currency_original: str
    balance_usd: float
    fx_rate: float = 1.0
    investment: Optional[Investment] = None


@dataclass(frozen=True)
class ExternalFundRecord:
    fund_name: str
    entity_name: str = ""
    as_of_date: str = ""
    daily_return: float = 0.0
    monthly_return: float = 0.0
    semiannual_return: float = 0.0
    annual_return: float = 0.0
    unit_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fund_name": self.fund_name,
            "entity_name": self.entity_name,
            "as_of_date": self.as_of_date,
            "daily_return": self.daily_return,
            "monthly_return": self.monthly_return,
            "semiannual_return": self.semiannual_return,
            "annual_return": self.annual_return,
            "unit_value": self.unit_value,
        }
