from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

from app.domain.models import ExternalFundRecord
from app.infra.settings import settings
from app.services.cache_utils import load_ttl_cache, store_ttl_cache
from app.services.fund_matcher import parse_rate

log = logging.getLogger(__name__)

_FIELDS = [
    "fecha_corte",
    "nombre_patrimonio",
    "nombre_entidad",
    "rentabilidad_diaria",
    "rentabilidad_mensual",
    "rentabilidad_semestral",
    "rentabilidad_anual",
    "valor_unidad_operaciones",
]


def parse_record(row: Dict[str, Any]) -> ExternalFundRecord:
    """Map a datos.gov.co FIC row onto ExternalFundRecord."""
    raw_unit = row.get("valor_unidad_operaciones")
    return ExternalFundRecord(
        fund_name=row.get("nombre_patrimonio") or "",
        entity_name=row.get("nombre_entidad") or "",
        as_of_date=(row.get("fecha_corte") or "").split("T")[0],
        daily_return=parse_rate(row.get("rentabilidad_diaria")),
        monthly_return=parse_rate(row.get("rentabilidad_mensual")),
        semiannual_return=parse_rate(row.get("rentabilidad_semestral")),
        annual_return=parse_rate(row.get("rentabilidad_anual")),
        unit_value=parse_rate(raw_unit) if raw_unit else None,
    )


def soql_literal(val: str) -> str:
    return "'" + (val or "").replace("'", "''") + "'"


class Soda3Client:
    """
    Thin client for the SODA3 FIC returns dataset. Responses are cached on disk
    (cache-aside) for `cache_ttl` seconds, keyed by the full query.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        app_token: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.soda3_base_url or "").rstrip("/")
        self.token = app_token if app_token is not None else settings.soda3_app_token
        self.cache_ttl = settings.soda3_cache_ttl_seconds if cache_ttl is None else cache_ttl

        if not self.base_url:
            raise RuntimeError("SODA3_BASE_URL is not set")

        self._client = httpx.Client(timeout=settings.soda3_timeout_seconds, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Soda3Client":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["X-App-Token"] = self.token
        return headers

    def _cache_key(self, params: Dict[str, str]) -> str:
        query = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{self.base_url}?{query}"

    def _get(self, params: Dict[str, str]) -> List[Dict[str, Any]]:
        cache_key = self._cache_key(params)
        cached = load_ttl_cache("soda3", cache_key)
        if isinstance(cached, list):
            return cached

        resp = self._client.get(self.base_url, headers=self._headers(), params=params)
        resp.raise_for_status()
        rows = resp.json()
        if not isinstance(rows, list):
            log.warning("unexpected SODA3 payload type=%s", type(rows).__name__)
            return []
        try:
            store_ttl_cache("soda3", cache_key, rows, self.cache_ttl)
        except OSError as e:
            log.warning("soda3 cache write failed: %s", e)
        return rows

    # ---------- queries ----------

    def get_latest_records(self, limit: int = 200) -> List[ExternalFundRecord]:
        """Most recent rows across all funds, newest cut date first."""
        rows = self._get(
            {
                "$order": "fecha_corte DESC",
                "$limit": str(limit),
                "$select": ",".join(_FIELDS),
            }
        )
        return [parse_record(r) for r in rows]

    def get_latest_cut_date(self) -> Optional[str]:
        rows = self._get({"$select": "fecha_corte", "$order": "fecha_corte DESC", "$limit": "1"})
        if not rows:
            return None
        return rows[0].get("fecha_corte")

    def get_funds_for_date(self, cut_date: str, limit: int = 1000) -> List[ExternalFundRecord]:
        rows = self._get(
            {
                "$where": f"fecha_corte={soql_literal(cut_date)}",
                "$limit": str(limit),
                "$select": ",".join(_FIELDS),
                "$order": "nombre_patrimonio ASC",
            }
        )
        return [parse_record(r) for r in rows]

    def get_fund_history(self, fund_name: str, since: date, limit: int = 400) -> List[ExternalFundRecord]:
        """Rows for one fund from `since` onwards, oldest first."""
        rows = self._get(
            {
                "$where": (
                    f"nombre_patrimonio={soql_literal(fund_name)} "
                    f"AND fecha_corte >= {soql_literal(since.isoformat())}"
                ),
                "$order": "fecha_corte ASC",
                "$limit": str(limit),
                "$select": ",".join(_FIELDS),
            }
        )
        return [parse_record(r) for r in rows]
