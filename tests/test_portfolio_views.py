from datetime import date

import pytest

from app.domain.models import ExternalFundRecord, Investment, Owner, Snapshot
from app.services.portfolio import (
    build_exposure,
    build_fund_list,
    build_history,
    build_overview,
    build_person_view,
)

ANA = Owner(id="p1", name="Ana", slug="ana")
LUIS = Owner(id="p2", name="Luis", slug="luis")
SOFIA = Owner(id="p3", name="Sofia", slug="sofia")

FIC = Investment(
    id="fic",
    owner_id=ANA.id,
    name="Fondo Bancolombia Acciones",
    platform="Bancolombia",
    l1_category="Equity",
    l2_category="FIC",
    country="Colombia",
    currency="COP",
    expense_ratio=1.5,
    owner=ANA,
)
ETF = Investment(
    id="etf",
    owner_id=ANA.id,
    name="Vanguard Total World",
    platform="Interactive Brokers",
    l1_category="Equity",
    l2_category="ETF",
    country="USA",
    currency="USD",
    expense_ratio=0.07,
    owner=ANA,
)
CDT = Investment(
    id="cdt",
    owner_id=LUIS.id,
    name="CDT Davivienda",
    platform="Davivienda",
    l1_category=None,
    country="Colombia",
    currency="COP",
    owner=LUIS,
)


def _snap(inv, day, usd):
    return Snapshot(
        investment_id=inv.id,
        snapshot_date=date.fromisoformat(day),
        balance_original=usd * 4000 if inv.currency == "COP" else usd,
        currency_original=inv.currency,
        balance_usd=usd,
        fx_rate=4000.0 if inv.currency == "COP" else 1.0,
        investment=inv,
    )


SNAPS = [
    _snap(FIC, "2024-02-29", 1100.0),
    _snap(ETF, "2024-02-29", 2000.0),
    _snap(CDT, "2024-02-29", 500.0),
    _snap(FIC, "2024-01-31", 1000.0),
    _snap(ETF, "2024-01-31", 1900.0),
]


def test_overview_totals_latest_only_and_lists_everyone():
    ov = build_overview([ANA, LUIS, SOFIA], SNAPS, date(2024, 2, 29))

    assert ov["latest_snapshot_date"] == "2024-02-29"
    assert ov["total_usd"] == pytest.approx(3600.0)
    assert ov["investment_count"] == 3
    assert ov["member_count"] == 2
    by_slug = {m["slug"]: m for m in ov["members"]}
    assert by_slug["ana"]["total_usd"] == pytest.approx(3100.0)
    assert by_slug["ana"]["investments"] == 2
    assert by_slug["sofia"] == {"name": "Sofia", "slug": "sofia", "total_usd": 0.0, "investments": 0}


def test_overview_with_no_data():
    ov = build_overview([ANA], [], None)
    assert ov["latest_snapshot_date"] is None
    assert ov["total_usd"] == 0.0
    assert ov["members"][0]["total_usd"] == 0.0


def test_person_view_annotates_colombian_funds_only():
    records = [
        ExternalFundRecord(fund_name="FONDO BANCOLOMBIA ACCIONES COLOMBIA", entity_name="Fiduciaria Bancolombia", annual_return=9.0),
        # would match the ETF name if the country filter were skipped
        ExternalFundRecord(fund_name="VANGUARD TOTAL WORLD", annual_return=20.0),
    ]
    ana_snaps = [s for s in SNAPS if s.investment.owner == ANA]

    view = build_person_view(ANA, ana_snaps, records)

    assert view["total_usd"] == pytest.approx(3100.0)
    names = [row["investment_name"] for row in view["investments"]]
    assert names == ["Vanguard Total World", "Fondo Bancolombia Acciones"]

    etf_row, fic_row = view["investments"]
    assert etf_row["fund_match"] is None
    assert etf_row["apy_gross_pct"] is None
    assert fic_row["fund_match"]["entity_name"] == "Fiduciaria Bancolombia"
    assert fic_row["apy_gross_pct"] == 9.0
    assert fic_row["apy_net_pct"] == pytest.approx(7.5)
    assert fic_row["balance_usd"] == 1100.0
    assert fic_row["portfolio_pct"] == pytest.approx(1100.0 / 3100.0 * 100.0)
    assert view["categories"] == [{"name": "Equity", "value": 3100.0, "pct": 100.0}]


def test_person_view_without_fund_data():
    view = build_person_view(LUIS, [_snap(CDT, "2024-02-29", 500.0)], [])
    assert view["investments"][0]["fund_match"] is None
    assert view["categories"][0]["name"] == "Other"


def test_exposure_filters_by_member():
    everyone = build_exposure(SNAPS)
    assert everyone["total_usd"] == pytest.approx(3600.0)
    assert set(everyone["breakdowns"]) == {"asset_class", "sub_category", "country", "currency"}
    assert everyone["breakdowns"]["currency"][0] == {"name": "USD", "value": 2000.0, "pct": pytest.approx(2000.0 / 36.0)}

    luis = build_exposure(SNAPS, member_slug="luis")
    assert luis["total_usd"] == 500.0
    assert luis["breakdowns"]["asset_class"] == [{"name": "Other", "value": 500.0, "pct": 100.0}]


def test_history_per_owner_zero_fills():
    hist = build_history([ANA, LUIS], SNAPS, grouping="owner")
    assert hist["series_names"] == ["Ana", "Luis"]
    assert hist["points"][0] == {"date": "2024-01-31", "Ana": 2900.0, "Luis": 0.0}
    assert hist["points"][1] == {"date": "2024-02-29", "Ana": 3100.0, "Luis": 500.0}


def test_history_rejects_unknown_grouping():
    with pytest.raises(ValueError):
        build_history([ANA], SNAPS, grouping="planet")


def test_fund_list_dedupes_share_classes():
    records = [
        ExternalFundRecord(fund_name="FIC ALPHA", entity_name="E", annual_return=5.0),
        ExternalFundRecord(fund_name="FIC ALPHA", entity_name="E", annual_return=5.5),
        ExternalFundRecord(fund_name="FIC BETA", entity_name="F", annual_return=0.0),
    ]
    assert build_fund_list(records) == [
        {"name": "FIC ALPHA", "entity": "E", "current_apy": 5.0},
        {"name": "FIC BETA", "entity": "F", "current_apy": 0.0},
    ]


def test_history_zero_fills_people_without_snapshots():
    ana_only = [s for s in SNAPS if s.investment.owner == ANA]
    hist = build_history([ANA, SOFIA], ana_only, grouping="owner")

    assert hist["series_names"] == ["Ana", "Sofia"]
    assert hist["groups"] == ["Ana", "Sofia"]
    for point in hist["points"]:
        assert point["Sofia"] == 0.0
    assert hist["points"][0] == {"date": "2024-01-31", "Ana": 2900.0, "Sofia": 0.0}


def test_history_keeps_owner_groups_missing_from_people():
    orphan = Investment(id="orphan", owner_id="p9", name="Loose cash", platform="Nu", currency="COP")
    snaps = [_snap(FIC, "2024-01-31", 10.0), _snap(orphan, "2024-02-29", 5.0)]
    hist = build_history([ANA, LUIS], snaps, grouping="owner")

    assert hist["series_names"] == ["Ana", "Luis", "Other"]
    assert hist["points"] == [
        {"date": "2024-01-31", "Ana": 10.0, "Luis": 0.0, "Other": 0.0},
        {"date": "2024-02-29", "Ana": 0.0, "Luis": 0.0, "Other": 5.0},
    ]
