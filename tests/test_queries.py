from datetime import date, datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.infra.db import Base
from app.infra.models import AuditLog, Investment, MonthlySnapshot, Person
from app.services import queries


@pytest.fixture
def db():
    engine = create_engine("sqlite://", future=True)
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(
            [
                Person(id="p1", name="Luis", slug="luis"),
                Person(id="p2", name="Ana", slug="ana"),
                Investment(
                    id="i1",
                    person_id="p2",
                    investment_name="Fondo Bancolombia Acciones",
                    platform="Bancolombia",
                    l1_category="Equity",
                    country="Colombia",
                    currency="COP",
                    ter=1.5,
                ),
                Investment(id="i2", person_id="p1", investment_name="CDT", platform="Davivienda", currency="COP", ter=0),
                MonthlySnapshot(
                    id="s1",
                    investment_id="i1",
                    snapshot_date=date(2024, 1, 31),
                    balance_original=4_000_000,
                    currency_original="COP",
                    balance_usd=1000.0,
                    fx_rate=4000.0,
                ),
                MonthlySnapshot(
                    id="s2",
                    investment_id="i1",
                    snapshot_date=date(2024, 2, 29),
                    balance_original=4_400_000,
                    currency_original="COP",
                    balance_usd=1100.0,
                    fx_rate=4000.0,
                ),
                MonthlySnapshot(
                    id="s3",
                    investment_id="i2",
                    snapshot_date=date(2024, 2, 29),
                    balance_original=2_000_000,
                    currency_original="COP",
                    balance_usd=500.0,
                    fx_rate=4000.0,
                ),
                AuditLog(
                    id="a1",
                    execution_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
                    workflow_name=None,
                    action="import_balances",
                    details={"rows": 3},
                    status="success",
                ),
            ]
        )
        session.commit()
        yield session
    engine.dispose()


def test_people_sorted_by_name(db):
    assert [p.slug for p in queries.get_people(db)] == ["ana", "luis"]


def test_person_by_slug(db):
    assert queries.get_person_by_slug(db, "ana").id == "p2"
    assert queries.get_person_by_slug(db, "nobody") is None


def test_snapshots_join_investment_and_owner(db):
    snaps = queries.get_snapshots(db)
    assert [s.snapshot_date for s in snaps][0] == date(2024, 2, 29)
    assert [s.snapshot_date for s in snaps][-1] == date(2024, 1, 31)

    first = [s for s in snaps if s.investment_id == "i1"][0]
    assert isinstance(first.balance_usd, float)
    assert first.investment.name == "Fondo Bancolombia Acciones"
    assert first.investment.expense_ratio == 1.5
    assert first.investment.owner.slug == "ana"


def test_snapshots_for_one_person_ascending(db):
    snaps = queries.get_snapshots(db, person_id="p2", ascending=True)
    assert [s.balance_usd for s in snaps] == [1000.0, 1100.0]


def test_latest_snapshot_date(db):
    assert queries.get_latest_snapshot_date(db) == date(2024, 2, 29)


def test_audit_logs(db):
    entries = queries.get_audit_logs(db)
    assert len(entries) == 1
    assert entries[0]["workflow_name"] == "Manual execution"
    assert entries[0]["details"] == {"rows": 3}


class _BrokenSession:
    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))


def test_queries_soft_fail_on_db_errors():
    broken = _BrokenSession()
    assert queries.get_people(broken) == []
    assert queries.get_person_by_slug(broken, "ana") is None
    assert queries.get_snapshots(broken) == []
    assert queries.get_latest_snapshot_date(broken) is None
    assert queries.get_audit_logs(broken) == []
