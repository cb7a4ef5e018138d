from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.domain.models import Investment, Owner, Snapshot
from app.infra.models import AuditLog, Investment as InvestmentRow, MonthlySnapshot, Person

log = logging.getLogger(__name__)


def _float(val: Any, default: float = 0.0) -> float:
    return float(val) if val is not None else default


def _owner(row: Person) -> Owner:
    return Owner(id=row.id, name=row.name, slug=row.slug)


def _investment(row: InvestmentRow) -> Investment:
    return Investment(
        id=row.id,
        owner_id=row.person_id,
        name=row.investment_name,
        platform=row.platform,
        l1_category=row.l1_category,
        l2_category=row.l2_category,
        country=row.country,
        currency=row.currency,
        expense_ratio=_float(row.ter),
        is_active=bool(row.is_active),
        owner=_owner(row.person) if row.person is not None else None,
    )


def _snapshot(row: MonthlySnapshot) -> Snapshot:
    return Snapshot(
        investment_id=row.investment_id,
        snapshot_date=row.snapshot_date,
        balance_original=_float(row.balance_original),
        currency_original=row.currency_original,
        balance_usd=_float(row.balance_usd),
        fx_rate=_float(row.fx_rate, 1.0),
        investment=_investment(row.investment) if row.investment is not None else None,
    )


def get_people(db: Session) -> List[Owner]:
    try:
        rows = db.query(Person).order_by(Person.name.asc()).all()
    except SQLAlchemyError as e:
        log.warning("people query failed: %s", e)
        return []
    return [_owner(r) for r in rows]


def get_person_by_slug(db: Session, slug: str) -> Optional[Owner]:
    try:
        row = db.query(Person).filter(Person.slug == slug).one_or_none()
    except SQLAlchemyError as e:
        log.warning("person query failed slug=%s: %s", slug, e)
        return None
    return _owner(row) if row is not None else None


def get_snapshots(
    db: Session,
    person_id: Optional[str] = None,
    ascending: bool = False,
) -> List[Snapshot]:
    """
    Snapshots joined with their investment and owner, ordered by snapshot_date.
    """
    order = MonthlySnapshot.snapshot_date.asc() if ascending else MonthlySnapshot.snapshot_date.desc()
    try:
        query = (
            db.query(MonthlySnapshot)
            .join(MonthlySnapshot.investment)
            .options(joinedload(MonthlySnapshot.investment).joinedload(InvestmentRow.person))
        )
        if person_id is not None:
            query = query.filter(InvestmentRow.person_id == person_id)
        rows = query.order_by(order).all()
    except SQLAlchemyError as e:
        log.warning("snapshot query failed person_id=%s: %s", person_id, e)
        return []
    return [_snapshot(r) for r in rows]


def get_latest_snapshot_date(db: Session) -> Optional[date]:
    try:
        return db.query(func.max(MonthlySnapshot.snapshot_date)).scalar()
    except SQLAlchemyError as e:
        log.warning("latest snapshot date query failed: %s", e)
        return None


def get_audit_logs(db: Session, limit: int = 50) -> List[Dict[str, Any]]:
    try:
        rows = db.query(AuditLog).order_by(AuditLog.execution_date.desc()).limit(limit).all()
    except SQLAlchemyError as e:
        log.warning("audit log query failed: %s", e)
        return []
    return [
        {
            "id": r.id,
            "execution_date": r.execution_date.isoformat() if r.execution_date else None,
            "workflow_name": r.workflow_name or "Manual execution",
            "action": r.action,
            "details": r.details,
            "status": r.status,
            "error_message": r.error_message,
        }
        for r in rows
    ]
