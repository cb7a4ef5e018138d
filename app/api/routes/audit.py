from typing import Dict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.services import queries

router = APIRouter(prefix="/api/v1/audit", tags=["audit"])


@router.get("/")
def get_audit_log(
    limit: int = Query(default=50, ge=1, le=500, description="Maximum number of entries to return."),
    db: Session = Depends(get_db),
) -> Dict:
    entries = queries.get_audit_logs(db, limit=limit)
    return {"count": len(entries), "entries": entries}
