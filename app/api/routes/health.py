from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.infra.settings import settings

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", summary="Health check")
def health_check(db: Session = Depends(get_db)) -> dict:
    """
    Basic health check; pings the DB so we know the snapshot store is reachable.
    """
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        db_ok = False

    return {
        "service": "fo",
        "env": settings.fo_env,
        "status": "ok",
        "db_ok": db_ok,
    }
