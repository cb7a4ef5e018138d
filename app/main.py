from fastapi import FastAPI

from app.api.routes.audit import router as audit_router
from app.api.routes.funds import router as funds_router
from app.api.routes.health import router as health_router
from app.api.routes.portfolio import router as portfolio_router
from app.infra.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="Family Office Service",
        version="0.1.0",
        description="Family portfolio balances, history, exposure and SODA3 fund returns.",
    )

    app.include_router(health_router)
    app.include_router(portfolio_router)
    app.include_router(funds_router)
    app.include_router(audit_router)

    @app.get("/", tags=["meta"])
    async def root() -> dict:
        return {"service": "fo", "status": "running"}

    return app


app = create_app()
