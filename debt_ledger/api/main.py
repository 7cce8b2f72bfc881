"""FastAPI application factory"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from debt_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from debt_ledger.api.v1 import clients, debts
from debt_ledger.infrastructure.database.session import init_db
from debt_ledger.infrastructure.observability.logging import setup_logging
from debt_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    init_db()
    yield


def create_app(upload_dir: str | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Debt Ledger",
        description="Customer debts, partial repayments, reputation and soft deletion",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(debts.router, prefix="/v1", tags=["debts"])
    app.include_router(clients.router, prefix="/v1", tags=["clients"])

    # Stored client photos, referenced as /uploads/<YYYY-MM>/<file>
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=upload_dir or settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


app = create_app()
