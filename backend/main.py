import os
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

import models  # noqa: F401  registers the tables on Base.metadata
from auth import TokenRevocationList
from config import (
    API_PREFIX,
    DOCS_URL,
    LOG_JSON,
    LOG_LEVEL,
    PRODUCTS_PREFIX,
    SERVICE_NAME,
    SERVICE_VERSION,
)
from database import Base, engine
from errors import register_error_handlers
from logging_config import bind_request_id, configure_logging, get_logger
from ratelimit import FixedWindowRateLimiter
from routes import customers_router, products_router, users_router

logger = get_logger("storefront.main")


def create_app(rate_limiter: Optional[FixedWindowRateLimiter] = None,
               bind: Optional[Engine] = None) -> FastAPI:
    configure_logging(LOG_LEVEL, LOG_JSON)
    bind = bind if bind is not None else engine

    app = FastAPI(
        title="Storefront API",
        description="Customers and products CRUD with token authentication.",
        version=SERVICE_VERSION,
        docs_url=DOCS_URL,
        openapi_url=f"{DOCS_URL}/openapi.json",
    )

    # Process-local state, owned by this application instance
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else FixedWindowRateLimiter()
    app.state.revoked_tokens = TokenRevocationList()
    app.state.engine = bind

    # Create DB tables
    Base.metadata.create_all(bind=bind)

    register_error_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = bind_request_id(request.headers.get("X-Request-ID"))
        started = time.perf_counter()
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    @app.get("/", tags=["Service"])
    def read_root():
        return {"service": SERVICE_NAME, "version": SERVICE_VERSION, "docs": DOCS_URL}

    @app.get("/health", tags=["Service"])
    def health_check(request: Request):
        try:
            with request.app.state.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Health check failed", error=str(exc))
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "database": "unavailable"},
            )
        return {"status": "ok", "database": "ok"}

    app.include_router(customers_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(products_router, prefix=f"{API_PREFIX}{PRODUCTS_PREFIX}")

    logger.info("Application created", api_prefix=API_PREFIX, docs=DOCS_URL)
    return app


app = create_app()


def run():
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    run()
