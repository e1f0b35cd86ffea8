"""
HTTP front end for the seed and reset operations.

    POST /user/seed            -> {"message": ..., "inserted": n}
    POST /user/reset-problems  -> {"message": ..., "usersWithProblems": n}

Handlers are plain (sync) functions, so FastAPI runs them on its worker
thread pool and a long seed does not block the event loop. Service errors are
rendered as `{"message", "error", ...}` with the status code carried by the
error class.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from user_service.config import get_settings
from user_service.errors import UserServiceError
from user_service.infrastructure.db_factory import PoolManager, get_sync_connection
from user_service.infrastructure.schema import ensure_schema
from user_service.infrastructure.user_store import UserStore
from user_service.orchestrator import build_store, reset_problems, seed_users
from user_service.utils.logging import configure_logging, get_logger

log = get_logger(__name__)


class SeedResponse(BaseModel):
    message: str
    inserted: int


class ResetProblemsResponse(BaseModel):
    message: str
    users_with_problems: int = Field(..., alias="usersWithProblems")

    model_config = ConfigDict(populate_by_name=True)


def _get_store(request: Request) -> UserStore:
    return request.app.state.store


def create_app(*, store: Optional[UserStore] = None) -> FastAPI:
    """
    Build the API app.

    With no `store`, the lifespan syncs the schema (when DB_SYNCHRONIZE is on)
    and opens the shared connection pool; it closes the pool on shutdown.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level, json_logs=settings.log_json)
        owns_pool = store is None
        if owns_pool:
            if settings.db_synchronize:
                with get_sync_connection() as conn:
                    ensure_schema(conn)
            app.state.store = build_store()
        log.info("startup", extra={"app_env": settings.app_env})
        yield
        if owns_pool:
            PoolManager().close_all()
        log.info("shutdown")

    app = FastAPI(title="user-seed-service", lifespan=lifespan)
    app.state.store = store

    @app.exception_handler(UserServiceError)
    async def service_error_handler(request: Request, exc: UserServiceError) -> JSONResponse:
        log.warning(
            "request_failed",
            extra={"path": request.url.path, "error": exc.kind, "status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.post("/user/seed", response_model=SeedResponse)
    def seed(
        total: Optional[int] = Query(None, description="Users to insert (default 1,000,000)."),
        user_store: UserStore = Depends(_get_store),
    ) -> SeedResponse:
        result = seed_users(total, store=user_store)
        return SeedResponse(message="Users seeded successfully", inserted=result["inserted"])

    @app.post(
        "/user/reset-problems",
        response_model=ResetProblemsResponse,
        response_model_by_alias=True,
    )
    def reset_problems_flag(
        user_store: UserStore = Depends(_get_store),
    ) -> ResetProblemsResponse:
        result = reset_problems(store=user_store)
        return ResetProblemsResponse(
            message="Problems flag reset",
            users_with_problems=result["reset_count"],
        )

    return app


__all__ = ["ResetProblemsResponse", "SeedResponse", "create_app"]
