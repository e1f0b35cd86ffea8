from __future__ import annotations

import sys
from typing import Optional

import typer
import uvicorn

from user_service.config import get_settings
from user_service.errors import UserServiceError
from user_service.infrastructure.db_factory import PoolManager, get_sync_connection
from user_service.infrastructure.schema import ensure_schema
from user_service.orchestrator import build_store, reset_problems, seed_users
from user_service.reporter import print_reset_result, print_seed_result, print_store_stats
from user_service.utils.logging import configure_logging

app = typer.Typer(help="User seed service CLI.")


def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _fail(exc: UserServiceError) -> None:
    details = exc.to_dict()
    extra = ", ".join(f"{k}={v}" for k, v in details.items() if k not in ("message", "error"))
    typer.echo(f"[{exc.kind}] {exc}" + (f" ({extra})" if extra else ""), err=True)
    raise typer.Exit(code=1)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) | "
        f"seed total={settings.seed_default_total} batch={settings.seed_batch_size} "
        f"concurrency={settings.seed_concurrency} | "
        f"reset attempts={settings.reset_max_attempts}"
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create the users table and its index if missing.
    """
    _setup()
    with get_sync_connection() as conn:
        ensure_schema(conn)
    typer.echo("Schema ready.")


@app.command()
def stats() -> None:
    """
    Show how many users exist and how many are flagged.
    """
    _setup()
    store = build_store()
    try:
        print_store_stats({"users": store.count_users(), "flagged": store.count_flagged()})
    except UserServiceError as exc:
        _fail(exc)
    finally:
        PoolManager().close_all()


@app.command()
def seed(
    total: Optional[int] = typer.Option(
        None,
        "--total",
        "-n",
        help="Number of users to insert (default from settings, 1,000,000).",
    ),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", help="Users per batch."),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", help="Batches written in parallel."
    ),
    rng_seed: Optional[int] = typer.Option(None, "--seed", help="Deterministic RNG seed."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Cancel the run after this many seconds."
    ),
) -> None:
    """
    Seed synthetic users in batches.
    """
    _setup()
    try:
        result = seed_users(
            total,
            batch_size=batch_size,
            concurrency=concurrency,
            rng_seed=rng_seed,
            timeout=timeout,
        )
    except UserServiceError as exc:
        _fail(exc)
    else:
        print_seed_result(result)
    finally:
        PoolManager().close_all()


@app.command("reset-problems")
def reset_problems_command() -> None:
    """
    Clear the problems flag and report how many users had it set.
    """
    _setup()
    try:
        result = reset_problems()
    except UserServiceError as exc:
        _fail(exc)
    else:
        print_reset_result(result)
    finally:
        PoolManager().close_all()


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port."),
) -> None:
    """
    Run the HTTP API.
    """
    settings = get_settings()
    uvicorn.run(
        "user_service.api:create_app",
        factory=True,
        host=host if host is not None else settings.api_host,
        port=port if port is not None else settings.api_port,
        log_config=None,
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
