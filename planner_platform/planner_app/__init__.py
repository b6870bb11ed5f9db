"""planner_app package – application factory and blueprint registration."""

from __future__ import annotations

import os
from time import perf_counter

import click
from flask import Flask, g, request
from sqlalchemy import event

from config import resolve_config
from .blueprints import BLUEPRINTS
from .extensions import cors, db, limiter, migrate
from .logging_config import assign_request_id, configure_logging
from .metrics import record_request
from .services.ai_client import init_generator_client
from .services.draft_service import schedule_draft_sweep


def create_app(config_name: str | None = None) -> Flask:
    """Application factory used by both CLI and runtime servers."""

    app = Flask(__name__)
    _configure_app(app, config_name)
    configure_logging(app)
    _register_extensions(app)
    _register_blueprints(app)
    init_generator_client(app)
    schedule_draft_sweep(app)
    _register_shellcontext(app)
    _register_cli(app)
    _register_bootstrap(app)
    _register_request_hooks(app)

    return app


def _configure_app(app: Flask, config_name: str | None) -> None:
    env_name = config_name or os.getenv("FLASK_CONFIG")
    config_obj = resolve_config(env_name)
    app.config.from_object(config_obj)


def _register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    _configure_sqlite_engine(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=True,
    )
    limiter.default_limits = app.config.get("RATE_LIMIT_DEFAULTS", [])
    limiter.init_app(app)


def _register_blueprints(app: Flask) -> None:
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=prefix)


def _register_shellcontext(app: Flask) -> None:
    # Lazy import inside function to avoid circular dependencies.
    from . import models

    @app.shell_context_processor
    def shell_context():
        return {
            "db": db,
            "GoalPreference": models.GoalPreference,
            "PlanDraft": models.PlanDraft,
            "GenerationQuota": models.GenerationQuota,
            "MonthlyPlan": models.MonthlyPlan,
        }


def _register_bootstrap(app: Flask) -> None:
    @app.before_request
    def ensure_schema():
        if app.config.get("_SCHEMA_READY"):
            return
        try:
            _ensure_schema(app)
            app.config["_SCHEMA_READY"] = True
        except Exception as exc:  # pragma: no cover
            app.logger.debug("Schema bootstrap skipped: %s", exc)
            app.config["_SCHEMA_READY"] = False


def _register_request_hooks(app: Flask) -> None:
    @app.before_request
    def start_request():
        assign_request_id()
        g.request_started_at = perf_counter()

    @app.after_request
    def finalize(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        started = getattr(g, "request_started_at", None)
        latency = perf_counter() - started if started else 0.0
        endpoint = request.endpoint or request.path
        record_request(request.method, endpoint, response.status_code, latency)
        return response


def _configure_sqlite_engine(app: Flask) -> None:
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite") or ":memory:" in uri:
        return
    busy_timeout_ms = int(app.config.get("SQLITE_BUSY_TIMEOUT_MS", 15000))

    with app.app_context():
        engine = db.engine

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):  # pragma: no cover
            cursor = dbapi_connection.cursor()
            try:
                cursor.execute("PRAGMA journal_mode=WAL;")
                cursor.execute(f"PRAGMA busy_timeout={busy_timeout_ms};")
                cursor.execute("PRAGMA synchronous=NORMAL;")
                cursor.execute("PRAGMA foreign_keys=ON;")
            finally:
                cursor.close()


def _ensure_schema(app: Flask) -> None:
    from . import models  # noqa: F401

    with app.app_context():
        db.create_all()


def _register_cli(app: Flask) -> None:
    @app.cli.group("drafts")
    def drafts_group():
        """Plan draft maintenance commands."""

    @drafts_group.command("sweep")
    def sweep_command():
        """Delete drafts whose expiry has passed."""

        from .services import draft_service

        with app.app_context():
            _ensure_schema(app)
            removed = draft_service.sweep_expired_drafts()
        click.echo(f"Removed {removed} expired drafts.")

    @app.cli.group("quota")
    def quota_group():
        """Generation quota commands."""

    @quota_group.command("show")
    @click.option("--user-id", required=True, help="User identifier as sent in X-User-ID.")
    @click.option("--month", help="Month (YYYY-MM). Defaults to the current month.")
    def show_quota(user_id: str, month: str | None):
        """Print the user's quota for a month."""

        from .services import quota_service
        from .utils import parse_month

        try:
            target = parse_month(month)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--month") from exc

        with app.app_context():
            _ensure_schema(app)
            quota = quota_service.get_or_create_quota(user_id, target)
            click.echo(
                f"{user_id} {quota.month_year.strftime('%Y-%m')}: "
                f"{quota.generations_used}/{quota.total_allowed} used, resets on {quota.resets_on.isoformat()}"
            )

    @quota_group.command("grant")
    @click.option("--user-id", required=True, help="User identifier as sent in X-User-ID.")
    @click.option("--amount", required=True, type=int, help="Extra generations to add.")
    @click.option("--reason", required=True, help="Audit note (at least 10 characters).")
    def grant_quota(user_id: str, amount: int, reason: str):
        """Top up the current month's allowance."""

        from marshmallow import ValidationError

        from .services import quota_service

        with app.app_context():
            _ensure_schema(app)
            try:
                quota, _ = quota_service.request_more_quota(user_id, amount, reason)
            except ValidationError as exc:
                raise click.ClickException(f"Invalid grant: {exc.messages}") from exc
            click.echo(f"Granted {amount} generations to {user_id}; allowance is now {quota.total_allowed}.")
