"""Prometheus scrape and liveness endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, Response, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db, limiter
from ..metrics import latest_metrics
from ..services.ai_client import get_generator_client, is_configured

metrics_bp = Blueprint("metrics_bp", __name__)


@metrics_bp.get("/metrics")
@limiter.exempt
def metrics():
    payload, content_type = latest_metrics()
    return Response(payload, mimetype=content_type)


@metrics_bp.get("/healthz")
@limiter.exempt
def healthz():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        current_app.logger.warning("Health check could not reach the database", exc_info=True)
        database = "unavailable"
    status = HTTPStatus.OK if database == "ok" else HTTPStatus.SERVICE_UNAVAILABLE
    return (
        jsonify(
            {
                "status": "ok" if status == HTTPStatus.OK else "degraded",
                "database": database,
                "generator_configured": is_configured(get_generator_client()),
            }
        ),
        status,
    )
