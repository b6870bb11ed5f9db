"""Monthly generation quota endpoints."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, g, jsonify, request
from marshmallow import ValidationError

from ..schemas import QuotaAdjustmentSchema, QuotaSchema
from ..services import quota_service
from ..services.errors import NotFoundError, PlannerError
from ..utils.identity import user_required

quota_bp = Blueprint("quota_bp", __name__)

quota_schema = QuotaSchema()
history_schema = QuotaSchema(many=True)
adjustment_schema = QuotaAdjustmentSchema()


@quota_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@quota_bp.errorhandler(PlannerError)
def handle_planner_error(err: PlannerError):
    status = HTTPStatus.NOT_FOUND if isinstance(err, NotFoundError) else HTTPStatus.BAD_REQUEST
    return jsonify(err.to_dict()), status


@quota_bp.get("/ping")
def ping():
    return jsonify({"module": "quota", "status": "ok"})


@quota_bp.get("/current")
@user_required
def current_quota():
    quota = quota_service.get_or_create_quota(g.user_id)
    return jsonify({"quota": quota_schema.dump(quota)})


@quota_bp.post("/request")
@user_required
def request_more():
    payload = request.get_json() or {}
    quota, adjustment = quota_service.request_more_quota(
        g.user_id, payload.get("requested_amount"), payload.get("reason")
    )
    return (
        jsonify(
            {
                "success": True,
                "quota": quota_schema.dump(quota),
                "adjustment": adjustment_schema.dump(adjustment),
            }
        ),
        HTTPStatus.CREATED,
    )


@quota_bp.get("/history")
@user_required
def history():
    months = request.args.get("months", default=6, type=int)
    return jsonify({"history": history_schema.dump(quota_service.get_quota_history(g.user_id, months))})
