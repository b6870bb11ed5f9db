"""Per-user monthly generation quota."""

from __future__ import annotations

from datetime import date, datetime

from flask import current_app
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import GenerationQuota, QuotaAdjustmentLog
from ..schemas import QuotaRequestSchema
from ..utils import month_start, next_month_start, shift_months
from .errors import NotFoundError, QuotaExceeded, QuotaRefundError

request_schema = QuotaRequestSchema()


def _default_allowance() -> int:
    return int(current_app.config.get("QUOTA_DEFAULT_MONTHLY", 20))


def quota_payload(quota: GenerationQuota) -> dict:
    return {
        "id": quota.id,
        "month_year": quota.month_year,
        "total_allowed": quota.total_allowed,
        "generations_used": quota.generations_used,
        "remaining": quota.remaining,
        "resets_on": quota.resets_on,
    }


def get_quota(user_id: str, month: date | datetime | None = None) -> GenerationQuota | None:
    return GenerationQuota.query.filter_by(user_id=user_id, month_year=month_start(month)).first()


def create_default_quota(
    user_id: str,
    month: date | datetime | None = None,
    total_allowed: int | None = None,
    resets_on: date | None = None,
) -> GenerationQuota:
    """Insert the month's row; a concurrent insert wins and is re-read."""

    first = month_start(month)
    quota = GenerationQuota(
        user_id=user_id,
        month_year=first,
        total_allowed=_default_allowance() if total_allowed is None else total_allowed,
        generations_used=0,
        resets_on=resets_on or next_month_start(first),
    )
    db.session.add(quota)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = get_quota(user_id, first)
        if existing is None:
            raise
        return existing
    current_app.logger.info(
        "Created generation quota for user %s month %s (%s allowed)",
        user_id,
        first.isoformat(),
        quota.total_allowed,
    )
    return quota


def get_or_create_quota(user_id: str, month: date | datetime | None = None) -> GenerationQuota:
    return get_quota(user_id, month) or create_default_quota(user_id, month)


def consume_one(quota_id: int) -> GenerationQuota:
    updated = GenerationQuota.query.filter(
        GenerationQuota.id == quota_id,
        GenerationQuota.generations_used < GenerationQuota.total_allowed,
    ).update(
        {GenerationQuota.generations_used: GenerationQuota.generations_used + 1},
        synchronize_session=False,
    )
    if not updated:
        db.session.rollback()
        quota = db.session.get(GenerationQuota, quota_id)
        if quota is None:
            raise NotFoundError("Quota not found", {"quota_id": quota_id})
        current_app.logger.info(
            "Generation quota exhausted for user %s (%s/%s)",
            quota.user_id,
            quota.generations_used,
            quota.total_allowed,
        )
        raise QuotaExceeded(
            "Monthly generation quota exhausted",
            {"quota": _serializable(quota_payload(quota))},
        )
    db.session.commit()
    return db.session.get(GenerationQuota, quota_id)


def refund_one(quota_id: int) -> GenerationQuota:
    updated = GenerationQuota.query.filter(
        GenerationQuota.id == quota_id,
        GenerationQuota.generations_used > 0,
    ).update(
        {GenerationQuota.generations_used: GenerationQuota.generations_used - 1},
        synchronize_session=False,
    )
    if not updated:
        db.session.rollback()
        if db.session.get(GenerationQuota, quota_id) is None:
            raise NotFoundError("Quota not found", {"quota_id": quota_id})
        raise QuotaRefundError("Nothing to refund", {"quota_id": quota_id})
    db.session.commit()
    return db.session.get(GenerationQuota, quota_id)


def set_allowance(quota_id: int, new_total: int) -> GenerationQuota:
    if new_total < 0:
        raise ValidationError({"total_allowed": ["Must be greater than or equal to 0."]})
    updated = GenerationQuota.query.filter(GenerationQuota.id == quota_id).update(
        {GenerationQuota.total_allowed: new_total},
        synchronize_session=False,
    )
    if not updated:
        db.session.rollback()
        raise NotFoundError("Quota not found", {"quota_id": quota_id})
    db.session.commit()
    return db.session.get(GenerationQuota, quota_id)


def request_more_quota(user_id: str, amount: int, reason: str) -> tuple[GenerationQuota, QuotaAdjustmentLog]:
    """Auto-approve a top-up of the current month and keep an audit row."""

    data = request_schema.load({"requested_amount": amount, "reason": reason})
    ceiling = int(current_app.config.get("QUOTA_REQUEST_MAX", 100))
    if data["requested_amount"] > ceiling:
        raise ValidationError({"requested_amount": [f"Must be at most {ceiling}."]})

    quota = get_or_create_quota(user_id)
    quota_id = quota.id
    GenerationQuota.query.filter(GenerationQuota.id == quota_id).update(
        {GenerationQuota.total_allowed: GenerationQuota.total_allowed + data["requested_amount"]},
        synchronize_session=False,
    )
    entry = QuotaAdjustmentLog(
        user_id=user_id,
        quota_id=quota_id,
        amount=data["requested_amount"],
        reason=data["reason"],
        status="approved",
    )
    db.session.add(entry)
    db.session.commit()
    current_app.logger.info(
        "Granted %s extra generations to user %s", data["requested_amount"], user_id
    )
    return db.session.get(GenerationQuota, quota_id), entry


def prepare_generation(user_id: str, now: datetime | None = None) -> GenerationQuota:
    quota = get_or_create_quota(user_id, now)
    return consume_one(quota.id)


def get_quota_history(user_id: str, months: int = 6, now: datetime | None = None) -> list[dict]:
    months = max(1, min(months, int(current_app.config.get("QUOTA_HISTORY_MAX_MONTHS", 12))))
    current = month_start(now)
    earliest = shift_months(current, -(months - 1))
    rows = {
        row.month_year: row
        for row in GenerationQuota.query.filter(
            GenerationQuota.user_id == user_id,
            GenerationQuota.month_year >= earliest,
            GenerationQuota.month_year <= current,
        )
    }
    history: list[dict] = []
    for offset in range(months):
        month = shift_months(current, -offset)
        row = rows.get(month)
        if row is not None:
            history.append(quota_payload(row))
            continue
        allowance = _default_allowance()
        history.append(
            {
                "id": None,
                "month_year": month,
                "total_allowed": allowance,
                "generations_used": 0,
                "remaining": allowance,
                "resets_on": next_month_start(month),
            }
        )
    return history


def _serializable(payload: dict) -> dict:
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in payload.items()
    }
