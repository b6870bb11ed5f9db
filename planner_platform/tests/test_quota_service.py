"""Tests for the monthly generation quota ledger."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from marshmallow import ValidationError

from planner_app.extensions import db
from planner_app.models import GenerationQuota, QuotaAdjustmentLog
from planner_app.services import quota_service
from planner_app.services.errors import NotFoundError, QuotaExceeded, QuotaRefundError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_lazy_creation_uses_default_allowance(app_with_db):
    quota = quota_service.get_or_create_quota("u1", NOW)

    assert quota.total_allowed == 20
    assert quota.generations_used == 0
    assert quota.month_year == date(2026, 10, 1)
    assert quota.resets_on == date(2026, 11, 1)
    assert quota_service.get_or_create_quota("u1", NOW).id == quota.id
    assert GenerationQuota.query.count() == 1


def test_create_default_quota_tolerates_existing_row(app_with_db):
    first = quota_service.create_default_quota("u1", NOW)
    second = quota_service.create_default_quota("u1", NOW)

    assert first.id == second.id
    assert GenerationQuota.query.count() == 1


def test_december_resets_in_january(app_with_db):
    quota = quota_service.get_or_create_quota("u1", date(2026, 12, 5))

    assert quota.resets_on == date(2027, 1, 1)


def test_consume_one_increments_below_limit(app_with_db):
    quota = quota_service.create_default_quota("u1", NOW, total_allowed=2)

    updated = quota_service.consume_one(quota.id)

    assert updated.generations_used == 1


def test_consume_one_at_limit_leaves_counter_unchanged(app_with_db):
    quota = quota_service.create_default_quota("u1", NOW, total_allowed=20)
    quota.generations_used = 20
    db.session.commit()

    with pytest.raises(QuotaExceeded) as excinfo:
        quota_service.consume_one(quota.id)

    assert excinfo.value.payload["quota"]["remaining"] == 0
    assert db.session.get(GenerationQuota, quota.id).generations_used == 20


def test_consume_one_unknown_quota(app_with_db):
    with pytest.raises(NotFoundError):
        quota_service.consume_one(999)


def test_refund_one(app_with_db):
    quota = quota_service.create_default_quota("u1", NOW)
    quota_service.consume_one(quota.id)

    assert quota_service.refund_one(quota.id).generations_used == 0
    with pytest.raises(QuotaRefundError):
        quota_service.refund_one(quota.id)


def test_set_allowance(app_with_db):
    quota = quota_service.create_default_quota("u1", NOW)

    assert quota_service.set_allowance(quota.id, 5).total_allowed == 5
    with pytest.raises(ValidationError):
        quota_service.set_allowance(quota.id, -1)


def test_request_more_quota_is_auto_approved_and_logged(app_with_db):
    quota, entry = quota_service.request_more_quota("u1", 10, "Working on a bigger launch")

    assert quota.total_allowed == 30
    assert entry.status == "approved"
    assert QuotaAdjustmentLog.query.filter_by(user_id="u1").count() == 1


@pytest.mark.parametrize(
    "amount, reason, field",
    [
        (0, "Long enough reason", "requested_amount"),
        (101, "Long enough reason", "requested_amount"),
        (5, "too short", "reason"),
    ],
)
def test_request_more_quota_validation(app_with_db, amount, reason, field):
    with pytest.raises(ValidationError) as excinfo:
        quota_service.request_more_quota("u1", amount, reason)

    assert field in excinfo.value.messages
    assert GenerationQuota.query.count() == 0


def test_quota_history_fills_missing_months(app_with_db):
    quota = quota_service.create_default_quota("u1", NOW)
    quota_service.consume_one(quota.id)
    quota_service.create_default_quota("u1", date(2026, 8, 1), total_allowed=5)

    history = quota_service.get_quota_history("u1", months=3, now=NOW)

    assert [row["month_year"] for row in history] == [
        date(2026, 10, 1),
        date(2026, 9, 1),
        date(2026, 8, 1),
    ]
    assert history[0]["generations_used"] == 1
    assert history[1]["id"] is None
    assert history[1]["total_allowed"] == 20
    assert history[2]["total_allowed"] == 5
