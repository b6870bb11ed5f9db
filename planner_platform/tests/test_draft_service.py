"""Tests for the plan draft staging area."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from planner_app.models import PlanDraft
from planner_app.services import draft_service

from conftest import PLAN_JSON

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _stage(user_id="u1", now=NOW, **kwargs):
    return draft_service.create_draft(user_id, PLAN_JSON, now=now, **kwargs)


def test_draft_key_shape():
    key = draft_service.generate_draft_key("user-123456", NOW)

    prefix, suffix, millis, token = key.split("_")
    assert prefix == "draft"
    assert suffix == "123456"
    assert int(millis) == int(NOW.timestamp() * 1000)
    assert len(token) == 8


def test_create_and_get_draft(app_with_db):
    draft = _stage()

    assert draft.expires_at.replace(tzinfo=timezone.utc) == NOW + timedelta(hours=24)
    fetched = draft_service.get_draft("u1", draft.draft_key, now=NOW)
    assert fetched is not None
    assert fetched.plan_data == PLAN_JSON
    assert draft_service.get_draft("someone-else", draft.draft_key, now=NOW) is None


def test_expired_draft_is_invisible(app_with_db):
    draft = _stage(ttl_hours=1)

    assert draft_service.get_draft("u1", draft.draft_key, now=NOW + timedelta(hours=1)) is not None
    assert draft_service.get_draft("u1", draft.draft_key, now=NOW + timedelta(hours=2)) is None
    assert draft_service.get_latest_draft("u1", now=NOW + timedelta(hours=2)) is None


def test_latest_draft_is_most_recent_by_created_at(app_with_db):
    newer = _stage(now=NOW)
    _stage(now=NOW - timedelta(hours=3))

    latest = draft_service.get_latest_draft("u1", now=NOW)

    assert latest.draft_key == newer.draft_key


def test_delete_draft(app_with_db):
    key = _stage().draft_key

    assert draft_service.delete_draft("u1", key) is True
    assert draft_service.get_draft("u1", key, now=NOW) is None
    assert draft_service.delete_draft("u1", key) is False


def test_sweep_removes_only_expired(app_with_db):
    _stage(now=NOW - timedelta(hours=30))
    live = _stage(now=NOW)

    removed = draft_service.sweep_expired_drafts(now=NOW)

    assert removed == 1
    assert [row.draft_key for row in PlanDraft.query.all()] == [live.draft_key]


def test_sweeper_not_scheduled_under_test(app_with_db):
    assert draft_service.schedule_draft_sweep(app_with_db) is None
