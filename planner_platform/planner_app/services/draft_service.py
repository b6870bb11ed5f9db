"""Staging area for generated plans awaiting confirmation."""

from __future__ import annotations

import secrets
import threading
from datetime import date, datetime, timedelta

from flask import current_app

from ..extensions import db
from ..metrics import record_sweep
from ..models import PlanDraft
from ..utils import month_start, utcnow


def generate_draft_key(user_id: str, now: datetime | None = None) -> str:
    now = now or utcnow()
    millis = int(now.timestamp() * 1000)
    return f"draft_{str(user_id)[-6:]}_{millis}_{secrets.token_hex(4)}"


def create_draft(
    user_id: str,
    plan_data: dict,
    *,
    goal_preference_id: int | None = None,
    month_year: date | None = None,
    extraction_confidence: int = 0,
    extraction_notes: str | None = None,
    ai_prompt: str | None = None,
    raw_response: str | None = None,
    now: datetime | None = None,
    ttl_hours: int | None = None,
) -> PlanDraft:
    now = now or utcnow()
    if ttl_hours is None:
        ttl_hours = int(current_app.config.get("DRAFT_TTL_HOURS", 24))
    draft = PlanDraft(
        draft_key=generate_draft_key(user_id, now),
        user_id=user_id,
        plan_data=plan_data,
        goal_preference_id=goal_preference_id,
        month_year=month_year or month_start(now),
        extraction_confidence=extraction_confidence,
        extraction_notes=extraction_notes,
        ai_prompt=ai_prompt,
        raw_response=raw_response,
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
    )
    db.session.add(draft)
    db.session.commit()
    return draft


def get_draft(user_id: str, draft_key: str, now: datetime | None = None) -> PlanDraft | None:
    now = now or utcnow()
    return PlanDraft.query.filter(
        PlanDraft.user_id == user_id,
        PlanDraft.draft_key == draft_key,
        PlanDraft.expires_at >= now,
    ).first()


def get_latest_draft(user_id: str, now: datetime | None = None) -> PlanDraft | None:
    now = now or utcnow()
    return (
        PlanDraft.query.filter(PlanDraft.user_id == user_id, PlanDraft.expires_at >= now)
        .order_by(PlanDraft.created_at.desc(), PlanDraft.id.desc())
        .first()
    )


def delete_draft(user_id: str, draft_key: str) -> bool:
    deleted = PlanDraft.query.filter_by(user_id=user_id, draft_key=draft_key).delete(
        synchronize_session=False
    )
    db.session.commit()
    return bool(deleted)


def sweep_expired_drafts(now: datetime | None = None) -> int:
    now = now or utcnow()
    removed = PlanDraft.query.filter(PlanDraft.expires_at < now).delete(synchronize_session=False)
    db.session.commit()
    record_sweep(removed)
    if removed:
        current_app.logger.info("Swept %s expired plan drafts", removed)
    return removed


def schedule_draft_sweep(app) -> threading.Event | None:
    """Start the periodic sweeper thread; returns its stop event."""

    if app.config.get("TESTING") or not app.config.get("DRAFT_SWEEP_ENABLE", True):
        return None
    interval = max(60, int(app.config.get("DRAFT_SWEEP_INTERVAL_SEC", 3600)))
    stop = threading.Event()

    def runner():
        while not stop.wait(interval):
            with app.app_context():
                try:
                    sweep_expired_drafts()
                except Exception:  # pragma: no cover - keep the sweeper alive
                    db.session.rollback()
                    app.logger.exception("Draft sweep failed")
                finally:
                    db.session.remove()

    thread = threading.Thread(target=runner, name="draft-sweeper", daemon=True)
    thread.start()
    app.extensions["draft_sweeper_stop"] = stop
    return stop
