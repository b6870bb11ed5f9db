"""Staged plans awaiting confirmation."""

from __future__ import annotations

from ..extensions import db
from ..utils import utcnow


class PlanDraft(db.Model):
    __tablename__ = "plan_drafts"
    __table_args__ = (db.Index("ix_plan_drafts_user_expires", "user_id", "expires_at"),)

    id = db.Column(db.Integer, primary_key=True)
    draft_key = db.Column(db.String(128), nullable=False, unique=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    plan_data = db.Column(db.JSON, nullable=False)
    goal_preference_id = db.Column(
        db.Integer, db.ForeignKey("user_goals_and_preferences.id"), nullable=True
    )
    month_year = db.Column(db.Date, nullable=False)
    ai_prompt = db.Column(db.Text)
    raw_response = db.Column(db.Text)
    extraction_confidence = db.Column(db.Integer, nullable=False, default=0)
    extraction_notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    goal_preference = db.relationship("GoalPreference")
