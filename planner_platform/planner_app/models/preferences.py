"""Planning inputs captured for each generation request."""

from __future__ import annotations

from ..extensions import db
from ..utils import utcnow

COMPLEXITY_CHOICES = ("Simple", "Balanced", "Ambitious")
WEEKEND_CHOICES = ("Work", "Rest", "Mixed")


class GoalPreference(db.Model):
    __tablename__ = "user_goals_and_preferences"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    goals_text = db.Column(db.Text, nullable=False)
    task_complexity = db.Column(
        db.Enum(*COMPLEXITY_CHOICES, name="task_complexity"), nullable=False, default="Balanced"
    )
    focus_areas = db.Column(db.String(150), nullable=False)
    weekend_preference = db.Column(
        db.Enum(*WEEKEND_CHOICES, name="weekend_preference"), nullable=False, default="Mixed"
    )
    fixed_commitments_json = db.Column(db.JSON, nullable=False, default=dict)
    preferred_time_slots = db.Column(db.JSON)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def fixed_commitments(self) -> list[dict]:
        payload = self.fixed_commitments_json or {}
        commitments = payload.get("commitments") if isinstance(payload, dict) else None
        return list(commitments or [])
