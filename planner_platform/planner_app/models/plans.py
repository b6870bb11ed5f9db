"""Confirmed monthly plans and their tasks."""

from __future__ import annotations

from ..extensions import db
from ..utils import utcnow


class MonthlyPlan(db.Model):
    __tablename__ = "monthly_plans"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    preference_id = db.Column(
        db.Integer, db.ForeignKey("user_goals_and_preferences.id"), nullable=True
    )
    month_year = db.Column(db.Date, nullable=False, index=True)
    ai_prompt = db.Column(db.Text)
    ai_response_raw = db.Column(db.JSON, nullable=False)
    monthly_summary = db.Column(db.Text)
    extraction_confidence = db.Column(db.Integer, nullable=False, default=0)
    extraction_notes = db.Column(db.Text)
    generated_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    preference = db.relationship("GoalPreference")
    tasks = db.relationship(
        "PlanTask",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="PlanTask.start_time",
    )


class PlanTask(db.Model):
    __tablename__ = "plan_tasks"

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey("monthly_plans.id"), nullable=False, index=True)
    task_description = db.Column(db.String(255), nullable=False)
    focus_area = db.Column(db.String(100), nullable=False, default="General")
    start_time = db.Column(db.DateTime(timezone=True), nullable=False)
    end_time = db.Column(db.DateTime(timezone=True), nullable=False)
    difficulty_level = db.Column(db.String(16), nullable=False, default="simple")
    scheduling_reason = db.Column(db.Text)
    priority = db.Column(db.String(16), nullable=False, default="Low")
    estimated_hours = db.Column(db.Integer, nullable=False, default=0)
    week_number = db.Column(db.Integer, nullable=False, default=1)
    day_of_week = db.Column(db.String(16), nullable=False)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime(timezone=True))
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    plan = db.relationship("MonthlyPlan", back_populates="tasks")
