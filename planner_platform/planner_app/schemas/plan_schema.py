"""Schemas for plan generation, drafts and confirmed plans."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from ..models.preferences import COMPLEXITY_CHOICES, WEEKEND_CHOICES
from ..utils import WEEKDAYS

CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class FixedCommitmentSchema(Schema):
    day_of_week = fields.String(required=True, validate=validate.OneOf(WEEKDAYS))
    start_time = fields.String(required=True, validate=validate.Regexp(CLOCK_PATTERN))
    end_time = fields.String(required=True, validate=validate.Regexp(CLOCK_PATTERN))
    description = fields.String(required=True, validate=validate.Length(min=1, max=255))


class GeneratePlanSchema(Schema):
    goals_text = fields.String(required=True, validate=validate.Length(min=1, max=5000))
    task_complexity = fields.String(required=True, validate=validate.OneOf(COMPLEXITY_CHOICES))
    focus_areas = fields.String(required=True, validate=validate.Length(min=1, max=150))
    weekend_preference = fields.String(required=True, validate=validate.OneOf(WEEKEND_CHOICES))
    fixed_commitments = fields.List(fields.Nested(FixedCommitmentSchema), load_default=list)
    preferred_time_slots = fields.List(fields.String(), load_default=None)


class ConfirmDraftSchema(Schema):
    draft_key = fields.String(required=True, validate=validate.Length(min=1, max=128))
    plan_data = fields.Dict(load_default=None, allow_none=True)


class TaskStatusSchema(Schema):
    is_completed = fields.Boolean(required=True)


class TaskRangeSchema(Schema):
    start = fields.Date(required=True)
    end = fields.Date(required=True)


class GoalPreferenceSchema(Schema):
    id = fields.Integer(dump_only=True)
    goals_text = fields.String()
    task_complexity = fields.String()
    focus_areas = fields.String()
    weekend_preference = fields.String()
    fixed_commitments = fields.List(fields.Dict())
    preferred_time_slots = fields.Raw(allow_none=True)
    created_at = fields.DateTime()


class PlanDraftSchema(Schema):
    draft_key = fields.String()
    plan_data = fields.Dict()
    goal_preference_id = fields.Integer(allow_none=True)
    month_year = fields.Date()
    extraction_confidence = fields.Integer()
    extraction_notes = fields.String(allow_none=True)
    created_at = fields.DateTime()
    expires_at = fields.DateTime()


class PlanTaskSchema(Schema):
    id = fields.Integer(dump_only=True)
    task_description = fields.String()
    focus_area = fields.String()
    start_time = fields.DateTime()
    end_time = fields.DateTime()
    difficulty_level = fields.String()
    scheduling_reason = fields.String(allow_none=True)
    priority = fields.String()
    estimated_hours = fields.Integer()
    week_number = fields.Integer()
    day_of_week = fields.String()
    is_completed = fields.Boolean()
    completed_at = fields.DateTime(allow_none=True)


class MonthlyPlanSchema(Schema):
    id = fields.Integer(dump_only=True)
    preference_id = fields.Integer(allow_none=True)
    month_year = fields.Date()
    monthly_summary = fields.String(allow_none=True)
    extraction_confidence = fields.Integer()
    extraction_notes = fields.String(allow_none=True)
    generated_at = fields.DateTime()
    plan_data = fields.Dict(attribute="ai_response_raw")
    tasks = fields.List(fields.Nested(PlanTaskSchema))
