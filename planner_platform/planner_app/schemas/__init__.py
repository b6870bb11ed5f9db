"""Serialization / validation schemas (Marshmallow)."""

from .plan_schema import (
    ConfirmDraftSchema,
    FixedCommitmentSchema,
    GeneratePlanSchema,
    GoalPreferenceSchema,
    MonthlyPlanSchema,
    PlanDraftSchema,
    PlanTaskSchema,
    TaskRangeSchema,
    TaskStatusSchema,
)
from .quota_schema import QuotaAdjustmentSchema, QuotaRequestSchema, QuotaSchema

__all__ = [
    "ConfirmDraftSchema",
    "FixedCommitmentSchema",
    "GeneratePlanSchema",
    "GoalPreferenceSchema",
    "MonthlyPlanSchema",
    "PlanDraftSchema",
    "PlanTaskSchema",
    "TaskRangeSchema",
    "TaskStatusSchema",
    "QuotaAdjustmentSchema",
    "QuotaRequestSchema",
    "QuotaSchema",
]
