"""Database models package."""

from .preferences import COMPLEXITY_CHOICES, WEEKEND_CHOICES, GoalPreference
from .drafts import PlanDraft
from .quota import GenerationQuota, QuotaAdjustmentLog
from .plans import MonthlyPlan, PlanTask

__all__ = [
    "COMPLEXITY_CHOICES",
    "WEEKEND_CHOICES",
    "GoalPreference",
    "PlanDraft",
    "GenerationQuota",
    "QuotaAdjustmentLog",
    "MonthlyPlan",
    "PlanTask",
]
