"""REST API blueprints (plan, quota, metrics)."""

from __future__ import annotations

from .plan_bp import plan_bp
from .quota_bp import quota_bp
from .metrics_bp import metrics_bp

BLUEPRINTS = (
    (plan_bp, "/api/plan"),
    (quota_bp, "/api/quota"),
    (metrics_bp, ""),
)

__all__ = [
    "BLUEPRINTS",
    "plan_bp",
    "quota_bp",
    "metrics_bp",
]
