"""Typed failures raised by the planner services."""

from __future__ import annotations


class PlannerError(Exception):
    """Base error carrying a machine-readable code and a JSON payload."""

    code = "planner_error"

    def __init__(self, message: str | None = None, payload: dict | None = None, code: str | None = None):
        super().__init__(message or self.code)
        if code:
            self.code = code
        self.message = message or self.code
        self.payload = payload or {}

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        body.update(self.payload)
        return body


class ConfigurationError(PlannerError):
    code = "generator_not_configured"


class GeneratorFailure(PlannerError):
    code = "generator_failed"


class GenerationFailed(PlannerError):
    """Generator or store failure after the preference row was committed."""

    code = "generation_failed"

    def __init__(self, message: str, preference_id: int | None = None, payload: dict | None = None):
        payload = dict(payload or {})
        payload["preference_id"] = preference_id
        super().__init__(message, payload)
        self.preference_id = preference_id


class QuotaExceeded(PlannerError):
    code = "quota_exceeded"


class NotFoundError(PlannerError):
    code = "not_found"


class QuotaRefundError(PlannerError):
    code = "quota_refund_failed"
