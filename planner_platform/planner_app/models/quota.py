"""Monthly generation allowance per user."""

from __future__ import annotations

from ..extensions import db
from ..utils import utcnow


class GenerationQuota(db.Model):
    __tablename__ = "generation_quotas"
    __table_args__ = (db.UniqueConstraint("user_id", "month_year", name="uq_quota_user_month"),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    month_year = db.Column(db.Date, nullable=False)
    total_allowed = db.Column(db.Integer, nullable=False, default=20)
    generations_used = db.Column(db.Integer, nullable=False, default=0)
    resets_on = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def remaining(self) -> int:
        return max((self.total_allowed or 0) - (self.generations_used or 0), 0)


class QuotaAdjustmentLog(db.Model):
    __tablename__ = "quota_adjustment_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    quota_id = db.Column(db.Integer, db.ForeignKey("generation_quotas.id"), nullable=False, index=True)
    amount = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="approved")
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)

    quota = db.relationship("GenerationQuota", backref="adjustments")
