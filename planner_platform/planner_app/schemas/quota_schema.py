"""Schemas for monthly generation quota."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class QuotaSchema(Schema):
    id = fields.Integer(dump_only=True)
    month_year = fields.Date()
    total_allowed = fields.Integer()
    generations_used = fields.Integer()
    remaining = fields.Integer()
    resets_on = fields.Date()


class QuotaRequestSchema(Schema):
    requested_amount = fields.Integer(required=True, validate=validate.Range(min=1, max=100))
    reason = fields.String(required=True, validate=validate.Length(min=10, max=1000))


class QuotaAdjustmentSchema(Schema):
    id = fields.Integer(dump_only=True)
    amount = fields.Integer()
    reason = fields.String()
    status = fields.String()
    created_at = fields.DateTime()
