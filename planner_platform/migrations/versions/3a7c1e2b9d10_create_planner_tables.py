"""create planning inputs, drafts, quota and monthly plan tables

Revision ID: 3a7c1e2b9d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c1e2b9d10'
down_revision = None
branch_labels = None
depends_on = None


def _timestamp(name, nullable=False):
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade():
    bind = op.get_bind()
    tables = set(sa.inspect(bind).get_table_names())

    if "user_goals_and_preferences" not in tables:
        op.create_table(
            "user_goals_and_preferences",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("goals_text", sa.Text(), nullable=False),
            sa.Column(
                "task_complexity",
                sa.Enum("Simple", "Balanced", "Ambitious", name="task_complexity"),
                nullable=False,
            ),
            sa.Column("focus_areas", sa.String(length=150), nullable=False),
            sa.Column(
                "weekend_preference",
                sa.Enum("Work", "Rest", "Mixed", name="weekend_preference"),
                nullable=False,
            ),
            sa.Column("fixed_commitments_json", sa.JSON(), nullable=False),
            sa.Column("preferred_time_slots", sa.JSON()),
            _timestamp("created_at"),
        )
        op.create_index(
            op.f("ix_user_goals_and_preferences_user_id"),
            "user_goals_and_preferences",
            ["user_id"],
        )

    if "plan_drafts" not in tables:
        op.create_table(
            "plan_drafts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("draft_key", sa.String(length=128), nullable=False, unique=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("plan_data", sa.JSON(), nullable=False),
            sa.Column(
                "goal_preference_id",
                sa.Integer(),
                sa.ForeignKey("user_goals_and_preferences.id"),
            ),
            sa.Column("month_year", sa.Date(), nullable=False),
            sa.Column("ai_prompt", sa.Text()),
            sa.Column("raw_response", sa.Text()),
            sa.Column("extraction_confidence", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("extraction_notes", sa.Text()),
            _timestamp("created_at"),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index(op.f("ix_plan_drafts_user_id"), "plan_drafts", ["user_id"])
        op.create_index("ix_plan_drafts_user_expires", "plan_drafts", ["user_id", "expires_at"])

    if "generation_quotas" not in tables:
        op.create_table(
            "generation_quotas",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column("month_year", sa.Date(), nullable=False),
            sa.Column("total_allowed", sa.Integer(), nullable=False, server_default="20"),
            sa.Column("generations_used", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("resets_on", sa.Date(), nullable=False),
            _timestamp("created_at"),
            _timestamp("updated_at"),
            sa.UniqueConstraint("user_id", "month_year", name="uq_quota_user_month"),
        )
        op.create_index(op.f("ix_generation_quotas_user_id"), "generation_quotas", ["user_id"])

    if "quota_adjustment_logs" not in tables:
        op.create_table(
            "quota_adjustment_logs",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column(
                "quota_id", sa.Integer(), sa.ForeignKey("generation_quotas.id"), nullable=False
            ),
            sa.Column("amount", sa.Integer(), nullable=False),
            sa.Column("reason", sa.Text(), nullable=False),
            sa.Column("status", sa.String(length=16), nullable=False, server_default="approved"),
            _timestamp("created_at"),
        )
        op.create_index(op.f("ix_quota_adjustment_logs_user_id"), "quota_adjustment_logs", ["user_id"])
        op.create_index(op.f("ix_quota_adjustment_logs_quota_id"), "quota_adjustment_logs", ["quota_id"])

    if "monthly_plans" not in tables:
        op.create_table(
            "monthly_plans",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("user_id", sa.String(length=64), nullable=False),
            sa.Column(
                "preference_id", sa.Integer(), sa.ForeignKey("user_goals_and_preferences.id")
            ),
            sa.Column("month_year", sa.Date(), nullable=False),
            sa.Column("ai_prompt", sa.Text()),
            sa.Column("ai_response_raw", sa.JSON(), nullable=False),
            sa.Column("monthly_summary", sa.Text()),
            sa.Column("extraction_confidence", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("extraction_notes", sa.Text()),
            _timestamp("generated_at"),
            _timestamp("created_at"),
        )
        op.create_index(op.f("ix_monthly_plans_user_id"), "monthly_plans", ["user_id"])
        op.create_index(op.f("ix_monthly_plans_month_year"), "monthly_plans", ["month_year"])

    if "plan_tasks" not in tables:
        op.create_table(
            "plan_tasks",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("plan_id", sa.Integer(), sa.ForeignKey("monthly_plans.id"), nullable=False),
            sa.Column("task_description", sa.String(length=255), nullable=False),
            sa.Column("focus_area", sa.String(length=100), nullable=False),
            sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
            sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
            sa.Column("difficulty_level", sa.String(length=16), nullable=False),
            sa.Column("scheduling_reason", sa.Text()),
            sa.Column("priority", sa.String(length=16), nullable=False, server_default="Low"),
            sa.Column("estimated_hours", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("week_number", sa.Integer(), nullable=False, server_default="1"),
            sa.Column("day_of_week", sa.String(length=16), nullable=False),
            sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("completed_at", sa.DateTime(timezone=True)),
            _timestamp("created_at"),
        )
        op.create_index(op.f("ix_plan_tasks_plan_id"), "plan_tasks", ["plan_id"])


def downgrade():
    bind = op.get_bind()
    tables = set(sa.inspect(bind).get_table_names())

    for table in (
        "plan_tasks",
        "monthly_plans",
        "quota_adjustment_logs",
        "generation_quotas",
        "plan_drafts",
        "user_goals_and_preferences",
    ):
        if table in tables:
            op.drop_table(table)

    if bind.dialect.name == "postgresql":
        sa.Enum(name="weekend_preference").drop(bind, checkfirst=True)
        sa.Enum(name="task_complexity").drop(bind, checkfirst=True)
