"""Initial challenge engine schema.

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261001_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "challenge_types",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("default_mode", sa.String(length=20), nullable=False, server_default="tracking"),
        sa.Column("primary_category", sa.String(length=50), nullable=False, server_default="cigarette_count"),
        sa.Column("required_observation_types", sa.JSON(), nullable=False),
        sa.Column("observation_categories", sa.JSON(), nullable=False),
        sa.Column("show_daily_counter", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("show_streak_counter", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("show_health_risks", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("challenge_types_pkey")),
        sa.UniqueConstraint("name", name="challenge_types_name_key"),
    )

    op.create_table(
        "challenge_milestones",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("challenge_type_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("days_required", sa.Integer(), nullable=True),
        sa.Column("target_value", sa.Float(), nullable=True),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.ForeignKeyConstraint(
            ["challenge_type_id"],
            ["challenge_types.id"],
            name=op.f("challenge_milestones_challenge_type_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("challenge_milestones_pkey")),
    )
    op.create_index(
        op.f("ix_challenge_milestones_challenge_type_id"), "challenge_milestones", ["challenge_type_id"], unique=False
    )

    op.create_table(
        "challenge_health_risks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("challenge_type_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("fade_start_days", sa.Integer(), nullable=False),
        sa.Column("fade_end_days", sa.Integer(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.CheckConstraint("fade_start_days < fade_end_days", name="ck_health_risk_fade_window"),
        sa.ForeignKeyConstraint(
            ["challenge_type_id"],
            ["challenge_types.id"],
            name=op.f("challenge_health_risks_challenge_type_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("challenge_health_risks_pkey")),
    )
    op.create_index(
        op.f("ix_challenge_health_risks_challenge_type_id"),
        "challenge_health_risks",
        ["challenge_type_id"],
        unique=False,
    )

    op.create_table(
        "user_challenges",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("challenge_type_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("current_mode", sa.String(length=20), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("quit_date", sa.Date(), nullable=True),
        sa.Column("current_streak_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("longest_streak_days", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_zero_logged_at", sa.Date(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(
            ["challenge_type_id"],
            ["challenge_types.id"],
            name=op.f("user_challenges_challenge_type_id_fkey"),
            ondelete="RESTRICT",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("user_challenges_pkey")),
    )
    op.create_index(op.f("ix_user_challenges_user_id"), "user_challenges", ["user_id"], unique=False)
    op.create_index(
        "uq_user_challenges_open_per_type",
        "user_challenges",
        ["user_id", "challenge_type_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('active', 'paused')"),
    )

    op.create_table(
        "milestone_unlocks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_challenge_id", sa.Integer(), nullable=False),
        sa.Column("milestone_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_challenge_id"],
            ["user_challenges.id"],
            name=op.f("milestone_unlocks_user_challenge_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["milestone_id"],
            ["challenge_milestones.id"],
            name=op.f("milestone_unlocks_milestone_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("milestone_unlocks_pkey")),
        sa.UniqueConstraint("user_challenge_id", "milestone_id", name="uq_milestone_unlock_challenge_milestone"),
    )
    op.create_index(op.f("ix_milestone_unlocks_user_id"), "milestone_unlocks", ["user_id"], unique=False)

    op.create_table(
        "observations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.Column("numeric_value", sa.Float(), nullable=True),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("observation_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("observations_pkey")),
    )
    op.create_index(
        "ix_observations_user_category_date",
        "observations",
        ["user_id", "category", "observation_date"],
        unique=False,
    )

    op.create_table(
        "reward_rules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("10")),
        sa.Column("frequency", sa.String(length=20), nullable=False, server_default="per_event"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("reward_rules_pkey")),
        sa.UniqueConstraint("activity_type", name="reward_rules_activity_type_key"),
    )

    op.create_table(
        "point_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=True),
        sa.Column("correlation_key", sa.String(length=255), nullable=True),
        sa.Column("idempotency_key", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("points > 0", name="ck_point_entries_positive"),
        sa.PrimaryKeyConstraint("id", name=op.f("point_entries_pkey")),
        sa.UniqueConstraint("user_id", "idempotency_key", name="uq_point_entries_user_key"),
    )
    op.create_index(op.f("ix_point_entries_user_id"), "point_entries", ["user_id"], unique=False)

    op.create_table(
        "user_activity_counts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=False),
        sa.Column("total_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("user_activity_counts_pkey")),
        sa.UniqueConstraint("user_id", "activity_type", name="uq_user_activity_counts_user_activity"),
    )

    op.create_table(
        "achievements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("icon", sa.String(length=50), nullable=False, server_default="award"),
        sa.Column("points_required", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("min_points_threshold", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("achievements_pkey")),
    )

    op.create_table(
        "badge_conditions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("achievement_id", sa.Integer(), nullable=False),
        sa.Column("activity_type", sa.String(length=50), nullable=False),
        sa.Column("required_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.ForeignKeyConstraint(
            ["achievement_id"],
            ["achievements.id"],
            name=op.f("badge_conditions_achievement_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("badge_conditions_pkey")),
    )
    op.create_index(op.f("ix_badge_conditions_achievement_id"), "badge_conditions", ["achievement_id"], unique=False)

    op.create_table(
        "user_achievements",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("achievement_id", sa.Integer(), nullable=False),
        sa.Column("unlocked_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(
            ["achievement_id"],
            ["achievements.id"],
            name=op.f("user_achievements_achievement_id_fkey"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("user_achievements_pkey")),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievements_user_achievement"),
    )
    op.create_index(op.f("ix_user_achievements_user_id"), "user_achievements", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_user_achievements_user_id"), table_name="user_achievements")
    op.drop_table("user_achievements")
    op.drop_index(op.f("ix_badge_conditions_achievement_id"), table_name="badge_conditions")
    op.drop_table("badge_conditions")
    op.drop_table("achievements")
    op.drop_table("user_activity_counts")
    op.drop_index(op.f("ix_point_entries_user_id"), table_name="point_entries")
    op.drop_table("point_entries")
    op.drop_table("reward_rules")
    op.drop_index("ix_observations_user_category_date", table_name="observations")
    op.drop_table("observations")
    op.drop_index(op.f("ix_milestone_unlocks_user_id"), table_name="milestone_unlocks")
    op.drop_table("milestone_unlocks")
    op.drop_index("uq_user_challenges_open_per_type", table_name="user_challenges")
    op.drop_index(op.f("ix_user_challenges_user_id"), table_name="user_challenges")
    op.drop_table("user_challenges")
    op.drop_index(op.f("ix_challenge_health_risks_challenge_type_id"), table_name="challenge_health_risks")
    op.drop_table("challenge_health_risks")
    op.drop_index(op.f("ix_challenge_milestones_challenge_type_id"), table_name="challenge_milestones")
    op.drop_table("challenge_milestones")
    op.drop_table("challenge_types")
