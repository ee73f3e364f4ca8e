"""Initial schema: users, buildings, locations, events, requests, surveys.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("user_type", sa.String(20), nullable=False, server_default=sa.text("'student'")),
        *_timestamps(),
        sa.CheckConstraint("user_type IN ('admin', 'student')", name="user_type"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "buildings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_buildings_id", "buildings", ["id"])

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("building_id", sa.Integer(), sa.ForeignKey("buildings.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_locations_id", "locations", ["id"])
    op.create_index("ix_locations_building_id", "locations", ["building_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("max_guest_count", sa.Integer(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("event_status", sa.String(20), nullable=False, server_default=sa.text("'open'")),
        sa.Column("host_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("guest_count >= 0", name="check_guest_count_non_negative"),
        sa.CheckConstraint("max_guest_count > 0", name="check_max_guest_count_positive"),
        sa.CheckConstraint("guest_count <= max_guest_count", name="check_guest_count_lte_max"),
        sa.CheckConstraint("event_status IN ('open', 'closed', 'cancelled')", name="event_status"),
    )
    op.create_index("ix_events_id", "events", ["id"])
    op.create_index("ix_events_host_id", "events", ["host_id"])
    op.create_index("ix_events_location_id", "events", ["location_id"])
    # The active listing is WHERE event_status = 'open' ORDER BY id
    op.create_index("ix_events_status_id", "events", ["event_status", "id"])

    op.create_table(
        "event_guests",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), primary_key=True),
    )

    op.create_table(
        "requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guest_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("host_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("events.id"), nullable=False),
        sa.Column("request_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        *_timestamps(),
        sa.CheckConstraint(
            "request_status IN ('pending', 'accepted', 'rejected')", name="request_status"
        ),
    )
    op.create_index("ix_requests_id", "requests", ["id"])
    op.create_index("ix_requests_guest_id", "requests", ["guest_id"])
    op.create_index("ix_requests_event_id", "requests", ["event_id"])
    # Host inbox: pending requests for a host
    op.create_index("ix_requests_host_status", "requests", ["host_id", "request_status"])

    op.create_table(
        "surveys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("curr_question", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_surveys_id", "surveys", ["id"])

    op.create_table(
        "survey_questions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("survey_id", sa.Integer(), sa.ForeignKey("surveys.id"), nullable=False),
        sa.Column("prompt", sa.String(1000), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_survey_questions_id", "survey_questions", ["id"])
    op.create_index("ix_survey_questions_survey_id", "survey_questions", ["survey_id"])

    op.create_table(
        "survey_answers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("survey_questions.id"), nullable=False),
        sa.Column("answer", sa.String(1000), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_survey_answers_id", "survey_answers", ["id"])
    op.create_index("ix_survey_answers_question_id", "survey_answers", ["question_id"])


def downgrade() -> None:
    op.drop_table("survey_answers")
    op.drop_table("survey_questions")
    op.drop_table("surveys")
    op.drop_table("requests")
    op.drop_table("event_guests")
    op.drop_table("events")
    op.drop_table("locations")
    op.drop_table("buildings")
    op.drop_table("users")
