"""create_webhookevent_and_build

Revision ID: 7c1e4b2a9d10
Revises:
Create Date: 2026-10-19 09:12:41.318204

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7c1e4b2a9d10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

WEBHOOKEVENT_INDEXES = (
    "id",
    "source",
    "event_type",
    "repository",
    "actor",
    "received_at",
    "processed",
)
BUILD_INDEXES = ("id", "job_name", "status", "revision", "created_at", "webhook_event_id")


def upgrade() -> None:
    op.create_table(
        "webhookevent",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("source", sa.Enum("GITEE", name="webhooksource"), nullable=False),
        sa.Column("event_type", sa.String(length=64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("repository", sa.String(length=255), nullable=False),
        sa.Column("actor", sa.String(length=255), nullable=False),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in WEBHOOKEVENT_INDEXES:
        op.create_index(
            op.f(f"ix_webhookevent_{column}"), "webhookevent", [column], unique=False
        )

    op.create_table(
        "build",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("job_name", sa.String(length=255), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "running",
                "succeeded",
                "failed",
                "cancelled",
                name="buildstatus",
            ),
            nullable=False,
        ),
        sa.Column("revision", sa.String(length=255), nullable=False),
        sa.Column("remote_name", sa.String(length=255), nullable=True),
        sa.Column("remote_url", sa.Text(), nullable=True),
        sa.Column("cause", sa.JSON(), nullable=False),
        sa.Column("status_update", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("webhook_event_id", sa.Uuid(), nullable=True),
        sa.Column("log_url", sa.Text(), nullable=True),
        sa.Column("callback_token", sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(["webhook_event_id"], ["webhookevent.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    for column in BUILD_INDEXES:
        op.create_index(op.f(f"ix_build_{column}"), "build", [column], unique=False)


def downgrade() -> None:
    for column in BUILD_INDEXES:
        op.drop_index(op.f(f"ix_build_{column}"), table_name="build")
    op.drop_table("build")
    sa.Enum(name="buildstatus").drop(op.get_bind(), checkfirst=True)

    for column in WEBHOOKEVENT_INDEXES:
        op.drop_index(op.f(f"ix_webhookevent_{column}"), table_name="webhookevent")
    op.drop_table("webhookevent")
    sa.Enum(name="webhooksource").drop(op.get_bind(), checkfirst=True)
