"""Create role, user, context and role assignment tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-17

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "role",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("shortname", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_role"),
        sa.UniqueConstraint("shortname", name="uq_role_shortname"),
    )
    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("idnumber", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_user_account"),
        sa.UniqueConstraint("username", name="uq_user_account_username"),
    )
    op.create_index("ix_user_account_email", "user_account", ["email"])
    op.create_index("ix_user_account_idnumber", "user_account", ["idnumber"])
    op.create_table(
        "context",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("context_level", sa.Integer(), nullable=False),
        sa.Column("instance_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_context"),
        sa.UniqueConstraint("context_level", "instance_id", name="uq_context_instance"),
    )
    op.create_table(
        "role_assignment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.Column("context_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_role_assignment"),
        sa.ForeignKeyConstraint(
            ["role_id"],
            ["role.id"],
            name="fk_role_assignment_role_id_role",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["context_id"],
            ["context.id"],
            name="fk_role_assignment_context_id_context",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["user_account.id"],
            name="fk_role_assignment_user_id_user_account",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "role_id", "context_id", "user_id", name="uq_role_assignment_identity"
        ),
    )
    op.create_index(
        "ix_role_assignment_context_role", "role_assignment", ["context_id", "role_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_role_assignment_context_role", table_name="role_assignment")
    op.drop_table("role_assignment")
    op.drop_table("context")
    op.drop_index("ix_user_account_idnumber", table_name="user_account")
    op.drop_index("ix_user_account_email", table_name="user_account")
    op.drop_table("user_account")
    op.drop_table("role")
