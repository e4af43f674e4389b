"""SQLAlchemy mapping metadata for the target role store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from sysrolesync.domain.model import Context, LocalUser, Role, RoleAssignment

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

role_table = Table(
    "role",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("shortname", String(100), nullable=False),
    Column("name", String(255), nullable=False, default=""),
    UniqueConstraint("shortname", name="uq_role_shortname"),
)

user_table = Table(
    "user_account",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(100), nullable=False),
    Column("email", String(100), nullable=True),
    Column("idnumber", String(255), nullable=True),
    UniqueConstraint("username", name="uq_user_account_username"),
    Index("ix_user_account_email", "email"),
    Index("ix_user_account_idnumber", "idnumber"),
)

context_table = Table(
    "context",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("context_level", Integer, nullable=False),
    Column("instance_id", Integer, nullable=False, default=0),
    UniqueConstraint("context_level", "instance_id", name="uq_context_instance"),
)

role_assignment_table = Table(
    "role_assignment",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("role_id", Integer, ForeignKey("role.id", ondelete="CASCADE"), nullable=False),
    Column("context_id", Integer, ForeignKey("context.id", ondelete="CASCADE"), nullable=False),
    Column(
        "user_id", Integer, ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False
    ),
    Column("assigned_at", UTCDateTime(), nullable=True),
    UniqueConstraint("role_id", "context_id", "user_id", name="uq_role_assignment_identity"),
    Index("ix_role_assignment_context_role", "context_id", "role_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Role, role_table)
    mapper_registry.map_imperatively(LocalUser, user_table)
    mapper_registry.map_imperatively(Context, context_table)
    mapper_registry.map_imperatively(RoleAssignment, role_assignment_table)

    configure_mappers()
    return mapper_registry

