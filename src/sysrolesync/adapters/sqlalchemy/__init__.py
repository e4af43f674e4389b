"""SQLAlchemy adapter package for the target role store."""

from __future__ import annotations

from .mappings import (
    context_table,
    mapper_registry,
    role_assignment_table,
    role_table,
    start_mappers,
    user_table,
)
from .repositories import (
    SqlAlchemyAssignmentStore,
    SqlAlchemyContextRepository,
    SqlAlchemyRoleCatalog,
    SqlAlchemyUserCatalog,
)
from .unit_of_work import (
    SqlAlchemyRoleSyncUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAssignmentStore",
    "SqlAlchemyContextRepository",
    "SqlAlchemyRoleCatalog",
    "SqlAlchemyRoleSyncUnitOfWork",
    "SqlAlchemyUserCatalog",
    "StartupError",
    "context_table",
    "is_started",
    "mapper_registry",
    "role_assignment_table",
    "role_table",
    "shutdown",
    "start_mappers",
    "startup",
    "user_table",
]
