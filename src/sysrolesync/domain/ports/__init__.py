"""Domain port definitions for adapters."""

from __future__ import annotations

from .external import (
    ExternalConnectError,
    ExternalConnection,
    ExternalReadError,
    ExternalRecord,
    ExternalSource,
    ExternalSourceError,
    QueryBuildError,
    TableProbe,
)
from .persistence import (
    AssignmentStore,
    ContextRepository,
    Repository,
    RoleCatalog,
    UserCatalog,
)
from .unit_of_work import (
    RepositoryCollection,
    RoleSyncRepositories,
    RoleSyncUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "AssignmentStore",
    "ContextRepository",
    "ExternalConnectError",
    "ExternalConnection",
    "ExternalReadError",
    "ExternalRecord",
    "ExternalSource",
    "ExternalSourceError",
    "QueryBuildError",
    "Repository",
    "RepositoryCollection",
    "RoleCatalog",
    "RoleSyncRepositories",
    "RoleSyncUnitOfWork",
    "TableProbe",
    "UnitOfWork",
]
