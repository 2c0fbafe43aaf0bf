"""Transaction boundaries for the marketplace services.

``SQLAlchemyUnitOfWork`` commits on a clean exit; ``SQLAlchemyReadOnlyUnitOfWork``
always rolls back and refuses flushes.
"""

from .base import SupportsCommit, UnitOfWork
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyUnitOfWork",
    "SupportsCommit",
    "UnitOfWork",
]
