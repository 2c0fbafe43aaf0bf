# furnibles/services/_shared/base.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from furnibles.core import errors as api_errors
from furnibles.repositories.base import Pagination
from furnibles.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from furnibles.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids, etc.).

    :param actor_id: Authenticated user identifier.
    :param role: Role claim of the authenticated user.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    role: str | None = None
    request_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Offer shared validation helpers (pagination, ownership).

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :param limit: Page size, capped at ``MAX_PAGE_SIZE``.
        :param sort: Sort tokens like ["-created_at", "rating"].
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        return Pagination(page=page, limit=limit, sort=list(sort or []))

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, NotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            return api_errors.Conflict(str(exc))

        if isinstance(exc, AuthenticationError):
            return api_errors.Unauthorized(str(exc))

        if isinstance(exc, AuthorizationError):
            return api_errors.Forbidden(str(exc))

        # ValidationError, InvalidTokenError and any other ServiceError → 400
        if isinstance(exc, ServiceError):
            return api_errors.BadRequest(str(exc))

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc

    # --------------------------- AuthZ --------------------------------
    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        :param actor_id: Authenticated actor id.
        :param owner_id: Expected owner id.
        :param msg: Optional custom error message.
        :raises AuthorizationError: If actor is not the owner.
        """
        from furnibles.services._shared.policies.common import is_owner

        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only access your own resources.")

    def ensure_role(self, *roles: str, msg: str | None = None) -> None:
        """:raises AuthorizationError: If the context role is not one of ``roles``."""
        from furnibles.services._shared.policies.common import has_role

        if not has_role(self.ctx.role, roles):
            raise AuthorizationError(msg or "Insufficient permissions.")
