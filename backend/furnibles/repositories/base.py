"""Generic repository base and query utilities for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:

- Strongly-typed pagination and sorting helpers.
- Safe sorting with a whitelist mapping (prevents SQL injection).
- Deterministic pagination (adds primary-key tiebreaker).
- Safe update helpers with per-repository updatable-field whitelists.
- No business logic, no commit/rollback: services own transactions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from furnibles.core.extensions import db

E = TypeVar("E")  # SQLAlchemy mapped entity type


# ------------------------------- Pagination ----------------------------------


@dataclass(slots=True)
class Pagination:
    """Pagination input parameters.

    :param page: 1-based page number (validated to be ``>= 1``).
    :param limit: Page size (validated to be ``>= 1``).
    :param sort: Public sort tokens (e.g., ``["-created_at", "rating"]``).
    """

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    """Result page with metadata."""

    items: Sequence[E]
    total: int
    page: int
    limit: int


# ----------------------------- Sorting utilities -----------------------------


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """Parse public sort tokens into ``(field, is_desc)`` tuples."""
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        is_desc = token.startswith("-")
        field = (token[1:] if is_desc else token).strip()
        if field:
            parsed.append((field, is_desc))
    return parsed


def apply_sorting(
    stmt: Select[Any],
    sortable_fields: Mapping[str, InstrumentedAttribute[Any]],
    tokens: Iterable[str],
    *,
    pk_attr: InstrumentedAttribute[Any] | None,
) -> Select[Any]:
    """Apply safe ``ORDER BY`` clauses based on a whitelist mapping.

    Unknown sort tokens are ignored silently. The model's primary key is always
    appended as a final ascending tiebreaker to stabilize pagination.
    """
    orders: list[Any] = []
    for field, is_desc in parse_sort_tokens(tokens):
        col = sortable_fields.get(field)
        if isinstance(col, InstrumentedAttribute):
            orders.append(col.desc() if is_desc else col.asc())

    if orders:
        stmt = stmt.order_by(*orders)
    if pk_attr is not None:
        stmt = stmt.order_by(pk_attr.asc())
    return stmt


def paginate_select(
    session: Session,
    stmt: Select[Any],
    *,
    page: int,
    limit: int,
    with_total: bool = True,
) -> tuple[list[Any], int]:
    """Execute a select with pagination and an optional total count.

    The statement's existing ``ORDER BY`` is stripped for the ``COUNT``.

    :returns: Tuple of ``(items, total)`` where ``total`` is 0 when
        ``with_total=False``.
    """
    page = max(int(page), 1)
    limit = max(int(limit), 1)

    total = 0
    if with_total:
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int(session.execute(count_stmt).scalar_one())

    sliced = stmt.limit(limit).offset((page - 1) * limit)
    items = list(session.execute(sliced).scalars().all())
    return items, total


# ------------------------------ Base repository ------------------------------


class BaseRepository(Generic[E]):
    """Generic, persistence-only repository for a single aggregate.

    Subclasses MUST define ``model`` and MAY override ``_sortable_fields``,
    ``_filterable_fields``, ``_updatable_fields`` and ``_default_eagerload``.

    This class NEVER opens/commits/rolls back transactions nor implements
    business rules. Services orchestrate use cases and own transaction
    boundaries through a Unit of Work.
    """

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        """Initialise the repository with an optional SQLAlchemy session.

        When no explicit session is provided the repository falls back to the
        Flask-scoped session exposed by ``furnibles.core.extensions``.
        """
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ Extensibility ----------------------------

    def _default_eagerload(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _pk_attr(self) -> InstrumentedAttribute[Any] | None:
        return getattr(self.model, "id", None)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        """Whitelist mapping of public sort keys to model attributes."""
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        """Optional whitelist of equality-filterable fields.

        ``None`` applies any key through ``getattr(self.model, key)``; a mapping
        restricts filters to its keys and silently ignores the rest.
        """
        return None

    def _updatable_fields(self) -> set[str]:
        """Whitelist of public keys that can be assigned on update."""
        return set()

    # ------------------------------ Internals --------------------------------

    def _apply_equality_filters(
        self,
        stmt: Select[Any],
        filters: Mapping[str, Any] | None,
    ) -> Select[Any]:
        if not filters:
            return stmt

        allowed = self._filterable_fields()
        if allowed is None:
            clauses = [getattr(self.model, k) == v for k, v in filters.items()]
            return stmt.where(and_(*clauses)) if clauses else stmt

        whitelist_clauses = [
            allowed[k] == v for k, v in filters.items() if isinstance(allowed.get(k), InstrumentedAttribute)
        ]
        return stmt.where(and_(*whitelist_clauses)) if whitelist_clauses else stmt

    def _sanitize_update_fields(
        self,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
    ) -> dict[str, Any]:
        """Return a dict with only whitelisted update keys.

        :raises ValueError: If ``strict`` and unknown keys are present.
        """
        allowed = self._updatable_fields()
        if not allowed:
            # Fail-closed to avoid accidental mass-assignment
            if fields and strict:
                raise ValueError("No updatable fields configured for this repository.")
            return {}

        unknown = [k for k in fields if k not in allowed]
        if unknown and strict:
            raise ValueError(f"Unknown or non-updatable fields: {unknown}")
        return {k: v for k, v in fields.items() if k in allowed}

    # --------------------------------- CRUD ----------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity and flush to materialize the PK."""
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Retrieve a single entity by primary key."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get requires a detectable PK attribute.")
        stmt = self._default_eagerload(select(self.model).where(pk_attr == entity_id))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def get_for_update(self, entity_id: Any) -> E | None:
        """Retrieve an entity by PK with a ``FOR UPDATE`` lock (when supported)."""
        pk_attr = self._pk_attr()
        if pk_attr is None:
            raise RuntimeError("BaseRepository.get_for_update requires a detectable PK.")
        stmt = self._default_eagerload(
            select(self.model).where(pk_attr == entity_id)
        ).with_for_update(of=self.model)
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def find_one(self, **filters: Any) -> E | None:
        """Find a single entity by simple equality filters."""
        stmt = self._default_eagerload(self._apply_equality_filters(select(self.model), filters))
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.flush()

    def flush(self) -> None:
        self.session.flush()

    # ----------------------------- Idempotent writes ---------------------------

    def _dialect_insert(self) -> Any | None:
        """Return the dialect ``insert`` supporting ``ON CONFLICT``, if any."""
        name = self.session.get_bind().dialect.name
        if name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as pg_insert

            return pg_insert
        if name == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as sqlite_insert

            return sqlite_insert
        return None

    def insert_ignore(self, values: Mapping[str, Any], *, conflict_on: Sequence[str]) -> bool:
        """Insert a row unless one with the same ``conflict_on`` key exists.

        Uses ``INSERT ... ON CONFLICT DO NOTHING`` where available so that
        concurrent writers cannot both succeed or fail.

        :returns: ``True`` when a row was inserted.
        """
        insert = self._dialect_insert()
        if insert is None:
            key = {col: values[col] for col in conflict_on}
            if self.find_one(**key) is not None:
                return False
            self.add(self.model(**values))
            return True

        stmt = insert(self.model).values(**values).on_conflict_do_nothing(
            index_elements=list(conflict_on)
        )
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def upsert(
        self,
        values: Mapping[str, Any],
        *,
        conflict_on: Sequence[str],
        update: Mapping[str, Any],
    ) -> None:
        """Insert ``values`` or, on key collision, overwrite ``update`` columns."""
        insert = self._dialect_insert()
        if insert is None:
            key = {col: values[col] for col in conflict_on}
            existing = self.find_one(**key)
            if existing is None:
                self.add(self.model(**values))
            else:
                for k, v in update.items():
                    setattr(existing, k, v)
                self.flush()
            return

        stmt = insert(self.model).values(**values)
        stmt = stmt.on_conflict_do_update(index_elements=list(conflict_on), set_=dict(update))
        self.session.execute(stmt)

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """Assign only whitelisted keys to ``instance`` and optionally flush.

        Uses ``setattr`` so that ``@validates`` hooks on the model run.
        """
        for k, v in self._sanitize_update_fields(fields, strict=strict).items():
            setattr(instance, k, v)
        if flush:
            self.flush()
        return instance

    # ------------------------------- Listing ---------------------------------

    def paginate(
        self,
        pagination: Pagination,
        *,
        filters: Mapping[str, Any] | None = None,
        with_total: bool = True,
    ) -> Page[E]:
        """Paginate entities with stable sorting and optional total."""
        stmt: Select[Any] = self._apply_equality_filters(select(self.model), filters)
        stmt = self._default_eagerload(stmt)
        stmt = apply_sorting(
            stmt, self._sortable_fields(), pagination.sort, pk_attr=self._pk_attr()
        )
        raw_items, total = paginate_select(
            self.session,
            stmt,
            page=pagination.page,
            limit=pagination.limit,
            with_total=with_total,
        )
        return Page(
            items=cast(list[E], raw_items),
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )
