"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session, SessionTransaction

from furnibles.core.extensions import db
from furnibles.repositories import (
    CartItemRepository,
    DownloadTokenRepository,
    OrderRepository,
    PaymentEventRepository,
    ProductRatingRepository,
    ProductRepository,
    ReviewReportRepository,
    ReviewRepository,
    ReviewResponseRepository,
    ReviewVoteRepository,
    SellerRatingRepository,
    TokenBlacklistRepository,
    TransactionRepository,
    UserRepository,
)
from furnibles.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.blacklist = TokenBlacklistRepository(session=self.session)
        self.products = ProductRepository(session=self.session)
        self.cart = CartItemRepository(session=self.session)
        self.orders = OrderRepository(session=self.session)
        self.transactions = TransactionRepository(session=self.session)
        self.downloads = DownloadTokenRepository(session=self.session)
        self.payment_events = PaymentEventRepository(session=self.session)
        self.reviews = ReviewRepository(session=self.session)
        self.review_responses = ReviewResponseRepository(session=self.session)
        self.review_votes = ReviewVoteRepository(session=self.session)
        self.review_reports = ReviewReportRepository(session=self.session)
        self.product_ratings = ProductRatingRepository(session=self.session)
        self.seller_ratings = SellerRatingRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    The same session is shared across all repositories for a consistent transaction.
    An explicit ``session`` may be injected for work running outside a request
    (e.g. the revocation worker thread).
    """

    def __init__(self, session: Session | None = None) -> None:
        super().__init__(session=session if session is not None else db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first write.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only Unit of Work backed by the Flask-scoped SQLAlchemy session.

    Any ORM flush carrying pending changes raises ``RuntimeError``. When the
    UoW opened the transaction itself it rolls it back on exit; when the
    session was already inside a transaction it attaches to it and leaves it
    untouched.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._txn_ctx: SessionTransaction | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._txn_ctx = None
        try:
            self._txn_ctx = self.session.begin()
        except InvalidRequestError:
            # Already inside a transaction (autobegin or outer fixture).
            pass
        event.listen(self._sync_session(), "before_flush", self._before_flush)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._txn_ctx is not None:
                self.session.rollback()
                self._txn_ctx = None
        finally:
            event.remove(self._sync_session(), "before_flush", self._before_flush)

    def commit(self) -> None:
        """
        Disallow commit in read-only Unit of Work.

        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _sync_session(self) -> Session:
        # scoped_session proxies are not valid event targets; resolve the real one.
        registry = getattr(self.session, "registry", None)
        return registry() if registry is not None else self.session

    @staticmethod
    def _before_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Write attempted inside a read-only UnitOfWork.")
