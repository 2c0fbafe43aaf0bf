"""
Unit of Work contract shared by the marketplace services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
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


class SupportsCommit(Protocol):
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class UnitOfWork(ABC):
    """
    Transaction boundary of one marketplace use-case.

    Every repository below shares the same session, so an order, its ledger
    rows and its download tokens land (or roll back) together.
    """

    users: UserRepository
    blacklist: TokenBlacklistRepository
    products: ProductRepository
    cart: CartItemRepository
    orders: OrderRepository
    transactions: TransactionRepository
    downloads: DownloadTokenRepository
    payment_events: PaymentEventRepository
    reviews: ReviewRepository
    review_responses: ReviewResponseRepository
    review_votes: ReviewVoteRepository
    review_reports: ReviewReportRepository
    product_ratings: ProductRatingRepository
    seller_ratings: SellerRatingRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
