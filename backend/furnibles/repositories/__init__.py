"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from furnibles.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from furnibles.repositories.cart import CartItemRepository
from furnibles.repositories.download_token import DownloadTokenRepository
from furnibles.repositories.order import OrderRepository
from furnibles.repositories.payment_event import PaymentEventRepository
from furnibles.repositories.product import ProductRepository
from furnibles.repositories.rating import ProductRatingRepository, SellerRatingRepository
from furnibles.repositories.review import (
    ReviewReportRepository,
    ReviewRepository,
    ReviewResponseRepository,
    ReviewVoteRepository,
)
from furnibles.repositories.token_blacklist import TokenBlacklistRepository
from furnibles.repositories.transaction import TransactionRepository
from furnibles.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "apply_sorting",
    "paginate_select",
    # Domain
    "CartItemRepository",
    "DownloadTokenRepository",
    "OrderRepository",
    "PaymentEventRepository",
    "ProductRatingRepository",
    "ProductRepository",
    "ReviewReportRepository",
    "ReviewRepository",
    "ReviewResponseRepository",
    "ReviewVoteRepository",
    "SellerRatingRepository",
    "TokenBlacklistRepository",
    "TransactionRepository",
    "UserRepository",
]
