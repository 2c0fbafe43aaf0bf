from furnibles.models.cart import CartItem
from furnibles.models.download_token import DownloadToken
from furnibles.models.order import Order, OrderItem
from furnibles.models.payment_event import PaymentEvent
from furnibles.models.product import Product
from furnibles.models.rating import ProductRating, SellerRating
from furnibles.models.review import Review, ReviewReport, ReviewResponse, ReviewVote
from furnibles.models.token_blacklist import BlacklistedToken
from furnibles.models.transaction import Transaction
from furnibles.models.user import User

__all__ = [
    "BlacklistedToken",
    "CartItem",
    "DownloadToken",
    "Order",
    "OrderItem",
    "PaymentEvent",
    "Product",
    "ProductRating",
    "Review",
    "ReviewReport",
    "ReviewResponse",
    "ReviewVote",
    "SellerRating",
    "Transaction",
    "User",
]
