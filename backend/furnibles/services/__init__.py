"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`furnibles.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``furnibles.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Marketplace services
    * :class:`AuthService`, :class:`CartService`, :class:`OrderService`
    * :class:`PaymentService`, :class:`DownloadService`, :class:`ReviewService`
    * :class:`MaintenanceService`
"""

from __future__ import annotations

# Base primitives (service base + request-scoped context)
from ._shared.base import BaseService, ServiceContext
from .auth.service import AuthService
from .cart.service import CartService
from .downloads.service import DownloadService
from .maintenance.service import MaintenanceService
from .orders.service import OrderService
from .payments.service import PaymentService
from .reviews.service import ReviewService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Marketplace
    "AuthService",
    "CartService",
    "DownloadService",
    "MaintenanceService",
    "OrderService",
    "PaymentService",
    "ReviewService",
]
