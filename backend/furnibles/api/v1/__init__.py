"""API v1 blueprint package bundling versioned routes."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import bp as auth_bp  # noqa: E402
from .cart import bp as cart_bp  # noqa: E402
from .downloads import bp as downloads_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .orders import bp as orders_bp  # noqa: E402
from .payments import bp as payments_bp  # noqa: E402
from .reviews import bp as reviews_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1
    (auth_bp, "/auth"),  # -> /api/v1/auth
    (cart_bp, "/cart"),
    (orders_bp, "/orders"),
    (payments_bp, "/payments"),
    (downloads_bp, "/downloads"),
    (reviews_bp, "/reviews"),
]

# Endpoints skipped by the revocation gate. Listed explicitly; anything not
# named here is checked when it carries a bearer token. Handlers listed here
# run with an anonymous context.
PUBLIC_ENDPOINTS: frozenset[str] = frozenset(
    {
        "health.healthcheck",
        "auth.register",
        "auth.login",
        "auth.verify_email",
        "auth.forgot_password",
        "auth.reset_password",
        "payments.webhook",
        "reviews.list_product_reviews",
        "reviews.product_stats",
        "reviews.seller_stats",
    }
)
