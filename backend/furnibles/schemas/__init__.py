"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    MessageSchema,
    ProfileSchema,
    RegisterResponseSchema,
    RegisterSchema,
    ResetPasswordSchema,
    TokenResponseSchema,
    VerifyEmailSchema,
)
from .commerce import (
    CartAddSchema,
    CartSchema,
    DownloadGrantSchema,
    DownloadTokenSchema,
    OrderFilterSchema,
    OrderSchema,
    PaymentEventResultSchema,
    PaymentEventSchema,
)
from .common import MetaSchema, PaginationQuerySchema, build_meta
from .review import (
    RatingStatsSchema,
    ReviewCreateSchema,
    ReviewFilterSchema,
    ReviewModerateSchema,
    ReviewReportSchema,
    ReviewRespondSchema,
    ReviewSchema,
    ReviewUpdateSchema,
    ReviewVoteSchema,
    VoteResultSchema,
)

__all__ = [
    "ChangePasswordSchema",
    "ForgotPasswordSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "MessageSchema",
    "ProfileSchema",
    "RegisterResponseSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "TokenResponseSchema",
    "VerifyEmailSchema",
    "CartAddSchema",
    "CartSchema",
    "DownloadGrantSchema",
    "DownloadTokenSchema",
    "OrderFilterSchema",
    "OrderSchema",
    "PaymentEventResultSchema",
    "PaymentEventSchema",
    "PaginationQuerySchema",
    "MetaSchema",
    "build_meta",
    "RatingStatsSchema",
    "ReviewCreateSchema",
    "ReviewFilterSchema",
    "ReviewModerateSchema",
    "ReviewReportSchema",
    "ReviewRespondSchema",
    "ReviewSchema",
    "ReviewUpdateSchema",
    "ReviewVoteSchema",
    "VoteResultSchema",
]
