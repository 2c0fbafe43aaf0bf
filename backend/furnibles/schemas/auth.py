"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

_PASSWORD = validate.Length(min=8, max=128)


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=_PASSWORD)
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    last_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    role = fields.String(
        load_default="BUYER", validate=validate.OneOf(["BUYER", "SELLER", "ADMIN"])
    )
    phone = fields.String(load_default=None, validate=validate.Length(max=32))
    address = fields.String(load_default=None, validate=validate.Length(max=255))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, validate=validate.Length(min=1))
    new_password = fields.String(required=True, validate=_PASSWORD)


class ForgotPasswordSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))
    new_password = fields.String(required=True, validate=_PASSWORD)


class VerifyEmailSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))


class UserSummarySchema(Schema):
    """Public identity returned alongside a session token."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    role = fields.String(required=True)


class LoginResponseSchema(Schema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")
    user = fields.Nested(UserSummarySchema, required=True)


class TokenResponseSchema(Schema):
    access_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")


class RegisterResponseSchema(Schema):
    message = fields.String(required=True)
    user_id = fields.Integer(required=True)


class ProfileSchema(UserSummarySchema):
    """Profile of the authenticated user."""

    phone = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    email_verified = fields.Boolean(required=True)
    is_active = fields.Boolean(required=True)


class MessageSchema(Schema):
    message = fields.String(required=True)
