"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from furnibles.api.deps import bearer_token, current_user_id, json_response, require_auth, timing
from furnibles.api.revocation import blacklist_store
from furnibles.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
from furnibles.schemas import (
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
from furnibles.services.auth.dto import (
    AuthConfig,
    ChangePasswordIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
)
from furnibles.services.auth.service import AuthService

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
change_password_schema = ChangePasswordSchema()
forgot_password_schema = ForgotPasswordSchema()
reset_password_schema = ResetPasswordSchema()
verify_email_schema = VerifyEmailSchema()
login_response_schema = LoginResponseSchema()
register_response_schema = RegisterResponseSchema()
token_schema = TokenResponseSchema()
profile_schema = ProfileSchema()
message_schema = MessageSchema()


def _service() -> AuthService:
    cfg = AuthConfig(
        access_expires=current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        password_reset_ttl=current_app.config["PASSWORD_RESET_TTL"],
    )
    return AuthService(token_provider=JWTTokenProvider(), blacklist_store=blacklist_store(), cfg=cfg)


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Create an unverified account; the caller must verify before logging in."""

    data = register_schema.load(_payload())
    out = _service().register(RegisterIn(**data))
    return json_response({"data": register_response_schema.dump(out)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access token."""

    data = login_schema.load(_payload())
    out = _service().login(LoginIn(**data))
    return json_response({"data": login_response_schema.dump(out)})


@bp.post("/verify-email")
@timing
def verify_email():
    data = verify_email_schema.load(_payload())
    return json_response({"data": message_schema.dump(_service().verify_email(data["token"]))})


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Always answers with the same message, known address or not."""

    data = forgot_password_schema.load(_payload())
    return json_response({"data": message_schema.dump(_service().forgot_password(data["email"]))})


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(_payload())
    result = _service().reset_password(ResetPasswordIn(**data))
    return json_response({"data": message_schema.dump(result)})


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(_payload())
    result = _service().change_password(current_user_id(), ChangePasswordIn(**data))
    return json_response({"data": message_schema.dump(result)})


@bp.post("/refresh")
@require_auth
@timing
def refresh():
    """Re-issue a session token with the caller's current claims."""

    token = _service().refresh_token(current_user_id())
    return json_response({"data": token_schema.dump({"access_token": token})})


@bp.get("/profile")
@require_auth
@timing
def profile():
    """Return the authenticated user profile."""

    return json_response({"data": profile_schema.dump(_service().get_profile(current_user_id()))})


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Revoke the presented token until it expires."""

    result = _service().logout(bearer_token() or "", current_user_id())
    return json_response({"data": message_schema.dump(result)})
