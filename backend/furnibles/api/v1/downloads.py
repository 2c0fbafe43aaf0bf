"""Download endpoints for fulfilled orders."""

from __future__ import annotations

from flask import Blueprint

from furnibles.api.deps import json_response, require_auth, service_context, timing
from furnibles.schemas import DownloadGrantSchema, DownloadTokenSchema
from furnibles.services.downloads.service import DownloadService

bp = Blueprint("downloads", __name__, url_prefix="/downloads")

token_list_schema = DownloadTokenSchema(many=True)
grant_schema = DownloadGrantSchema()


@bp.get("/orders/<int:order_id>")
@require_auth
@timing
def list_order_downloads(order_id: int):
    tokens = DownloadService(ctx=service_context()).list_order_downloads(order_id)
    return json_response({"data": token_list_schema.dump(tokens)})


@bp.post("/<string:token>")
@require_auth
@timing
def redeem(token: str):
    """Consume one download and return the file reference."""

    grant = DownloadService(ctx=service_context()).redeem(token)
    return json_response({"data": grant_schema.dump(grant)})
