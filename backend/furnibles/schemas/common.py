"""Query-string and envelope schemas shared by the listing endpoints."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, post_load, validate

# ``rating`` or ``-created_at``; columns are whitelisted again by the repositories.
_SORT_TOKEN = validate.Regexp(r"^-?[a-z_]{1,40}$")


class PaginationQuerySchema(Schema):
    """
    ``?page=2&limit=10&sort=-rating,created_at``.

    ``limit`` is clamped to ``[1, max_limit]`` rather than rejected so that
    clients asking for "everything" still get a page.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))
    sort = fields.String(load_default="")

    def __init__(self, *, default_limit: int = 20, max_limit: int = 100, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    @post_load
    def normalize(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        tokens = [t.strip() for t in (data.get("sort") or "").split(",") if t.strip()]
        for token in tokens:
            try:
                _SORT_TOKEN(token)
            except ValidationError as exc:
                raise ValidationError({"sort": [f"Invalid sort token: {token!r}"]}) from exc
        data["sort"] = tokens
        data["limit"] = min(data.get("limit", self._default_limit), self._max_limit)
        return data


class MetaSchema(Schema):
    """``meta`` block of paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)


_meta_schema = MetaSchema()


def build_meta(*, total: int, page: int, limit: int) -> dict[str, int]:
    return _meta_schema.dump({"total": total, "page": page, "limit": limit})
