"""HTTP API package: mounts the versioned marketplace blueprints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join_prefix(*segments: str) -> str:
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount ``(blueprint, relative_prefix)`` pairs beneath ``base_prefix``.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Version root such as ``"/api/v1"``.
    entries:
        Pairs whose relative prefix is appended to ``base_prefix``; an empty
        one mounts the blueprint at the version root (used by ``/health``).
    """

    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register API v1 and check that every public endpoint actually exists."""

    from furnibles.api.v1 import API_VERSION, PUBLIC_ENDPOINTS, REGISTRY

    api_base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(app, base_prefix=f"{api_base}/{API_VERSION}", entries=REGISTRY)

    unknown = PUBLIC_ENDPOINTS - set(app.view_functions)
    if unknown:
        raise RuntimeError(f"Public endpoints without a route: {sorted(unknown)}")
    app.logger.debug(
        "api.registered", extra={"version": API_VERSION, "public": len(PUBLIC_ENDPOINTS)}
    )


__all__ = ["init_app", "register_blueprint_group"]
