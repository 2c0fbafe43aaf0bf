"""Reverse-proxy awareness for the WSGI app."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Trust ``PROXY_HOPS`` layers of ``X-Forwarded-*`` headers when ``USE_PROXYFIX`` is on.

    The API runs behind a reverse proxy terminating TLS, so generated URLs
    and logged client addresses must come from the forwarded headers.
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXY_HOPS", 1))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
