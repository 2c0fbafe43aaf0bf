"""Small assertion helpers shared by unit and HTTP tests."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any


@contextmanager
def not_raises(exception: type[BaseException]):
    """Fail the test, instead of erroring it, when ``exception`` escapes the block."""
    try:
        yield
    except exception as exc:  # pragma: no cover
        raise AssertionError(f"Unexpected {type(exc).__name__}: {exc}") from exc


def problem_of(response: Any, status: int) -> dict[str, Any]:
    """Assert ``response`` is a problem document with ``status`` and return its body.

    Parameters
    ----------
    response:
        Flask test-client response.
    status:
        Expected HTTP status, repeated in the body's ``status`` member.
    """
    assert response.status_code == status, response.get_data(as_text=True)
    assert response.mimetype == "application/problem+json"
    body = response.get_json()
    assert body["status"] == status
    return body
