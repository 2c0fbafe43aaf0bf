# furnibles/services/reviews/moderation.py
from __future__ import annotations

from collections.abc import Iterable


def find_banned_terms(text: str, banned_terms: Iterable[str]) -> list[str]:
    """Return the banned terms contained in ``text`` (case-insensitive substring match)."""
    haystack = (text or "").lower()
    return [term for term in banned_terms if term and term.lower() in haystack]


def auto_moderate(text: str, rating: int, banned_terms: Iterable[str]) -> tuple[str, str | None]:
    """
    Decide the initial status of a submitted or edited review.

    One-star reviews and reviews containing a banned term go to manual
    moderation as ``FLAGGED``; everything else is ``PUBLISHED``.

    :returns: ``(status, reason)`` where ``reason`` is ``None`` when published.
    """
    hits = find_banned_terms(text, banned_terms)
    if hits:
        return "FLAGGED", f"Contains flagged terms: {', '.join(sorted(hits))}"
    if rating == 1:
        return "FLAGGED", "One-star rating"
    return "PUBLISHED", None
