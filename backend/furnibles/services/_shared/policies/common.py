from collections.abc import Iterable


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def has_role(role: str | None, allowed: Iterable[str]) -> bool:
    """Return True if ``role`` is one of ``allowed`` (case-insensitive)."""
    return bool(role) and role.upper() in {r.upper() for r in allowed}
