"""Structured logging helpers."""

from typing import Any


def build_log_context(
    *,
    user_id: int | None = None,
    listing_type: str | None = None,
    listing_id: int | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict suitable for ``extra=``."""
    context: dict[str, Any] = {}
    if user_id is not None:
        context["user_id"] = user_id
    if listing_type:
        context["listing_type"] = listing_type
    if listing_id is not None:
        context["listing_id"] = listing_id
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
