"""
issuance_engines.request_list -- Pending request list search.

Case-insensitive substring match over the fields shown in the request
list, newest first.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from issuance_engines.notes import parse_timestamp

SEARCH_FIELDS: tuple[str, ...] = (
    "umi",
    "mrf_no",
    "user_name",
    "project_name",
    "status",
    "date",
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created(request: Mapping[str, Any]) -> datetime:
    stamp = parse_timestamp(request.get("created_at") or request.get("date"))
    if stamp is None:
        return _EPOCH
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


def matches(request: Mapping[str, Any], term: str) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    for field in SEARCH_FIELDS:
        value = request.get(field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def filter_requests(
    requests: Iterable[Mapping[str, Any]],
    term: str = "",
) -> list[Mapping[str, Any]]:
    """Requests matching ``term``, newest first."""
    found = [r for r in requests if matches(r, term)]
    return sorted(found, key=_created, reverse=True)
