"""
issuance_engines.notes -- Note and change-history normalization.

Responsibility:
    Turn whatever the server stored in a request's ``note`` column into a
    tuple of ``Note`` records.  Three legacy shapes are in the wild:

    * a bare string:           ``"hello"``
    * a JSON-encoded string:   ``'[{"content": "hello"}]'``
    * an array of note dicts:  ``[{"content": "hello", "userName": "A"}]``

    and author keys come as ``user_name``, ``userName`` or ``username``.
    All of them normalize to the same thing; normalization never raises.

Invariants enforced:
    - Purity: no clock access.  The caller passes ``received_at`` for
      notes whose payload carries no timestamp.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from issuance_kernel.domain.lines import QuantityChange
from issuance_kernel.domain.notes import UNKNOWN_AUTHOR, Note
from issuance_engines.quantities import to_int

_AUTHOR_KEYS = ("user_name", "userName", "username")


def _author(data: Mapping[str, Any], default: str) -> str:
    for key in _AUTHOR_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp, tolerating a trailing ``Z``."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _note_from_mapping(
    data: Mapping[str, Any],
    default_author: str,
    received_at: datetime | None,
) -> Note:
    content = data.get("content")
    return Note(
        content="" if content is None else str(content),
        author_name=_author(data, default_author),
        role=str(data.get("role") or UNKNOWN_AUTHOR),
        timestamp=parse_timestamp(data.get("timestamp")) or received_at,
    )


def _from_decoded(
    decoded: Any,
    default_author: str,
    received_at: datetime | None,
) -> tuple[Note, ...]:
    if isinstance(decoded, Mapping):
        return (_note_from_mapping(decoded, default_author, received_at),)
    if isinstance(decoded, (list, tuple)):
        notes: list[Note] = []
        for item in decoded:
            if isinstance(item, Mapping):
                notes.append(_note_from_mapping(item, default_author, received_at))
            elif isinstance(item, str) and item.strip():
                notes.append(Note(
                    content=item,
                    author_name=default_author,
                    timestamp=received_at,
                ))
        return tuple(notes)
    return ()


def normalize_notes(
    raw: Any,
    default_author: str = UNKNOWN_AUTHOR,
    received_at: datetime | None = None,
) -> tuple[Note, ...]:
    """Normalize any legacy note payload into a tuple of ``Note``.

    Args:
        raw: ``None``, a bare string, a JSON string, a dict or a list.
        default_author: Author name used when the payload names none.
        received_at: Timestamp used when the payload carries none.

    Returns:
        Tuple of notes in payload order; empty for empty/unusable input.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return ()
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, (list, tuple, Mapping)):
            return _from_decoded(decoded, default_author, received_at)
        if isinstance(decoded, str) and decoded.strip():
            # JSON-encoded bare string: '"hello"'
            return (Note(content=decoded, author_name=default_author, timestamp=received_at),)
        return (Note(content=raw, author_name=default_author, timestamp=received_at),)
    return _from_decoded(raw, default_author, received_at)


def combine_request_notes(
    sources: tuple[tuple[Any, str], ...],
    received_at: datetime | None = None,
) -> tuple[Note, ...]:
    """Concatenate notes from several payload fields, in the given order.

    ``sources`` pairs a raw payload with the author name to assume for it,
    e.g. ``((raw["head_note"], "Previous User"), (raw["mif_note"], "Inventory Head"))``.
    """
    combined: list[Note] = []
    for raw, default_author in sources:
        combined.extend(normalize_notes(raw, default_author, received_at))
    return tuple(combined)


def normalize_history(raw: Any) -> list[QuantityChange]:
    """Normalize a ``quantity_change_history`` payload.

    Accepts a list or a JSON string holding a list; anything else yields
    an empty history.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, (list, tuple)):
        return []
    history: list[QuantityChange] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        history.append(QuantityChange(
            timestamp=parse_timestamp(entry.get("timestamp")),
            user_name=_author(entry, UNKNOWN_AUTHOR),
            role=str(entry.get("role") or UNKNOWN_AUTHOR),
            old_quantity=to_int(entry.get("old_quantity")),
            new_quantity=to_int(entry.get("new_quantity")),
        ))
    return history
