"""
issuance_engines.mirror -- MIF/MRF linked-line arithmetic.

When part of a request cannot be issued from stock, the shortfall is
raised as an MRF.  The two forms then carry a line each for the same
component, matched on (component_id, MPN), compared trimmed and
case-insensitively.  A change on the MIF line moves the MRF line by the
same amount, so changes propagate as a delta, never as an absolute value:
the MRF line may have pending edits of its own.
"""

from __future__ import annotations

from collections.abc import Iterable

from issuance_kernel.domain.lines import NOT_AVAILABLE, RequestLine


def _normalize(value: str | None) -> str:
    return str(value).strip().lower() if value else ""


def match_key(line: RequestLine) -> tuple[str, str] | None:
    """Key a line is mirrored on, or None if it cannot be matched."""
    component = _normalize(line.component_id)
    mpn = _normalize(line.mpn) if line.mpn != NOT_AVAILABLE else ""
    if not component or not mpn:
        return None
    return component, mpn


def find_mirror(line: RequestLine, candidates: Iterable[RequestLine]) -> RequestLine | None:
    """Return the first candidate mirrored to ``line``."""
    key = match_key(line)
    if key is None:
        return None
    for candidate in candidates:
        if match_key(candidate) == key:
            return candidate
    return None


def apply_mirror_delta(mirror_quantity: int, old_quantity: int, new_quantity: int) -> int:
    """``max(0, mirror + (new - old))``."""
    return max(0, mirror_quantity + (new_quantity - old_quantity))
