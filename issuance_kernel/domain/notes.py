"""
Request notes (``issuance_kernel.domain.notes``).

A note is a single remark attached to a request by a person acting in a
role.  Server payloads carry notes in several legacy shapes; they are
normalized into ``Note`` once, at ingestion (see ``issuance_engines.notes``),
and nothing downstream branches on shape.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class Note:
    """One note on a request. Immutable."""

    content: str
    author_name: str = UNKNOWN_AUTHOR
    role: str = UNKNOWN_AUTHOR
    timestamp: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        """Project to the JSON shape the backend stores."""
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "user_name": self.author_name,
            "role": self.role,
            "content": self.content,
        }
