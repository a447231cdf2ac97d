"""
issuance_engines.preview -- Derived "preview of changes" list.

The preview is a pure function of the lines: one entry per line whose
edited quantity differs from its current quantity, in line order.  It is
recomputed on demand rather than patched on every keystroke, so any
sequence of edits (including reverts) that ends in the same line state
yields the same preview.
"""

from __future__ import annotations

from collections.abc import Iterable

from issuance_kernel.domain.lines import PreviewEntry, RequestLine
from issuance_engines.tracer import traced_engine


def preview_entry(line: RequestLine) -> PreviewEntry:
    return PreviewEntry(
        key=line.key,
        component_id=line.component_id,
        line_ref=line.line_ref,
        identifier=line.identifier,
        original_quantity=line.current_quantity,
        updated_quantity=line.edited_quantity,
        remark=line.remark,
        allocations=tuple(line.selected_allocations),
        quantity_history=tuple(line.quantity_history),
    )


@traced_engine("preview", "1.0", fingerprint_fields=("lines",))
def compute_preview(lines: Iterable[RequestLine]) -> tuple[PreviewEntry, ...]:
    """Return the preview entries for every changed line, ordered by key."""
    changed = sorted((line for line in lines if line.is_changed), key=lambda line: line.key)
    return tuple(preview_entry(line) for line in changed)
