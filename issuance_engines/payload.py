"""
issuance_engines.payload -- Submission payload projection.

Only the fields the backend needs leave the editor: identity, the updated
quantity, the remark, and where present vendor fields and MRR
allocations.  Display-only fields never do.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from issuance_kernel.domain.lines import PayloadScope, RequestKind, RequestLine


def _line_ref_field(kind: RequestKind) -> str:
    return "basket_id" if kind is RequestKind.MIF else "mrf_id"


def _allocations(line: RequestLine) -> list[dict[str, Any]]:
    return [
        {"mrr_no": a.allocation_id, "quantity": a.quantity}
        for a in line.selected_allocations
    ]


def line_payload(line: RequestLine) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "component_id": line.component_id,
        _line_ref_field(line.kind): line.line_ref,
        "updated_requested_qty": line.edited_quantity,
        "remark": line.remark,
    }
    if line.vendor is not None:
        entry.update(line.vendor.to_payload())
    if line.selected_allocations:
        entry["mrr_allocations"] = _allocations(line)
    return entry


def to_submission_payload(
    lines: Sequence[RequestLine],
    scope: PayloadScope = PayloadScope.CHANGED,
) -> list[dict[str, Any]]:
    """Project lines into the approve-request ``updatedItems`` list.

    ``CHANGED`` keeps lines whose quantity changed or that carry a remark;
    ``ALL`` keeps every line with a component id.
    """
    selected = [line for line in lines if line.component_id]
    if scope is PayloadScope.CHANGED:
        selected = [line for line in selected if line.is_changed or line.has_remark]
    return [line_payload(line) for line in selected]


def to_issue_items(lines: Sequence[RequestLine]) -> list[dict[str, Any]]:
    """Project every line into the material-issue ``items`` list."""
    return [
        {
            "component_id": line.component_id,
            "issued_quantity": line.issued_quantity,
            "remark": line.remark,
            "mrr_allocations": _allocations(line),
        }
        for line in lines
        if line.component_id
    ]
