"""
issuance_engines.allocation -- MRR allocation bookkeeping for issuance.

Issued stock can be traced back to the material receipts (MRRs) it came
from.  A line's ``selected_allocations`` say how much of the issued
quantity is drawn from each MRR.

Invariants enforced:
    - An ``add`` never produces a selection whose total exceeds the
      issued quantity; such an add is rejected (returns None).
    - An ``add`` quantity must be a non-negative whole number no larger
      than what the MRR has available.
    - MRR ids are compared trimmed and case-insensitively.
    - Inputs are never mutated; new lists are returned.
"""

from __future__ import annotations

from issuance_kernel.domain.lines import Allocation, AllocationOption, RequestLine
from issuance_engines.quantities import coerce_quantity


def _same_id(a: str, b: str) -> bool:
    return str(a).strip().lower() == str(b).strip().lower()


def find_option(line: RequestLine, allocation_id: str) -> AllocationOption | None:
    for option in line.available_allocations:
        if _same_id(option.allocation_id, allocation_id):
            return option
    return None


def upsert_allocation(
    line: RequestLine,
    allocation_id: str,
    quantity: object,
) -> list[Allocation] | None:
    """Return the selection with ``allocation_id`` set to ``quantity``.

    Returns None when the MRR is not offered for this line, when
    ``quantity`` is not a usable quantity or exceeds what the MRR has
    available, or when the new total would exceed ``line.issued_quantity``.
    """
    option = find_option(line, allocation_id)
    if option is None:
        return None
    qty = coerce_quantity(quantity)
    if qty is None or qty > option.available_quantity:
        return None

    selected: list[Allocation] = []
    replaced = False
    for existing in line.selected_allocations:
        if _same_id(existing.allocation_id, allocation_id):
            selected.append(Allocation(existing.allocation_id, qty))
            replaced = True
        else:
            selected.append(existing)
    if not replaced:
        selected.append(Allocation(allocation_id, qty))

    if sum(a.quantity for a in selected) > line.issued_quantity:
        return None
    return selected


def remove_allocation(line: RequestLine, allocation_id: str) -> list[Allocation]:
    return [
        a for a in line.selected_allocations
        if not _same_id(a.allocation_id, allocation_id)
    ]


def allocation_errors(line: RequestLine) -> tuple[str, ...]:
    """Check a line's allocations are ready to submit.

    Allocations are optional; when present each must be a positive
    quantity against a non-blank MRR and the total must equal the issued
    quantity exactly.
    """
    if not line.selected_allocations:
        return ()
    errors: list[str] = []
    for allocation in line.selected_allocations:
        if not allocation.allocation_id.strip():
            errors.append(f"{line.identifier}: allocation without an MRR number")
        if allocation.quantity <= 0:
            errors.append(
                f"{line.identifier}: allocation against {allocation.allocation_id} "
                f"must be a positive quantity"
            )
    if line.allocated_quantity != line.issued_quantity:
        errors.append(
            f"{line.identifier}: allocated {line.allocated_quantity} "
            f"but issuing {line.issued_quantity}"
        )
    return tuple(errors)
