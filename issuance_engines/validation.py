"""
issuance_engines.validation -- Pre-submit checks.

Validation failures are values, not exceptions: the caller highlights the
offending fields and shows one blocking message, and no request is sent.

* approve: every line whose quantity was changed needs a non-blank remark.
* reject:  the user must have written at least one note.
* issue:   issued quantities are whole, non-negative, and any MRR
           allocations add up to them exactly.
"""

from __future__ import annotations

from collections.abc import Sequence

from issuance_kernel.domain.lines import RequestLine, ValidationResult
from issuance_kernel.domain.notes import Note
from issuance_engines.allocation import allocation_errors
from issuance_engines.tracer import traced_engine

NOTE_REQUIRED_MESSAGE = "A note is required to reject the request. Please add a note."


def remark_message(identifier: str) -> str:
    return (
        f'Remark is mandatory for "{identifier}". '
        "Please provide a reason for the quantity change."
    )


def lines_missing_remark(lines: Sequence[RequestLine]) -> list[RequestLine]:
    return [line for line in lines if line.is_changed and not line.has_remark]


@traced_engine("validation.approve", "1.0", fingerprint_fields=("lines",))
def validate_for_approve(lines: Sequence[RequestLine]) -> ValidationResult:
    """Every changed line must carry a non-blank remark."""
    offenders = lines_missing_remark(lines)
    if not offenders:
        return ValidationResult(ok=True)
    first = offenders[0]
    return ValidationResult(
        ok=False,
        invalid_keys=tuple(line.key for line in offenders),
        first_identifier=first.identifier,
        message=remark_message(first.identifier),
    )


def validate_for_reject(draft_notes: Sequence[Note]) -> ValidationResult:
    """A rejection must be explained by at least one non-blank note."""
    if any(note.content.strip() for note in draft_notes):
        return ValidationResult(ok=True)
    return ValidationResult(ok=False, note_required=True, message=NOTE_REQUIRED_MESSAGE)


@traced_engine("validation.issue", "1.0", fingerprint_fields=("lines",))
def validate_issuance(lines: Sequence[RequestLine]) -> ValidationResult:
    """Check an issuance is ready: remarks on deviations, allocations balanced."""
    missing = [
        line for line in lines
        if line.issued_quantity != line.current_quantity and not line.has_remark
    ]
    if missing:
        return ValidationResult(
            ok=False,
            invalid_keys=tuple(line.key for line in missing),
            first_identifier=missing[0].identifier,
            message="Remarks are required for items with changed quantities.",
        )

    negative = [line for line in lines if line.issued_quantity < 0]
    if negative:
        return ValidationResult(
            ok=False,
            invalid_keys=tuple(line.key for line in negative),
            first_identifier=negative[0].identifier,
            message="All issued quantities must be valid non-negative integers.",
        )

    unbalanced: list[RequestLine] = []
    details: list[str] = []
    for line in lines:
        errors = allocation_errors(line)
        if errors:
            unbalanced.append(line)
            details.extend(errors)
    if unbalanced:
        return ValidationResult(
            ok=False,
            invalid_keys=tuple(line.key for line in unbalanced),
            first_identifier=unbalanced[0].identifier,
            message="Invalid MRR allocations: " + "; ".join(details),
        )
    return ValidationResult(ok=True)
