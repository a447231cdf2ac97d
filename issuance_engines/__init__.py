"""
Module: issuance_engines
Responsibility:
    Package entrypoint that re-exports the pure calculation engines used
    by the request line editor: note normalization, payload ingestion,
    preview derivation, mirror arithmetic, MRR allocation bookkeeping,
    pre-submit validation, vendor checks, payload projection and panel
    state resolution.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import issuance_kernel (domain, exceptions) and sibling engine
    modules.  MUST NOT import issuance_services or issuance_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Timestamps and dates are passed in by the caller.
    - Determinism: identical inputs always produce identical outputs.
"""

from issuance_kernel.logging_config import get_logger

logger = get_logger("engines")

from issuance_engines.allocation import (
    allocation_errors,
    find_option,
    remove_allocation,
    upsert_allocation,
)
from issuance_engines.ingestion import normalize_line, parse_date
from issuance_engines.mirror import apply_mirror_delta, find_mirror, match_key
from issuance_engines.notes import (
    combine_request_notes,
    normalize_history,
    normalize_notes,
)
from issuance_engines.panel import can_transition, next_state
from issuance_engines.payload import to_issue_items, to_submission_payload
from issuance_engines.preview import compute_preview
from issuance_engines.quantities import clamp_mif_quantity, coerce_quantity
from issuance_engines.request_list import filter_requests
from issuance_engines.validation import (
    validate_for_approve,
    validate_for_reject,
    validate_issuance,
)
from issuance_engines.vendor import FieldError, validate_vendor_details

__all__ = [
    "FieldError",
    "allocation_errors",
    "apply_mirror_delta",
    "can_transition",
    "clamp_mif_quantity",
    "coerce_quantity",
    "combine_request_notes",
    "compute_preview",
    "find_mirror",
    "filter_requests",
    "find_option",
    "match_key",
    "next_state",
    "normalize_history",
    "normalize_line",
    "normalize_notes",
    "parse_date",
    "remove_allocation",
    "to_issue_items",
    "to_submission_payload",
    "upsert_allocation",
    "validate_for_approve",
    "validate_for_reject",
    "validate_issuance",
    "validate_vendor_details",
]
