"""
Pure domain layer.

Value objects and mutable line records with NO dependencies on I/O,
HTTP, configuration files or the wall clock (time comes from an
injected ``Clock``).
"""

from issuance_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from issuance_kernel.domain.lines import (
    Allocation,
    AllocationOption,
    CertificateChoice,
    PayloadScope,
    PreviewEntry,
    QuantityChange,
    RequestKind,
    RequestLine,
    SubmitAction,
    ValidationResult,
    VendorDetails,
)
from issuance_kernel.domain.notes import Note
from issuance_kernel.domain.panel import (
    PANEL_WORKFLOW,
    READ_ONLY_STATES,
    PanelAction,
    PanelState,
)

__all__ = [
    "Allocation",
    "AllocationOption",
    "CertificateChoice",
    "Clock",
    "DeterministicClock",
    "Note",
    "PANEL_WORKFLOW",
    "PanelAction",
    "PanelState",
    "PayloadScope",
    "PreviewEntry",
    "QuantityChange",
    "READ_ONLY_STATES",
    "RequestKind",
    "RequestLine",
    "SubmitAction",
    "SystemClock",
    "ValidationResult",
    "VendorDetails",
]
