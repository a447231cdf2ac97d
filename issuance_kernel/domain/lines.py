"""
Request line domain types (``issuance_kernel.domain.lines``).

Responsibility
--------------
The nouns of the approval view-model: a ``RequestLine`` (one component
entry within a MIF or MRF), its MRR allocations, its vendor sub-record,
its quantity change history, and the derived ``PreviewEntry``.

``RequestLine`` is deliberately mutable: the editor updates it in place
as the user types.  Everything derived from it (``PreviewEntry``,
``ValidationResult``) is frozen and recomputed on demand.

Invariants
----------
* ``edited_quantity`` starts equal to ``current_quantity``.
* ``sum(a.quantity for a in selected_allocations) <= issued_quantity``.
* ``quantity_history`` is append-only within one open session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

NOT_AVAILABLE = "N/A"


class RequestKind(str, Enum):
    """Which form a line belongs to."""

    MIF = "mif"
    MRF = "mrf"


class SubmitAction(str, Enum):
    """What a pre-submit validation is checking for."""

    APPROVE = "approve"
    REJECT = "reject"


class PayloadScope(str, Enum):
    """Which lines a submission payload covers."""

    CHANGED = "changed"
    ALL = "all"


class CertificateChoice(str, Enum):
    """Tri-state "certificate of conformance desired" answer."""

    YES = "yes"
    NO = "no"
    UNSET = "none"

    @classmethod
    def from_raw(cls, value: Any) -> "CertificateChoice":
        if value is True:
            return cls.YES
        if value is False:
            return cls.NO
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("yes", "true"):
                return cls.YES
            if lowered in ("no", "false"):
                return cls.NO
        return cls.UNSET

    def to_payload(self) -> bool | None:
        if self is CertificateChoice.UNSET:
            return None
        return self is CertificateChoice.YES


@dataclass(frozen=True)
class Allocation:
    """Quantity of an issued line drawn from one MRR."""

    allocation_id: str
    quantity: int


@dataclass(frozen=True)
class AllocationOption:
    """An MRR the line may be allocated against."""

    allocation_id: str
    available_quantity: int
    source: str = NOT_AVAILABLE


@dataclass(frozen=True)
class VendorDetails:
    """Vendor and pricing data attached to an MRF line before procurement."""

    vendor_name: str = ""
    vendor_link: str = ""
    approx_price: Decimal | None = None
    expected_delivery_date: date | None = None
    certificate_desired: CertificateChoice = CertificateChoice.UNSET

    def to_payload(self) -> dict[str, Any]:
        return {
            "vendor": self.vendor_name,
            "vendor_link": self.vendor_link,
            "approx_price": str(self.approx_price) if self.approx_price is not None else None,
            "expected_deliverydate": (
                self.expected_delivery_date.isoformat()
                if self.expected_delivery_date else None
            ),
            "certificate_desired": self.certificate_desired.to_payload(),
        }


@dataclass(frozen=True)
class QuantityChange:
    """One entry in a line's quantity change history."""

    timestamp: datetime | None
    user_name: str
    role: str
    old_quantity: int
    new_quantity: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "user_name": self.user_name,
            "role": self.role,
            "old_quantity": self.old_quantity,
            "new_quantity": self.new_quantity,
        }


@dataclass
class RequestLine:
    """One component entry within a request, as held by the editor."""

    key: int
    kind: RequestKind
    component_id: str
    line_ref: str | None = None
    description: str = NOT_AVAILABLE
    mpn: str = NOT_AVAILABLE
    part_no: str = NOT_AVAILABLE
    make: str = NOT_AVAILABLE
    uom: str = NOT_AVAILABLE
    location: str = NOT_AVAILABLE
    on_hand_quantity: int = 0

    initial_quantity: int = 0
    current_quantity: int = 0
    edited_quantity: int = 0
    remark: str = ""
    highlight_remark: bool = False

    mirror_quantity: int | None = None
    issued_quantity: int = 0
    selected_allocations: list[Allocation] = field(default_factory=list)
    available_allocations: tuple[AllocationOption, ...] = ()

    vendor: VendorDetails | None = None
    quantity_history: list[QuantityChange] = field(default_factory=list)

    @property
    def is_changed(self) -> bool:
        return self.edited_quantity != self.current_quantity

    @property
    def has_remark(self) -> bool:
        return bool(self.remark.strip())

    @property
    def total_quantity(self) -> int:
        return self.edited_quantity + (self.mirror_quantity or 0)

    @property
    def allocated_quantity(self) -> int:
        return sum(a.quantity for a in self.selected_allocations)

    @property
    def identifier(self) -> str:
        """Human-facing name used in validation messages."""
        return self.mpn if self.mpn != NOT_AVAILABLE else self.description


@dataclass(frozen=True)
class PreviewEntry:
    """A pending change to one line, derived from the line's state."""

    key: int
    component_id: str
    line_ref: str | None
    identifier: str
    original_quantity: int
    updated_quantity: int
    remark: str
    allocations: tuple[Allocation, ...] = ()
    quantity_history: tuple[QuantityChange, ...] = ()


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a pre-submit check.

    ``invalid_keys`` lists every offending line; ``first_identifier`` is the
    line named in the blocking message.  ``note_required`` is the global
    flag raised when a rejection has no note.
    """

    ok: bool
    invalid_keys: tuple[int, ...] = ()
    first_identifier: str | None = None
    note_required: bool = False
    message: str = ""
