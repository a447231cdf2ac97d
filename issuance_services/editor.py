"""
issuance_services.editor -- The request line editor.

Responsibility:
    Hold the editable view of one request's lines (a MIF or an MRF), keep
    edited quantities, remarks, notes and MRR allocations consistent, and
    produce a validated submission payload.  All arithmetic and checks are
    delegated to the pure engines in ``issuance_engines``; this class owns
    only the mutable state and the clock.

Architecture position:
    Services -- stateful, single-threaded.  One editor per open panel; no
    state is shared between editors except through an explicit
    ``link_mirror`` between a MIF editor and the editor of its MRF.

Invariants enforced:
    - ``edited_quantity`` is seeded from ``current_quantity`` on load.
    - The preview is recomputed from the lines, never patched.
    - MIF edits propagate to the linked MRF line as a delta, floored at 0.
    - ``sum(selected_allocations) <= issued_quantity`` after every edit.
    - Quantity history is append-only within the session.

Failure modes:
    - Unusable input (negative, fractional, non-numeric, read-only panel)
      is dropped with a warning log; nothing is raised.
    - ``UnknownLineError`` for a key that is not loaded.
    - ``PriorityLockedError`` when clearing another user's priority flag.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from issuance_config.schema import EditorConfig
from issuance_engines.allocation import remove_allocation, upsert_allocation
from issuance_engines.ingestion import normalize_line
from issuance_engines.mirror import apply_mirror_delta, find_mirror
from issuance_engines.notes import combine_request_notes
from issuance_engines.payload import to_issue_items, to_submission_payload
from issuance_engines.preview import compute_preview
from issuance_engines.quantities import clamp_mif_quantity, coerce_quantity
from issuance_engines.validation import (
    validate_for_approve,
    validate_for_reject,
    validate_issuance,
)
from issuance_kernel.domain.clock import Clock, SystemClock
from issuance_kernel.domain.lines import (
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
from issuance_kernel.exceptions import PriorityLockedError, UnknownLineError
from issuance_kernel.logging_config import get_logger

logger = get_logger("services.editor")

ALLOCATION_ADD = "add"
ALLOCATION_REMOVE = "remove"


class RequestLineEditor:
    """Editable view of one request's lines."""

    def __init__(
        self,
        kind: RequestKind,
        *,
        user_name: str,
        role: str,
        clock: Clock | None = None,
        config: EditorConfig | None = None,
    ) -> None:
        self.kind = kind
        self.user_name = user_name
        self.role = role
        self._clock = clock or SystemClock()
        self._config = config or EditorConfig()

        self._lines: dict[int, RequestLine] = {}
        self.fetched_notes: tuple[Note, ...] = ()
        self.draft_notes: list[Note] = []
        self.note_required = False
        self.read_only = False
        self.priority = False
        self.priority_set_by: str | None = None

        self._mirror: RequestLineEditor | None = None
        self._mirror_source: RequestLineEditor | None = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, raw_lines: Iterable[Mapping[str, Any]]) -> list[RequestLine]:
        """Replace the editor state with normalized server lines."""
        raw = list(raw_lines)
        lines = [normalize_line(item, key, self.kind) for key, item in enumerate(raw, start=1)]
        self._lines = {line.key: line for line in lines}
        self.draft_notes = []
        self.note_required = False

        head = raw[0] if raw else {}
        authors = self._config.note_authors
        self.fetched_notes = combine_request_notes(
            (
                (head.get("note"), authors.note),
                (head.get("head_note"), authors.head_note),
                (head.get("mif_note"), authors.mif_note),
            ),
            received_at=self._clock.now(),
        )
        self.priority = bool(head.get("priority"))
        self.priority_set_by = head.get("prioritySetBy") if self.priority else None

        self._refresh_mirror_quantities()
        logger.info(
            "request_lines_loaded",
            extra={
                "kind": self.kind.value,
                "line_count": len(lines),
                "fetched_note_count": len(self.fetched_notes),
            },
        )
        return lines

    def clear(self) -> None:
        """Discard all state (panel closed or request refetched)."""
        self._lines = {}
        self.fetched_notes = ()
        self.draft_notes = []
        self.note_required = False
        self.priority = False
        self.priority_set_by = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def lines(self) -> tuple[RequestLine, ...]:
        return tuple(self._lines[k] for k in sorted(self._lines))

    @property
    def notes(self) -> tuple[Note, ...]:
        return self.fetched_notes + tuple(self.draft_notes)

    def line(self, key: int) -> RequestLine:
        try:
            return self._lines[key]
        except KeyError:
            raise UnknownLineError(key) from None

    def preview(self) -> tuple[PreviewEntry, ...]:
        return compute_preview(self._lines.values())

    def preview_entry(self, key: int) -> PreviewEntry | None:
        for entry in self.preview():
            if entry.key == key:
                return entry
        return None

    def total_quantity(self, key: int) -> int:
        return self.line(key).total_quantity

    def _rejected(self, operation: str, key: int, value: Any, reason: str) -> None:
        logger.warning(
            f"{operation}_rejected",
            extra={"kind": self.kind.value, "line_key": key, "value": repr(value), "reason": reason},
        )

    # ------------------------------------------------------------------
    # Quantities
    # ------------------------------------------------------------------

    def set_quantity(self, key: int, value: Any) -> None:
        """Set a line's edited quantity; unusable input is dropped."""
        line = self.line(key)
        if self.read_only:
            self._rejected("quantity", key, value, "read_only")
            return
        quantity = coerce_quantity(value)
        if quantity is None:
            self._rejected("quantity", key, value, "not a non-negative whole number")
            return

        if self.kind is RequestKind.MIF and self._config.clamp_mif_to_stock:
            quantity = clamp_mif_quantity(
                quantity, line.on_hand_quantity or line.current_quantity
            )

        old_quantity = line.edited_quantity
        line.edited_quantity = quantity
        line.highlight_remark = False

        if quantity != old_quantity and quantity != line.current_quantity:
            line.quantity_history.append(QuantityChange(
                timestamp=self._clock.now(),
                user_name=self.user_name,
                role=self.role,
                old_quantity=line.current_quantity,
                new_quantity=quantity,
            ))

        if self._mirror is not None and quantity != old_quantity:
            self._mirror.apply_mirror_change(line, old_quantity, quantity)

        logger.debug(
            "quantity_set",
            extra={
                "kind": self.kind.value,
                "line_key": key,
                "old_quantity": old_quantity,
                "new_quantity": quantity,
            },
        )

    def apply_mirror_change(
        self,
        source_line: RequestLine,
        old_quantity: int,
        new_quantity: int,
    ) -> None:
        """Apply a linked MIF line's quantity change to the matching line here."""
        target = find_mirror(source_line, self._lines.values())
        if target is None:
            return
        target.mirror_quantity = new_quantity
        if self.read_only:
            return
        target.edited_quantity = apply_mirror_delta(
            target.edited_quantity, old_quantity, new_quantity
        )
        logger.debug(
            "mirror_quantity_applied",
            extra={
                "line_key": target.key,
                "delta": new_quantity - old_quantity,
                "edited_quantity": target.edited_quantity,
                "total_quantity": target.total_quantity,
            },
        )

    def link_mirror(self, mirror: RequestLineEditor) -> None:
        """Link this MIF editor to the editor of its MRF."""
        if self.kind is not RequestKind.MIF or mirror.kind is not RequestKind.MRF:
            raise ValueError("Only a MIF editor can be linked to an MRF editor")
        self._mirror = mirror
        mirror._mirror_source = self
        mirror._refresh_mirror_quantities()

    def unlink_mirror(self) -> None:
        if self._mirror is not None:
            self._mirror._mirror_source = None
            for line in self._mirror._lines.values():
                line.mirror_quantity = None
        self._mirror = None

    def _refresh_mirror_quantities(self) -> None:
        """Recompute ``mirror_quantity`` on MRF lines from the linked MIF."""
        if self._mirror_source is not None:
            source_lines = list(self._mirror_source._lines.values())
            for line in self._lines.values():
                match = find_mirror(line, source_lines)
                line.mirror_quantity = match.edited_quantity if match else None
        if self._mirror is not None:
            self._mirror._refresh_mirror_quantities()

    # ------------------------------------------------------------------
    # Remarks, notes, priority
    # ------------------------------------------------------------------

    def set_remark(self, key: int, text: str) -> None:
        line = self.line(key)
        if self.read_only:
            self._rejected("remark", key, text, "read_only")
            return
        line.remark = text or ""
        line.highlight_remark = False

    def add_note(self, content: str) -> Note | None:
        """Add a draft note from the acting user; blank content is ignored."""
        if self.read_only or not content or not content.strip():
            return None
        note = Note(
            content=content.strip(),
            author_name=self.user_name,
            role=self.role,
            timestamp=self._clock.now(),
        )
        self.draft_notes.append(note)
        self.note_required = False
        return note

    def toggle_priority(self) -> bool:
        """Flip the high-priority flag; only its setter may lower it."""
        if self.read_only:
            return self.priority
        if self.priority and self.priority_set_by and self.priority_set_by != self.user_name:
            raise PriorityLockedError(self.priority_set_by, self.user_name)
        self.priority = not self.priority
        self.priority_set_by = self.user_name if self.priority else None
        logger.info(
            "priority_toggled",
            extra={"kind": self.kind.value, "priority": self.priority},
        )
        return self.priority

    # ------------------------------------------------------------------
    # Issuance: issued quantity, MRR allocations
    # ------------------------------------------------------------------

    def set_issued_quantity(self, key: int, value: Any) -> None:
        """Set how much of a line inventory will issue.

        Clamped to stock on hand.  Allocations that no longer fit under
        the new issued quantity are cleared.
        """
        line = self.line(key)
        if self.read_only:
            self._rejected("issued_quantity", key, value, "read_only")
            return
        quantity = coerce_quantity(value)
        if quantity is None:
            self._rejected("issued_quantity", key, value, "not a non-negative whole number")
            return
        line.issued_quantity = clamp_mif_quantity(
            quantity, line.on_hand_quantity or line.current_quantity
        )
        if line.allocated_quantity > line.issued_quantity:
            line.selected_allocations = []
            logger.info(
                "allocations_cleared",
                extra={"line_key": key, "issued_quantity": line.issued_quantity},
            )

    def set_allocation(self, key: int, allocation_id: str, quantity: Any, action: str) -> None:
        """Add/update (``"add"``) or drop (``"remove"``) an MRR allocation."""
        line = self.line(key)
        if self.read_only:
            self._rejected("allocation", key, allocation_id, "read_only")
            return
        if action == ALLOCATION_ADD:
            selected = upsert_allocation(line, allocation_id, quantity)
            if selected is None:
                self._rejected(
                    "allocation", key, allocation_id,
                    "unknown MRR, unusable quantity or over-allocation",
                )
                return
            line.selected_allocations = selected
        elif action == ALLOCATION_REMOVE:
            line.selected_allocations = remove_allocation(line, allocation_id)
        else:
            self._rejected("allocation", key, action, "unknown action")

    # ------------------------------------------------------------------
    # Vendor details
    # ------------------------------------------------------------------

    def set_vendor(self, key: int, vendor: VendorDetails) -> None:
        line = self.line(key)
        if self.read_only or line.kind is not RequestKind.MRF:
            self._rejected("vendor", key, vendor.vendor_name, "read_only or not an MRF line")
            return
        line.vendor = vendor

    # ------------------------------------------------------------------
    # Validation and submission
    # ------------------------------------------------------------------

    def validate_for_submit(self, action: SubmitAction | str) -> ValidationResult:
        """Check the editor can be submitted for ``action``.

        Highlights every line missing a remark (approve) or raises the
        global note-required flag (reject).
        """
        action = SubmitAction(action)
        if action is SubmitAction.APPROVE:
            result = validate_for_approve(self.lines)
            for key in result.invalid_keys:
                self._lines[key].highlight_remark = True
        else:
            result = validate_for_reject(self.draft_notes)
            self.note_required = result.note_required

        if not result.ok:
            logger.info(
                "submit_validation_failed",
                extra={
                    "kind": self.kind.value,
                    "action": action.value,
                    "invalid_keys": list(result.invalid_keys),
                    "note_required": result.note_required,
                },
            )
        return result

    def validate_issuance(self) -> ValidationResult:
        result = validate_issuance(self.lines)
        for key in result.invalid_keys:
            line = self._lines[key]
            if line.issued_quantity != line.current_quantity and not line.has_remark:
                line.highlight_remark = True
        return result

    def to_submission_payload(
        self,
        scope: PayloadScope | str = PayloadScope.CHANGED,
    ) -> list[dict[str, Any]]:
        return to_submission_payload(self.lines, PayloadScope(scope))

    def issue_items(self) -> list[dict[str, Any]]:
        return to_issue_items(self.lines)

    def notes_payload(self) -> list[dict[str, Any]]:
        """Draft notes in the shape the backend stores."""
        return [note.to_payload() for note in self.draft_notes]
