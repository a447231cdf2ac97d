"""
issuance_services.panel_service -- One open request panel.

Responsibility:
    Drive a ``RequestLineEditor`` through the panel lifecycle: fetch the
    request, let the user edit, validate, submit once, and on success
    discard the edits and refetch.  The panel is the call site for the
    backend, so it is also where remote failures are caught and turned
    into the single message the user sees.

Architecture position:
    Services -- composes the editor, the ``RequestApi`` collaborator, the
    panel state machine and configuration.

Invariants enforced:
    - At most one submission in flight per panel
      (``SubmissionInProgressError`` on re-entry).
    - The editor is read-only in every state but ``editing``.
    - A failed submission leaves the editor untouched so the user can
      retry; nothing is retried automatically.
    - A failed open leaves the current request and its edits in place.

Failure modes:
    - ``ReadOnlyPanelError`` when submitting from a non-editing state.
    - ``InvalidPanelTransitionError`` for lifecycle misuse (closing while
      submitting).
    - ``RemoteRequestError`` never escapes: it becomes a failed
      ``SubmitOutcome`` (or a failed open) with the backend's message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from zoneinfo import ZoneInfo

from issuance_config.schema import IssuanceConfig
from issuance_engines.panel import next_state
from issuance_engines.vendor import FieldError, validate_vendor_details
from issuance_kernel.domain.clock import Clock, SystemClock
from issuance_kernel.domain.lines import (
    PayloadScope,
    RequestKind,
    SubmitAction,
    ValidationResult,
    VendorDetails,
)
from issuance_kernel.domain.panel import READ_ONLY_STATES, PanelAction, PanelState
from issuance_kernel.exceptions import (
    ReadOnlyPanelError,
    RemoteRequestError,
    SubmissionInProgressError,
)
from issuance_kernel.logging_config import LogContext, get_logger
from issuance_services.api_client import RequestApi
from issuance_services.editor import RequestLineEditor

logger = get_logger("services.panel")


@dataclass(frozen=True)
class SubmitOutcome:
    """Result of a user-triggered submission, shown once to the user."""

    ok: bool
    message: str
    validation: ValidationResult | None = None
    field_errors: tuple[FieldError, ...] = ()
    response: dict[str, Any] = field(default_factory=dict)


class ApprovalPanel:
    """One open MIF or MRF request and its editor."""

    def __init__(
        self,
        api: RequestApi,
        kind: RequestKind,
        *,
        user_name: str,
        role: str,
        config: IssuanceConfig,
        clock: Clock | None = None,
    ) -> None:
        self._api = api
        self._config = config
        self._clock = clock or SystemClock()
        self.kind = kind
        self.user_name = user_name
        self.role = role
        self.editor = RequestLineEditor(
            kind,
            user_name=user_name,
            role=role,
            clock=self._clock,
            config=config.editor,
        )
        self.request_id: str | None = None
        self.message: str | None = None
        self._state = PanelState.IDLE
        self._in_flight = False
        self.editor.read_only = True

    @property
    def state(self) -> PanelState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def _log_context(self, request_id: str | None = None) -> Any:
        return LogContext.bind(
            request_id=request_id or self.request_id,
            request_kind=self.kind.value,
            user_name=self.user_name,
            role=self.role,
        )

    def _transition(self, action: PanelAction) -> None:
        previous = self._state
        self._state = next_state(self._state, action)
        self.editor.read_only = self._state in READ_ONLY_STATES or self._state is PanelState.IDLE
        logger.debug(
            "panel_transition",
            extra={
                "from_state": previous.value,
                "action": action.value,
                "to_state": self._state.value,
            },
        )

    def take_message(self) -> str | None:
        """Return the pending user message once, then forget it."""
        message, self.message = self.message, None
        return message

    # ------------------------------------------------------------------
    # Opening and closing
    # ------------------------------------------------------------------

    def _fetch(self, request_id: str, past: bool) -> list[dict[str, Any]] | None:
        try:
            details = self._api.fetch_request_details(self.kind, request_id, past=past)
        except RemoteRequestError as exc:
            logger.warning("request_fetch_failed", exc_info=True)
            self.message = exc.backend_message or "Failed to fetch request details."
            return None
        if not details:
            self.message = f"No request found for {request_id}"
            return None
        return details

    def _open(self, request_id: str, action: PanelAction, past: bool) -> bool:
        # A failed fetch leaves the panel, its request and its edits as they were.
        with self._log_context(request_id):
            details = self._fetch(request_id, past=past)
            if details is None:
                return False
            self._transition(action)
            self.request_id = request_id
            self.editor.load(details)
        return True

    def open(self, request_id: str) -> bool:
        """Fetch a pending request and start editing it."""
        return self._open(request_id, PanelAction.LOAD, past=False)

    def open_past(self, request_id: str) -> bool:
        """Fetch an already-decided request for read-only display."""
        return self._open(request_id, PanelAction.LOAD_PAST, past=True)

    def close(self) -> None:
        with self._log_context():
            self._transition(PanelAction.CLOSE)
        self.editor.unlink_mirror()
        self.editor.clear()
        self.request_id = None
        self.message = None

    def link(self, mrf_panel: "ApprovalPanel") -> None:
        """Show the MRF raised for this MIF alongside it."""
        self.editor.link_mirror(mrf_panel.editor)

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def _begin(self, action: str) -> None:
        if self._in_flight:
            raise SubmissionInProgressError(str(self.request_id), action)
        if self._state is not PanelState.EDITING:
            raise ReadOnlyPanelError(str(self.request_id), self._state.value)

    def _send(
        self,
        action: str,
        success: PanelAction,
        call: Any,
        success_message: str,
    ) -> SubmitOutcome:
        self._in_flight = True
        self._transition(PanelAction.SUBMIT)
        try:
            response = call()
        except RemoteRequestError as exc:
            self._transition(PanelAction.FAIL)
            logger.warning("submit_failed", extra={"action": action}, exc_info=True)
            self.message = exc.user_message
            return SubmitOutcome(ok=False, message=exc.user_message)
        except Exception:
            self._transition(PanelAction.FAIL)
            raise
        finally:
            self._in_flight = False

        self._transition(success)
        message = (response or {}).get("message") or success_message
        self.message = message
        logger.info("submit_succeeded", extra={"action": action})
        self._refetch()
        return SubmitOutcome(ok=True, message=message, response=response or {})

    def _refetch(self) -> None:
        """Discard edits and reload the decided request, read-only."""
        self.editor.clear()
        try:
            details = self._api.fetch_request_details(self.kind, str(self.request_id), past=True)
        except RemoteRequestError:
            logger.warning("refetch_failed", exc_info=True)
            return
        self.editor.load(details)

    def approve(self) -> SubmitOutcome:
        """Approve the request with the edited quantities and remarks."""
        with self._log_context():
            self._begin("approve")
            validation = self.editor.validate_for_submit(SubmitAction.APPROVE)
            if not validation.ok:
                self.message = validation.message
                return SubmitOutcome(ok=False, message=validation.message, validation=validation)

            items = self.editor.to_submission_payload(PayloadScope.ALL)
            if not items:
                self.message = "No valid items to approve."
                return SubmitOutcome(ok=False, message=self.message)

            editor = self.editor
            return self._send(
                "approve",
                PanelAction.SUCCEED_APPROVE,
                lambda: self._api.approve_request(
                    self.kind,
                    str(self.request_id),
                    items,
                    editor.notes_payload(),
                    editor.priority,
                    editor.priority_set_by,
                ),
                f"{self.kind.value.upper()} request approved successfully!",
            )

    def reject(self) -> SubmitOutcome:
        """Reject the request; requires at least one draft note."""
        with self._log_context():
            self._begin("reject")
            validation = self.editor.validate_for_submit(SubmitAction.REJECT)
            if not validation.ok:
                self.message = validation.message
                return SubmitOutcome(ok=False, message=validation.message, validation=validation)

            notes = self.editor.notes_payload()
            items = self.editor.to_submission_payload(PayloadScope.ALL)
            return self._send(
                "reject",
                PanelAction.SUCCEED_REJECT,
                lambda: self._api.reject_request(
                    self.kind, str(self.request_id), notes, items,
                ),
                f"{self.kind.value.upper()} request rejected successfully!",
            )

    def issue(self, issue_date: str | None = None) -> SubmitOutcome:
        """Issue stock against a MIF, with optional MRR allocations."""
        with self._log_context():
            if self.kind is not RequestKind.MIF:
                raise ValueError("Only a MIF can be issued")
            self._begin("issue")
            validation = self.editor.validate_issuance()
            if not validation.ok:
                self.message = validation.message
                return SubmitOutcome(ok=False, message=validation.message, validation=validation)

            items = self.editor.issue_items()
            notes = self.editor.notes_payload()
            when = issue_date or self._clock.now().isoformat()
            return self._send(
                "issue",
                PanelAction.SUCCEED_APPROVE,
                lambda: self._api.submit_issue(str(self.request_id), items, when, notes),
                "Request issued successfully!",
            )

    def save_vendor(self, key: int, vendor: VendorDetails) -> SubmitOutcome:
        """Validate and save vendor details for one MRF line."""
        with self._log_context():
            self._begin("save_vendor")
            line = self.editor.line(key)
            today = self._clock.today(ZoneInfo(self._config.editor.business_timezone))
            errors = validate_vendor_details(
                vendor, today, self._config.required_vendor_fields(self.role),
            )
            if errors:
                self.message = errors[0].message
                return SubmitOutcome(ok=False, message=errors[0].message, field_errors=errors)

            self._in_flight = True
            try:
                response = self._api.update_vendor_details(
                    line.line_ref or str(self.request_id),
                    line.component_id,
                    vendor.to_payload(),
                )
            except RemoteRequestError as exc:
                logger.warning("vendor_save_failed", exc_info=True)
                self.message = exc.user_message
                return SubmitOutcome(ok=False, message=exc.user_message)
            finally:
                self._in_flight = False

            self.editor.set_vendor(key, vendor)
            self.message = "Vendor details saved."
            return SubmitOutcome(ok=True, message=self.message, response=response or {})
