"""
Panel lifecycle (``issuance_kernel.domain.panel``).

One approval panel owns one ``RequestLineEditor``.  Instead of a dozen
independent ``is_approved`` / ``is_modal_open`` flags, the panel moves
through a single explicit state machine so that invalid combinations
(approved *and* editable, submitting *and* closed) cannot be represented.

    idle          --load-->            editing
    idle          --load_past-->       past_readonly
    editing       --load-->            editing (another request)
    editing       --submit-->          submitting
    submitting    --succeed_approve--> approved
    submitting    --succeed_reject-->  rejected
    submitting    --fail-->            editing
    approved      --load_past-->       past_readonly
    rejected      --load_past-->       past_readonly
    past_readonly --load_past-->       past_readonly

Every non-submitting state may ``close`` back to ``idle``.  A submission
cannot be cancelled once issued.
"""

from __future__ import annotations

from enum import Enum

from issuance_kernel.domain.workflow import Transition, Workflow


class PanelState(str, Enum):
    """Panel lifecycle states."""

    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAST_READONLY = "past_readonly"


class PanelAction(str, Enum):
    """Events that drive the panel state machine."""

    LOAD = "load"
    LOAD_PAST = "load_past"
    SUBMIT = "submit"
    SUCCEED_APPROVE = "succeed_approve"
    SUCCEED_REJECT = "succeed_reject"
    FAIL = "fail"
    CLOSE = "close"


def _close_from(*states: PanelState) -> tuple[Transition, ...]:
    return tuple(
        Transition(s.value, PanelState.IDLE.value, action=PanelAction.CLOSE.value)
        for s in states
    )


PANEL_WORKFLOW = Workflow(
    name="approval_panel",
    description="Request panel lifecycle for MIF/MRF approval and issuance",
    initial_state=PanelState.IDLE.value,
    states=tuple(s.value for s in PanelState),
    transitions=(
        Transition("idle", "editing", action="load"),
        Transition("idle", "past_readonly", action="load_past"),
        Transition("editing", "editing", action="load"),
        Transition("editing", "submitting", action="submit"),
        Transition("submitting", "approved", action="succeed_approve"),
        Transition("submitting", "rejected", action="succeed_reject"),
        Transition("submitting", "editing", action="fail"),
        Transition("approved", "past_readonly", action="load_past"),
        Transition("rejected", "past_readonly", action="load_past"),
        Transition("past_readonly", "past_readonly", action="load_past"),
        *_close_from(
            PanelState.IDLE,
            PanelState.EDITING,
            PanelState.APPROVED,
            PanelState.REJECTED,
            PanelState.PAST_READONLY,
        ),
    ),
    terminal_states=(
        PanelState.APPROVED.value,
        PanelState.REJECTED.value,
    ),
)

READ_ONLY_STATES: frozenset[PanelState] = frozenset({
    PanelState.SUBMITTING,
    PanelState.APPROVED,
    PanelState.REJECTED,
    PanelState.PAST_READONLY,
})
