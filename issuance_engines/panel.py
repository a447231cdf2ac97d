"""
issuance_engines.panel -- Panel state machine resolution.

Resolves ``(state, action)`` against ``PANEL_WORKFLOW``.  The first
declared transition wins; there is never more than one per pair.
"""

from __future__ import annotations

from issuance_kernel.domain.panel import PANEL_WORKFLOW, PanelAction, PanelState
from issuance_kernel.domain.workflow import Transition, Workflow
from issuance_kernel.exceptions import InvalidPanelTransitionError


def find_transition(
    state: PanelState,
    action: PanelAction,
    workflow: Workflow = PANEL_WORKFLOW,
) -> Transition | None:
    for transition in workflow.transitions_from(state.value):
        if transition.action == action.value:
            return transition
    return None


def can_transition(state: PanelState, action: PanelAction) -> bool:
    return find_transition(state, action) is not None


def next_state(state: PanelState, action: PanelAction) -> PanelState:
    """Return the state reached by ``action``; raise if none is declared."""
    transition = find_transition(state, action)
    if transition is None:
        raise InvalidPanelTransitionError(state.value, action.value)
    return PanelState(transition.to_state)
