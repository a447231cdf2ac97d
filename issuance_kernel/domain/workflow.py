"""
Canonical workflow types (``issuance_kernel.domain.workflow``).

Responsibility
--------------
Pure value objects for state machines.  ``Transition`` and ``Workflow``
are defined once and used by the panel lifecycle.

Invariants enforced
-------------------
* Transitions reference only states in ``Workflow.states``.
* ``initial_state`` is a member of ``states``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Transition:
    """A valid state transition in a workflow."""
    from_state: str
    to_state: str
    action: str


@dataclass(frozen=True)
class Workflow:
    """A state machine definition for a panel lifecycle.

    ``terminal_states`` are states with no outgoing transitions other
    than closing the panel.
    """
    name: str
    description: str
    initial_state: str
    states: tuple[str, ...]
    transitions: tuple[Transition, ...]
    terminal_states: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.initial_state not in self.states:
            raise ValueError(
                f"Workflow '{self.name}': initial_state "
                f"'{self.initial_state}' is not a declared state"
            )
        for t in self.transitions:
            for state in (t.from_state, t.to_state):
                if state not in self.states:
                    raise ValueError(
                        f"Workflow '{self.name}': transition '{t.action}' "
                        f"references unknown state '{state}'"
                    )

    def transitions_from(self, state: str) -> tuple[Transition, ...]:
        return tuple(t for t in self.transitions if t.from_state == state)
