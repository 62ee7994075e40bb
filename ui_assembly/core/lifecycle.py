"""Component lifecycle transition table.

WHY: Invariant: a component only ever moves along the lifecycle state
machine, never skipping a state. Centralizing the allowed edges means
the engine can't accidentally jump from pending straight to mounted.

HOW: ALLOWED_TRANSITIONS maps each state to the set of states it may
move to. transition() checks the edge and mutates the component.

RULES:
- pending → mounting → mounted
- mounted → updating → mounted
- mounted | updating → unmounting → removed
- removed has no outgoing edges
- An illegal edge raises LifecycleError (a programming error, not a
  recoverable condition)
"""

from __future__ import annotations

from ui_assembly.core.ir import ComponentState, LifecycleState


class AssemblyError(Exception):
    """Base class for assembly engine errors."""


class LifecycleError(AssemblyError):
    """Raised when a component is asked to take an illegal lifecycle edge."""

    def __init__(self, component_id: str, current: LifecycleState, target: LifecycleState) -> None:
        self.component_id = component_id
        self.current = current
        self.target = target
        super().__init__(
            "Illegal lifecycle transition for {}: {} -> {}".format(
                component_id, current.value, target.value
            )
        )


ALLOWED_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.PENDING: frozenset({LifecycleState.MOUNTING}),
    LifecycleState.MOUNTING: frozenset({LifecycleState.MOUNTED}),
    LifecycleState.MOUNTED: frozenset({LifecycleState.UPDATING, LifecycleState.UNMOUNTING}),
    LifecycleState.UPDATING: frozenset({LifecycleState.MOUNTED, LifecycleState.UNMOUNTING}),
    LifecycleState.UNMOUNTING: frozenset({LifecycleState.REMOVED}),
    LifecycleState.REMOVED: frozenset(),
}


def can_transition(current: LifecycleState, target: LifecycleState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(component: ComponentState, target: LifecycleState) -> None:
    """Move ``component`` to ``target`` or raise LifecycleError."""
    if not can_transition(component.lifecycle, target):
        raise LifecycleError(component.id, component.lifecycle, target)
    component.lifecycle = target
