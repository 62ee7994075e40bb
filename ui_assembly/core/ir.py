"""Intermediate representation dataclasses for intents, instructions, and state.

WHY: The intent classifier, the rule mapper, the wire codec, and the
assembly engine all pass the same handful of shapes between them: an
intent, a component instance, a position, an instruction, a snapshot.
A single set of well-typed dataclasses keeps every stage talking about
the same thing and decouples the mapper from the engine.

HOW: Plain dataclasses and str-based enums:
  Intent              - classifier output for one user turn (frozen)
  Position            - where a component sits (area, order, sizing hints)
  AnimationConfig     - enter/exit animation names, duration, stagger, ease
  ComponentInstance   - a concrete component ready to mount
  ComponentUpdate     - partial props/position change for one id
  ComponentState      - an instance plus lifecycle and mount time
  AssemblyInstruction - one unit of change (add/remove/update/reorganize)
  AssemblyState       - snapshot of the active set

RULES:
- Intent is immutable once created
- ComponentState is only ever mutated by the assembly engine
- Positions are replaced wholesale on reorganize, merged field-wise on update
- Instruction.action is a plain string so unknown actions survive decoding
- Timestamps are Unix epoch seconds (float)
"""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field, fields, replace
from typing import Any


class Action(str, enum.Enum):
    """The four instruction actions the engine knows how to apply."""

    ADD = "add"
    REMOVE = "remove"
    UPDATE = "update"
    REORGANIZE = "reorganize"


class LifecycleState(str, enum.Enum):
    """Lifecycle of a component inside the active set.

    RULES:
    - pending → mounting → mounted
    - mounted → updating → mounted
    - mounted | updating → unmounting → removed
    - removed is terminal; the id leaves the active set
    """

    PENDING = "pending"
    MOUNTING = "mounting"
    MOUNTED = "mounted"
    UPDATING = "updating"
    UNMOUNTING = "unmounting"
    REMOVED = "removed"


@dataclass(frozen=True)
class Intent:
    """Structured classification of one conversational turn.

    WHY: The mapper's rules test the type, the confidence, and whatever
    the classifier extracted. Freezing the dataclass means no rule can
    change what a later rule sees.

    RULES:
    - confidence is in [0, 1]
    - entities and context default to empty mappings
    """

    type: str
    confidence: float
    entities: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class Position:
    """Placement of a component on the rendering surface.

    Attributes:
        area: Named region, e.g. ``"main"``, ``"sidebar"``, ``"grid"``.
        order: Position among components sharing the same area.
        width: CSS-style width hint (``"100%"``, ``"300px"``, ``"auto"``).
        max_width: Optional maximum width hint.
        grid_column: 1-based column for grid layouts.
        grid_row: 1-based row for grid layouts.
    """

    area: str
    order: int
    width: str | None = None
    max_width: str | None = None
    grid_column: int | None = None
    grid_row: int | None = None

    def merged(self, overrides: dict[str, Any]) -> Position:
        """Return a copy with the given fields replaced (unknown keys ignored)."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


@dataclass
class AnimationConfig:
    """How components enter, leave, and move.

    RULES:
    - duration is in seconds
    - stagger is the per-index delay the renderer may apply on top
    - ease is an optional cubic-bezier control point list
    """

    enter: str
    exit: str
    duration: float
    stagger: float | None = None
    ease: list[float] | None = None

    def merged(self, overrides: dict[str, Any]) -> AnimationConfig:
        """Return a copy with the given fields replaced (unknown keys ignored)."""
        known = {f.name for f in fields(self)}
        return replace(self, **{k: v for k, v in overrides.items() if k in known})


@dataclass
class ComponentInstance:
    """A concrete component produced by the mapper, ready to be mounted.

    RULES:
    - id is unique within the active set for the component's lifetime
    - animation_delay is seconds before the enter animation starts
    """

    id: str
    type: str
    props: dict[str, Any]
    position: Position
    animation_delay: float = 0.0


@dataclass
class ComponentUpdate:
    """Partial change for one active component.

    RULES:
    - props is shallow-merged into the existing props
    - position holds only the fields to change
    """

    id: str
    props: dict[str, Any] | None = None
    position: dict[str, Any] | None = None


@dataclass
class ComponentState:
    """An instance inside the engine's active set."""

    id: str
    type: str
    props: dict[str, Any]
    position: Position
    animation_delay: float
    lifecycle: LifecycleState
    mounted_at: float

    @classmethod
    def from_instance(cls, instance: ComponentInstance, mounted_at: float) -> ComponentState:
        """Wrap a fresh instance in the pending state."""
        return cls(
            id=instance.id,
            type=instance.type,
            props=dict(instance.props),
            position=replace(instance.position),
            animation_delay=instance.animation_delay,
            lifecycle=LifecycleState.PENDING,
            mounted_at=mounted_at,
        )

    def snapshot(self) -> ComponentState:
        """Deep copy so observers can't reach the engine's live state."""
        return copy.deepcopy(self)


@dataclass
class AssemblyInstruction:
    """The wire-level unit of change.

    WHY: The mapper produces these, the codec ships them, the engine
    applies them. Keeping the action a plain string (rather than the
    Action enum) lets an instruction with an unknown action reach the
    engine, which drops it with a diagnostic instead of the codec
    failing the whole message.

    RULES:
    - action "add" uses components
    - action "remove" uses component_ids
    - action "update" uses updates
    - action "reorganize" uses layout
    - meta carries top-level flags contributed by modifier rules
    """

    action: str
    components: list[ComponentInstance] | None = None
    component_ids: list[str] | None = None
    updates: list[ComponentUpdate] | None = None
    layout: str | None = None
    animation: AnimationConfig | None = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass
class AssemblyState:
    """Snapshot of the active set, recomputed on demand."""

    components: list[ComponentState]
    layout: str
    timestamp: float
