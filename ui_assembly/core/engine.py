"""Assembly engine: applies instructions to the active component set.

WHY: Instructions arrive one per conversational turn and describe what
the surface should look like next. Something has to own the set of
live components, move each one through its lifecycle, wait for the
animations that make those moves visible, and tell observers what the
surface looks like afterwards. That is this module.

HOW: AssemblyEngine keeps an insertion-ordered dict of ComponentState
keyed by id. apply() dispatches on the instruction's action:
  add        - insert pending → mounting, await enter animations → mounted
  remove     - mounted → unmounting, await exit animations → removed (deleted)
  update     - shallow-merge props / position, mounted → updating → mounted
  reorganize - recompute every position, await one layout animation
assemble() wraps apply() for mapped adds and follows each with a
reorganize of the whole surface.
Per-component animation waits in one batch run concurrently through
asyncio.gather and the call returns once all have settled. Each wait is
bounded by ``animation_timeout_s``; a timed-out component is forced to
its target state and recorded as a degraded completion.

RULES:
- One instruction at a time; callers await apply() before the next call
- Unregistered types, missing ids, and unknown actions are skipped and
  reported as diagnostics, never raised
- An animation executor failure is raised as AnimationFailedError after
  every sibling in the batch has settled; nothing is rolled back and no
  notification is sent for that call
- Exactly one notification per successful apply(), to every subscriber
- A component never stays in mounting/unmounting once apply() returns
"""

from __future__ import annotations

import asyncio
import collections
import functools
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional

from ui_assembly.animation.base import BaseAnimationExecutor
from ui_assembly.config import ANIMATION_TIMEOUT_S, CLEAR_ANIMATION, DEFAULT_ANIMATION
from ui_assembly.core.ir import (
    Action,
    AnimationConfig,
    AssemblyInstruction,
    AssemblyState,
    ComponentInstance,
    ComponentState,
    ComponentUpdate,
    LifecycleState,
)
from ui_assembly.core.layout import DEFAULT_LAYOUT, LayoutEngine
from ui_assembly.core.lifecycle import AssemblyError, transition
from ui_assembly.core.registry import ComponentRegistry

logger = logging.getLogger(__name__)

Subscriber = Callable[[AssemblyState], None]

MAX_DIAGNOSTICS = 200


class AnimationFailedError(AssemblyError):
    """Raised when an animation executor fails during a batch.

    RULES:
    - component_id is the first component whose animation failed
      (None for a whole-set layout animation)
    - __cause__ is the executor's original exception
    """

    def __init__(self, component_id: Optional[str], cause: BaseException) -> None:
        self.component_id = component_id
        target = component_id or "layout change"
        super().__init__("Animation failed for {}: {}".format(target, cause))


@dataclass
class Diagnostic:
    """One non-fatal event reported through the side channel.

    Attributes:
        kind: ``unregistered_type``, ``duplicate_id``, ``unknown_action``,
              or ``animation_timeout``.
        message: Human-readable description.
        component_id: The component concerned, when there is one.
        timestamp: Epoch seconds when the event was recorded.
    """

    kind: str
    message: str
    component_id: Optional[str] = None
    timestamp: float = 0.0


class AssemblyEngine:
    """Owns the active component set and its lifecycle.

    Args:
        registry: Component types the surface can render.
        executor: Animation executor awaited for enter/exit/layout animations.
        layout_engine: Position solver; a fresh LayoutEngine by default.
        animation_timeout_s: Upper bound on every animation wait. None
            disables the bound.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        executor: BaseAnimationExecutor,
        layout_engine: Optional[LayoutEngine] = None,
        animation_timeout_s: Optional[float] = ANIMATION_TIMEOUT_S,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._layout_engine = layout_engine or LayoutEngine()
        self._animation_timeout_s = animation_timeout_s
        self._active: Dict[str, ComponentState] = {}
        self._subscribers: List[Subscriber] = []
        self.diagnostics: Deque[Diagnostic] = collections.deque(maxlen=MAX_DIAGNOSTICS)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def layout(self) -> str:
        return self._layout_engine.current_layout

    def __len__(self) -> int:
        return len(self._active)

    def get(self, component_id: str) -> Optional[ComponentState]:
        """Return a copy of one active component, or None."""
        component = self._active.get(component_id)
        return component.snapshot() if component else None

    def get_state(self) -> AssemblyState:
        """Snapshot of the active set in insertion order."""
        return AssemblyState(
            components=[c.snapshot() for c in self._active.values()],
            layout=self._layout_engine.current_layout,
            timestamp=time.time(),
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a callable that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    async def apply(self, instruction: AssemblyInstruction) -> AssemblyState:
        """Apply one instruction and notify subscribers.

        Returns:
            The snapshot delivered to subscribers.

        Raises:
            AnimationFailedError: If the animation executor failed for any
                component in the batch.
        """
        logger.debug("Applying %s instruction", instruction.action)
        try:
            action = Action(instruction.action)
        except ValueError:
            action = None

        animation = instruction.animation or AnimationConfig(**DEFAULT_ANIMATION)

        if action is Action.ADD:
            await self._add_components(instruction.components or [], animation)
        elif action is Action.REMOVE:
            await self._remove_components(instruction.component_ids or [], animation)
        elif action is Action.UPDATE:
            self._update_components(instruction.updates or [])
        elif action is Action.REORGANIZE:
            await self._reorganize(instruction.layout or DEFAULT_LAYOUT)
        else:
            self._report(
                "unknown_action",
                "Dropped instruction with unknown action '{}'".format(instruction.action),
            )

        return self._notify()

    async def clear(self) -> AssemblyState:
        """Remove every active component with a short fade."""
        return await self.apply(AssemblyInstruction(
            action=Action.REMOVE.value,
            component_ids=list(self._active),
            animation=AnimationConfig(**CLEAR_ANIMATION),
        ))

    async def assemble(self, instruction: AssemblyInstruction) -> AssemblyState:
        """Apply a mapped add, then lay the whole surface out again.

        WHY: Mapped components carry positions numbered from zero within
        their own instruction. Once they join components from earlier
        turns those orders collide, and their areas only fit the layout
        the instruction asked for.

        HOW: Applies the instruction as-is. If it mounted anything new, or
        names a layout other than the current one, follows up with a
        reorganize under ``instruction.layout`` (or the current layout)
        using the instruction's animation.

        RULES:
        - Subscribers see one notification per engine call
        - An add that mounted nothing under an unchanged layout is one call
        """
        fresh = [c.id for c in instruction.components or [] if c.id not in self._active]
        state = await self.apply(instruction)
        layout = instruction.layout or self.layout
        if any(component_id in self._active for component_id in fresh) or layout != self.layout:
            state = await self.apply(AssemblyInstruction(
                action=Action.REORGANIZE.value,
                layout=layout,
                animation=instruction.animation,
            ))
        return state

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def _add_components(
        self,
        components: List[ComponentInstance],
        animation: AnimationConfig,
    ) -> None:
        accepted: List[ComponentState] = []
        now = time.time()

        for instance in components:
            if not self._registry.has(instance.type):
                self._report(
                    "unregistered_type",
                    "Component type '{}' not registered; skipping".format(instance.type),
                    instance.id,
                )
                continue
            if instance.id in self._active:
                self._report(
                    "duplicate_id",
                    "Component id '{}' already active; skipping".format(instance.id),
                    instance.id,
                )
                continue

            state = ComponentState.from_instance(instance, mounted_at=now)
            self._active[state.id] = state
            transition(state, LifecycleState.MOUNTING)
            accepted.append(state)

        def _mounted(state: ComponentState) -> Callable[[], None]:
            return lambda: transition(state, LifecycleState.MOUNTED)

        await self._fan_in([
            (
                state.id,
                functools.partial(self._executor.animate_in, state.id, animation, state.animation_delay),
                _mounted(state),
            )
            for state in accepted
        ])

    async def _remove_components(
        self,
        component_ids: List[str],
        animation: AnimationConfig,
    ) -> None:
        leaving: List[ComponentState] = []

        for component_id in component_ids:
            state = self._active.get(component_id)
            if state is None or state.lifecycle is LifecycleState.UNMOUNTING:
                continue
            transition(state, LifecycleState.UNMOUNTING)
            leaving.append(state)

        def _removed(state: ComponentState) -> Callable[[], None]:
            def _finish() -> None:
                transition(state, LifecycleState.REMOVED)
                self._active.pop(state.id, None)
            return _finish

        await self._fan_in([
            (state.id, functools.partial(self._executor.animate_out, state.id, animation), _removed(state))
            for state in leaving
        ])

    def _update_components(self, updates: List[ComponentUpdate]) -> None:
        for update in updates:
            state = self._active.get(update.id)
            if state is None:
                continue

            transition(state, LifecycleState.UPDATING)
            if update.props:
                state.props = {**state.props, **update.props}
            if update.position:
                state.position = state.position.merged(update.position)
            transition(state, LifecycleState.MOUNTED)

    async def _reorganize(self, layout_key: str) -> None:
        components = list(self._active.values())
        positions = self._layout_engine.calculate_positions(components, layout_key)

        for component_id, position in positions.items():
            self._active[component_id].position = position

        try:
            finished = await self._bounded(
                functools.partial(self._executor.animate_layout_change, list(self._active))
            )
        except Exception as exc:
            raise AnimationFailedError(None, exc) from exc
        if not finished:
            self._report("animation_timeout", "Layout animation timed out; positions applied")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _bounded(self, start: Callable[[], Awaitable[Any]]) -> bool:
        """Run one executor animation under the engine's deadline.

        Returns False when the deadline passed first; the animation is
        then cancelled. Anything the executor raises, including its own
        TimeoutError, propagates unchanged.
        """
        task = asyncio.ensure_future(start())
        try:
            done, _ = await asyncio.wait({task}, timeout=self._animation_timeout_s)
        finally:
            if not task.done():
                task.cancel()
        if not done:
            return False
        task.result()
        return True

    async def _fan_in(self, waits: List[Any]) -> None:
        """Await every (id, start, on_done) triple concurrently.

        start is called inside the wait, so an executor that raises before
        returning its awaitable counts as a failed animation. on_done
        always runs, whether the animation completed, timed out, or
        failed, so no component is left mid-transition. The first failure
        is raised once everything has settled.
        """
        if not waits:
            return

        async def _settle(
            component_id: str,
            start: Callable[[], Awaitable[Any]],
            on_done: Callable[[], None],
        ) -> None:
            try:
                finished = await self._bounded(start)
            except Exception as exc:
                on_done()
                raise AnimationFailedError(component_id, exc) from exc
            if not finished:
                self._report(
                    "animation_timeout",
                    "Animation for '{}' timed out; forcing completion".format(component_id),
                    component_id,
                )
            on_done()

        results = await asyncio.gather(
            *(_settle(cid, anim, done) for cid, anim, done in waits),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    def _report(self, kind: str, message: str, component_id: Optional[str] = None) -> None:
        logger.warning(message)
        self.diagnostics.append(Diagnostic(
            kind=kind,
            message=message,
            component_id=component_id,
            timestamp=time.time(),
        ))

    def _notify(self) -> AssemblyState:
        state = self.get_state()
        for callback in list(self._subscribers):
            try:
                callback(state)
            except Exception:
                logger.exception("Assembly subscriber %r failed", callback)
        return state
