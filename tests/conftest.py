"""Shared test fixtures for the ui_assembly test suite.

WHY: Most test modules need the same building blocks: a registry with
the default catalog, a mapper over the default rules, and an engine
whose animations can be observed, delayed, or made to fail on demand.

HOW: Pytest fixtures build fresh instances per test. RecordingExecutor
is a BaseAnimationExecutor that logs every call with a start and end
time and can be told to hang or raise for specific component ids.

RULES:
- Every fixture returns a new instance (no shared mutable state)
- Async code is driven with asyncio.run() inside synchronous tests
"""

from __future__ import annotations

import asyncio
import time
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from ui_assembly.animation.base import BaseAnimationExecutor
from ui_assembly.core.engine import AssemblyEngine
from ui_assembly.core.ir import AnimationConfig, ComponentInstance, Intent, Position
from ui_assembly.core.registry import ComponentRegistry
from ui_assembly.mapping.catalog import DEFAULT_RULES, register_defaults
from ui_assembly.mapping.mapper import IntentMapper


class RecordingExecutor(BaseAnimationExecutor):
    """Animation executor that records calls and misbehaves on request.

    Attributes:
        calls: (kind, component_id or None, start, end) per awaited animation.
        duration_s: Sleep applied to every animation.
        hang_ids: Component ids whose animation never finishes.
        fail_ids: Component ids whose animation raises RuntimeError.
        fail_layout: Make animate_layout_change raise.
        hang_layout: Make animate_layout_change never finish.
    """

    def __init__(self, duration_s: float = 0.0) -> None:
        self.calls: List[Tuple[str, Optional[str], float, float]] = []
        self.duration_s = duration_s
        self.hang_ids: Set[str] = set()
        self.fail_ids: Set[str] = set()
        self.fail_layout = False
        self.hang_layout = False
        self.layout_calls: List[List[str]] = []

    @property
    def name(self) -> str:
        return "Recording"

    async def _run(self, kind: str, component_id: Optional[str]) -> None:
        start = time.monotonic()
        if component_id in self.hang_ids:
            await asyncio.sleep(3600)
        await asyncio.sleep(self.duration_s)
        if component_id in self.fail_ids:
            raise RuntimeError("boom: {}".format(component_id))
        self.calls.append((kind, component_id, start, time.monotonic()))

    async def animate_in(self, component_id: str, config: AnimationConfig, delay: float) -> None:
        await self._run("in", component_id)

    async def animate_out(self, component_id: str, config: AnimationConfig) -> None:
        await self._run("out", component_id)

    async def animate_layout_change(self, component_ids: Sequence[str]) -> None:
        self.layout_calls.append(list(component_ids))
        if self.fail_layout:
            raise RuntimeError("layout boom")
        if self.hang_layout:
            await asyncio.sleep(3600)
        await self._run("layout", None)


class EagerFailingExecutor(RecordingExecutor):
    """Raises from animate_in before any awaitable exists, for ids in fail_ids."""

    def animate_in(self, component_id: str, config: AnimationConfig, delay: float):
        if component_id in self.fail_ids:
            raise RuntimeError("rejected: {}".format(component_id))
        return super().animate_in(component_id, config, delay)


class AcknowledgeTimeoutExecutor(RecordingExecutor):
    """Executor whose own transport times out for ids in fail_ids."""

    async def animate_in(self, component_id: str, config: AnimationConfig, delay: float) -> None:
        if component_id in self.fail_ids:
            raise asyncio.TimeoutError("client never acknowledged {}".format(component_id))
        await self._run("in", component_id)


def make_instance(
    component_id: str,
    component_type: str = "ProductGrid",
    area: str = "main",
    order: int = 0,
    props: Optional[Dict] = None,
) -> ComponentInstance:
    """Build a ComponentInstance with sensible defaults."""
    return ComponentInstance(
        id=component_id,
        type=component_type,
        props=props or {},
        position=Position(area=area, order=order),
        animation_delay=0.0,
    )


@pytest.fixture
def registry():
    """Registry bound to the default component catalog."""
    return register_defaults(ComponentRegistry())


@pytest.fixture
def mapper(registry):
    """Mapper over the default rule list."""
    return IntentMapper(DEFAULT_RULES, registry=registry)


@pytest.fixture
def executor():
    """Fresh recording executor."""
    return RecordingExecutor()


@pytest.fixture
def engine(registry, executor):
    """Engine with the default catalog and a recording executor."""
    return AssemblyEngine(registry=registry, executor=executor, animation_timeout_s=1.0)


@pytest.fixture
def greeting_intent():
    return Intent(type="greeting", confidence=0.9)


@pytest.fixture
def browse_intent():
    return Intent(
        type="product_browse",
        confidence=0.75,
        entities={"color": "black", "product_type": "dress"},
        context={"urgency": "high"},
    )
