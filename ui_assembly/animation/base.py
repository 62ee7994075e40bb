"""Abstract base animation executor.

WHY: The engine schedules animations and waits for them, but the
actual interpolation happens elsewhere: on the client surface, in a
simulator, or nowhere at all in tests. This base class is the seam the
engine awaits through, so any executor can be dropped in.

HOW: BaseAnimationExecutor is an ABC with three coroutine methods, one
per kind of animation the engine schedules. Each resolves when the
animation has finished and raises if it failed.

RULES:
- animate_in() is awaited once per mounted component, after ``delay`` seconds
- animate_out() is awaited once per removed component
- animate_layout_change() is awaited once per reorganize, for the whole set
- Executors never touch engine state; they only signal completion

To add a new executor:
1. Create a new file in animation/
2. Subclass BaseAnimationExecutor
3. Implement the three coroutines and ``name``
4. Register in EXECUTORS in animation/__init__.py
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ui_assembly.core.ir import AnimationConfig


class BaseAnimationExecutor(ABC):
    """Abstract base for animation executors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable executor name, e.g. 'Timed'."""

    @abstractmethod
    async def animate_in(self, component_id: str, config: AnimationConfig, delay: float) -> None:
        """Run the enter animation for one component."""

    @abstractmethod
    async def animate_out(self, component_id: str, config: AnimationConfig) -> None:
        """Run the exit animation for one component."""

    @abstractmethod
    async def animate_layout_change(self, component_ids: Sequence[str]) -> None:
        """Run one layout transition covering the whole active set."""
