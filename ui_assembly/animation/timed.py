"""Executor that waits out each animation's real duration.

WHY: The server has to hold a batch open while the client plays it,
otherwise a remove could arrive for a component that is still fading
in. Without a feedback channel from the client, the best estimate of
"done" is the animation's own timeline.

HOW: Each animation sleeps for ``delay + duration``, multiplied by
``time_scale``. A scale of 0 turns the executor into a no-op; values
below 1 speed up demos.

RULES:
- Enter waits delay + duration
- Exit waits duration
- Layout change waits layout_duration once for the whole set
- All waits are scaled by time_scale
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from ui_assembly.animation.base import BaseAnimationExecutor
from ui_assembly.config import TIME_SCALE
from ui_assembly.core.ir import AnimationConfig

DEFAULT_LAYOUT_DURATION_S = 0.4


class TimedAnimationExecutor(BaseAnimationExecutor):
    """Simulates the client's animation timeline with asyncio.sleep."""

    def __init__(
        self,
        time_scale: float | None = None,
        layout_duration_s: float = DEFAULT_LAYOUT_DURATION_S,
    ) -> None:
        self.time_scale = TIME_SCALE if time_scale is None else time_scale
        if self.time_scale < 0:
            raise ValueError("time_scale must be >= 0, got {}".format(self.time_scale))
        self.layout_duration_s = layout_duration_s

    @property
    def name(self) -> str:
        return "Timed"

    async def animate_in(self, component_id: str, config: AnimationConfig, delay: float) -> None:
        await asyncio.sleep((delay + config.duration) * self.time_scale)

    async def animate_out(self, component_id: str, config: AnimationConfig) -> None:
        await asyncio.sleep(config.duration * self.time_scale)

    async def animate_layout_change(self, component_ids: Sequence[str]) -> None:
        await asyncio.sleep(self.layout_duration_s * self.time_scale)
