"""Executor that completes every animation at once.

Used by tests, by the CLI's dry replays, and by headless deployments
where the client animates on its own and the server doesn't wait.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from ui_assembly.animation.base import BaseAnimationExecutor
from ui_assembly.core.ir import AnimationConfig


class ImmediateAnimationExecutor(BaseAnimationExecutor):

    @property
    def name(self) -> str:
        return "Immediate"

    async def animate_in(self, component_id: str, config: AnimationConfig, delay: float) -> None:
        await asyncio.sleep(0)

    async def animate_out(self, component_id: str, config: AnimationConfig) -> None:
        await asyncio.sleep(0)

    async def animate_layout_change(self, component_ids: Sequence[str]) -> None:
        await asyncio.sleep(0)
