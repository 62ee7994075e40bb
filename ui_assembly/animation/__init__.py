"""Animation executor registry: pluggable completion signals.

WHY: The CLI, the server, and tests each want a different notion of
"the animation finished". A central dict lets any of them pick an
executor by name: ``executor = EXECUTORS["timed"]()``.

HOW: EXECUTORS maps string keys to executor *classes* (not instances).

RULES:
- Keys are lowercase identifiers (used in config and CLI flags)
- Values are BaseAnimationExecutor subclasses
- Every executor listed here must be constructible with no arguments
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ui_assembly.animation.immediate import ImmediateAnimationExecutor
from ui_assembly.animation.timed import TimedAnimationExecutor

if TYPE_CHECKING:
    from ui_assembly.animation.base import BaseAnimationExecutor

EXECUTORS: dict[str, type[BaseAnimationExecutor]] = {
    "immediate": ImmediateAnimationExecutor,
    "timed": TimedAnimationExecutor,
}


def create_executor(key: str) -> BaseAnimationExecutor:
    """Instantiate the executor registered under ``key``.

    Raises:
        ValueError: If no executor is registered under that key.
    """
    if key not in EXECUTORS:
        raise ValueError(
            "Unknown animation executor '{}'. Available: {}".format(
                key, ", ".join(sorted(EXECUTORS))
            )
        )
    return EXECUTORS[key]()
