"""UI Assembly Engine: turns conversational intents into a live interface.

WHY: A conversational assistant decides turn by turn what the user
wants; the interface should follow along, mounting a product grid when
they browse and a scheduler when they want to visit. This package maps
each classified intent to a typed assembly instruction and applies
those instructions to a set of live, animated components.

HOW: Four-stage pipeline: map (ordered rules → instruction), encode
(JSON wire protocol), apply (assembly engine lifecycle + animation
waits), observe (snapshots pushed to subscribers). Each stage is
independently testable.

RULES:
- The intent classifier, renderer, and animation timeline are external
- All stages share the IR in ui_assembly.core.ir
- The registry is injected, never a process-wide singleton
"""

__version__ = "0.1.0"
