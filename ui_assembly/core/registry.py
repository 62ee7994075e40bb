"""Component registry: type name to renderable capability.

WHY: The mapper emits component *type names*; something has to decide
which of those names the rendering surface can actually draw. The
registry is that table. It is constructed explicitly and handed to the
mapper and engine, so each test or session can have its own isolated
set of components.

HOW: One dict maps a name to a ``_Binding`` (capability + metadata).
Storing both in a single entry makes rebinding atomic: a name never
points at a new capability with stale metadata.

RULES:
- register() binds or rebinds a name, replacing capability and metadata together
- get() returns None for unknown names (absence is not an error)
- No validation of the capability's shape
- Callers treat an unregistered type as "render nothing, proceed"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional


@dataclass
class ComponentMetadata:
    """Descriptive metadata for a registered component type.

    Attributes:
        category: One of ``"display"``, ``"input"``, ``"layout"``, ``"feedback"``.
        description: Human-readable summary.
        required_props: Props the renderer expects to be present.
        optional_props: Props the renderer understands but can do without.
    """

    category: str = "display"
    description: str = ""
    required_props: List[str] = field(default_factory=list)
    optional_props: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RemoteComponent:
    """Capability handle for a component rendered on the client surface.

    The server never renders anything itself; registering a
    RemoteComponent just declares that the client knows how to draw
    ``name``.
    """

    name: str


class _Binding(NamedTuple):
    capability: Any
    metadata: Optional[ComponentMetadata]


class ComponentRegistry:
    """Name → capability table with optional metadata."""

    def __init__(self) -> None:
        self._bindings: Dict[str, _Binding] = {}

    def register(
        self,
        name: str,
        capability: Any,
        metadata: Optional[ComponentMetadata] = None,
    ) -> None:
        self._bindings[name] = _Binding(capability, metadata)

    def get(self, name: str) -> Any:
        binding = self._bindings.get(name)
        return binding.capability if binding else None

    def get_metadata(self, name: str) -> Optional[ComponentMetadata]:
        binding = self._bindings.get(name)
        return binding.metadata if binding else None

    def has(self, name: str) -> bool:
        return name in self._bindings

    def list_names(self) -> List[str]:
        """Registered names in registration order."""
        return list(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
