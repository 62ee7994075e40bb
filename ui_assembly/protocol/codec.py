"""Wire codec for instructions, intents, and state snapshots.

WHY: The decision service and the rendering surface only share JSON.
This module is the single place that knows how IR dataclasses map to
wire keys (camelCase, as the surface expects) and back.

HOW: encode_* functions turn IR objects into plain dicts; decode_*
functions validate a dict (or JSON string) against the matching schema
with jsonschema, then build IR objects. dumps()/loads() wrap json for
callers that want strings.

RULES:
- Wire keys: componentIds, animationDelay, mountedAt, maxWidth, gridColumn, gridRow
- Optional fields that are None are omitted on encode
- Schema violations raise ProtocolError (a ValueError)
- An unknown action decodes fine; the engine reports and drops it
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

import jsonschema

from ui_assembly.core.ir import (
    AnimationConfig,
    AssemblyInstruction,
    AssemblyState,
    ComponentInstance,
    ComponentState,
    ComponentUpdate,
    Intent,
    LifecycleState,
    Position,
)
from ui_assembly.protocol.schemas import INSTRUCTION_SCHEMA, INTENT_SCHEMA, STATE_SCHEMA

Document = Union[str, bytes, Dict[str, Any]]


class ProtocolError(ValueError):
    """Raised when an inbound document does not match the wire schema."""


def _load(document: Document, schema: Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(document, (str, bytes)):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as exc:
            raise ProtocolError("Malformed JSON: {}".format(exc)) from exc
    try:
        jsonschema.validate(instance=document, schema=schema)
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ProtocolError(
            "{} invalid at {}: {}".format(schema.get("title", "Document"), location, exc.message)
        ) from exc
    return document


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Positions and animations
# ---------------------------------------------------------------------------


def encode_position(position: Position) -> Dict[str, Any]:
    return _drop_none({
        "area": position.area,
        "order": position.order,
        "width": position.width,
        "maxWidth": position.max_width,
        "gridColumn": position.grid_column,
        "gridRow": position.grid_row,
    })


_POSITION_KEYS = {
    "area": "area",
    "order": "order",
    "width": "width",
    "maxWidth": "max_width",
    "gridColumn": "grid_column",
    "gridRow": "grid_row",
}


def decode_position_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Translate wire position keys to Position field names, dropping unknowns."""
    return {_POSITION_KEYS[k]: v for k, v in data.items() if k in _POSITION_KEYS}


def decode_position(data: Dict[str, Any]) -> Position:
    return Position(**decode_position_fields(data))


def encode_animation(animation: AnimationConfig) -> Dict[str, Any]:
    return _drop_none({
        "enter": animation.enter,
        "exit": animation.exit,
        "duration": animation.duration,
        "stagger": animation.stagger,
        "ease": list(animation.ease) if animation.ease is not None else None,
    })


def decode_animation(data: Optional[Dict[str, Any]]) -> Optional[AnimationConfig]:
    if data is None:
        return None
    return AnimationConfig(
        enter=data["enter"],
        exit=data["exit"],
        duration=float(data["duration"]),
        stagger=data.get("stagger"),
        ease=data.get("ease"),
    )


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------


def encode_component(component: ComponentInstance) -> Dict[str, Any]:
    return {
        "id": component.id,
        "type": component.type,
        "props": component.props,
        "position": encode_position(component.position),
        "animationDelay": component.animation_delay,
    }


def encode_instruction(instruction: AssemblyInstruction) -> Dict[str, Any]:
    data: Dict[str, Any] = {"action": instruction.action}
    if instruction.components is not None:
        data["components"] = [encode_component(c) for c in instruction.components]
    if instruction.component_ids is not None:
        data["componentIds"] = list(instruction.component_ids)
    if instruction.updates is not None:
        data["updates"] = [
            _drop_none({"id": u.id, "props": u.props, "position": u.position})
            for u in instruction.updates
        ]
    if instruction.layout is not None:
        data["layout"] = instruction.layout
    if instruction.animation is not None:
        data["animation"] = encode_animation(instruction.animation)
    if instruction.meta:
        data["meta"] = dict(instruction.meta)
    return data


def decode_instruction(document: Document) -> AssemblyInstruction:
    data = _load(document, INSTRUCTION_SCHEMA)

    components = data.get("components")
    component_ids = data.get("componentIds")
    updates = data.get("updates")

    return AssemblyInstruction(
        action=data["action"],
        components=None if components is None else [
            ComponentInstance(
                id=c["id"],
                type=c["type"],
                props=dict(c["props"]),
                position=decode_position(c["position"]),
                animation_delay=float(c.get("animationDelay", 0.0)),
            )
            for c in components
        ],
        component_ids=None if component_ids is None else list(component_ids),
        updates=None if updates is None else [
            ComponentUpdate(
                id=u["id"],
                props=u.get("props"),
                position=decode_position_fields(u["position"]) if u.get("position") else None,
            )
            for u in updates
        ],
        layout=data.get("layout"),
        animation=decode_animation(data.get("animation")),
        meta=dict(data.get("meta") or {}),
    )


# ---------------------------------------------------------------------------
# Intents
# ---------------------------------------------------------------------------


def encode_intent(intent: Intent) -> Dict[str, Any]:
    return {
        "type": intent.type,
        "confidence": intent.confidence,
        "entities": dict(intent.entities),
        "context": dict(intent.context),
    }


def decode_intent(document: Document) -> Intent:
    data = _load(document, INTENT_SCHEMA)
    return Intent(
        type=data["type"],
        confidence=float(data["confidence"]),
        entities=dict(data.get("entities") or {}),
        context=dict(data.get("context") or {}),
    )


# ---------------------------------------------------------------------------
# State snapshots
# ---------------------------------------------------------------------------


def encode_state(state: AssemblyState) -> Dict[str, Any]:
    return {
        "components": [
            {
                "id": c.id,
                "type": c.type,
                "props": c.props,
                "position": encode_position(c.position),
                "status": c.lifecycle.value,
                "mountedAt": c.mounted_at,
                "animationDelay": c.animation_delay,
            }
            for c in state.components
        ],
        "layout": state.layout,
        "timestamp": state.timestamp,
    }


def decode_state(document: Document) -> AssemblyState:
    data = _load(document, STATE_SCHEMA)
    return AssemblyState(
        components=[
            ComponentState(
                id=c["id"],
                type=c["type"],
                props=dict(c["props"]),
                position=decode_position(c["position"]),
                animation_delay=float(c.get("animationDelay", 0.0)),
                lifecycle=LifecycleState(c["status"]),
                mounted_at=float(c["mountedAt"]),
            )
            for c in data["components"]
        ],
        layout=data["layout"],
        timestamp=float(data["timestamp"]),
    )


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def dumps(data: Dict[str, Any], indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False)


def loads(text: Union[str, bytes]) -> Dict[str, Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ProtocolError("Malformed JSON: {}".format(exc)) from exc
