"""JSON Schemas for the assembly wire protocol.

WHY: Messages cross a process boundary, from the decision service to a
rendering surface and back. Validating each inbound document against a
schema gives an immediate, precise error instead of a KeyError deep in
the engine.

HOW: Draft 2020-12 schemas as module-level dicts, one per message kind.
The codec validates with jsonschema before building IR objects.

RULES:
- action is a free string here; unknown actions are the engine's concern
- Optional fields may be omitted or null
- Extra keys are allowed so newer senders don't break older receivers
"""

from __future__ import annotations

from typing import Any, Dict

_NUMBER_OR_NULL = {"type": ["number", "null"]}
_STRING_OR_NULL = {"type": ["string", "null"]}

POSITION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["area", "order"],
    "properties": {
        "area": {"type": "string"},
        "order": {"type": "integer"},
        "width": _STRING_OR_NULL,
        "maxWidth": _STRING_OR_NULL,
        "gridColumn": {"type": ["integer", "null"]},
        "gridRow": {"type": ["integer", "null"]},
    },
}

ANIMATION_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["enter", "exit", "duration"],
    "properties": {
        "enter": {"type": "string"},
        "exit": {"type": "string"},
        "duration": {"type": "number", "minimum": 0},
        "stagger": _NUMBER_OR_NULL,
        "ease": {"type": ["array", "null"], "items": {"type": "number"}},
    },
}

COMPONENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["id", "type", "props", "position"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "minLength": 1},
        "props": {"type": "object"},
        "position": POSITION_SCHEMA,
        "animationDelay": {"type": "number", "minimum": 0},
    },
}

UPDATE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string"},
        "props": {"type": ["object", "null"]},
        "position": {"type": ["object", "null"]},
    },
}

INSTRUCTION_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "AssemblyInstruction",
    "type": "object",
    "required": ["action"],
    "properties": {
        "action": {"type": "string"},
        "components": {"type": ["array", "null"], "items": COMPONENT_SCHEMA},
        "componentIds": {"type": ["array", "null"], "items": {"type": "string"}},
        "updates": {"type": ["array", "null"], "items": UPDATE_SCHEMA},
        "layout": _STRING_OR_NULL,
        "animation": {"anyOf": [ANIMATION_SCHEMA, {"type": "null"}]},
        "meta": {"type": ["object", "null"]},
    },
}

INTENT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Intent",
    "type": "object",
    "required": ["type", "confidence"],
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "confidence": {"type": "number", "minimum": 0, "maximum": 1},
        "entities": {"type": ["object", "null"]},
        "context": {"type": ["object", "null"]},
    },
}

STATE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "AssemblyState",
    "type": "object",
    "required": ["components", "layout", "timestamp"],
    "properties": {
        "components": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "type", "props", "position", "status", "mountedAt"],
                "properties": {
                    "id": {"type": "string"},
                    "type": {"type": "string"},
                    "props": {"type": "object"},
                    "position": POSITION_SCHEMA,
                    "status": {
                        "enum": ["pending", "mounting", "mounted", "updating", "unmounting", "removed"],
                    },
                    "mountedAt": {"type": "number"},
                    "animationDelay": {"type": "number"},
                },
            },
        },
        "layout": {"type": "string"},
        "timestamp": {"type": "number"},
    },
}
