"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint pair (request + response) has its own model.
Instructions and snapshots travel as wire dicts produced by the
protocol codec, so their models hold plain mappings; the codec is the
single source of truth for their inner shape.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- confidence is bounded to [0, 1] at the edge
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class IntentRequest(BaseModel):
    """A classified user turn submitted for mapping."""

    type: str = Field(min_length=1, description="Intent type label, e.g. 'product_browse'.")
    confidence: float = Field(ge=0.0, le=1.0, description="Classifier confidence in [0, 1].")
    entities: Dict[str, Any] = Field(
        default_factory=dict,
        description="Entities extracted by the classifier.",
    )
    context: Dict[str, Any] = Field(
        default_factory=dict,
        description="Conversational context tags (e.g. urgency, sentiment).",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "type": "product_browse",
                "confidence": 0.75,
                "entities": {"color": "black", "product_type": "dress"},
                "context": {"urgency": "high"},
            }
        ]
    }}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class StateResponse(BaseModel):
    """Snapshot of a session's active component set."""

    components: List[Dict[str, Any]] = Field(description="Active components with status and position.")
    layout: str = Field(description="Layout key most recently applied.")
    timestamp: float = Field(description="Snapshot time (Unix epoch seconds).")


class SessionResponse(BaseModel):
    """Session metadata."""

    id: str = Field(description="Unique session identifier (UUID hex).")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    updated_at: float = Field(description="Last activity timestamp (Unix epoch seconds).")
    component_count: int = Field(description="Number of active components.")
    layout: str = Field(description="Current layout key.")


class InstructionResponse(BaseModel):
    """Instruction produced by the mapper."""

    instruction: Dict[str, Any] = Field(description="Wire-format assembly instruction.")


class IntentResultResponse(BaseModel):
    """Result of mapping and applying an intent in a session."""

    instruction: Dict[str, Any] = Field(description="Wire-format instruction that was applied.")
    state: StateResponse = Field(description="Snapshot after the instruction was applied.")


class ComponentInfo(BaseModel):
    """A registered component type."""

    name: str = Field(description="Component type name.")
    category: Optional[str] = Field(default=None, description="Component category.")
    description: Optional[str] = Field(default=None, description="Human-readable summary.")
    required_props: List[str] = Field(default_factory=list, description="Props the renderer requires.")
    optional_props: List[str] = Field(default_factory=list, description="Props the renderer accepts.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
