"""Mapping rule building blocks: predicates, props sources, effects.

WHY: Rules are the auditable heart of the mapper. Each one says "when
the intent looks like this, contribute that". Giving every part of a
rule its own small type keeps rule tables readable and lets the mapper
dispatch on explicit variants instead of sniffing whether ``props`` is
a dict or a function.

HOW: A MappingRule pairs a predicate with an effect:
  AddEffect     - component definitions, plus optional layout/animation
  ModifyEffect  - top-level overrides folded into the instruction draft
Component props come from a PropsSource:
  StaticProps   - a fixed mapping, copied per instance
  DerivedProps  - a function of the intent
intent_matches() builds the common "type equals X and confidence at
least Y" predicate.

RULES:
- Confidence gating lives inside the predicate, never in the mapper
- Definitions inside one AddEffect are realized sorted by ``order``
- StaticProps.resolve() returns a fresh copy so instances never share dicts
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ui_assembly.core.ir import AnimationConfig, Intent

Predicate = Callable[[Intent], bool]


@dataclass(frozen=True)
class StaticProps:
    values: Dict[str, Any] = field(default_factory=dict)

    def resolve(self, intent: Intent) -> Dict[str, Any]:
        return copy.deepcopy(self.values)


@dataclass(frozen=True)
class DerivedProps:
    fn: Callable[[Intent], Dict[str, Any]]

    def resolve(self, intent: Intent) -> Dict[str, Any]:
        return dict(self.fn(intent))


PropsSource = Union[StaticProps, DerivedProps]


@dataclass(frozen=True)
class ComponentDefinition:
    """Rule-owned template for one component, not yet an instance."""

    type: str
    props: PropsSource = field(default_factory=StaticProps)
    area: str = "main"
    order: int = 0


@dataclass(frozen=True)
class AddEffect:
    components: Tuple[ComponentDefinition, ...]
    layout: Optional[str] = None
    animation: Optional[AnimationConfig] = None

    def ordered_components(self) -> List[ComponentDefinition]:
        return sorted(self.components, key=lambda d: d.order)


@dataclass(frozen=True)
class ModifyEffect:
    """Top-level overrides for the instruction being built.

    ``layout`` replaces the draft layout, ``animation`` (a mapping) is
    merged field by field into the draft animation, and any other key
    lands in the instruction's ``meta``.
    """

    overrides: Dict[str, Any]


RuleEffect = Union[AddEffect, ModifyEffect]


@dataclass(frozen=True)
class MappingRule:
    id: str
    predicate: Predicate
    effect: RuleEffect


def intent_matches(intent_type: str, min_confidence: Optional[float] = None) -> Predicate:
    """Predicate: intent type equals ``intent_type`` and confidence ≥ the minimum.

    With ``min_confidence=None`` the rule fires on type match alone.
    """

    def _predicate(intent: Intent) -> bool:
        if intent.type != intent_type:
            return False
        return min_confidence is None or intent.confidence >= min_confidence

    return _predicate
