"""Intent mapper: ordered rules folded into one assembly instruction.

WHY: The classifier says *what the user meant*; the surface needs to
know *which components to show*. A flat, ordered rule list keeps that
translation auditable: replaying the same intent always yields the same
instruction, and later rules can post-process earlier ones (an urgency
rule shortening the animation a browse rule chose).

HOW: map_to_instruction() evaluates every rule's predicate in order.
A predicate that raises counts as "no match". Matched rules are folded
left to right over a draft that starts at layout "default" and the
default animation. Add effects append instances with fresh ids and
staggered delays and overwrite layout/animation when they declare
them; Modify effects merge overrides into the draft's top-level fields.
No match at all yields the fixed help-panel fallback.

RULES:
- Never returns an empty instruction
- Layout/animation conflicts resolve last-matching-rule-wins
- position.order and animation_delay follow the draft's running count
- Ids are unique across the process: type, monotonic counter, random suffix
- Modify effects never touch components already in the draft
"""

from __future__ import annotations

import itertools
import logging
import uuid
from typing import Iterable, List, Optional

from ui_assembly.config import DEFAULT_ANIMATION, FALLBACK_ANIMATION, STAGGER_UNIT
from ui_assembly.core.ir import (
    Action,
    AnimationConfig,
    AssemblyInstruction,
    ComponentInstance,
    Intent,
    Position,
)
from ui_assembly.core.registry import ComponentRegistry
from ui_assembly.mapping.rules import AddEffect, MappingRule, ModifyEffect

logger = logging.getLogger(__name__)

FALLBACK_COMPONENT_TYPE = "HelpPanel"
FALLBACK_PROPS = {
    "message": "I'm here to help. What would you like to explore?",
    "showSuggestions": True,
}

_id_counter = itertools.count(1)


def new_component_id(component_type: str) -> str:
    """Generate a component id that is unique for the life of the process."""
    return "{}-{}-{}".format(component_type, next(_id_counter), uuid.uuid4().hex[:8])


class IntentMapper:
    """Maps intents to instructions through an ordered rule list.

    Args:
        rules: Rules in evaluation order.
        registry: Optional registry; when given, rules emitting unknown
            types are logged (the engine still makes the final call).
        stagger_unit: Seconds of enter delay per component index.
    """

    def __init__(
        self,
        rules: Iterable[MappingRule],
        registry: Optional[ComponentRegistry] = None,
        stagger_unit: float = STAGGER_UNIT,
    ) -> None:
        self.rules: List[MappingRule] = list(rules)
        self._registry = registry
        self.stagger_unit = stagger_unit

    def matching_rules(self, intent: Intent) -> List[MappingRule]:
        """Rules whose predicate holds for ``intent``, in declaration order."""
        return [rule for rule in self.rules if self._evaluate(rule, intent)]

    def map_to_instruction(self, intent: Intent) -> AssemblyInstruction:
        matched = self.matching_rules(intent)
        if not matched:
            logger.info("No rule matched intent '%s'; using fallback", intent.type)
            return self.fallback_instruction()

        draft = AssemblyInstruction(
            action=Action.ADD.value,
            components=[],
            layout="default",
            animation=AnimationConfig(**DEFAULT_ANIMATION),
        )

        for rule in matched:
            effect = rule.effect
            if isinstance(effect, ModifyEffect):
                self._apply_modify(draft, effect)
            else:
                self._apply_add(draft, effect, intent, rule.id)

        logger.debug(
            "Intent '%s' matched %s -> %d components, layout %s",
            intent.type, [r.id for r in matched], len(draft.components), draft.layout,
        )
        return draft

    def fallback_instruction(self) -> AssemblyInstruction:
        return AssemblyInstruction(
            action=Action.ADD.value,
            components=[ComponentInstance(
                id=new_component_id(FALLBACK_COMPONENT_TYPE),
                type=FALLBACK_COMPONENT_TYPE,
                props=dict(FALLBACK_PROPS),
                position=Position(area="main", order=0),
                animation_delay=0.0,
            )],
            layout="centered",
            animation=AnimationConfig(**FALLBACK_ANIMATION),
        )

    # ------------------------------------------------------------------

    def _evaluate(self, rule: MappingRule, intent: Intent) -> bool:
        try:
            return bool(rule.predicate(intent))
        except Exception:
            logger.exception("Error evaluating rule %s", rule.id)
            return False

    def _apply_add(
        self,
        draft: AssemblyInstruction,
        effect: AddEffect,
        intent: Intent,
        rule_id: str,
    ) -> None:
        for definition in effect.ordered_components():
            if self._registry is not None and not self._registry.has(definition.type):
                logger.warning(
                    "Rule %s emits unregistered component type '%s'", rule_id, definition.type
                )
            count = len(draft.components)
            draft.components.append(ComponentInstance(
                id=new_component_id(definition.type),
                type=definition.type,
                props=definition.props.resolve(intent),
                position=Position(area=definition.area, order=count),
                animation_delay=round(count * self.stagger_unit, 6),
            ))

        if effect.layout is not None:
            draft.layout = effect.layout
        if effect.animation is not None:
            draft.animation = effect.animation

    @staticmethod
    def _apply_modify(draft: AssemblyInstruction, effect: ModifyEffect) -> None:
        for key, value in effect.overrides.items():
            if key == "layout":
                draft.layout = value
            elif key == "animation":
                draft.animation = draft.animation.merged(value)
            else:
                draft.meta[key] = value
