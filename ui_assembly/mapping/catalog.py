"""Default rule set and component catalog for the boutique assistant.

WHY: The mapper is generic; this module is the product decision of
which intents show which components. Keeping the table here, as plain
data, means adding an intent is one new MappingRule and the component
names it needs.

HOW: DEFAULT_RULES is the ordered rule list. Content rules come first,
modifiers last so they post-process whatever the content rules chose.
COMPONENT_CATALOG describes every component the rules emit (plus the
fallback HelpPanel); register_defaults() binds them all in a registry
as RemoteComponent handles.

RULES:
- Rule order is significant: modifiers must stay after content rules
- Every type emitted by DEFAULT_RULES appears in COMPONENT_CATALOG
- Entity → filter extraction keeps only entities the user mentioned
"""

from __future__ import annotations

from typing import Any, Dict, List

from ui_assembly.core.ir import AnimationConfig, Intent
from ui_assembly.core.registry import ComponentMetadata, ComponentRegistry, RemoteComponent
from ui_assembly.mapping.rules import (
    AddEffect,
    ComponentDefinition,
    DerivedProps,
    MappingRule,
    ModifyEffect,
    StaticProps,
    intent_matches,
)

ALL_FILTERS = ["category", "color", "size", "price", "occasion", "style", "material"]

# entity key → filter key
_FILTER_ENTITIES = [
    ("color", "color"),
    ("product_type", "category"),
    ("occasion", "occasion"),
    ("price_range", "priceRange"),
    ("style", "style"),
]


def extract_filters(entities: Dict[str, Any]) -> Dict[str, Any]:
    """Pick the filter-worthy entities the classifier found."""
    return {
        filter_key: entities[entity_key]
        for entity_key, filter_key in _FILTER_ENTITIES
        if entities.get(entity_key)
    }


def available_filters(entities: Dict[str, Any]) -> List[str]:
    """All filters, the ones the user mentioned first."""
    mentioned = list(extract_filters(entities))
    return mentioned + [f for f in ALL_FILTERS if f not in mentioned]


def _has_product_id(intent: Intent) -> bool:
    return intent.type == "product_detail" and bool(intent.entities.get("productId"))


def _is_urgent(intent: Intent) -> bool:
    return intent.context.get("urgency") == "high" and intent.confidence >= 0.7


DEFAULT_RULES: List[MappingRule] = [
    MappingRule(
        id="greeting_rule",
        predicate=intent_matches("greeting", min_confidence=0.7),
        effect=AddEffect(
            components=(
                ComponentDefinition(
                    type="WelcomeHero",
                    props=StaticProps({
                        "message": "Welcome to our world of luxury",
                        "subtitle": "How may we assist you today?",
                    }),
                    area="hero",
                    order=0,
                ),
                ComponentDefinition(
                    type="SuggestionCards",
                    props=StaticProps({
                        "suggestions": [
                            {"text": "Browse New Arrivals", "intent": "product_browse"},
                            {"text": "Book Styling Session", "intent": "appointment"},
                            {"text": "Explore Collections", "intent": "brand_story"},
                        ],
                    }),
                    area="main",
                    order=1,
                ),
            ),
            layout="centered",
            animation=AnimationConfig(enter="fadeInUp", exit="fadeOut", duration=0.6, stagger=0.2),
        ),
    ),
    MappingRule(
        id="browse_rule",
        predicate=intent_matches("product_browse", min_confidence=0.6),
        effect=AddEffect(
            components=(
                ComponentDefinition(
                    type="ProductGrid",
                    props=DerivedProps(lambda intent: {
                        "filters": extract_filters(intent.entities),
                        "initialProducts": 12,
                        "enableInfiniteScroll": True,
                    }),
                    area="main",
                    order=0,
                ),
                ComponentDefinition(
                    type="FilterPanel",
                    props=DerivedProps(lambda intent: {
                        "availableFilters": available_filters(intent.entities),
                        "activeFilters": extract_filters(intent.entities),
                    }),
                    area="sidebar",
                    order=1,
                ),
            ),
            layout="two-column",
            animation=AnimationConfig(enter="slideIn", exit="fadeOut", duration=0.5),
        ),
    ),
    MappingRule(
        id="detail_rule",
        predicate=_has_product_id,
        effect=AddEffect(
            components=(
                ComponentDefinition(
                    type="ProductDetailView",
                    props=DerivedProps(lambda intent: {
                        "productId": intent.entities["productId"],
                        "showCraftsmanship": True,
                        "enable360View": True,
                    }),
                    area="main",
                    order=0,
                ),
                ComponentDefinition(
                    type="RelatedProducts",
                    props=DerivedProps(lambda intent: {
                        "productId": intent.entities["productId"],
                        "maxItems": 4,
                    }),
                    area="bottom",
                    order=1,
                ),
            ),
            layout="full-width",
            animation=AnimationConfig(enter="fadeIn", exit="fadeOut", duration=0.4),
        ),
    ),
    MappingRule(
        id="style_advice_rule",
        predicate=intent_matches("style_advice"),
        effect=AddEffect(
            components=(
                ComponentDefinition(
                    type="StyleAdvisor",
                    props=DerivedProps(lambda intent: {
                        "occasion": intent.entities.get("occasion"),
                        "preferences": dict(intent.entities),
                        "mode": "interactive",
                    }),
                    area="main",
                    order=0,
                ),
                ComponentDefinition(
                    type="OutfitBuilder",
                    props=StaticProps({"allowMixMatch": True, "showPricing": True}),
                    area="sidebar",
                    order=1,
                ),
            ),
            layout="split-view",
            animation=AnimationConfig(enter="slideInFromRight", exit="fadeOut", duration=0.5),
        ),
    ),
    MappingRule(
        id="store_visit_rule",
        predicate=intent_matches("store_visit"),
        effect=AddEffect(
            components=(
                ComponentDefinition(
                    type="StoreLocator",
                    props=StaticProps({"showMap": True, "enableGeolocation": True}),
                    area="main",
                    order=0,
                ),
                ComponentDefinition(
                    type="AppointmentScheduler",
                    props=StaticProps({
                        "serviceTypes": ["personal-shopping", "styling-consultation"],
                        "showAvailability": True,
                    }),
                    area="sidebar",
                    order=1,
                ),
            ),
            layout="map-view",
            animation=AnimationConfig(enter="expandFromCenter", exit="fadeOut", duration=0.6),
        ),
    ),
    MappingRule(
        id="urgency_modifier",
        predicate=_is_urgent,
        effect=ModifyEffect({
            "animation": {"duration": 0.3, "enter": "instant"},
            "props": {"priority": "high", "showQuickActions": True},
        }),
    ),
]


COMPONENT_CATALOG: Dict[str, ComponentMetadata] = {
    "WelcomeHero": ComponentMetadata(
        category="display",
        description="Greeting banner shown at the start of a conversation.",
        required_props=["message"],
        optional_props=["subtitle"],
    ),
    "SuggestionCards": ComponentMetadata(
        category="input",
        description="Clickable suggestions that send a follow-up intent.",
        required_props=["suggestions"],
    ),
    "ProductGrid": ComponentMetadata(
        category="display",
        description="Paged grid of products matching the active filters.",
        optional_props=["filters", "initialProducts", "enableInfiniteScroll"],
    ),
    "FilterPanel": ComponentMetadata(
        category="input",
        description="Facet filters for the product grid.",
        required_props=["availableFilters"],
        optional_props=["activeFilters"],
    ),
    "ProductDetailView": ComponentMetadata(
        category="display",
        description="Full detail page for a single product.",
        required_props=["productId"],
        optional_props=["showCraftsmanship", "enable360View"],
    ),
    "RelatedProducts": ComponentMetadata(
        category="display",
        description="Products related to the one being viewed.",
        required_props=["productId"],
        optional_props=["maxItems"],
    ),
    "StyleAdvisor": ComponentMetadata(
        category="input",
        description="Interactive styling conversation.",
        optional_props=["occasion", "preferences", "mode"],
    ),
    "OutfitBuilder": ComponentMetadata(
        category="input",
        description="Mix-and-match outfit composer.",
        optional_props=["allowMixMatch", "showPricing"],
    ),
    "StoreLocator": ComponentMetadata(
        category="display",
        description="Map of boutiques near the user.",
        optional_props=["showMap", "enableGeolocation"],
    ),
    "AppointmentScheduler": ComponentMetadata(
        category="input",
        description="Booking form for in-store appointments.",
        optional_props=["serviceTypes", "showAvailability"],
    ),
    "HelpPanel": ComponentMetadata(
        category="feedback",
        description="Fallback prompt when no rule matched the intent.",
        required_props=["message"],
        optional_props=["showSuggestions"],
    ),
}


def register_defaults(registry: ComponentRegistry) -> ComponentRegistry:
    """Bind every catalog component in ``registry`` and return it."""
    for name, metadata in COMPONENT_CATALOG.items():
        registry.register(name, RemoteComponent(name), metadata)
    return registry
