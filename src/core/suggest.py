"""
Suggestion engine: proposes wording for a UI string using the registered
resources first, an optional generative model second, and a templated
fallback last.

Confidence tiers: exact 0.95 > fuzzy 0.7 > model 0.6 > template 0.3.
"""

from typing import Any, List, Optional

from util.logging import logger
from ..agents.ollama_agent import SuggestionProviderError
from .audit import MIN_TEXT_LENGTH, iter_text_units
from .matcher import filter_resources, find_exact_match, find_fuzzy_match, variant_for_product
from .schema import FigmaSuggestion, Resource, Suggestion

CONFIDENCE_EXACT = 0.95
CONFIDENCE_FUZZY = 0.7
CONFIDENCE_AI = 0.6
CONFIDENCE_TEMPLATE = 0.3

IMPROVEMENT_MARKERS = {
    "ko-KR": "(개선 제안)",
    "en-US": "(suggested)",
    "zh-CN": "(建议)",
    "ja-JP": "(改善案)",
    "vi-VN": "(đề xuất)",
}

PRODUCT_NAMES = {"knox": "Knox", "brity": "Brity"}
VARIANT_NAMES = {"knoxTeams": "Knox Teams", "brityMessenger": "Brity Messenger"}


def _korean(locale: str) -> bool:
    return locale == "ko-KR"


def _decorate(rationale: str, locale: str, product: Optional[str], style_guide: Optional[str]) -> str:
    """Append style-guide and product-tone notes."""
    if style_guide:
        if _korean(locale):
            rationale += f' 스타일 가이드 "{style_guide}"를 적용했습니다.'
        else:
            rationale += f' Applied style guide: "{style_guide}".'
    if product:
        name = PRODUCT_NAMES.get(product.lower(), product)
        if _korean(locale):
            rationale += f" {name} 제품의 톤앤매너를 고려했습니다."
        else:
            rationale += f" Considered {name} product tone and manner."
    return rationale


def templated_suggestion(text: str, locale: str) -> str:
    marker = IMPROVEMENT_MARKERS.get(locale, IMPROVEMENT_MARKERS["en-US"])
    return f"{text.strip()} {marker}"


def suggest(text: str, resources: List[Resource], locale: str, product: Optional[str] = None,
            style_guide: Optional[str] = None, use_ai: bool = False, generator: Any = None) -> Suggestion:
    """Suggest wording for one string.

    ``generator`` is any object with ``generate(text, locale, product, style_guide, examples)``
    raising SuggestionProviderError on failure (see OllamaSuggestionAgent).
    """
    original = (text or "").strip()
    if not original:
        raise ValueError("text is required")

    candidates = filter_resources(resources, product=product, locale=locale)

    exact = find_exact_match(original, candidates, locale)
    if exact:
        if _korean(locale):
            rationale = f'이미 등록된 리소스입니다: "{exact.resource.key}"'
        else:
            rationale = f'Already registered as resource "{exact.resource.key}".'
        result = Suggestion(
            original=original,
            suggestion=exact.matched_text,
            rationale=rationale,
            confidence=CONFIDENCE_EXACT,
            source="exact",
            matched_key=exact.resource.key,
        )
        logger.log_suggestion(result.source, result.confidence, result.degraded)
        return result

    fuzzy = find_fuzzy_match(original, candidates, locale)
    if fuzzy:
        suggestion_text = fuzzy.matched_text
        if _korean(locale):
            rationale = f'기존 리소스에서 유사한 표현을 찾았습니다: "{fuzzy.resource.key}"'
        else:
            rationale = f'Found similar expression in existing resources: "{fuzzy.resource.key}"'

        # The requested product's own wording overrides the generic text
        variant = variant_for_product(product)
        variant_text = (fuzzy.resource.product_specific.get(variant) or {}).get(locale) if variant else None
        if variant_text:
            suggestion_text = variant_text
            if _korean(locale):
                rationale += f" {VARIANT_NAMES[variant]} 전용 표현으로 개선했습니다."
            else:
                rationale += f" Improved with {VARIANT_NAMES[variant]} specific expression."

        result = Suggestion(
            original=original,
            suggestion=suggestion_text,
            rationale=_decorate(rationale, locale, product, style_guide),
            confidence=CONFIDENCE_FUZZY,
            source="fuzzy",
            matched_key=fuzzy.resource.key,
        )
        logger.log_suggestion(result.source, result.confidence, result.degraded)
        return result

    degraded = False
    if use_ai:
        if generator is None:
            degraded = True
            logger.warning("AI suggestion requested but no generator is configured")
        else:
            try:
                generated = generator.generate(
                    original, locale, product=product, style_guide=style_guide,
                    examples=[r.text_for(locale) for r in candidates if r.text_for(locale)][:5],
                )
            except SuggestionProviderError as e:
                degraded = True
                logger.warning(f"AI suggestion degraded to template: {e}")
            else:
                if _korean(locale):
                    rationale = "AI 모델이 더 명확한 표현을 제안했습니다."
                else:
                    rationale = "Generated by the language model for clarity and consistency."
                result = Suggestion(
                    original=original,
                    suggestion=generated,
                    rationale=_decorate(rationale, locale, product, style_guide),
                    confidence=CONFIDENCE_AI,
                    source="ai",
                )
                logger.log_suggestion(result.source, result.confidence, result.degraded)
                return result

    if _korean(locale):
        rationale = "더 명확하고 일관된 표현으로 개선했습니다."
    else:
        rationale = "Improved for clarity and consistency."
    if degraded:
        rationale += " (AI suggestion unavailable)"

    result = Suggestion(
        original=original,
        suggestion=templated_suggestion(original, locale),
        rationale=_decorate(rationale, locale, product, style_guide),
        confidence=CONFIDENCE_TEMPLATE,
        source="template",
        degraded=degraded,
    )
    logger.log_suggestion(result.source, result.confidence, result.degraded)
    return result


def suggest_selection(selection: Any, resources: List[Resource], locale: str, product: Optional[str] = None,
                      style_guide: Optional[str] = None, use_ai: bool = False,
                      generator: Any = None) -> List[FigmaSuggestion]:
    """Suggestions for every text node in a design-tool selection that is not already registered."""
    items: List[FigmaSuggestion] = []

    for unit in iter_text_units(selection):
        result = suggest(unit.text, resources, locale, product=product, style_guide=style_guide,
                         use_ai=use_ai, generator=generator)

        if result.source == "fuzzy":
            items.append(FigmaSuggestion(
                id=f"{unit.node_id}-resource",
                node_id=unit.node_id,
                type="resource",
                title="Use registered resource",
                description=f'"{unit.text}" is close to resource "{result.matched_key}"',
                priority="medium",
                before=unit.text,
                after=result.suggestion,
                confidence=result.confidence,
                rationale=result.rationale,
            ))
        elif result.source != "exact":
            items.append(FigmaSuggestion(
                id=f"{unit.node_id}-unregistered",
                node_id=unit.node_id,
                type="unregistered",
                title="Text not registered",
                description=f'"{unit.text}" is not a registered language resource',
                priority="high",
                before=unit.text,
                after=result.suggestion,
                confidence=result.confidence,
                rationale=result.rationale,
            ))

        if len(unit.text) < MIN_TEXT_LENGTH:
            items.append(FigmaSuggestion(
                id=f"{unit.node_id}-short",
                node_id=unit.node_id,
                type="short",
                title="Text too short",
                description=f'"{unit.text}" is shorter than {MIN_TEXT_LENGTH} characters',
                priority="low",
                before=unit.text,
                after=None,
                confidence=result.confidence,
                rationale="Short labels are hard to translate consistently.",
            ))

    return items
