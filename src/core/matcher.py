"""
Matching of arbitrary input strings against stored resources.

Exact: trimmed, case-sensitive equality with a resource's locale text.
Fuzzy: bidirectional case-insensitive substring containment.
Across a list every exact candidate beats every fuzzy candidate; inside
each pass the first resource in list order wins.
"""

from typing import Iterable, List, Optional

from .config import PRODUCT_VARIANTS, is_product_variant_first
from .schema import MatchKind, MatchResult, Resource


def _ordered_texts(resource: Resource, locale: str, variant_first: bool):
    """(variant, text) candidates of one resource; variant None = generic text."""
    generic = [(None, resource.text_for(locale))] if resource.text_for(locale) else []
    variants = resource.variant_texts(locale)
    return variants + generic if variant_first else generic + variants


def _exact_in(text: str, resource: Resource, locale: str, variant_first: bool) -> Optional[MatchResult]:
    for variant, target in _ordered_texts(resource, locale, variant_first):
        if target.strip() == text:
            kind = MatchKind.EXACT if variant is None else MatchKind.PRODUCT_SPECIFIC
            return MatchResult(kind=kind, input=text, matched_text=target, resource=resource, variant=variant)
    return None


def _fuzzy_in(text: str, resource: Resource, locale: str, variant_first: bool) -> Optional[MatchResult]:
    needle = text.lower()
    for variant, target in _ordered_texts(resource, locale, variant_first):
        haystack = target.lower()
        if not haystack.strip():
            continue
        if needle in haystack or haystack in needle:
            return MatchResult(kind=MatchKind.FUZZY, input=text, matched_text=target, resource=resource, variant=variant)
    return None


def classify_match(text: str, resource: Resource, locale: str, variant_first: Optional[bool] = None) -> Optional[MatchResult]:
    """Match one input against one resource: exact, then product-specific exact, then fuzzy."""
    text = (text or "").strip()
    if not text:
        return None
    if variant_first is None:
        variant_first = is_product_variant_first()

    return _exact_in(text, resource, locale, variant_first) or _fuzzy_in(text, resource, locale, variant_first)


def find_exact_match(text: str, resources: Iterable[Resource], locale: str, variant_first: Optional[bool] = None) -> Optional[MatchResult]:
    text = (text or "").strip()
    if not text:
        return None
    if variant_first is None:
        variant_first = is_product_variant_first()

    for resource in resources:
        result = _exact_in(text, resource, locale, variant_first)
        if result:
            return result
    return None


def find_fuzzy_match(text: str, resources: Iterable[Resource], locale: str, variant_first: Optional[bool] = None) -> Optional[MatchResult]:
    text = (text or "").strip()
    if not text:
        return None
    if variant_first is None:
        variant_first = is_product_variant_first()

    for resource in resources:
        result = _fuzzy_in(text, resource, locale, variant_first)
        if result:
            return result
    return None


def find_match(text: str, resources: List[Resource], locale: str, variant_first: Optional[bool] = None) -> Optional[MatchResult]:
    """Best match over a candidate list: full exact pass, then full fuzzy pass."""
    return (
        find_exact_match(text, resources, locale, variant_first)
        or find_fuzzy_match(text, resources, locale, variant_first)
    )


def matches_product(resource: Resource, product: Optional[str]) -> bool:
    if not product:
        return True
    product = product.lower()
    return any(tag.lower() == product for tag in resource.products)


def matches_category(resource: Resource, category: Optional[str]) -> bool:
    """Case-insensitive substring on any category field."""
    if not category:
        return True
    needle = category.lower()
    return any(needle in value.lower() for value in resource.category.values())


def has_locale(resource: Resource, locale: Optional[str]) -> bool:
    if not locale:
        return True
    return bool(resource.text_for(locale).strip()) or any(t.strip() for _, t in resource.variant_texts(locale))


def filter_resources(resources: Iterable[Resource], product: Optional[str] = None,
                     category: Optional[str] = None, locale: Optional[str] = None) -> List[Resource]:
    """Predicate filters applied to the candidate list before matching."""
    return [
        r for r in resources
        if matches_product(r, product) and matches_category(r, category) and has_locale(r, locale)
    ]


def variant_for_product(product: Optional[str]) -> Optional[str]:
    """Product tag -> product-specific variant name (knox -> knoxTeams)."""
    if not product:
        return None
    return PRODUCT_VARIANTS.get(product.lower())
