"""
Substring search over the resource store.
The normalized query is looked up in a resource's key, every translation,
every product-specific text and the category fields.
"""

from typing import Any, Dict, Iterable, List, Optional

from util.logging import logger
from . import config
from .matcher import filter_resources
from .normalize import normalize, normalize_query
from .schema import Resource


def _searchable_texts(resource: Resource) -> List[str]:
    return [resource.key] + resource.all_texts() + resource.category.values()


def resource_matches_query(resource: Resource, query: str) -> bool:
    """True when the normalized query occurs in any searchable text of the resource."""
    needle = normalize_query(query)
    if not needle:
        return True

    for text in _searchable_texts(resource):
        # Compare against both forms so queries with or without punctuation hit
        if needle in normalize_query(text) or needle in normalize(text):
            return True
    return False


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return config.SEARCH_DEFAULT_LIMIT
    return max(1, min(int(limit), config.SEARCH_MAX_LIMIT))


def search_resources(resources: Iterable[Resource], query: Optional[str] = None, locale: str = "ko-KR",
                     product: Optional[str] = None, category: Optional[str] = None,
                     limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Search resources by query with optional product and category filters.

    Returns the response body of the search endpoint: ``data`` holds at most
    ``limit`` resources in store order, ``total`` counts every match.
    An empty query returns the filtered list.
    """
    query = (query or "").strip()
    candidates = filter_resources(resources, product=product, category=category)

    if query:
        matches = [r for r in candidates if resource_matches_query(r, query)]
    else:
        matches = candidates

    page = matches[:clamp_limit(limit)]
    logger.log_search(query, {"locale": locale, "product": product, "category": category}, len(matches))

    return {
        "success": True,
        "data": [r.to_dict() for r in page],
        "total": len(matches),
        "query": {
            "query": query,
            "locale": locale,
            "product": product,
            "category": category,
        },
    }
