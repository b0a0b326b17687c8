"""
Audit engine: document audits (design-tool node trees), flat text-list audits
and repository-wide health audits.

Scores are intentionally simple heuristics:
  document: overallScore = max(0, 100 - 5 * issues), coverage = exact matches / texts
  repository: 100 - 50*missing_en - 30*inconsistent - 10*draft - 10*review (ratios)
"""

import math
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from util.logging import logger
from .matcher import filter_resources, find_exact_match, find_fuzzy_match, find_match
from .schema import AuditIssue, AuditReport, RepositoryAudit, Resource, TextAuditResult, TextUnit

ISSUE_PENALTY = 5
MIN_TEXT_LENGTH = 2
LOCATION_SEPARATOR = " > "


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _pages(document: Any) -> List[Mapping[str, Any]]:
    """Accept a document with pages, a single node, or a list of nodes."""
    if isinstance(document, Mapping):
        if "pages" in document:
            return list(document.get("pages") or [])
        return [{"name": "", "children": [document]}]
    if isinstance(document, (list, tuple)):
        return [{"name": "", "children": list(document)}]
    return []


def iter_text_units(document: Any) -> Iterator[TextUnit]:
    """Depth-first, children in array order. Yields TEXT nodes with non-empty text.

    The tree is read, never mutated.
    """
    for page in _pages(document):
        if not isinstance(page, Mapping):
            continue
        page_path = (str(page.get("name")),) if page.get("name") else ()
        stack = [(child, page_path) for child in reversed(list(page.get("children") or []))]

        while stack:
            node, path = stack.pop()
            if not isinstance(node, Mapping):
                continue

            name = str(node.get("name") or "")
            node_path = path + (name,) if name else path
            text = node.get("text")

            if node.get("type") == "TEXT" and isinstance(text, str) and text.strip():
                yield TextUnit(
                    node_id=str(node.get("id") or ""),
                    name=name,
                    text=text.strip(),
                    location=LOCATION_SEPARATOR.join(node_path),
                )

            children = node.get("children") or []
            stack.extend((child, node_path) for child in reversed(list(children)))


def _short_text_issue(unit: TextUnit) -> AuditIssue:
    return AuditIssue(
        id=f"{unit.node_id}-short",
        node_id=unit.node_id,
        type="text_too_short",
        priority="low",
        title="Text too short",
        description=f'"{unit.text}" is shorter than {MIN_TEXT_LENGTH} characters',
        location=unit.location,
        recommendation="Check that this text is meaningful or replace it with a registered resource",
        text=unit.text,
    )


def audit_unit(unit: TextUnit, resources: List[Resource], locale: str) -> tuple:
    """Audit one text unit. Returns (matched, issues)."""
    issues = []
    matched = False

    if find_exact_match(unit.text, resources, locale):
        matched = True
    else:
        fuzzy = find_fuzzy_match(unit.text, resources, locale)
        if fuzzy:
            issues.append(AuditIssue(
                id=f"{unit.node_id}-similar",
                node_id=unit.node_id,
                type="similar_resource",
                priority="medium",
                title="Similar resource found",
                description=f'"{unit.text}" is close to registered resource "{fuzzy.resource.key}"',
                location=unit.location,
                recommendation=f'Use the registered text: "{fuzzy.matched_text}"',
                text=unit.text,
                matched_key=fuzzy.resource.key,
            ))
        else:
            issues.append(AuditIssue(
                id=f"{unit.node_id}-missing",
                node_id=unit.node_id,
                type="missing_resource",
                priority="high",
                title="Text not in resources",
                description=f'"{unit.text}" is not registered as a language resource',
                location=unit.location,
                recommendation="Register this text as a new resource or replace it with an existing one",
                text=unit.text,
            ))

    if len(unit.text) < MIN_TEXT_LENGTH:
        issues.append(_short_text_issue(unit))

    return matched, issues


def audit_document(document: Any, resources: List[Resource], locale: str, product: Optional[str] = None) -> AuditReport:
    """Audit every text leaf of a document against the (filtered) resource list."""
    candidates = filter_resources(resources, product=product, locale=locale)

    issues: List[AuditIssue] = []
    total = 0
    matched_count = 0

    for unit in iter_text_units(document):
        total += 1
        matched, unit_issues = audit_unit(unit, candidates, locale)
        if matched:
            matched_count += 1
        issues.extend(unit_issues)

    coverage = round_half_up(matched_count / total * 100) if total else 100
    overall_score = max(0, 100 - len(issues) * ISSUE_PENALTY)

    report = AuditReport(
        issues=issues,
        total_texts=total,
        matched_texts=matched_count,
        coverage=coverage,
        overall_score=overall_score,
    )
    logger.log_audit_run("document", locale, {
        "product": product,
        "total_texts": total,
        "issues": len(issues),
        "coverage": coverage,
        "score": overall_score,
    })
    return report


def audit_texts(texts: Sequence[str], resources: List[Resource], locale: str, product: Optional[str] = None) -> TextAuditResult:
    """Flat list audit: each non-blank input is matched (exact first) or reported missing."""
    candidates = filter_resources(resources, product=product, locale=locale)

    matched = []
    missing = []
    total = 0

    for raw in texts:
        text = (raw or "").strip()
        if not text:
            continue
        total += 1

        result = find_match(text, candidates, locale)
        if result:
            matched.append(result)
        else:
            missing.append(text)

    logger.log_audit_run("texts", locale, {
        "product": product,
        "total": total,
        "matched": len(matched),
        "missing": len(missing),
    })
    return TextAuditResult(matched=matched, missing=missing, total=total)


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def audit_repository(resources: List[Resource], product: Optional[str] = None) -> RepositoryAudit:
    """Repository health: missing English, product/author/Korean inconsistencies, workflow status."""
    if product:
        resources = filter_resources(resources, product=product)

    missing_translations: List[Dict[str, Any]] = []
    inconsistent_products: List[Dict[str, Any]] = []
    inconsistent_ids = set()

    for resource in resources:
        korean = resource.text_for("ko-KR")

        if _is_blank(resource.text_for("en-US")):
            missing_translations.append({
                "id": resource.id,
                "key": resource.key,
                "korean_text": korean,
                "missing_locales": ["en-US"],
            })

        problems = []
        if not resource.products and not resource.common:
            problems.append("No products assigned (Knox, Brity, or common)")
        if _is_blank(korean):
            problems.append("Missing Korean text (main content)")
        if _is_blank(resource.metadata.author):
            problems.append("Missing author information")

        for problem in problems:
            inconsistent_products.append({
                "id": resource.id,
                "key": resource.key,
                "korean_text": korean,
                "issue": problem,
            })
        if problems:
            inconsistent_ids.add(resource.id)

    total = len(resources)
    stats = {
        "total_resources": total,
        "approved": sum(1 for r in resources if r.status == "approved"),
        "draft": sum(1 for r in resources if r.status == "draft"),
        "review": sum(1 for r in resources if r.status == "review"),
        "knox_resources": sum(1 for r in resources if "knox" in r.products),
        "brity_resources": sum(1 for r in resources if "brity" in r.products),
        "common_resources": sum(1 for r in resources if r.common),
        "english_translations": sum(1 for r in resources if not _is_blank(r.text_for("en-US"))),
    }

    if total == 0:
        health_score = 100
    else:
        score = (
            100
            - len(missing_translations) / total * 50
            - len(inconsistent_ids) / total * 30
            - stats["draft"] / total * 10
            - stats["review"] / total * 10
        )
        health_score = round_half_up(max(0.0, score))

    audit = RepositoryAudit(
        total=total,
        missing_translations=missing_translations,
        inconsistent_products=inconsistent_products,
        stats=stats,
        health_score=health_score,
    )
    audit.recommendations = recommendations_for(audit)

    logger.log_audit_run("repository", None, {
        "product": product,
        "total": total,
        "health_score": health_score,
    })
    return audit


def recommendations_for(audit: RepositoryAudit) -> List[str]:
    recommendations = []

    if audit.missing_translations:
        recommendations.append(f"Complete missing translations for {len(audit.missing_translations)} resources")
    if audit.inconsistent_products:
        resource_count = len({issue["id"] for issue in audit.inconsistent_products})
        recommendations.append(f"Fix product assignments for {resource_count} resources")
    if audit.stats.get("draft"):
        recommendations.append(f"Review and approve {audit.stats['draft']} draft resources")
    if audit.stats.get("review"):
        recommendations.append(f"Complete review process for {audit.stats['review']} resources")

    if not recommendations:
        recommendations.append("All resources are in good shape!")
    return recommendations
