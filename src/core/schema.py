"""
Resource records and the transient result records of the matching/audit core.
Wire form (to_dict/from_dict) follows the resources.json layout: camelCase keys,
`common` nested under `category`.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class ResourceCategory:
    section1: Optional[str] = None
    section2: Optional[str] = None
    artboard: Optional[str] = None
    component: Optional[str] = None

    def values(self) -> List[str]:
        return [v for v in (self.section1, self.section2, self.artboard, self.component) if v]


@dataclass
class ResourceMetadata:
    created_at: date
    updated_at: date
    author: str


@dataclass
class Resource:
    id: int
    key: str
    products: List[str]
    common: bool
    category: ResourceCategory
    translations: Dict[str, str]
    product_specific: Dict[str, Dict[str, str]]
    status: str
    metadata: ResourceMetadata
    notes: Optional[str] = None

    def text_for(self, locale: str) -> str:
        """Generic translation for a locale, empty string when absent."""
        return self.translations.get(locale) or ""

    def variant_texts(self, locale: str) -> List[tuple]:
        """(variant, text) pairs for a locale in stored order, blanks skipped."""
        pairs = []
        for variant, texts in self.product_specific.items():
            text = (texts or {}).get(locale)
            if text:
                pairs.append((variant, text))
        return pairs

    def all_texts(self) -> List[str]:
        texts = [t for t in self.translations.values() if t]
        for variant_texts in self.product_specific.values():
            texts.extend(t for t in (variant_texts or {}).values() if t)
        return texts

    def to_dict(self) -> Dict[str, Any]:
        category = {"common": self.common}
        for name in ("section1", "section2", "artboard", "component"):
            value = getattr(self.category, name)
            if value is not None:
                category[name] = value

        data = {
            "id": self.id,
            "key": self.key,
            "products": list(self.products),
            "category": category,
            "translations": dict(self.translations),
            "status": self.status,
            "metadata": {
                "createdAt": self.metadata.created_at.isoformat(),
                "updatedAt": self.metadata.updated_at.isoformat(),
                "author": self.metadata.author,
            },
        }
        if self.product_specific:
            data["productSpecific"] = {k: dict(v) for k, v in self.product_specific.items()}
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Resource":
        """Build from the wire form. Missing locales and productSpecific are tolerated."""
        category = dict(data.get("category") or {})
        metadata = data.get("metadata") or {}
        today = date.today()

        return cls(
            id=int(data["id"]) if data.get("id") is not None else 0,
            key=data.get("key") or "",
            products=list(data.get("products") or []),
            common=bool(category.pop("common", data.get("common", False))),
            category=ResourceCategory(
                section1=category.get("section1"),
                section2=category.get("section2"),
                artboard=category.get("artboard"),
                component=category.get("component"),
            ),
            translations={k: v for k, v in (data.get("translations") or {}).items() if v is not None},
            product_specific={
                variant: {k: v for k, v in (texts or {}).items() if v is not None}
                for variant, texts in (data.get("productSpecific") or {}).items()
            },
            status=data.get("status") or "draft",
            metadata=ResourceMetadata(
                created_at=_parse_date(metadata.get("createdAt"), today),
                updated_at=_parse_date(metadata.get("updatedAt"), today),
                author=metadata.get("author") or "",
            ),
            notes=data.get("notes"),
        )


def _parse_date(value, default: date) -> date:
    if isinstance(value, date):
        return value
    if not value:
        return default
    # Accept full ISO timestamps as well as plain dates
    return date.fromisoformat(str(value)[:10])


class MatchKind(str, Enum):
    EXACT = "exact"
    PRODUCT_SPECIFIC = "productSpecific"
    FUZZY = "fuzzy"


@dataclass
class MatchResult:
    """One match of an input string against a resource. No match is None."""
    kind: MatchKind
    input: str
    matched_text: str
    resource: Resource
    variant: Optional[str] = None

    @property
    def is_exact(self) -> bool:
        return self.kind in (MatchKind.EXACT, MatchKind.PRODUCT_SPECIFIC)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input": self.input,
            "resource": self.resource.to_dict(),
            "matchedText": self.matched_text,
            "match": self.kind.value,
        }


@dataclass
class TextUnit:
    node_id: str
    name: str
    text: str
    location: str


@dataclass
class AuditIssue:
    id: str
    node_id: str
    type: str  # missing_resource, similar_resource, text_too_short
    priority: str  # high, medium, low
    title: str
    description: str
    location: str
    recommendation: str
    text: str
    matched_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nodeId": self.node_id,
            "type": self.type,
            "priority": self.priority,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "recommendation": self.recommendation,
            "text": self.text,
            "matchedKey": self.matched_key,
        }


@dataclass
class AuditReport:
    issues: List[AuditIssue]
    total_texts: int
    matched_texts: int
    coverage: int
    overall_score: int

    def count(self, priority: str) -> int:
        return sum(1 for issue in self.issues if issue.priority == priority)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [issue.to_dict() for issue in self.issues],
            "stats": {
                "totalTexts": self.total_texts,
                "matchedTexts": self.matched_texts,
                "issuesFound": len(self.issues),
                "coverage": self.coverage,
            },
            "summary": {
                "overallScore": self.overall_score,
                "highPriority": self.count("high"),
                "mediumPriority": self.count("medium"),
                "lowPriority": self.count("low"),
            },
        }


@dataclass
class TextAuditResult:
    matched: List[MatchResult]
    missing: List[str]
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matched": [m.to_dict() for m in self.matched],
            "missing": list(self.missing),
            "stats": {
                "total": self.total,
                "matched": len(self.matched),
                "missing": len(self.missing),
            },
        }


@dataclass
class RepositoryAudit:
    total: int
    missing_translations: List[Dict[str, Any]]
    inconsistent_products: List[Dict[str, Any]]
    stats: Dict[str, int]
    health_score: int
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "health_score": self.health_score,
            "summary": {
                "total_resources": self.total,
                "missing_translations_count": len(self.missing_translations),
                "inconsistent_products_count": len(self.inconsistent_products),
            },
            "stats": dict(self.stats),
            "issues": {
                "missing_translations": self.missing_translations,
                "inconsistent_products": self.inconsistent_products,
            },
            "recommendations": list(self.recommendations),
        }


@dataclass
class Suggestion:
    original: str
    suggestion: str
    rationale: str
    confidence: float
    source: str  # exact, fuzzy, ai, template
    degraded: bool = False
    matched_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "suggestion": self.suggestion,
            "rationale": self.rationale,
            "confidence": self.confidence,
            "source": self.source,
            "degraded": self.degraded,
            "matchedKey": self.matched_key,
        }


@dataclass
class FigmaSuggestion:
    id: str
    node_id: str
    type: str
    title: str
    description: str
    priority: str
    before: str
    after: Optional[str]
    confidence: float
    rationale: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nodeId": self.node_id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "before": self.before,
            "after": self.after,
            "confidence": self.confidence,
            "rationale": self.rationale,
        }
