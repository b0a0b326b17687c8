"""
Request and response models for the language resource API.
Field names follow the resources.json wire shape (camelCase aliases).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from ..core.config import LOCALES, PRODUCTS, STATUSES


def _check_locale(v):
    if v not in LOCALES:
        raise ValueError(f'locale must be one of: {list(LOCALES)}')
    return v


def _check_product(v):
    if v is None:
        return v
    v = v.strip().lower()
    if not v:
        return None
    if v not in PRODUCTS:
        raise ValueError(f'product must be one of: {list(PRODUCTS)}')
    return v


class CategoryModel(BaseModel):
    common: Optional[bool] = None
    section1: Optional[str] = None
    section2: Optional[str] = None
    artboard: Optional[str] = None
    component: Optional[str] = None


class MetadataModel(BaseModel):
    author: Optional[str] = None


class ResourceCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = None
    products: List[str] = Field(default_factory=list)
    common: Optional[bool] = None
    category: Optional[CategoryModel] = None
    translations: Dict[str, Optional[str]] = Field(default_factory=dict)
    product_specific: Optional[Dict[str, Dict[str, Optional[str]]]] = Field(None, alias="productSpecific")
    status: Optional[str] = None
    metadata: MetadataModel = Field(default_factory=MetadataModel)
    notes: Optional[str] = None

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        if v is not None and v not in STATUSES:
            raise ValueError(f'status must be one of: {list(STATUSES)}')
        return v

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ResourceUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are merged."""
    model_config = ConfigDict(populate_by_name=True)

    key: Optional[str] = None
    products: Optional[List[str]] = None
    common: Optional[bool] = None
    category: Optional[CategoryModel] = None
    translations: Optional[Dict[str, Optional[str]]] = None
    product_specific: Optional[Dict[str, Dict[str, Optional[str]]]] = Field(None, alias="productSpecific")
    status: Optional[str] = None
    metadata: Optional[MetadataModel] = None
    notes: Optional[str] = None

    @field_validator('key')
    @classmethod
    def key_must_not_be_empty(cls, v):
        if v is not None and not v.strip():
            raise ValueError('key cannot be empty')
        return v

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        if v is not None and v not in STATUSES:
            raise ValueError(f'status must be one of: {list(STATUSES)}')
        return v

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class AuditRequest(BaseModel):
    """Either a list of strings or a design-tool document export."""
    texts: Optional[List[str]] = None
    document: Optional[Any] = None
    locale: str = "ko-KR"
    product: Optional[str] = None

    @field_validator('locale')
    @classmethod
    def locale_must_be_valid(cls, v):
        return _check_locale(v)

    @field_validator('product')
    @classmethod
    def product_must_be_valid(cls, v):
        return _check_product(v)


class RepositoryAuditRequest(BaseModel):
    locale: str = "ko-KR"
    product: Optional[str] = None

    @field_validator('locale')
    @classmethod
    def locale_must_be_valid(cls, v):
        return _check_locale(v)

    @field_validator('product')
    @classmethod
    def product_must_be_valid(cls, v):
        return _check_product(v)


class SuggestRequest(BaseModel):
    """Single text, or a selection of design-tool nodes."""
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    selection: Optional[Any] = None
    locale: str
    product: Optional[str] = None
    style_guide: Optional[str] = Field(None, alias="styleGuide")
    use_ai: bool = Field(False, alias="useAi")

    @field_validator('locale')
    @classmethod
    def locale_must_be_valid(cls, v):
        return _check_locale(v)

    @field_validator('product')
    @classmethod
    def product_must_be_valid(cls, v):
        return _check_product(v)


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
    db_health: bool
    resource_count: int
    checks: Dict[str, Any]


class ErrorResponse(BaseModel):
    detail: str
    field: Optional[str] = None
