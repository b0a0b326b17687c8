"""
HTTP surface of the language resource service.
Every route except /health requires the x-secret header (see auth.py).
"""

from fastapi import APIRouter, FastAPI, HTTPException, Depends, Query
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import logging
from datetime import datetime

from .auth import require_secret
from .schemas import (
    ResourceCreateRequest,
    ResourceUpdateRequest,
    AuditRequest,
    RepositoryAuditRequest,
    SuggestRequest,
    HealthResponse,
    ErrorResponse,
)
from ..core import dao
from ..core.dao import (
    ResourceValidationError,
    ResourceNotFoundError,
    ResourceConflictError,
    StoreUnavailableError,
)
from ..core.audit import audit_document, audit_texts, audit_repository
from ..core.suggest import suggest, suggest_selection
from ..core.search_service import search_resources
from ..core.db import health_check
from ..core.config import VERSION, CORS_ORIGINS, debug_enabled, is_ai_suggest_enabled, validate_config
from ..agents.ollama_agent import OllamaSuggestionAgent, check_ollama_health
from util.logging import logger, audit_event

# Initialize the FastAPI application
app = FastAPI(
    title="Language Resource Manager API",
    version=VERSION,
    description="Localized UI string store with matching, audit and suggestion services",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)

# Add CORS middleware to allow the web UI and the design-tool plugin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "x-secret"],
)

router = APIRouter(dependencies=[Depends(require_secret)])

_suggestion_agent = None


def get_suggestion_agent() -> Optional[OllamaSuggestionAgent]:
    """Lazy initialization of the Ollama agent; None while AI suggestions are disabled."""
    global _suggestion_agent
    if not is_ai_suggest_enabled():
        return None
    if _suggestion_agent is None:
        _suggestion_agent = OllamaSuggestionAgent()
    return _suggestion_agent


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint():
    """Check system health."""
    db_health = health_check()
    resource_count = dao.get_resource_count() if db_health else 0

    if is_ai_suggest_enabled():
        ollama = check_ollama_health()
    else:
        ollama = {"status": "not_configured", "message": "AI suggestions disabled"}

    issues = validate_config()
    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        timestamp=datetime.now(),
        db_health=db_health,
        resource_count=resource_count,
        checks={
            "database": {
                "status": "connected" if db_health else "error",
                "message": f"Database operational, {resource_count} resources" if db_health else "Database unavailable",
            },
            "ollama": ollama,
            "environment": {
                "status": "configured" if not issues else "incomplete",
                "issues": issues,
            },
        }
    )


# Search is defined BEFORE /resources/{resource_id} to avoid path parameter conflict
@router.get("/resources/search")
def search_resources_endpoint(query: str = "", locale: str = "ko-KR", product: Optional[str] = None,
                              category: Optional[str] = None, limit: Optional[int] = Query(None, ge=1)):
    """Search language resources by query with optional product and category filters."""
    return search_resources(dao.list_resources(), query, locale=locale, product=product,
                            category=category, limit=limit)


@router.get("/resources")
def list_resources_endpoint(locale: str = "ko-KR", product: Optional[str] = None,
                            category: Optional[str] = None, limit: Optional[int] = Query(None, ge=1)):
    """List resources, filtered by product and category."""
    return search_resources(dao.list_resources(), "", locale=locale, product=product,
                            category=category, limit=limit)


@router.post("/resources", status_code=201)
def create_resource_endpoint(request: ResourceCreateRequest):
    """Create a new resource (status defaults to draft)."""
    resource = dao.insert_resource(request.to_wire())
    audit_event("resource.created", {"id": resource.id, "key": resource.key})
    return {
        "success": True,
        "data": resource.to_dict(),
        "message": "Resource created successfully"
    }


@router.get("/resources/{resource_id}")
def get_resource_endpoint(resource_id: int):
    """Get a single resource by id."""
    return {"success": True, "data": dao.get_resource(resource_id).to_dict()}


@router.put("/resources/{resource_id}")
def update_resource_endpoint(resource_id: int, request: ResourceUpdateRequest):
    """Partially update a resource; updatedAt is refreshed."""
    resource = dao.update_resource(resource_id, request.to_wire())
    audit_event("resource.updated", {"id": resource.id, "key": resource.key})
    return {
        "success": True,
        "data": resource.to_dict(),
        "message": "Resource updated successfully"
    }


@router.delete("/resources/{resource_id}")
def delete_resource_endpoint(resource_id: int):
    """Delete a resource."""
    dao.delete_resource(resource_id)
    audit_event("resource.deleted", {"id": resource_id})
    return {"success": True, "message": "Resource deleted successfully"}


@router.post("/audit")
def audit_endpoint(request: AuditRequest):
    """Audit a list of texts, or every text node of a design document, against the resources."""
    resources = dao.list_resources()

    if request.texts is not None:
        result = audit_texts(request.texts, resources, request.locale, product=request.product)
    elif request.document is not None:
        result = audit_document(request.document, resources, request.locale, product=request.product)
    else:
        raise HTTPException(status_code=400, detail="Texts array or document is required")

    return {"success": True, **result.to_dict()}


@router.post("/audit/repository")
def repository_audit_endpoint(request: RepositoryAuditRequest):
    """Audit the resource repository for missing translations and inconsistencies."""
    audit = audit_repository(dao.list_resources(), product=request.product)
    return {
        "success": True,
        "timestamp": datetime.now().isoformat(),
        **audit.to_dict()
    }


@router.post("/suggest")
def suggest_endpoint(request: SuggestRequest):
    """Suggest wording for one text, or for every text node of a selection."""
    resources = dao.list_resources()
    generator = get_suggestion_agent() if request.use_ai else None

    if request.selection is not None:
        items = suggest_selection(
            request.selection, resources, request.locale, product=request.product,
            style_guide=request.style_guide, use_ai=request.use_ai, generator=generator
        )
        return {"success": True, "suggestions": [item.to_dict() for item in items]}

    if not request.text or not request.text.strip():
        raise HTTPException(status_code=400, detail="Text and locale are required")

    result = suggest(
        request.text, resources, request.locale, product=request.product,
        style_guide=request.style_guide, use_ai=request.use_ai, generator=generator
    )
    return {"success": True, **result.to_dict()}


app.include_router(router)


def _error(status_code: int, detail: str, field: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=detail, field=field).model_dump(exclude_none=True),
    )


@app.exception_handler(ResourceValidationError)
async def validation_exception_handler(request, exc):
    return _error(400, exc.message, exc.field)


@app.exception_handler(ResourceNotFoundError)
async def not_found_exception_handler(request, exc):
    return _error(404, "Resource not found")


@app.exception_handler(ResourceConflictError)
async def conflict_exception_handler(request, exc):
    return _error(409, "Resource with this key already exists")


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_exception_handler(request, exc):
    logger.error(f"Store unavailable: {exc}")
    return _error(503, "Resource store unavailable")


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logging.error(f"Unhandled exception: {exc}")
    content = {"detail": "Internal server error"}
    if debug_enabled():
        content["debug"] = str(exc)
    status_code = 500
    return JSONResponse(
        status_code=status_code,
        content=content,
    )
