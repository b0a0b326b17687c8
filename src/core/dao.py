"""
Resource store: insert, partial update, lookup, delete and bulk import/export
over SQLite, plus an explicit read cache for the matching/audit core.
"""

import json
import sqlite3
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from util.logging import logger
from . import config
from .db import get_db, init_db
from .normalize import normalize
from .schema import Resource, ResourceCategory, ResourceMetadata

# Initialize database on module import
init_db()

CATEGORY_FIELDS = ("section1", "section2", "artboard", "component")


class ResourceValidationError(ValueError):
    """A required field is missing or a value is outside its vocabulary."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class ResourceNotFoundError(LookupError):
    def __init__(self, resource_id):
        super().__init__(f"Resource not found: {resource_id}")
        self.resource_id = resource_id


class ResourceConflictError(ValueError):
    def __init__(self, key: str):
        super().__init__(f"A resource with key '{key}' already exists")
        self.key = key


class StoreUnavailableError(RuntimeError):
    """The backing database could not be read or written."""
    pass


class ResourceCache:
    """In-memory copy of the resource list. Invalidated after every write."""

    def __init__(self):
        self._resources: Optional[List[Resource]] = None

    def load(self) -> List[Resource]:
        if self._resources is None:
            self._resources = _fetch_all()
            logger.info(f"Loaded {len(self._resources)} resources into cache")
        return list(self._resources)

    def invalidate(self) -> None:
        self._resources = None

    @property
    def loaded(self) -> bool:
        return self._resources is not None


resource_cache = ResourceCache()


def _row_to_resource(row: sqlite3.Row) -> Resource:
    return Resource(
        id=row["id"],
        key=row["key"],
        products=json.loads(row["products"] or "[]"),
        common=bool(row["is_common"]),
        category=ResourceCategory(
            section1=row["section1"],
            section2=row["section2"],
            artboard=row["artboard"],
            component=row["component"],
        ),
        translations=json.loads(row["translations"] or "{}"),
        product_specific=json.loads(row["product_specific"] or "{}"),
        status=row["status"],
        metadata=ResourceMetadata(
            created_at=date.fromisoformat(row["created_at"]),
            updated_at=date.fromisoformat(row["updated_at"]),
            author=row["author"] or "",
        ),
        notes=row["notes"],
    )


def _row_values(resource: Resource) -> Dict[str, Any]:
    return {
        "key": resource.key,
        "products": json.dumps(resource.products),
        "is_common": resource.common,
        "section1": resource.category.section1,
        "section2": resource.category.section2,
        "artboard": resource.category.artboard,
        "component": resource.category.component,
        "translations": json.dumps(resource.translations, ensure_ascii=False),
        "product_specific": json.dumps(resource.product_specific, ensure_ascii=False),
        "korean_text_norm": normalize(resource.text_for("ko-KR")),
        "english_text_norm": normalize(resource.text_for("en-US")),
        "status": resource.status,
        "author": resource.metadata.author,
        "notes": resource.notes,
        "created_at": resource.metadata.created_at.isoformat(),
        "updated_at": resource.metadata.updated_at.isoformat(),
    }


def _fetch_all() -> List[Resource]:
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM resources ORDER BY id ASC")
            return [_row_to_resource(row) for row in cursor.fetchall()]
    except sqlite3.Error as e:
        logger.error(f"Failed to load resources: {e}")
        raise StoreUnavailableError(f"Resource store unavailable: {e}") from e


def validate_resource(resource: Resource) -> None:
    """Check resource invariants. Raises ResourceValidationError naming the field."""
    if not resource.text_for("ko-KR").strip():
        raise ResourceValidationError("translations.ko-KR", "Korean text (ko-KR) is required")

    if not resource.metadata.author.strip():
        raise ResourceValidationError("metadata.author", "Author is required")

    unknown = [p for p in resource.products if p not in config.PRODUCTS]
    if unknown:
        raise ResourceValidationError("products", f"Unknown products: {unknown}. Must be one of: {list(config.PRODUCTS)}")

    if not resource.products and not resource.common:
        raise ResourceValidationError("products", "At least one product (Knox, Brity, or common) must be selected")

    unknown = [loc for loc in resource.translations if loc not in config.LOCALES]
    if unknown:
        raise ResourceValidationError("translations", f"Unknown locales: {unknown}")

    valid_variants = set(config.PRODUCT_VARIANTS.values())
    for variant, texts in resource.product_specific.items():
        if variant not in valid_variants:
            raise ResourceValidationError("productSpecific", f"Unknown product variant: {variant}")
        unknown = [loc for loc in texts if loc not in config.LOCALES]
        if unknown:
            raise ResourceValidationError(f"productSpecific.{variant}", f"Unknown locales: {unknown}")

    if resource.status not in config.STATUSES:
        raise ResourceValidationError("status", f"status must be one of: {list(config.STATUSES)}")


def _clean(resource: Resource) -> Resource:
    """Trim texts, drop blank optional fields and duplicate product tags."""
    resource.key = (resource.key or "").strip()
    resource.products = list(dict.fromkeys(p.strip().lower() for p in resource.products if p and p.strip()))
    resource.translations = {
        loc: text.strip() for loc, text in resource.translations.items()
        if text and text.strip()
    }
    resource.product_specific = {
        variant: {loc: text.strip() for loc, text in texts.items() if text and text.strip()}
        for variant, texts in resource.product_specific.items()
    }
    resource.product_specific = {k: v for k, v in resource.product_specific.items() if v}
    for name in CATEGORY_FIELDS:
        value = getattr(resource.category, name)
        setattr(resource.category, name, value.strip() if value and value.strip() else None)
    resource.metadata.author = (resource.metadata.author or "").strip()
    return resource


def _key_taken(conn: sqlite3.Connection, key: str, exclude_id: Optional[int] = None) -> bool:
    cursor = conn.cursor()
    if exclude_id is None:
        cursor.execute("SELECT 1 FROM resources WHERE key = ?", (key,))
    else:
        cursor.execute("SELECT 1 FROM resources WHERE key = ? AND id != ?", (key, exclude_id))
    return cursor.fetchone() is not None


def list_resources() -> List[Resource]:
    """All resources in id order (served from the cache)."""
    return resource_cache.load()


def get_resource(resource_id: int) -> Resource:
    for resource in resource_cache.load():
        if resource.id == resource_id:
            return resource
    raise ResourceNotFoundError(resource_id)


def get_resource_count() -> int:
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM resources")
            return cursor.fetchone()[0]
    except sqlite3.Error as e:
        logger.error(f"Failed to count resources: {e}")
        return 0


def insert_resource(fields: Dict[str, Any]) -> Resource:
    """Validate and insert a resource given in wire form. Assigns id, dates, draft status."""
    today = date.today()
    data = dict(fields)
    data.pop("id", None)
    metadata = dict(data.get("metadata") or {})
    metadata["createdAt"] = today
    metadata["updatedAt"] = today
    data["metadata"] = metadata
    data["status"] = data.get("status") or "draft"

    resource = _clean(Resource.from_dict(data))
    try:
        validate_resource(resource)
    except ResourceValidationError as e:
        logger.log_validation_error("insert_resource", [{"field": e.field, "message": e.message}], data)
        raise

    resource = _insert(resource, explicit_id=None)
    logger.log_resource_operation("insert", resource.id, resource.key)
    return resource


def _insert(resource: Resource, explicit_id: Optional[int]) -> Resource:
    try:
        with get_db() as conn:
            if resource.key and _key_taken(conn, resource.key):
                raise ResourceConflictError(resource.key)

            values = _row_values(resource)
            if explicit_id is not None:
                values["id"] = explicit_id
            columns = ", ".join(values)
            placeholders = ", ".join("?" for _ in values)

            cursor = conn.cursor()
            cursor.execute(f"INSERT INTO resources ({columns}) VALUES ({placeholders})", tuple(values.values()))
            resource.id = cursor.lastrowid

            # Key is optional on insert; fall back to a stable generated one
            if not resource.key:
                resource.key = f"resource.{resource.id}"
                cursor.execute("UPDATE resources SET key = ? WHERE id = ?", (resource.key, resource.id))

            conn.commit()
    except sqlite3.IntegrityError as e:
        raise ResourceConflictError(resource.key or str(explicit_id)) from e
    except sqlite3.Error as e:
        logger.error(f"Database error during insert of '{resource.key}': {e}")
        raise StoreUnavailableError(f"Resource store unavailable: {e}") from e
    finally:
        resource_cache.invalidate()

    return resource


def _merge(resource: Resource, updates: Dict[str, Any]) -> Resource:
    if updates.get("key") is not None:
        resource.key = updates["key"]
    if updates.get("products") is not None:
        resource.products = list(updates["products"])
    if updates.get("common") is not None:
        resource.common = bool(updates["common"])

    category = updates.get("category") or {}
    if category.get("common") is not None:
        resource.common = bool(category["common"])
    for name in CATEGORY_FIELDS:
        if name in category:
            setattr(resource.category, name, category[name])

    for locale, text in (updates.get("translations") or {}).items():
        if text is not None:
            resource.translations[locale] = text

    for variant, texts in (updates.get("productSpecific") or {}).items():
        merged = dict(resource.product_specific.get(variant) or {})
        for locale, text in (texts or {}).items():
            if text is not None:
                merged[locale] = text
        resource.product_specific[variant] = merged

    if updates.get("status") is not None:
        resource.status = updates["status"]
    if "notes" in updates:
        resource.notes = updates["notes"]

    metadata = updates.get("metadata") or {}
    if metadata.get("author") is not None:
        resource.metadata.author = metadata["author"]

    return resource


def update_resource(resource_id: int, updates: Dict[str, Any]) -> Resource:
    """Merge provided fields into an existing resource and bump updatedAt."""
    current = get_resource(resource_id)
    # Work on a copy so a rejected update never leaks into the cache
    resource = Resource.from_dict(current.to_dict())

    resource = _clean(_merge(resource, updates))
    resource.metadata.updated_at = date.today()

    try:
        validate_resource(resource)
    except ResourceValidationError as e:
        logger.log_validation_error("update_resource", [{"field": e.field, "message": e.message}], {"key": resource.key})
        raise
    if not resource.key:
        raise ResourceValidationError("key", "key cannot be empty")

    try:
        with get_db() as conn:
            if _key_taken(conn, resource.key, exclude_id=resource_id):
                raise ResourceConflictError(resource.key)

            values = _row_values(resource)
            values.pop("created_at")
            assignments = ", ".join(f"{column} = ?" for column in values)
            cursor = conn.cursor()
            cursor.execute(
                f"UPDATE resources SET {assignments} WHERE id = ?",
                tuple(values.values()) + (resource_id,)
            )
            conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Database error during update of resource {resource_id}: {e}")
        raise StoreUnavailableError(f"Resource store unavailable: {e}") from e
    finally:
        resource_cache.invalidate()

    logger.log_resource_operation("update", resource_id, resource.key, details={"fields": sorted(updates)})
    return resource


def delete_resource(resource_id: int) -> None:
    try:
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
            deleted = cursor.rowcount
            conn.commit()
    except sqlite3.Error as e:
        logger.error(f"Database error during delete of resource {resource_id}: {e}")
        raise StoreUnavailableError(f"Resource store unavailable: {e}") from e
    finally:
        resource_cache.invalidate()

    if not deleted:
        raise ResourceNotFoundError(resource_id)
    logger.log_resource_operation("delete", resource_id, None)


def import_resources(records: List[Dict[str, Any]], replace: bool = False) -> Dict[str, Any]:
    """
    Load resources from the JSON array format (resources.json).

    Numeric ids are preserved; records failing validation are skipped and
    reported rather than aborting the whole import.
    """
    if replace:
        try:
            with get_db() as conn:
                conn.execute("DELETE FROM resources")
                conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Resource store unavailable: {e}") from e
        finally:
            resource_cache.invalidate()

    imported = 0
    skipped = []

    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            skipped.append({"index": index, "key": None, "error": "record is not a JSON object"})
            continue

        try:
            resource = _clean(Resource.from_dict({**record, "id": None}))
            validate_resource(resource)
            explicit_id = _numeric_id(record.get("id"))
            _insert(resource, explicit_id)
            imported += 1
        except (ResourceValidationError, ResourceConflictError, ValueError, TypeError, AttributeError) as e:
            skipped.append({"index": index, "key": record.get("key"), "error": str(e)})

    logger.log_operation("resources.import", "success", {
        "imported": imported,
        "skipped": len(skipped),
        "replace": replace
    })
    return {"imported": imported, "skipped": skipped}


def _numeric_id(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def export_resources() -> List[Dict[str, Any]]:
    return [resource.to_dict() for resource in list_resources()]
