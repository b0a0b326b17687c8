"""
Shared fixtures: every test runs against its own temporary SQLite file.
"""

import os
import tempfile
from datetime import date

import pytest

# Point the store at a throwaway database before any src module is imported
os.environ['DB_PATH'] = tempfile.mkstemp(suffix='.db')[1]
os.environ.pop('SECRET_PASSWORD', None)
os.environ['AI_SUGGEST_ENABLED'] = 'false'

from src.core import config
from src.core.db import init_db
from src.core.dao import resource_cache
from src.core.schema import Resource, ResourceCategory, ResourceMetadata


@pytest.fixture(autouse=True)
def temp_store(tmp_path, monkeypatch):
    """Fresh empty resource table and cache for each test."""
    db_path = str(tmp_path / "resources.db")
    monkeypatch.setattr(config, "DB_PATH", db_path)
    monkeypatch.delenv("SECRET_PASSWORD", raising=False)
    monkeypatch.setenv("AI_SUGGEST_ENABLED", "false")
    monkeypatch.setenv("PRODUCT_VARIANT_FIRST", "false")
    init_db()
    resource_cache.invalidate()
    yield db_path
    resource_cache.invalidate()


@pytest.fixture
def make_resource():
    """Factory for in-memory resources with sensible defaults."""
    counter = {"id": 0}

    def _make(ko, en=None, key=None, products=("knox",), common=False, status="approved",
              author="tester", product_specific=None, section1=None, component=None, **translations):
        counter["id"] += 1
        texts = {"ko-KR": ko}
        if en is not None:
            texts["en-US"] = en
        texts.update({k.replace("_", "-"): v for k, v in translations.items()})
        return Resource(
            id=counter["id"],
            key=key or f"test.key{counter['id']}",
            products=list(products),
            common=common,
            category=ResourceCategory(section1=section1, component=component),
            translations=texts,
            product_specific=dict(product_specific or {}),
            status=status,
            metadata=ResourceMetadata(created_at=date(2024, 1, 1), updated_at=date(2024, 1, 1), author=author),
        )

    return _make


@pytest.fixture
def resource_payload():
    """Wire-form body accepted by insert_resource and POST /resources."""
    return {
        "key": "common.login",
        "products": ["knox"],
        "category": {"section1": "Auth", "component": "Button"},
        "translations": {"ko-KR": "로그인", "en-US": "Log in"},
        "productSpecific": {"knoxTeams": {"ko-KR": "Knox 로그인"}},
        "metadata": {"author": "kim"},
    }
