"""
Runtime configuration for the language resource service.
All settings come from environment variables (optionally loaded from .env).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/resources.db")

# Debug flag exposes /docs and error details
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Shared secret for the x-secret header (unset = open, development only)
SECRET_PASSWORD = os.getenv("SECRET_PASSWORD")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:3001,http://127.0.0.1:3001",
    ).split(",")
    if origin.strip()
]

# Generative suggestion collaborator (Ollama)
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3.2:latest")
AI_SUGGEST_ENABLED = os.getenv("AI_SUGGEST_ENABLED", "false").lower() == "true"
AI_TIMEOUT_SEC = float(os.getenv("AI_TIMEOUT_SEC", "10"))

# Matching precedence: product-specific text before generic text inside one resource
PRODUCT_VARIANT_FIRST = os.getenv("PRODUCT_VARIANT_FIRST", "false").lower() == "true"

# Search paging
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "100"))
SEARCH_MAX_LIMIT = 500

# Closed vocabularies
LOCALES = ("ko-KR", "en-US", "zh-CN", "ja-JP", "vi-VN")
PRODUCTS = ("knox", "brity")
PRODUCT_VARIANTS = {"knox": "knoxTeams", "brity": "brityMessenger"}
STATUSES = ("approved", "draft", "review")

VERSION = "1.0.0"


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def get_secret_password():
    """Shared secret, read at call time so it can be rotated without restart."""
    return os.getenv("SECRET_PASSWORD") or None


def is_ai_suggest_enabled():
    """Check if the generative suggestion collaborator may be called."""
    return os.getenv("AI_SUGGEST_ENABLED", str(AI_SUGGEST_ENABLED)).lower() == "true"


def is_product_variant_first():
    """Get matcher precedence flag."""
    return os.getenv("PRODUCT_VARIANT_FIRST", str(PRODUCT_VARIANT_FIRST)).lower() == "true"


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if not get_secret_password():
        issues.append("SECRET_PASSWORD not set - API is open (development mode)")

    if AI_TIMEOUT_SEC <= 0:
        issues.append("AI_TIMEOUT_SEC must be > 0")

    if SEARCH_DEFAULT_LIMIT < 1 or SEARCH_DEFAULT_LIMIT > SEARCH_MAX_LIMIT:
        issues.append(f"SEARCH_DEFAULT_LIMIT must be between 1 and {SEARCH_MAX_LIMIT}")

    if not OLLAMA_URL:
        issues.append("OLLAMA_URL not set - AI suggestions unavailable")

    return issues
