"""
Ollama-backed text generation for resource suggestions.
Every call is time-bounded by AI_TIMEOUT_SEC; failures surface as
SuggestionProviderError so callers can degrade to templated output.
"""

import ollama
from typing import List, Dict, Any, Optional
from datetime import datetime

from ..core import config
from util.logging import logger


LOCALE_NAMES = {
    "ko-KR": "Korean",
    "en-US": "English",
    "zh-CN": "Simplified Chinese",
    "ja-JP": "Japanese",
    "vi-VN": "Vietnamese",
}


class SuggestionProviderError(RuntimeError):
    """Generative model unavailable, timed out, or returned nothing usable."""
    pass


class OllamaSuggestionAgent:
    """
    Asks a local Ollama model for a clearer wording of a UI string.
    The model only sees the input text, a few registered resource texts for
    tone, and optional product/style guidance.
    """

    def __init__(self, model_name: Optional[str] = None, host: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.model_name = model_name or config.OLLAMA_MODEL
        self.host = host or config.OLLAMA_URL
        self.timeout = timeout if timeout is not None else config.AI_TIMEOUT_SEC
        self._client = None

    @property
    def client(self) -> ollama.Client:
        if self._client is None:
            self._client = ollama.Client(host=self.host, timeout=self.timeout)
        return self._client

    def generate(self, text: str, locale: str, product: Optional[str] = None,
                 style_guide: Optional[str] = None, examples: Optional[List[str]] = None) -> str:
        """Return one improved wording of ``text``. Raises SuggestionProviderError."""
        messages = self._build_messages(text, locale, product, style_guide, examples or [])
        start_time = datetime.now()

        try:
            response = self.client.chat(
                model=self.model_name,
                messages=messages,
                options={
                    'temperature': 0.3,  # wording, not creativity
                    'top_p': 0.9
                }
            )
        except ollama.ResponseError as e:
            logger.log_external_failure("ollama", f"model error: {e}")
            raise SuggestionProviderError(f"Ollama model error: {e}") from e
        except Exception as e:
            logger.log_external_failure("ollama", str(e))
            raise SuggestionProviderError(f"Ollama unavailable: {e}") from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        content = _clean_output(response.get('message', {}).get('content', ''))

        if not content:
            logger.log_external_failure("ollama", "empty response")
            raise SuggestionProviderError("Ollama returned an empty suggestion")

        logger.log_operation("ollama.generate", "success", {
            "model": self.model_name,
            "processing_time_ms": processing_time,
            "response_length": len(content)
        })
        return content

    def _build_messages(self, text: str, locale: str, product: Optional[str],
                        style_guide: Optional[str], examples: List[str]) -> List[Dict[str, str]]:
        language = LOCALE_NAMES.get(locale, locale)
        system = (
            f"You edit short {language} UI strings for a software product. "
            "Reply with the improved string only, without quotes or explanation."
        )
        if product:
            system += f" The product is {product.capitalize()}; match its tone."
        if style_guide:
            system += f" Follow this style guide: {style_guide}"

        messages = [{'role': 'system', 'content': system}]

        # A few registered strings show the expected tone
        if examples:
            sample = "\n".join(f"- {example}" for example in examples[:5])
            messages.append({'role': 'system', 'content': f"Registered strings:\n{sample}"})

        messages.append({'role': 'user', 'content': text})
        return messages


def _clean_output(content: str) -> str:
    content = (content or "").strip()
    if not content:
        return ""
    # Models sometimes echo the answer in quotes
    return content.splitlines()[0].strip().strip("\"'“”").strip()


def check_ollama_health(host: Optional[str] = None) -> Dict[str, Any]:
    """
    Check Ollama service connectivity for /health.
    Never raises; reports status and model count.
    """
    try:
        client = ollama.Client(host=host or config.OLLAMA_URL, timeout=config.AI_TIMEOUT_SEC)
        models = client.list()
        count = len(models.get('models', []))
        return {"status": "connected", "message": f"Ollama running, {count} models available"}
    except Exception as e:
        return {"status": "error", "message": str(e)}
