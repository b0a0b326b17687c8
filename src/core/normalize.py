"""
Text normalization for resource comparison and search.

Two forms are kept deliberately distinct:

* ``normalize`` - canonical form used for stored text: Unicode NFD->NFC,
  lower-case, whitespace collapsed, a fixed punctuation set removed.
* ``normalize_query`` - same Unicode/case/whitespace steps, punctuation kept.
  Applied to raw search queries before substring tests against stored text.
"""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_PUNCTUATION = re.compile(r"[.,!?;:()\[\]{}\"'`~]")


def normalize_query(text) -> str:
    """Unicode-normalize, lower-case and collapse whitespace. Never fails."""
    if not text or not isinstance(text, str):
        return ""

    text = unicodedata.normalize("NFC", unicodedata.normalize("NFD", text))
    text = text.lower()
    return _WHITESPACE.sub(" ", text).strip()


def normalize(text) -> str:
    """Canonical comparison form: ``normalize_query`` plus punctuation removal.

    >>> normalize("Hello,   World!")
    'hello world'
    """
    text = normalize_query(text)
    if not text:
        return ""

    # Removal can leave "a , b" as "a  b"
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()
