"""Map free-form language tokens onto the canonical code set."""

from __future__ import annotations

from typing import Optional

from .codes import (
    DUBBING_LANGUAGE_CODES,
    LANGUAGE_ALIASES,
    LANGUAGE_LABELS,
    ORIGIN_LANGUAGE,
    UNKNOWN_LANGUAGE,
)

_SUPPORTED_DUBBING_LANGUAGES = frozenset(DUBBING_LANGUAGE_CODES)


def normalize(token: Optional[str]) -> str:
    """Return the canonical code for ``token`` or :data:`UNKNOWN_LANGUAGE`.

    The lookup lower-cases and trims the token (treating ``_`` as ``-``), tries
    the alias table, then falls back to the primary subtag before the first
    ``-``. The primary subtag goes through the alias table once more so that
    ``normalize`` is idempotent for every input.
    """

    if not token:
        return UNKNOWN_LANGUAGE
    cleaned = str(token).strip().lower().replace("_", "-")
    if not cleaned:
        return UNKNOWN_LANGUAGE

    alias = LANGUAGE_ALIASES.get(cleaned)
    if alias is not None:
        return alias

    primary = cleaned.split("-", 1)[0].strip()
    if not primary:
        return UNKNOWN_LANGUAGE
    return LANGUAGE_ALIASES.get(primary, primary)


def is_origin(token: Optional[str]) -> bool:
    return normalize(token) == ORIGIN_LANGUAGE


def is_unknown(token: Optional[str]) -> bool:
    return normalize(token) == UNKNOWN_LANGUAGE


def is_supported_dubbing_language(token: Optional[str]) -> bool:
    """Return True when the remote dubbing service accepts ``token`` as a target."""

    return normalize(token) in _SUPPORTED_DUBBING_LANGUAGES


def display_label(code: Optional[str]) -> str:
    """Return the UI label for a canonical code, upper-casing unknown codes."""

    canonical = normalize(code)
    label = LANGUAGE_LABELS.get(canonical)
    if label:
        return label
    return canonical.upper()


__all__ = [
    "display_label",
    "is_origin",
    "is_supported_dubbing_language",
    "is_unknown",
    "normalize",
]
