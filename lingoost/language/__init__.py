"""Language code tables and normalization helpers."""

from .codes import (
    DUBBING_LANGUAGE_CODES,
    LANGUAGE_ALIASES,
    LANGUAGE_LABELS,
    ORIGIN_LANGUAGE,
    UNKNOWN_LANGUAGE,
)
from .normalizer import (
    display_label,
    is_origin,
    is_supported_dubbing_language,
    is_unknown,
    normalize,
)

__all__ = [
    "DUBBING_LANGUAGE_CODES",
    "LANGUAGE_ALIASES",
    "LANGUAGE_LABELS",
    "ORIGIN_LANGUAGE",
    "UNKNOWN_LANGUAGE",
    "display_label",
    "is_origin",
    "is_supported_dubbing_language",
    "is_unknown",
    "normalize",
]
