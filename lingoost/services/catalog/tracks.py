"""Track descriptors exposed to viewers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class SourceKind(str, Enum):
    """Where a track descriptor came from, in merge priority order."""

    ORIGIN = "origin"
    DATABASE_DUB = "database_dub"
    MANIFEST_DETECTED = "manifest_detected"
    FALLBACK_PLACEHOLDER = "fallback_placeholder"


@dataclass(frozen=True)
class TrackDescriptor:
    """A selectable language option for one content section."""

    canonical_language: str
    display_label: str
    source_kind: SourceKind
    playable_location: str = ""

    @property
    def is_playable(self) -> bool:
        return bool(self.playable_location)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.canonical_language,
            "label": self.display_label,
            "source": self.source_kind.value,
            "location": self.playable_location,
            "playable": self.is_playable,
        }


__all__ = ["SourceKind", "TrackDescriptor"]
