"""Platform capability detection computed once per playback session."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

_IOS_PATTERN = re.compile(r"iPad|iPhone|iPod")
_SAFARI_PATTERN = re.compile(r"^((?!chrome|android).)*safari", re.IGNORECASE)
_WEBVIEW_PATTERN = re.compile(r"WebView|\bwv\b")
_HANDHELD_IOS_PATTERN = re.compile(r"iPhone|iPod")

_TRUTHY = {"1", "true", "yes", "on", "probably", "maybe"}


def _hint(hints: Mapping[str, Any], *names: str) -> Optional[bool]:
    for name in names:
        if name not in hints:
            continue
        value = hints[name]
        if value is None:
            continue
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        return str(value).strip().lower() in _TRUTHY
    return None


@dataclass(frozen=True)
class PlatformCapabilities:
    """What the viewer's runtime can do, as reported at session creation."""

    is_ios: bool = False
    is_safari: bool = False
    is_embedded_webview: bool = False
    native_hls: bool = False
    media_source_extensions: bool = True

    @property
    def prefers_native(self) -> bool:
        # Native HLS inside an embedded webview is unreliable for adaptive audio tracks.
        return self.native_hls and not self.is_embedded_webview

    @property
    def supports_fallback(self) -> bool:
        return self.media_source_extensions

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_client(
        cls,
        user_agent: Optional[str],
        hints: Optional[Mapping[str, Any]] = None,
    ) -> "PlatformCapabilities":
        """Derive capabilities from a user-agent string plus explicit client hints.

        Recognised hints: ``native_hls`` (``canPlayType`` result), ``media_source``,
        ``webkit_message_handlers``, ``react_native_webview`` and ``standalone``.
        Hints win over anything inferred from the user agent.
        """

        agent = user_agent or ""
        hints = hints or {}

        is_ios = bool(_IOS_PATTERN.search(agent))
        is_safari = bool(_SAFARI_PATTERN.search(agent))

        is_webview = bool(_WEBVIEW_PATTERN.search(agent))
        for name in ("webkit_message_handlers", "react_native_webview", "standalone"):
            if _hint(hints, name):
                is_webview = True
        explicit_webview = _hint(hints, "embedded_webview", "is_embedded_webview")
        if explicit_webview is not None:
            is_webview = explicit_webview

        native_hls = _hint(hints, "native_hls", "can_play_hls")
        if native_hls is None:
            native_hls = is_ios or is_safari

        media_source = _hint(hints, "media_source", "media_source_extensions", "mse")
        if media_source is None:
            media_source = not _HANDHELD_IOS_PATTERN.search(agent)

        return cls(
            is_ios=is_ios,
            is_safari=is_safari,
            is_embedded_webview=is_webview,
            native_hls=native_hls,
            media_source_extensions=media_source,
        )


__all__ = ["PlatformCapabilities"]
