"""Registry of live playback sessions."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from ... import logging_manager as log_mgr
from ...config_manager.constants import DEFAULT_MANIFEST_RETRY_CEILING
from ..catalog.builder import TrackCatalogBuilder
from ..catalog.locations import master_manifest_location
from ..dubbing.job import DubJob
from ..errors import SessionNotFound
from .capabilities import PlatformCapabilities
from .controller import PlaybackSessionController, SwitchOutcome
from .engines import EngineFactory
from .preferences import LanguagePreferenceStore
from .session import PlaybackSession

logger = log_mgr.get_logger().getChild("services.playback.registry")


class PlaybackSessionRegistry:
    """Open, look up, switch and close playback sessions by id.

    With ``idle_ttl_seconds`` set, a session nobody has touched for that long
    (a viewer who left without closing it, or one stuck in ``Error``) is
    closed and dropped on the next open or lookup.
    """

    def __init__(
        self,
        *,
        engine_factory: EngineFactory,
        catalog_builder: TrackCatalogBuilder,
        preferences: Optional[LanguagePreferenceStore] = None,
        retry_ceiling: int = DEFAULT_MANIFEST_RETRY_CEILING,
        cdn_base_url: Optional[str] = None,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._engine_factory = engine_factory
        self._catalog_builder = catalog_builder
        self._preferences = preferences
        self._retry_ceiling = retry_ceiling
        self._cdn_base_url = cdn_base_url
        self._idle_ttl = idle_ttl_seconds
        self._clock = clock
        self._controllers: Dict[str, PlaybackSessionController] = {}
        self._last_activity: Dict[str, float] = {}
        self._lock = threading.RLock()

    def open_session(
        self,
        section_id: str,
        *,
        user_agent: Optional[str] = None,
        hints: Optional[Mapping[str, Any]] = None,
        viewer_id: Optional[str] = None,
        capabilities: Optional[PlatformCapabilities] = None,
    ) -> PlaybackSession:
        """Create a session for ``section_id`` and run it to ``Ready`` or ``Error``."""

        self.evict_idle()
        session = PlaybackSession(
            session_id=uuid4().hex,
            section_id=section_id,
            viewer_id=viewer_id,
            capabilities=capabilities or PlatformCapabilities.from_client(user_agent, hints),
            manifest_location=master_manifest_location(section_id, self._cdn_base_url),
        )
        controller = PlaybackSessionController(
            session,
            engine_factory=self._engine_factory,
            catalog_builder=self._catalog_builder,
            preferences=self._preferences,
            retry_ceiling=self._retry_ceiling,
        )
        with self._lock:
            self._controllers[session.session_id] = controller
            self._last_activity[session.session_id] = self._clock()
        logger.info(
            "Opening playback session",
            extra={
                "event": "playback.session.open",
                "session_id": session.session_id,
                "section_id": section_id,
            },
        )
        return controller.open()

    def get_controller(self, session_id: str) -> PlaybackSessionController:
        self.evict_idle()
        with self._lock:
            controller = self._controllers.get(session_id)
            if controller is not None:
                self._last_activity[session_id] = self._clock()
        if controller is None:
            raise SessionNotFound(f"Playback session {session_id} not found")
        return controller

    def get_session(self, session_id: str) -> PlaybackSession:
        return self.get_controller(session_id).session

    def switch_language(self, session_id: str, language: str) -> SwitchOutcome:
        return self.get_controller(session_id).request_language(language)

    def close_session(self, session_id: str) -> None:
        with self._lock:
            controller = self._controllers.pop(session_id, None)
            self._last_activity.pop(session_id, None)
        if controller is None:
            raise SessionNotFound(f"Playback session {session_id} not found")
        controller.close()

    def evict_idle(self) -> int:
        """Close sessions idle for longer than the TTL; return how many were closed."""

        if self._idle_ttl is None:
            return 0
        cutoff = self._clock() - self._idle_ttl
        with self._lock:
            expired = [
                session_id
                for session_id, seen in self._last_activity.items()
                if seen <= cutoff
            ]
            controllers = [self._controllers.pop(session_id) for session_id in expired]
            for session_id in expired:
                del self._last_activity[session_id]
        for controller in controllers:
            controller.close()
        if controllers:
            logger.info(
                "Evicted idle playback sessions",
                extra={"event": "playback.session.evicted", "sessions": len(controllers)},
            )
        return len(controllers)

    def list_sessions(self, section_id: Optional[str] = None) -> List[PlaybackSession]:
        with self._lock:
            controllers = list(self._controllers.values())
        return [
            controller.session
            for controller in controllers
            if section_id is None or controller.session.section_id == section_id
        ]

    def on_job_ready(self, job: DubJob) -> int:
        """Rebuild the catalog of every live session showing ``job``'s section."""

        with self._lock:
            controllers = [
                controller
                for controller in self._controllers.values()
                if controller.session.section_id == job.section_id
            ]
        refreshed = sum(1 for controller in controllers if controller.refresh_catalog())
        logger.info(
            "Refreshed playback catalogs after dubbing completion",
            extra={
                "event": "playback.catalog.job_ready",
                "job_id": job.job_id,
                "section_id": job.section_id,
                "sessions": refreshed,
            },
        )
        return refreshed

    def close_all(self) -> int:
        with self._lock:
            controllers = list(self._controllers.values())
            self._controllers.clear()
            self._last_activity.clear()
        for controller in controllers:
            controller.close()
        return len(controllers)


__all__ = ["PlaybackSessionRegistry"]
