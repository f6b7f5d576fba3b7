"""Per-session playback state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ... import logging_manager as log_mgr
from ...config_manager.constants import DEFAULT_MANIFEST_RETRY_CEILING
from ...language import ORIGIN_LANGUAGE, normalize
from ..catalog.builder import TrackCatalogBuilder
from ..errors import (
    DubbingPlaybackError,
    EngineUnsupported,
    ManifestLoadFailed,
    SessionClosed,
    SwitchInProgress,
    TrackUnresolved,
)
from .engines import EngineFactory, EngineKind, EngineTrack, PlaybackEngine, select_engine_kind
from .preferences import LanguagePreferenceStore
from .resolver import TrackResolution, resolve
from .session import EngineState, PlaybackSession

logger = log_mgr.get_logger().getChild("services.playback.controller")


@dataclass
class SwitchOutcome:
    """Result of a language switch request."""

    applied: bool
    language: str
    sequence: int
    strategy: Optional[str] = None
    stale: bool = False
    error: Optional[TrackUnresolved] = None
    session: Dict[str, Any] = field(default_factory=dict)


class PlaybackSessionController:
    """Drive one :class:`PlaybackSession` through its states.

    ``Initializing -> EngineSelecting -> ManifestLoading -> Ready``, with
    ``Ready <-> Switching`` for language changes and ``Error`` once manifest
    loading has failed ``retry_ceiling`` times or no engine is usable.
    """

    def __init__(
        self,
        session: PlaybackSession,
        *,
        engine_factory: EngineFactory,
        catalog_builder: TrackCatalogBuilder,
        preferences: Optional[LanguagePreferenceStore] = None,
        retry_ceiling: int = DEFAULT_MANIFEST_RETRY_CEILING,
    ) -> None:
        self._session = session
        self._engine_factory = engine_factory
        self._catalog_builder = catalog_builder
        self._preferences = preferences
        self._retry_ceiling = max(1, retry_ceiling)

    @property
    def session(self) -> PlaybackSession:
        return self._session

    def _log_context(self):
        return log_mgr.log_context(
            session_id=self._session.session_id,
            section_id=self._session.section_id,
        )

    def _set_state(self, state: EngineState) -> None:
        session = self._session
        previous = session.engine_state
        session.engine_state = state
        logger.debug(
            "Playback state changed",
            extra={
                "event": "playback.state",
                "state": state.value,
                "previous_state": previous.value,
            },
        )

    def _fail(self, error: DubbingPlaybackError) -> None:
        session = self._session
        with session.lock:
            session.failure = error
            self._set_state(EngineState.ERROR)
            engine = session.engine
            session.engine = None
        if engine is not None:
            engine.detach()
        logger.error(
            "Playback session failed",
            extra={
                "event": "playback.session.error",
                "error": error.code,
                "attempt": session.retry_count,
            },
        )

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------
    def open(self) -> PlaybackSession:
        """Select an engine, load the manifest and settle in ``Ready`` or ``Error``."""

        session = self._session
        with self._log_context():
            with session.lock:
                if session.closed:
                    raise SessionClosed(f"Session {session.session_id} is closed")
                self._set_state(EngineState.ENGINE_SELECTING)
            try:
                kind = select_engine_kind(session.capabilities)
            except EngineUnsupported as exc:
                self._fail(exc)
                return session

            engine = self._attach_engine(kind)
            if engine is None:
                return session
            self._load_with_retries(engine)
        return session

    def _attach_engine(self, kind: EngineKind) -> Optional[PlaybackEngine]:
        session = self._session
        engine = self._engine_factory(kind)
        engine.attach()
        with session.lock:
            if session.closed:
                engine.detach()
                return None
            previous = session.engine
            session.engine = engine
            session.engine_kind = kind
        if previous is not None and previous is not engine:
            previous.detach()
        logger.info(
            "Playback engine attached",
            extra={"event": "playback.engine.attached", "engine": kind.value},
        )
        return engine

    def _load_with_retries(self, engine: PlaybackEngine) -> None:
        session = self._session
        while True:
            with session.lock:
                if session.closed:
                    return
                self._set_state(EngineState.MANIFEST_LOADING)
            try:
                tracks = engine.load(session.manifest_location)
            except ManifestLoadFailed as exc:
                error = exc
            except Exception as exc:
                error = ManifestLoadFailed(f"Engine load failed: {exc}", kind="media")
            else:
                self._on_manifest_loaded(engine, tracks)
                return

            with session.lock:
                if session.closed or session.engine is not engine:
                    return
                session.retry_count += 1
                attempt = session.retry_count
                if engine.kind == EngineKind.NATIVE:
                    session.native_failures += 1
            logger.warning(
                "Manifest load failed",
                extra={
                    "event": "playback.manifest.failed",
                    "attempt": attempt,
                    "engine": engine.kind.value,
                    "kind": error.kind,
                    "error": error.message,
                },
            )
            if attempt >= self._retry_ceiling:
                self._fail(error)
                return

            if engine.kind == EngineKind.NATIVE and session.capabilities.supports_fallback:
                # One native failure is enough; the rest of the session uses the fallback engine.
                replacement = self._attach_engine(EngineKind.FALLBACK)
                if replacement is None:
                    return
                engine = replacement
            else:
                engine.recover(error)

    def _on_manifest_loaded(self, engine: PlaybackEngine, tracks: List[EngineTrack]) -> None:
        session = self._session
        with session.lock:
            if session.closed or session.engine is not engine:
                logger.info(
                    "Discarded manifest result for inactive session",
                    extra={"event": "playback.manifest.discarded"},
                )
                return
            session.available_tracks = self._catalog_builder.build(
                session.section_id, engine_tracks=tracks
            )
            language, resolution = self._initial_language(tracks)
            if resolution is not None and resolution.track is not None:
                engine.select_track(resolution.track)
            session.current_language = language
            session.failure = None
            self._set_state(EngineState.READY)
        logger.info(
            "Playback session ready",
            extra={
                "event": "playback.session.ready",
                "engine": engine.kind.value,
                "attempt": session.retry_count,
                "language": language,
            },
        )

    def _initial_language(
        self, tracks: List[EngineTrack]
    ) -> tuple[str, Optional[TrackResolution]]:
        session = self._session
        preferred = self._load_preference()
        if preferred and preferred != ORIGIN_LANGUAGE and preferred in session.available_languages:
            resolution = resolve(preferred, tracks)
            if resolution.resolved:
                return preferred, resolution
        resolution = resolve(ORIGIN_LANGUAGE, tracks)
        return ORIGIN_LANGUAGE, resolution if resolution.resolved else None

    def _load_preference(self) -> Optional[str]:
        session = self._session
        if self._preferences is None or not session.viewer_id:
            return None
        try:
            stored = self._preferences.get(session.viewer_id, session.section_id)
        except SQLAlchemyError:
            logger.warning(
                "Language preference lookup failed",
                exc_info=True,
                extra={"event": "playback.preference.load_failed", "session_id": session.session_id},
            )
            return None
        return normalize(stored) if stored else None

    def _store_preference(self, language: str) -> None:
        session = self._session
        if self._preferences is None or not session.viewer_id:
            return
        try:
            self._preferences.set(session.viewer_id, session.section_id, language)
        except SQLAlchemyError:
            logger.warning(
                "Language preference could not be stored",
                exc_info=True,
                extra={
                    "event": "playback.preference.store_failed",
                    "session_id": session.session_id,
                    "language": language,
                },
            )

    # ------------------------------------------------------------------
    # Switching
    # ------------------------------------------------------------------
    def request_language(self, language: str) -> SwitchOutcome:
        """Switch to ``language``; an unresolvable request leaves the session unchanged."""

        session = self._session
        target = normalize(language)
        with self._log_context():
            with session.lock:
                if session.closed:
                    raise SessionClosed(f"Session {session.session_id} is closed")
                if session.engine_state == EngineState.ERROR:
                    raise SessionClosed(
                        f"Session {session.session_id} is in the error state"
                    )
                if session.engine_state != EngineState.READY:
                    raise SwitchInProgress(
                        f"Session {session.session_id} is {session.engine_state.value}; "
                        "retry the language change once it is ready"
                    )
                session.switch_sequence += 1
                sequence = session.switch_sequence
                self._set_state(EngineState.SWITCHING)
                engine = session.engine
                tracks = engine.tracks() if engine is not None else []
                offered = target == ORIGIN_LANGUAGE or target in session.available_languages

            resolution = resolve(target, tracks) if offered else None
            if resolution is None or not resolution.resolved:
                return self._reject_switch(language, target, sequence)
            return self._apply_switch(engine, target, sequence, resolution)

    def _reject_switch(self, requested: str, target: str, sequence: int) -> SwitchOutcome:
        session = self._session
        error = TrackUnresolved(
            f"No playable track matches language {requested!r}", language=target
        )
        with session.lock:
            if not session.closed and session.switch_sequence == sequence:
                self._set_state(EngineState.READY)
            snapshot = session.snapshot()
        logger.warning(
            "Language switch unresolved",
            extra={"event": "playback.switch.unresolved", "language": target},
        )
        return SwitchOutcome(
            applied=False,
            language=target,
            sequence=sequence,
            error=error,
            session=snapshot,
        )

    def _apply_switch(
        self,
        engine: Optional[PlaybackEngine],
        target: str,
        sequence: int,
        resolution: TrackResolution,
    ) -> SwitchOutcome:
        session = self._session
        with session.lock:
            if session.closed or session.switch_sequence != sequence or session.engine is not engine:
                logger.info(
                    "Discarded stale switch result",
                    extra={"event": "playback.switch.stale", "language": target},
                )
                return SwitchOutcome(
                    applied=False,
                    language=target,
                    sequence=sequence,
                    stale=True,
                    session=session.snapshot(),
                )
            if engine is not None and resolution.track is not None:
                engine.select_track(resolution.track)
            session.current_language = target
            self._set_state(EngineState.READY)
            snapshot = session.snapshot()
        self._store_preference(target)
        logger.info(
            "Language switched",
            extra={
                "event": "playback.switch.applied",
                "language": target,
                "strategy": resolution.strategy,
            },
        )
        return SwitchOutcome(
            applied=True,
            language=target,
            sequence=sequence,
            strategy=resolution.strategy,
            session=snapshot,
        )

    # ------------------------------------------------------------------
    # Catalog refresh and teardown
    # ------------------------------------------------------------------
    def refresh_catalog(self) -> bool:
        """Rebuild the available tracks; return False when the session cannot refresh."""

        session = self._session
        with session.lock:
            if session.closed or session.engine_state not in (
                EngineState.READY,
                EngineState.SWITCHING,
            ):
                return False
            engine = session.engine
            tracks = engine.tracks() if engine is not None else []
            session.available_tracks = self._catalog_builder.build(
                session.section_id, engine_tracks=tracks
            )
            if (
                session.current_language != ORIGIN_LANGUAGE
                and session.current_language not in session.available_languages
            ):
                dropped = session.current_language
                origin = resolve(ORIGIN_LANGUAGE, tracks)
                if engine is not None and origin.track is not None:
                    engine.select_track(origin.track)
                session.current_language = ORIGIN_LANGUAGE
                logger.info(
                    "Active language left the catalog; reverted to origin",
                    extra={"event": "playback.catalog.reverted", "language": dropped},
                )
        logger.debug(
            "Playback catalog refreshed",
            extra={"event": "playback.catalog.refreshed", "session_id": session.session_id},
        )
        return True

    def close(self) -> None:
        """Tear the session down; late results from in-flight work are discarded."""

        session = self._session
        with session.lock:
            if session.closed:
                return
            session.closed = True
            engine = session.engine
            session.engine = None
        if engine is not None:
            engine.detach()
        logger.info(
            "Playback session closed",
            extra={"event": "playback.session.closed", "session_id": session.session_id},
        )


__all__ = ["PlaybackSessionController", "SwitchOutcome"]
