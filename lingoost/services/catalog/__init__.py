"""Track catalog: descriptors, location rules and the three-source merge."""

from .builder import TrackCatalogBuilder
from .locations import (
    absolutize_location,
    dub_track_location,
    master_manifest_location,
)
from .sources import (
    DatabaseTrackRecord,
    DatabaseTrackSource,
    DetectedTrack,
    JobStoreTrackSource,
    READY_TRACK_STATUSES,
    StaticTrackSource,
)
from .tracks import SourceKind, TrackDescriptor

__all__ = [
    "DatabaseTrackRecord",
    "DatabaseTrackSource",
    "DetectedTrack",
    "JobStoreTrackSource",
    "READY_TRACK_STATUSES",
    "SourceKind",
    "StaticTrackSource",
    "TrackCatalogBuilder",
    "TrackDescriptor",
    "absolutize_location",
    "dub_track_location",
    "master_manifest_location",
]
