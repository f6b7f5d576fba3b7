"""Service layer for dubbing jobs, track catalogs, and playback sessions."""
