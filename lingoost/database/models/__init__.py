"""SQLAlchemy models; importing this package registers them on Base.metadata."""

from .dub_job import DubJobModel
from .preference import LanguagePreferenceModel

__all__ = [
    "DubJobModel",
    "LanguagePreferenceModel",
]
