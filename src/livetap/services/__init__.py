"""Resolution, manifest and status services."""

from livetap.services.manifest import ManifestService
from livetap.services.probe import DurationProber, FFprobeDurationProber
from livetap.services.resolution import ResolutionService
from livetap.services.status import StatusStore

__all__ = [
    "DurationProber",
    "FFprobeDurationProber",
    "ManifestService",
    "ResolutionService",
    "StatusStore",
]
