"""Release publishing workflow."""

from .progress import PercentProgress
from .publish import Artifact, PublishSettings, ReleasePublisher, collect_artifacts, run

__all__ = [
    "Artifact",
    "PercentProgress",
    "PublishSettings",
    "ReleasePublisher",
    "collect_artifacts",
    "run",
]
