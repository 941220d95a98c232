"""Schema package exports."""
from .alert import (
    AlertCandidate,
    AlertDismissRequest,
    AlertDismissResponse,
    AlertFeedRead,
    AlertSeverity,
    SeverityCounts,
)

__all__ = [
    "AlertCandidate",
    "AlertDismissRequest",
    "AlertDismissResponse",
    "AlertFeedRead",
    "AlertSeverity",
    "SeverityCounts",
]
