"""Alert feed schemas."""
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, 0 being the most urgent."""

        return SEVERITY_RANK[self]


SEVERITY_RANK: dict[AlertSeverity, int] = {
    AlertSeverity.CRITICAL: 0,
    AlertSeverity.HIGH: 1,
    AlertSeverity.MEDIUM: 2,
    AlertSeverity.LOW: 3,
}


class AlertCandidate(BaseModel):
    """A computed, never-persisted alert. Identity is ``(type, key)``."""

    type: str
    key: str
    severity: AlertSeverity
    icon: str
    title: str
    description: str
    action_url: str
    action_label: str
    created_at: datetime
    dismissable: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @property
    def identity(self) -> tuple[str, str]:
        return (self.type, self.key)


class SeverityCounts(BaseModel):
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class AlertFeedRead(BaseModel):
    alerts: list[AlertCandidate]
    count: int
    count_by_severity: SeverityCounts

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlertDismissRequest(BaseModel):
    """Dismiss command body; required fields are checked by the handler to answer 400."""

    alert_type: str | None = None
    alert_key: str | None = None
    notes: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AlertDismissResponse(BaseModel):
    success: bool = True
