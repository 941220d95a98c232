"""Role visibility matrix for computed alerts."""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from app.models.user import AdminRole

_ALL_STAFF = frozenset(AdminRole)
_MANAGERS = frozenset({AdminRole.super_admin, AdminRole.admin, AdminRole.manager})
_ADMINS = frozenset({AdminRole.super_admin, AdminRole.admin})


@dataclass(frozen=True)
class AlertVisibility:
    """Immutable ``alert_type -> roles`` map; unknown types are visible to nobody."""

    matrix: Mapping[str, frozenset[AdminRole]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {alert_type: frozenset(roles) for alert_type, roles in self.matrix.items()}
        object.__setattr__(self, "matrix", MappingProxyType(frozen))

    def can_see(self, alert_type: str, role: AdminRole) -> bool:
        return role in self.matrix.get(alert_type, frozenset())

    def can_see_any(self, alert_types: Iterable[str], role: AdminRole) -> bool:
        return any(self.can_see(alert_type, role) for alert_type in alert_types)

    def visible_types(self, role: AdminRole) -> frozenset[str]:
        return frozenset(alert_type for alert_type, roles in self.matrix.items() if role in roles)


DEFAULT_ALERT_VISIBILITY = AlertVisibility(
    {
        "prize_pick_winner": _ALL_STAFF,
        "prize_notify_winner": _ALL_STAFF,
        "prize_pay_winner": _ALL_STAFF,
        "prize_setup_missing": _MANAGERS,
        "email_test_mode": _ADMINS,
        "health_no_revenue": _ADMINS,
        "health_critical": _ADMINS,
        "health_warning": _ADMINS,
        "health_burn_rate": _ADMINS,
        "payout_pending": _ADMINS,
        "campaign_critical": _MANAGERS,
        "campaign_warning": _MANAGERS,
    }
)


__all__ = ["AlertVisibility", "DEFAULT_ALERT_VISIBILITY"]
