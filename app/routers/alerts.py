"""Admin alert endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas.alert import AlertDismissRequest, AlertDismissResponse, AlertFeedRead
from app.security import AdminViewer, require_admin_viewer
from app.services.alerts import build_alert_feed, dismiss_alert_for_viewer

router = APIRouter(prefix="/admin/alerts", tags=["admin-alerts"])


@router.get(
    "",
    response_model=AlertFeedRead,
    status_code=status.HTTP_200_OK,
)
def get_alert_feed(
    db: Session = Depends(get_db),
    viewer: AdminViewer = Depends(require_admin_viewer),
) -> AlertFeedRead:
    """Return the alerts visible to the caller's role, most urgent first."""

    return build_alert_feed(db, role=viewer.role)


@router.post(
    "",
    response_model=AlertDismissResponse,
    status_code=status.HTTP_200_OK,
)
def dismiss_alert(
    payload: AlertDismissRequest,
    db: Session = Depends(get_db),
    viewer: AdminViewer = Depends(require_admin_viewer),
) -> AlertDismissResponse:
    dismiss_alert_for_viewer(
        db,
        role=viewer.role,
        user_id=viewer.user_id,
        email=viewer.email,
        alert_type=payload.alert_type,
        alert_key=payload.alert_key,
        notes=payload.notes,
    )
    return AlertDismissResponse(success=True)
