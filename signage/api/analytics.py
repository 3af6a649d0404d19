"""Dashboard summary endpoints."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from signage.api.deps import require_admin
from signage.database import get_session
from signage.models.user import User
from signage.schemas.display import DisplaySummaryResponse
from signage.services.liveness_service import summarize_displays

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/displays-summary", response_model=DisplaySummaryResponse)
def displays_summary(
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Caller's displays with presentation status (stale heartbeats shown as offline)."""
    return DisplaySummaryResponse(**summarize_displays(user.id, session))
