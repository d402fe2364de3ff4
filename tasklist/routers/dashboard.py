from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasklist.core.database import get_db
from tasklist.core.deps import get_current_user
from tasklist.models.user import User
from tasklist.schemas.dashboard import DashboardResponse
from tasklist.services.dashboard_service import build_dashboard

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
def dashboard(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return build_dashboard(db, current_user)
