from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from tasklist.core.database import get_db
from tasklist.core.deps import require_admin
from tasklist.models.feedback import Feedback
from tasklist.models.user import User
from tasklist.schemas.common import Message
from tasklist.schemas.feedback import (
    FeedbackCreate,
    FeedbackStatusUpdate,
    FeedbackResponse,
    FeedbackCreated,
    FeedbackUpdated,
    FeedbackPage,
    FeedbackCount,
)
from tasklist.services import feedback_service
from tasklist.services.pagination import MAX_LIMIT

router = APIRouter(prefix="/feedback", tags=["feedback"])


def _get_feedback_or_404(db: Session, feedback_id: int) -> Feedback:
    feedback = db.query(Feedback).filter(Feedback.id == feedback_id).first()
    if not feedback:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return feedback


@router.post("", response_model=FeedbackCreated, status_code=status.HTTP_201_CREATED)
def submit_feedback(data: FeedbackCreate, db: Session = Depends(get_db)):
    """Envoyer un feedback (public, pas de token)"""
    feedback = feedback_service.submit_feedback(db, data)
    return {"message": "Feedback sent", "id": feedback.id}


@router.get("", response_model=FeedbackPage)
def list_feedback(
    status_filter: Optional[str] = Query(None, alias="status"),
    type_filter: Optional[str] = Query(None, alias="type"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    feedbacks, pagination = feedback_service.search_feedback(
        db, page, limit, status=status_filter, type=type_filter, search=search
    )
    return {"feedbacks": feedbacks, "pagination": pagination}


@router.get("/unread-count", response_model=FeedbackCount)
def unread_count(db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return {"count": feedback_service.count_new(db)}


@router.get("/{feedback_id}", response_model=FeedbackResponse)
def get_feedback(feedback_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    return _get_feedback_or_404(db, feedback_id)


@router.patch("/{feedback_id}", response_model=FeedbackUpdated)
def update_feedback_status(
    feedback_id: int,
    data: FeedbackStatusUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    feedback = _get_feedback_or_404(db, feedback_id)
    feedback = feedback_service.set_status(db, feedback, data.status)
    return {"message": "Feedback status updated", "feedback": feedback}


@router.delete("/{feedback_id}", response_model=Message)
def delete_feedback(feedback_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    feedback = _get_feedback_or_404(db, feedback_id)
    db.delete(feedback)
    db.commit()
    return {"message": "Feedback deleted"}
