"""Feedback service"""

import logging
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from tasklist.models.feedback import Feedback, FEEDBACK_TYPES, FEEDBACK_STATUSES
from tasklist.schemas.feedback import FeedbackCreate
from tasklist.services.pagination import paginate

logger = logging.getLogger(__name__)


def submit_feedback(db: Session, data: FeedbackCreate) -> Feedback:
    feedback = Feedback(
        user_email=data.user_email.lower().strip(),
        type=data.type,
        subject=data.subject or None,
        message=data.message,
        status="new"
    )
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    logger.info(f"Feedback {feedback.id} received ({feedback.type})")
    return feedback


def search_feedback(
    db: Session,
    page: int,
    limit: int,
    status: Optional[str] = None,
    type: Optional[str] = None,
    search: Optional[str] = None
) -> Tuple[List[Feedback], dict]:
    query = db.query(Feedback)

    # "all" ou valeur inconnue = pas de filtre
    if status and status in FEEDBACK_STATUSES:
        query = query.filter(Feedback.status == status)
    if type and type in FEEDBACK_TYPES:
        query = query.filter(Feedback.type == type)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Feedback.user_email.ilike(pattern),
            Feedback.subject.ilike(pattern),
            Feedback.message.ilike(pattern)
        ))

    return paginate(query.order_by(Feedback.created_at.desc(), Feedback.id.desc()), page, limit)


def set_status(db: Session, feedback: Feedback, status: str) -> Feedback:
    # resolved_at suit les transitions new <-> resolved
    if status == "resolved" and feedback.status != "resolved":
        feedback.resolved_at = datetime.utcnow()
    elif status == "new" and feedback.status == "resolved":
        feedback.resolved_at = None
    feedback.status = status

    db.commit()
    db.refresh(feedback)
    return feedback


def count_new(db: Session) -> int:
    return db.query(Feedback).filter(Feedback.status == "new").count()
