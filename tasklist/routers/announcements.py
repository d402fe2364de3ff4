"""
Router annonces : lecture pour tous les utilisateurs connectés,
publication / modification / suppression réservées aux admins.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from tasklist.core.database import get_db
from tasklist.core.deps import get_current_user, require_admin
from tasklist.models.announcement import Announcement
from tasklist.models.user import User
from tasklist.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementPage,
    AdminAnnouncementPage,
    UserAnnouncement,
    UnreadCount,
)
from tasklist.schemas.common import Message
from tasklist.services import announcement_service
from tasklist.services.pagination import MAX_LIMIT

router = APIRouter(prefix="/announcements", tags=["announcements"])
admin_router = APIRouter(prefix="/admin/announcements", tags=["admin"])


# ============ USERS ============

@router.get("", response_model=AnnouncementPage)
def list_announcements(
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    announcements, pagination = announcement_service.list_for_user(
        db, current_user.id, page, limit, category=category
    )
    return {"announcements": announcements, "pagination": pagination}


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return {"unread_count": announcement_service.unread_count(db, current_user.id)}


@router.get("/{announcement_id}", response_model=UserAnnouncement)
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    announcement = announcement_service.get_visible(db, announcement_id)
    if not announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return announcement_service.with_read_status(db, current_user.id, [announcement])[0]


@router.post("/{announcement_id}/read", response_model=Message)
def mark_as_read(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    announcement = announcement_service.get_visible(db, announcement_id)
    if not announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")

    announcement_service.mark_read(db, current_user.id, announcement)
    return {"message": "Announcement marked as read"}


# ============ ADMIN ============

def _get_announcement_or_404(db: Session, announcement_id: int) -> Announcement:
    announcement = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if not announcement:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Announcement not found")
    return announcement


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    announcement = Announcement(
        title=data.title,
        content=data.content,
        category=data.category or "News",
        published_at=data.published_at or datetime.utcnow(),
        is_active=True
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    return announcement


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    announcement = _get_announcement_or_404(db, announcement_id)

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        # published_at peut repasser à null (brouillon), pas les autres champs
        if value is None and field != "published_at":
            continue
        setattr(announcement, field, value)

    db.commit()
    db.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}", response_model=Message)
def delete_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    announcement = _get_announcement_or_404(db, announcement_id)
    db.delete(announcement)
    db.commit()
    return {"message": "Announcement deleted"}


@admin_router.get("", response_model=AdminAnnouncementPage)
def admin_list_announcements(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    announcements, pagination = announcement_service.list_for_admin(
        db, page, limit, status=status_filter, category=category
    )
    return {"announcements": announcements, "pagination": pagination}
