"""
Service annonces - visibilité selon published_at, suivi de lecture par utilisateur
"""

from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import and_, or_, func, select
from sqlalchemy.orm import Session

from tasklist.models.announcement import Announcement, AnnouncementRead
from tasklist.models.user import User
from tasklist.services.pagination import paginate


def _visible(now: datetime):
    # active ET publiée (published_at passé)
    return and_(
        Announcement.is_active == True,
        Announcement.published_at.isnot(None),
        Announcement.published_at <= now
    )


def _read_ids(db: Session, user_id: int, announcement_ids: List[int]) -> set:
    if not announcement_ids:
        return set()
    rows = db.query(AnnouncementRead.announcement_id).filter(
        AnnouncementRead.user_id == user_id,
        AnnouncementRead.announcement_id.in_(announcement_ids)
    ).all()
    return {row.announcement_id for row in rows}


def with_read_status(db: Session, user_id: int, announcements: List[Announcement]) -> List[dict]:
    read_ids = _read_ids(db, user_id, [a.id for a in announcements])
    return [
        {**_as_dict(a), "is_read": a.id in read_ids}
        for a in announcements
    ]


def _as_dict(announcement: Announcement) -> dict:
    return {
        "id": announcement.id,
        "title": announcement.title,
        "content": announcement.content,
        "category": announcement.category,
        "published_at": announcement.published_at,
        "is_active": announcement.is_active,
        "created_at": announcement.created_at,
        "updated_at": announcement.updated_at,
    }


def list_for_user(
    db: Session,
    user_id: int,
    page: int,
    limit: int,
    category: Optional[str] = None,
    now: Optional[datetime] = None
) -> Tuple[List[dict], dict]:
    if now is None:
        now = datetime.utcnow()

    query = db.query(Announcement).filter(_visible(now))
    if category and category != "all":
        query = query.filter(Announcement.category == category)

    items, pagination = paginate(query.order_by(Announcement.published_at.desc(), Announcement.id.desc()), page, limit)
    return with_read_status(db, user_id, items), pagination


def get_visible(db: Session, announcement_id: int, now: Optional[datetime] = None) -> Optional[Announcement]:
    if now is None:
        now = datetime.utcnow()
    return db.query(Announcement).filter(
        Announcement.id == announcement_id,
        _visible(now)
    ).first()


def unread_count(db: Session, user_id: int, now: Optional[datetime] = None) -> int:
    if now is None:
        now = datetime.utcnow()

    read_subquery = select(AnnouncementRead.announcement_id).where(
        AnnouncementRead.user_id == user_id
    )
    return db.query(Announcement).filter(
        _visible(now),
        Announcement.id.notin_(read_subquery)
    ).count()


def mark_read(db: Session, user_id: int, announcement: Announcement) -> AnnouncementRead:
    """Crée ou rafraîchit la ligne de lecture (upsert)."""
    read = db.query(AnnouncementRead).filter(
        AnnouncementRead.user_id == user_id,
        AnnouncementRead.announcement_id == announcement.id
    ).first()

    if read:
        read.read_at = datetime.utcnow()
    else:
        read = AnnouncementRead(user_id=user_id, announcement_id=announcement.id, read_at=datetime.utcnow())
        db.add(read)

    db.commit()
    return read


def list_for_admin(
    db: Session,
    page: int,
    limit: int,
    status: Optional[str] = None,
    category: Optional[str] = None,
    now: Optional[datetime] = None
) -> Tuple[List[dict], dict]:
    """Toutes les annonces (brouillons et inactives inclus) avec stats de lecture."""
    if now is None:
        now = datetime.utcnow()

    query = db.query(Announcement)
    if category and category != "all":
        query = query.filter(Announcement.category == category)

    if status == "published":
        query = query.filter(_visible(now))
    elif status == "draft":
        query = query.filter(or_(
            Announcement.published_at.is_(None),
            Announcement.published_at > now
        ))
    elif status == "inactive":
        query = query.filter(Announcement.is_active == False)

    items, pagination = paginate(query.order_by(Announcement.created_at.desc(), Announcement.id.desc()), page, limit)

    total_users = db.query(User).count()
    read_counts = dict(
        db.query(AnnouncementRead.announcement_id, func.count(AnnouncementRead.id)).filter(
            AnnouncementRead.announcement_id.in_([a.id for a in items])
        ).group_by(AnnouncementRead.announcement_id).all()
    ) if items else {}

    results = []
    for announcement in items:
        read_count = read_counts.get(announcement.id, 0)
        results.append({
            **_as_dict(announcement),
            "stats": {
                "read_count": read_count,
                "total_users": total_users,
                "read_percentage": round(read_count * 100 / total_users) if total_users else 0
            }
        })
    return results, pagination
