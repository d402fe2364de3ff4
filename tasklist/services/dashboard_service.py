"""Dashboard service - synthèse des tâches d'un utilisateur"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from tasklist.models.category import Category
from tasklist.models.task import Task
from tasklist.models.user import User
from tasklist.services.task_service import get_overdue_tasks

TOP_PRIORITY_COUNT = 5


def week_bounds(now: datetime):
    """Lundi 00:00 -> lundi suivant 00:00"""
    week_start = datetime.combine(now.date() - timedelta(days=now.weekday()), datetime.min.time())
    return week_start, week_start + timedelta(days=7)


def build_dashboard(db: Session, user: User, now: Optional[datetime] = None) -> dict:
    if now is None:
        now = datetime.utcnow()

    active_query = db.query(Task).filter(Task.user_id == user.id, Task.completed == False)

    week_start, week_end = week_bounds(now)
    completed_this_week = db.query(Task).filter(
        Task.user_id == user.id,
        Task.completed == True,
        Task.completed_at >= week_start,
        Task.completed_at < week_end
    ).count()

    top_priority_tasks = active_query.order_by(
        Task.coefficient.desc(),
        Task.id.asc()
    ).limit(TOP_PRIORITY_COUNT).all()

    rows = db.query(Category.id, Category.name, func.count(Task.id)).join(
        Task, Task.category_id == Category.id
    ).filter(
        Category.user_id == user.id,
        Task.completed == False
    ).group_by(Category.id, Category.name).order_by(Category.name).all()

    return {
        "username": user.name or "",
        "stats": {
            "active_tasks": active_query.count(),
            "overdue_tasks": len(get_overdue_tasks(db, user.id, now)),
            "completed_this_week": completed_this_week,
            "top_priority_tasks": top_priority_tasks,
            "category_distribution": [
                {"id": cat_id, "name": name, "active_tasks": count}
                for cat_id, name, count in rows
            ]
        }
    }
