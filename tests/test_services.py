from datetime import datetime, timedelta

import pytest
from sqlalchemy import event, update

from tasklist.core.database import engine
from tasklist.models.announcement import Announcement
from tasklist.models.category import Category
from tasklist.models.feedback import Feedback
from tasklist.models.task import Task
from tasklist.schemas.task import TaskCreate
from tasklist.services import announcement_service, feedback_service, task_service
from tasklist.services.coefficient import (
    BlockedByIncompleteChildren,
    BlockedByExistingChildren,
    InvalidInputRange,
    TaskRuleError,
)
from tasklist.services.dashboard_service import build_dashboard, week_bounds
from tasklist.services.task_service import InvalidReference

NOW = datetime(2024, 6, 12, 15, 30)  # un mercredi


def add_task(db, user, name="T", parent=None, completed_at=None, **factors):
    task = task_service.create_task(db, user.id, TaskCreate(
        name=name,
        parent_id=parent.id if parent else None,
        **factors
    ))
    if completed_at is not None:
        task.completed = True
        task.completed_at = completed_at
        db.commit()
    return task


# ============ task_service ============

def test_create_task_persists_coefficient(db, user):
    task = add_task(db, user, priority=2, complexity=4, length=5)
    assert task.coefficient == 2 + 1 + 0
    assert db.query(Task).filter(Task.id == task.id).first().coefficient == 3


def test_update_task_recomputes_in_same_write(db, user):
    task = add_task(db, user, priority=1, complexity=1, length=1)
    task_service.update_task(db, task, {"priority": 5, "length": 5})
    assert task.coefficient == 5 + 4 + 0


def test_set_completed_refused_and_rolled_back(db, user):
    parent = add_task(db, user, name="P")
    add_task(db, user, name="C", parent=parent)

    with pytest.raises(BlockedByIncompleteChildren):
        task_service.set_completed(db, parent, True)

    db.expire_all()
    assert db.query(Task).filter(Task.id == parent.id).first().completed is False


def test_set_completed_sees_fresh_children_state(db, user):
    parent = add_task(db, user, name="P")
    child = add_task(db, user, name="C", parent=parent)

    task_service.set_completed(db, child, True)
    task_service.set_completed(db, parent, True)
    assert parent.completed is True

    # un enfant rouvert ne rouvre pas le parent
    task_service.set_completed(db, child, False)
    assert parent.completed is True


def test_delete_task_refused_with_children(db, user):
    parent = add_task(db, user, name="P")
    add_task(db, user, name="C", parent=parent)

    with pytest.raises(BlockedByExistingChildren):
        task_service.delete_task(db, parent)
    assert db.query(Task).count() == 2


def test_create_task_with_foreign_parent(db, user, admin):
    foreign = add_task(db, admin, name="Admin task")
    with pytest.raises(InvalidReference):
        add_task(db, user, parent=foreign)


def test_delete_completed_respects_period(db, user):
    add_task(db, user, name="old", completed_at=NOW - timedelta(days=40))
    add_task(db, user, name="recent", completed_at=NOW - timedelta(days=10))
    add_task(db, user, name="active")

    count = task_service.delete_completed(db, user.id, "30days", now=NOW)
    assert count == 1
    assert sorted(t.name for t in db.query(Task).all()) == ["active", "recent"]


def test_delete_completed_month_arithmetic(db, user):
    add_task(db, user, name="7 months", completed_at=NOW - timedelta(days=213))
    add_task(db, user, name="5 months", completed_at=NOW - timedelta(days=150))

    assert task_service.delete_completed(db, user.id, "6months", now=NOW) == 1
    assert task_service.delete_completed(db, user.id, "1year", now=NOW) == 0


def test_delete_completed_never_orphans_children(db, user):
    old = NOW - timedelta(days=400)
    parent = add_task(db, user, name="parent", completed_at=old)
    add_task(db, user, name="recent child", parent=parent, completed_at=NOW - timedelta(days=1))

    # le parent est éligible mais son enfant reste : rien n'est supprimé
    assert task_service.delete_completed(db, user.id, "1year", now=NOW) == 0

    # avec "all", parent et enfant partent ensemble
    assert task_service.delete_completed(db, user.id, "all", now=NOW) == 2
    assert db.query(Task).count() == 0


def test_delete_completed_keeps_parent_of_active_child(db, user):
    parent = add_task(db, user, name="parent", completed_at=NOW - timedelta(days=400))
    add_task(db, user, name="active child", parent=parent)

    assert task_service.delete_completed(db, user.id, "all", now=NOW) == 0


def test_delete_completed_is_scoped_to_user(db, user, admin):
    add_task(db, admin, name="admin done", completed_at=NOW - timedelta(days=400))
    assert task_service.delete_completed(db, user.id, "all", now=NOW) == 0
    assert db.query(Task).count() == 1


def test_delete_completed_unknown_period(db, user):
    with pytest.raises(TaskRuleError):
        task_service.delete_completed(db, user.id, "forever")


def test_delete_completed_skips_task_reopened_before_delete(db, user):
    done = add_task(db, user, name="done", completed_at=NOW - timedelta(days=40))
    done_id = done.id

    # réouverture par une autre connexion juste avant l'envoi du DELETE
    def reopen(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("DELETE FROM tasks"):
            with engine.begin() as other:
                other.execute(update(Task).where(Task.id == done_id).values(completed=False, completed_at=None))

    event.listen(engine, "before_cursor_execute", reopen)
    try:
        count = task_service.delete_completed(db, user.id, "30days", now=NOW)
    finally:
        event.remove(engine, "before_cursor_execute", reopen)

    assert count == 0
    db.expire_all()
    remaining = db.query(Task).all()
    assert [t.name for t in remaining] == ["done"]
    assert remaining[0].completed is False


def test_recalculate_coefficients_refuses_out_of_range_factor(db, user):
    task = add_task(db, user, priority=3, complexity=3, length=3)
    db.query(Task).filter(Task.id == task.id).update({"priority": 9})
    db.commit()

    with pytest.raises(InvalidInputRange):
        task_service.recalculate_coefficients(db, user.id)

    db.expire_all()
    assert db.query(Task).filter(Task.id == task.id).one().coefficient == 5


# ============ dashboard_service ============

def test_week_bounds_start_on_monday():
    start, end = week_bounds(NOW)
    assert start == datetime(2024, 6, 10)
    assert end == datetime(2024, 6, 17)


def test_build_dashboard(db, user):
    work = Category(user_id=user.id, name="Work")
    home = Category(user_id=user.id, name="Home")
    db.add_all([work, home])
    db.commit()

    for i, priority in enumerate([1, 2, 3, 4, 5, 5]):
        task = add_task(db, user, name=f"t{i}", priority=priority)
        task.category_id = work.id
    overdue = add_task(db, user, name="overdue")
    overdue.due_date = NOW - timedelta(days=1)
    add_task(db, user, name="done this week", completed_at=NOW - timedelta(days=1))
    add_task(db, user, name="done last week", completed_at=NOW - timedelta(days=8))
    db.commit()

    data = build_dashboard(db, user, now=NOW)

    assert data["username"] == "Tester"
    stats = data["stats"]
    assert stats["active_tasks"] == 7
    assert stats["overdue_tasks"] == 1
    assert stats["completed_this_week"] == 1
    assert [t.coefficient for t in stats["top_priority_tasks"]] == [13, 13, 12, 11, 10]
    assert stats["category_distribution"] == [{"id": work.id, "name": "Work", "active_tasks": 6}]


# ============ announcement_service ============

def test_announcement_visibility_and_reads(db, user):
    published = Announcement(title="Live", content="c", published_at=NOW - timedelta(hours=1))
    scheduled = Announcement(title="Later", content="c", published_at=NOW + timedelta(days=1))
    inactive = Announcement(title="Off", content="c", published_at=NOW - timedelta(days=1), is_active=False)
    draft = Announcement(title="Draft", content="c", published_at=None)
    db.add_all([published, scheduled, inactive, draft])
    db.commit()

    items, pagination = announcement_service.list_for_user(db, user.id, 1, 10, now=NOW)
    assert [a["title"] for a in items] == ["Live"]
    assert items[0]["is_read"] is False
    assert pagination == {"page": 1, "limit": 10, "total": 1, "total_pages": 1}

    assert announcement_service.unread_count(db, user.id, now=NOW) == 1
    announcement_service.mark_read(db, user.id, published)
    announcement_service.mark_read(db, user.id, published)  # upsert, pas de doublon
    assert announcement_service.unread_count(db, user.id, now=NOW) == 0

    admin_items, _ = announcement_service.list_for_admin(db, 1, 10, status="draft", now=NOW)
    assert sorted(a["title"] for a in admin_items) == ["Draft", "Later"]

    live, _ = announcement_service.list_for_admin(db, 1, 10, status="published", now=NOW)
    assert live[0]["stats"] == {"read_count": 1, "total_users": 1, "read_percentage": 100}


# ============ feedback_service ============

def test_feedback_status_transitions(db):
    feedback = Feedback(user_email="a@b.com", type="bug", message="Broken", status="new")
    db.add(feedback)
    db.commit()

    feedback_service.set_status(db, feedback, "resolved")
    assert feedback.resolved_at is not None
    resolved_at = feedback.resolved_at

    # déjà résolu : date inchangée
    feedback_service.set_status(db, feedback, "resolved")
    assert feedback.resolved_at == resolved_at

    feedback_service.set_status(db, feedback, "new")
    assert feedback.resolved_at is None
    assert feedback_service.count_new(db) == 1
