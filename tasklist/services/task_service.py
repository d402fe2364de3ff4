"""Task service"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from tasklist.models.category import Category
from tasklist.models.task import Task
from tasklist.schemas.task import TaskCreate
from tasklist.services.coefficient import (
    COEFFICIENT_FACTORS,
    TaskRuleError,
    compute_coefficient,
    ensure_can_complete,
    ensure_can_delete,
)

logger = logging.getLogger(__name__)

DELETE_PERIODS = {
    "30days": relativedelta(days=30),
    "6months": relativedelta(months=6),
    "1year": relativedelta(years=1),
    "all": None,
}

NULLABLE_FIELDS = ("notes", "due_date", "parent_id", "category_id")


class InvalidReference(TaskRuleError):
    """Parent or category missing, foreign, or forming a cycle."""


def get_user_task(db: Session, user_id: int, task_id: int, lock: bool = False) -> Optional[Task]:
    query = db.query(Task).filter(Task.id == task_id, Task.user_id == user_id)
    if lock:
        query = query.with_for_update()
    return query.first()


def list_tasks(
    db: Session,
    user_id: int,
    completed: Optional[bool] = None,
    category_id: Optional[int] = None,
    parent_id: Optional[int] = None
) -> List[Task]:
    query = db.query(Task).filter(Task.user_id == user_id)

    if completed is not None:
        query = query.filter(Task.completed == completed)
    if category_id is not None:
        query = query.filter(Task.category_id == category_id)
    if parent_id is not None:
        query = query.filter(Task.parent_id == parent_id)

    # non terminées d'abord, puis échéance, puis coefficient
    return query.order_by(
        Task.completed.asc(),
        Task.due_date.is_(None),
        Task.due_date.asc(),
        Task.coefficient.desc(),
        Task.id.asc()
    ).all()


def _check_category(db: Session, user_id: int, category_id: int) -> None:
    category = db.query(Category).filter(
        Category.id == category_id,
        Category.user_id == user_id
    ).first()
    if not category:
        raise InvalidReference("Category not found")


def _lock_parent(db: Session, user_id: int, parent_id: int, task: Optional[Task] = None) -> Task:
    # verrou sur le parent : une complétion concurrente du parent attend l'insertion
    parent = db.query(Task).filter(
        Task.id == parent_id,
        Task.user_id == user_id
    ).with_for_update().first()
    if not parent:
        raise InvalidReference("Parent task not found")

    if task is not None:
        ancestor = parent
        while ancestor is not None:
            if ancestor.id == task.id:
                raise InvalidReference("A task cannot be its own parent or ancestor")
            if ancestor.parent_id is None:
                break
            ancestor = db.query(Task).filter(Task.id == ancestor.parent_id).first()
    return parent


def _apply_completion(db: Session, task: Task, completed: bool) -> None:
    if completed:
        # état frais des enfants, verrouillés jusqu'au commit
        children = db.query(Task).filter(Task.parent_id == task.id).with_for_update().all()
        ensure_can_complete(task, children)
        if not task.completed:
            task.completed = True
            task.completed_at = datetime.utcnow()
    elif task.completed:
        task.completed = False
        task.completed_at = None


def create_task(db: Session, user_id: int, data: TaskCreate) -> Task:
    try:
        if data.parent_id is not None:
            _lock_parent(db, user_id, data.parent_id)
        if data.category_id is not None:
            _check_category(db, user_id, data.category_id)

        new_task = Task(
            user_id=user_id,
            parent_id=data.parent_id,
            category_id=data.category_id,
            name=data.name,
            notes=data.notes,
            due_date=data.due_date,
            priority=data.priority,
            complexity=data.complexity,
            length=data.length,
            coefficient=compute_coefficient(data.priority, data.complexity, data.length),
            completed=False
        )
        db.add(new_task)
        db.commit()
    except TaskRuleError as e:
        db.rollback()
        logger.warning(f"Task creation refused for user {user_id}: {e}")
        raise

    db.refresh(new_task)
    return new_task


def update_task(db: Session, task: Task, changes: dict) -> Task:
    """
    Applique une mise à jour partielle.

    Le coefficient est recalculé dès qu'un des trois facteurs change et
    écrit dans le même commit ; `completed` passe par la règle des enfants.
    """
    task_id = task.id
    # null explicite ignoré pour les colonnes obligatoires
    changes = {f: v for f, v in changes.items() if v is not None or f in NULLABLE_FIELDS}
    completed = changes.pop("completed", None)

    try:
        if changes.get("parent_id") is not None:
            _lock_parent(db, task.user_id, changes["parent_id"], task)
        if changes.get("category_id") is not None:
            _check_category(db, task.user_id, changes["category_id"])

        for field, value in changes.items():
            setattr(task, field, value)

        if any(field in changes for field in COEFFICIENT_FACTORS):
            task.coefficient = compute_coefficient(task.priority, task.complexity, task.length)

        if completed is not None:
            _apply_completion(db, task, completed)

        db.commit()
    except TaskRuleError as e:
        db.rollback()
        logger.warning(f"Update of task {task_id} refused: {e}")
        raise

    db.refresh(task)
    return task


def set_completed(db: Session, task: Task, completed: bool) -> Task:
    return update_task(db, task, {"completed": completed})


def delete_task(db: Session, task: Task) -> None:
    task_id = task.id
    try:
        children = db.query(Task.id).filter(Task.parent_id == task_id).with_for_update().all()
        ensure_can_delete(task, children)
        db.delete(task)
        db.commit()
    except TaskRuleError as e:
        db.rollback()
        logger.warning(f"Deletion of task {task_id} refused: {e}")
        raise


def recalculate_coefficients(db: Session, user_id: int) -> int:
    try:
        active_tasks = db.query(Task).filter(
            Task.user_id == user_id,
            Task.completed == False
        ).with_for_update().all()

        for task in active_tasks:
            task.coefficient = compute_coefficient(task.priority, task.complexity, task.length)

        db.commit()
    except TaskRuleError as e:
        db.rollback()
        logger.warning(f"Coefficient recalculation refused for user {user_id}: {e}")
        raise

    logger.info(f"Recalculated {len(active_tasks)} coefficients for user {user_id}")
    return len(active_tasks)


def delete_completed(db: Session, user_id: int, period: str, now: Optional[datetime] = None) -> int:
    """
    Supprime les tâches terminées depuis plus longtemps que `period`.

    Une tâche dont un enfant reste en base est conservée : pas de
    suppression en cascade, même en masse.
    """
    if period not in DELETE_PERIODS:
        raise TaskRuleError(f"Invalid period: {period}")
    if now is None:
        now = datetime.utcnow()

    eligible = [Task.user_id == user_id, Task.completed == True]
    delta = DELETE_PERIODS[period]
    if delta is not None:
        eligible.append(Task.completed_at < now - delta)

    # lignes verrouillées jusqu'au commit : pas de réouverture ni de nouvel enfant entre lecture et DELETE
    candidates = {row.id for row in db.query(Task.id).filter(*eligible).with_for_update().all()}

    children_by_parent = defaultdict(list)
    for row in db.query(Task.id, Task.parent_id).filter(
        Task.user_id == user_id,
        Task.parent_id.isnot(None)
    ).with_for_update().all():
        children_by_parent[row.parent_id].append(row.id)

    # on retire les parents qui garderaient un enfant, jusqu'au point fixe
    changed = True
    while changed:
        changed = False
        for task_id in list(candidates):
            if any(child_id not in candidates for child_id in children_by_parent[task_id]):
                candidates.discard(task_id)
                changed = True

    count = 0
    if candidates:
        # l'état terminé est revérifié par le DELETE lui-même
        count = db.query(Task).filter(
            Task.id.in_(list(candidates)),
            *eligible
        ).delete(synchronize_session=False)
    db.commit()
    logger.info(f"Deleted {count} completed tasks for user {user_id} (period={period})")
    return count


def get_overdue_tasks(db: Session, user_id: int, now: Optional[datetime] = None) -> List[Task]:
    if now is None:
        now = datetime.utcnow()

    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.completed == False,
        Task.due_date < now
    ).all()
