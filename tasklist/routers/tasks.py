from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Literal

from tasklist.core.database import get_db
from tasklist.core.deps import get_current_user
from tasklist.models.user import User
from tasklist.schemas.task import TaskCreate, TaskUpdate, TaskResponse, BulkResult
from tasklist.services.coefficient import TaskRuleError
from tasklist.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _rule_error(e: TaskRuleError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _get_task_or_404(db: Session, user: User, task_id: int, lock: bool = False):
    task = task_service.get_user_task(db, user.id, task_id, lock=lock)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        return task_service.create_task(db, current_user.id, task_data)
    except TaskRuleError as e:
        raise _rule_error(e)


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    completed: Optional[bool] = Query(None),
    category_id: Optional[int] = Query(None),
    parent_id: Optional[int] = Query(None)
):
    return task_service.list_tasks(
        db,
        current_user.id,
        completed=completed,
        category_id=category_id,
        parent_id=parent_id
    )


@router.post("/recalculate-coefficients", response_model=BulkResult)
def recalculate_coefficients(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        count = task_service.recalculate_coefficients(db, current_user.id)
    except TaskRuleError as e:
        raise _rule_error(e)
    return {"message": "Coefficients recalculated", "count": count}


@router.delete("/completed", response_model=BulkResult)
def delete_completed(
    period: Literal["30days", "6months", "1year", "all"] = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    count = task_service.delete_completed(db, current_user.id, period)
    return {"message": "Completed tasks deleted", "count": count}


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _get_task_or_404(db, current_user, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_task_or_404(db, current_user, task_id, lock=True)

    try:
        return task_service.update_task(db, task, task_data.model_dump(exclude_unset=True))
    except TaskRuleError as e:
        raise _rule_error(e)


@router.post("/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_task_or_404(db, current_user, task_id, lock=True)

    try:
        return task_service.set_completed(db, task, True)
    except TaskRuleError as e:
        raise _rule_error(e)


@router.post("/{task_id}/reopen", response_model=TaskResponse)
def reopen_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_task_or_404(db, current_user, task_id, lock=True)
    return task_service.set_completed(db, task, False)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = _get_task_or_404(db, current_user, task_id, lock=True)

    try:
        task_service.delete_task(db, task)
    except TaskRuleError as e:
        raise _rule_error(e)
