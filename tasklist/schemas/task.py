"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List

from tasklist.schemas.category import CategoryResponse


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: int = Field(default=1, ge=1, le=5)
    complexity: int = Field(default=1, ge=1, le=5)
    length: int = Field(default=1, ge=1, le=5)
    parent_id: Optional[int] = None
    category_id: Optional[int] = None


class TaskUpdate(BaseModel):
    """Partial update; coefficient is never accepted from the client."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[int] = Field(default=None, ge=1, le=5)
    complexity: Optional[int] = Field(default=None, ge=1, le=5)
    length: Optional[int] = Field(default=None, ge=1, le=5)
    parent_id: Optional[int] = None
    category_id: Optional[int] = None
    completed: Optional[bool] = None


class TaskSummary(BaseModel):
    id: int
    name: str
    completed: bool

    model_config = ConfigDict(from_attributes=True)


class TaskResponse(BaseModel):
    id: int
    user_id: int
    parent_id: Optional[int]
    category_id: Optional[int]
    name: str
    notes: Optional[str]
    due_date: Optional[datetime]
    priority: int
    complexity: int
    length: int
    coefficient: int
    completed: bool
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryResponse] = None
    children: List[TaskSummary] = []

    model_config = ConfigDict(from_attributes=True)


class BulkResult(BaseModel):
    message: str
    count: int
