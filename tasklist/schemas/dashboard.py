from pydantic import BaseModel
from typing import List

from tasklist.schemas.task import TaskResponse

class CategoryCount(BaseModel):
    id: int
    name: str
    active_tasks: int

class DashboardStats(BaseModel):
    active_tasks: int
    overdue_tasks: int
    completed_this_week: int
    top_priority_tasks: List[TaskResponse]
    category_distribution: List[CategoryCount]

class DashboardResponse(BaseModel):
    username: str
    stats: DashboardStats
