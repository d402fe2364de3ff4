"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from tasklist.core.database import Base
from tasklist.models.category import Category


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    parent_id = Column(Integer, ForeignKey("tasks.id"), nullable=True, index=True)

    name = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    due_date = Column(DateTime, nullable=True, index=True)

    # facteurs 1-5, coefficient dérivé 1-13
    priority = Column(Integer, nullable=False, default=1)
    complexity = Column(Integer, nullable=False, default=1)
    length = Column(Integer, nullable=False, default=1)
    coefficient = Column(Integer, nullable=False)

    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    category = relationship(Category)
    children = relationship("Task", order_by="Task.id")
