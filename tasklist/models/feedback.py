from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from tasklist.core.database import Base

FEEDBACK_TYPES = ["bug", "suggestion", "other"]
FEEDBACK_STATUSES = ["new", "resolved"]

class Feedback(Base):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_email = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)  # "bug", "suggestion", "other"
    subject = Column(String, nullable=True)
    message = Column(String, nullable=False)
    status = Column(String, nullable=False, default="new")
    created_at = Column(DateTime, default=datetime.utcnow)
    resolved_at = Column(DateTime, nullable=True)
