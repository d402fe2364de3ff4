from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional, List, Literal

from tasklist.schemas.common import Pagination

FeedbackType = Literal["bug", "suggestion", "other"]
FeedbackStatus = Literal["new", "resolved"]

class FeedbackCreate(BaseModel):
    """Feedback envoyé par n'importe qui (pas de token requis)"""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    user_email: EmailStr
    type: FeedbackType
    subject: Optional[str] = Field(default=None, max_length=200)
    message: str = Field(min_length=1, max_length=2000)

class FeedbackStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: FeedbackStatus

class FeedbackResponse(BaseModel):
    id: int
    user_email: str
    type: str
    subject: Optional[str]
    message: str
    status: str
    created_at: datetime
    resolved_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

class FeedbackCreated(BaseModel):
    message: str
    id: int

class FeedbackUpdated(BaseModel):
    message: str
    feedback: FeedbackResponse

class FeedbackPage(BaseModel):
    feedbacks: List[FeedbackResponse]
    pagination: Pagination

class FeedbackCount(BaseModel):
    count: int
