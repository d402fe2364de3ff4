from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, List

from tasklist.schemas.common import Pagination

class AnnouncementCreate(BaseModel):
    """Créer une annonce (admin). published_at absent = publiée maintenant"""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    category: str = "News"
    published_at: Optional[datetime] = None

class AnnouncementUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    published_at: Optional[datetime] = None  # null explicite = brouillon
    is_active: Optional[bool] = None

class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    category: str
    published_at: Optional[datetime]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class UserAnnouncement(AnnouncementResponse):
    is_read: bool = False

class AnnouncementStats(BaseModel):
    read_count: int
    total_users: int
    read_percentage: int

class AdminAnnouncement(AnnouncementResponse):
    stats: AnnouncementStats

class AnnouncementPage(BaseModel):
    announcements: List[UserAnnouncement]
    pagination: Pagination

class AdminAnnouncementPage(BaseModel):
    announcements: List[AdminAnnouncement]
    pagination: Pagination

class UnreadCount(BaseModel):
    unread_count: int
