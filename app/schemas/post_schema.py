from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.models.post import MediaSource


class AuthorSummary(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    address: str

    model_config = ConfigDict(from_attributes=True)


class TopicSummary(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    title: str

    model_config = ConfigDict(from_attributes=True)


class PostListItem(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    upvotes: int
    downvotes: int
    shares: int
    caption: Optional[str] = None
    media_url: str
    tiktok: Optional[str] = None
    media_source: MediaSource
    created_at: datetime
    author: AuthorSummary
    topic: TopicSummary

    # Only present for authenticated callers
    upvoted: Optional[bool] = None
    downvoted: Optional[bool] = None

    model_config = ConfigDict(from_attributes=True)


class PostDetail(BaseModel):
    id: str = Field(..., serialization_alias="_id")
    topic_id: TopicSummary
    author_id: str
    caption: Optional[str] = None
    media_url: str
    tiktok: Optional[str] = None
    upvotes: int
    downvotes: int
    shares: int
    created_at: datetime


class PageMeta(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class PostCreated(BaseModel):
    id: str = Field(..., serialization_alias="_id")
