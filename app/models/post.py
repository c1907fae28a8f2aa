import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.ids import new_id, utcnow


class MediaSource(str, enum.Enum):
    UPLOAD = "UPLOAD"
    TIKTOK = "TIKTOK"


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(32), primary_key=True, default=new_id)
    topic_id = Column(String(32), ForeignKey("topics.id"), nullable=False, index=True)
    author_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    caption = Column(Text, nullable=True)
    media_url = Column(String(1024), nullable=False)
    tiktok = Column(String(1024), nullable=True)              # external source link
    media_source = Column(Enum(MediaSource, name="media_source"), nullable=False, default=MediaSource.UPLOAD)

    # Denormalized counters, only ever moved with SQL increments
    upvotes = Column(Integer, default=0, nullable=False)
    downvotes = Column(Integer, default=0, nullable=False)
    shares = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    topic = relationship("Topic")
    author = relationship("User")
