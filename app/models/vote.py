import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, UniqueConstraint

from app.database import Base
from app.utils.ids import new_id, utcnow


class VoteType(str, enum.Enum):
    UPVOTE = "UPVOTE"
    DOWNVOTE = "DOWNVOTE"


class Vote(Base):
    __tablename__ = "votes"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    post_id = Column(String(32), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(VoteType, name="vote_type"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "post_id", name="_user_post_vote_uc"),)
