import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint

from app.database import Base
from app.utils.ids import new_id, utcnow


class ShareMedium(str, enum.Enum):
    TWITTER = "TWITTER"
    FACEBOOK = "FACEBOOK"
    WHATSAPP = "WHATSAPP"
    TELEGRAM = "TELEGRAM"
    TIKTOK = "TIKTOK"
    INSTAGRAM = "INSTAGRAM"
    EMAIL = "EMAIL"
    GENERIC = "GENERIC"

    @classmethod
    def coerce(cls, value) -> "ShareMedium":
        try:
            return cls(value)
        except (ValueError, TypeError):
            return cls.GENERIC


class Share(Base):
    __tablename__ = "shares"

    id = Column(String(32), primary_key=True, default=new_id)
    post_id = Column(String(32), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    sharer_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    medium = Column(Enum(ShareMedium, name="share_medium"), nullable=False, default=ShareMedium.GENERIC)
    clicks = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("post_id", "sharer_id", "medium", name="_post_sharer_medium_uc"),)
