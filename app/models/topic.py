from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.utils.ids import new_id, utcnow


class Topic(Base):
    __tablename__ = "topics"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(255), unique=True, index=True, nullable=False)
    posts = Column(Integer, default=0, nullable=False)  # number of posts referencing this topic
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
