# models/user.py
from sqlalchemy import Column, String, DateTime
from app.database import Base
from app.utils.ids import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    address = Column(String(42), unique=True, index=True, nullable=False)  # lower-cased wallet address
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
