from sqlalchemy import Column, String, DateTime, func
import uuid
from eventhub.db.session import Base


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
