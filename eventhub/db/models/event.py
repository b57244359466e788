from sqlalchemy import Column, Integer, String, Text, DateTime, Index
import uuid
from eventhub.db.session import Base


class Event(Base):
    __tablename__ = "events"
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    # Revision token, replaced on every write; see repositories.next_revision
    rev = Column(String(64), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String(255), nullable=False)
    # None means unlimited
    max_participants = Column(Integer, nullable=True)
    creator_id = Column(String(32), nullable=False)
    creator_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index('idx_event_date', 'date'),
        Index('idx_event_creator', 'creator_id'),
        Index('idx_event_created_at', 'created_at'),
    )
