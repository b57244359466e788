from sqlalchemy import Column, String, DateTime, Index, UniqueConstraint
import uuid
from eventhub.db.session import Base


class Participant(Base):
    """One user's RSVP to one event.

    ``event_id`` is a plain reference without a foreign key; participants are
    removed together with their event by the cascade in EventService.
    User and event display fields are snapshots taken at RSVP time.
    """
    __tablename__ = "participants"
    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    rev = Column(String(64), nullable=False)
    event_id = Column(String(32), nullable=False)
    user_id = Column(String(32), nullable=False)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    event_title = Column(String(255), nullable=True)
    event_date = Column(DateTime(timezone=True), nullable=True)
    rsvp_date = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint('event_id', 'user_id', name='uq_participant_event_user'),
        Index('idx_participant_event', 'event_id'),
        Index('idx_participant_user', 'user_id'),
    )
