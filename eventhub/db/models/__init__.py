"""Database models package."""
from eventhub.db.models.user import User
from eventhub.db.models.event import Event
from eventhub.db.models.participant import Participant

__all__ = ["User", "Event", "Participant"]
