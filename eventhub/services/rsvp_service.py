from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.schemas import RSVPCreate
from eventhub.db.models import Participant, User
from eventhub.db.repositories import (
    create_participant as db_create_participant,
    delete_participant as db_delete_participant,
    get_event as db_get_event,
    get_participant as db_get_participant,
    list_participants_for_event as db_list_participants_for_event,
    list_participants_for_event_and_user as db_list_participants_for_event_and_user,
    list_participants_for_user as db_list_participants_for_user,
)
from eventhub.concurrency.event_locks import event_locks
from eventhub.core.exceptions import AuthorizationError, ConflictError, NotFoundError, RevisionConflictError
from eventhub.core.logging import logger
from eventhub.services.retry import with_revision_retries
from typing import List, Optional


class RSVPService:
    """
    Creation, lookup and cancellation of RSVPs.

    Creating an RSVP runs under the event's lock and commits only while the
    event revision it checked capacity against is still current, so capacity
    holds under concurrent requests in one process and across processes.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_rsvp(self, payload: RSVPCreate, user: User) -> Participant:
        event_id = payload.event_id
        # Plain values: a rollback inside a retry expires every ORM instance in the session
        identity = (user.id, user.name, user.email)
        async with event_locks.hold(event_id):
            return await with_revision_retries(
                self._create_once, event_id, *identity, label=f"RSVP to event {event_id}"
            )

    async def _create_once(
        self, event_id: str, user_id: str, user_name: Optional[str], user_email: Optional[str]
    ) -> Participant:
        event = await db_get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found")

        existing = await db_list_participants_for_event(self.session, event_id)
        if any(p.user_id == user_id for p in existing):
            raise ConflictError("Already RSVP'd to this event")

        if event.max_participants and len(existing) >= event.max_participants:
            raise ConflictError("Event is full")

        participant = await db_create_participant(self.session, event, user_id, user_name, user_email)
        logger.info(f"User {user_id} RSVP'd to event {event_id} ({len(existing) + 1} participants)")
        return participant

    async def get_participant(self, participant_id: str) -> Participant:
        participant = await db_get_participant(self.session, participant_id)
        if not participant:
            raise NotFoundError("RSVP not found")
        return participant

    async def list_for_event(self, event_id: str) -> List[Participant]:
        return await db_list_participants_for_event(self.session, event_id)

    async def list_for_user(self, user_id: str) -> List[Participant]:
        return await db_list_participants_for_user(self.session, user_id)

    async def cancel_rsvp(self, participant_id: str, user: User) -> None:
        """Cancel an RSVP by its id; only its owner may do so."""
        user_id = user.id
        participant = await self.get_participant(participant_id)
        if participant.user_id != user_id:
            raise AuthorizationError("Not authorized to cancel this RSVP")
        await self._delete(participant.id, participant.rev)
        logger.info(f"User {user_id} cancelled RSVP {participant_id}")

    async def cancel_rsvp_for_event(self, event_id: str, user_id: str, user: User) -> None:
        """
        Cancel the RSVP held by ``user_id`` for ``event_id``.

        The unique (event, user) constraint means at most one match; should
        several exist anyway (rows written around the service), the violation
        is logged and the earliest RSVP is cancelled.
        """
        if user_id != user.id:
            raise AuthorizationError("Not authorized to cancel this RSVP")

        matches = await db_list_participants_for_event_and_user(self.session, event_id, user_id)
        if not matches:
            raise NotFoundError("RSVP not found")
        if len(matches) > 1:
            logger.error(
                f"Data integrity violation: {len(matches)} RSVPs for event {event_id} and user {user_id}, "
                f"cancelling the earliest ({matches[0].id})"
            )

        target = matches[0]
        await self._delete(target.id, target.rev)
        logger.info(f"User {user_id} cancelled RSVP {target.id} for event {event_id}")

    async def _delete(self, participant_id: str, rev: str) -> None:
        try:
            await db_delete_participant(self.session, participant_id, rev)
        except RevisionConflictError:
            # Participants are never rewritten, so a stale revision means it is gone
            raise NotFoundError("RSVP not found")
