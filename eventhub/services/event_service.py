from dataclasses import dataclass, field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.schemas import EventCreate, EventUpdate, EventOut
from eventhub.db.models import Event, User
from eventhub.db.repositories import (
    count_participants_for_event as db_count_participants_for_event,
    create_event as db_create_event,
    delete_event as db_delete_event,
    delete_participant as db_delete_participant,
    get_event as db_get_event,
    list_events as db_list_events,
    list_events_by_creator as db_list_events_by_creator,
    list_participants_for_event as db_list_participants_for_event,
    update_event as db_update_event,
)
from eventhub.concurrency.event_locks import event_locks
from eventhub.core.exceptions import AuthorizationError, ConflictError, NotFoundError, RevisionConflictError
from eventhub.core.logging import logger
from eventhub.services.retry import with_revision_retries
from typing import List, Tuple

# Columns that may not be cleared by an explicit null in an update
NON_NULLABLE_FIELDS = {"title", "description", "date", "location"}


@dataclass
class CascadeResult:
    event_id: str
    removed_participants: int = 0
    failed_participants: List[str] = field(default_factory=list)


class EventService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_event(self, payload: EventCreate, user: User) -> Event:
        event = await db_create_event(self.session, payload, user)
        logger.info(f"User {event.creator_id} created event {event.id}")
        return event

    async def list_events(self) -> List[Event]:
        return await db_list_events(self.session)

    async def list_events_by_creator(self, creator_id: str) -> List[Event]:
        return await db_list_events_by_creator(self.session, creator_id)

    async def get_event(self, event_id: str) -> Event:
        event = await db_get_event(self.session, event_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    async def get_event_detail(self, event_id: str) -> dict:
        """Event fields plus its participant count and remaining spots."""
        event = await self.get_event(event_id)
        count = await db_count_participants_for_event(self.session, event_id)
        detail = EventOut.model_validate(event).model_dump()
        detail["participant_count"] = count
        detail["available_spots"] = (
            max(0, event.max_participants - count) if event.max_participants else None
        )
        return detail

    async def update_event(self, event_id: str, payload: EventUpdate, user: User) -> Event:
        """
        Overwrite the supplied fields of an event owned by ``user``.

        maxParticipants may be set to null to lift the limit, but not below the
        number of participants already registered.
        """
        changes = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or key not in NON_NULLABLE_FIELDS
        }
        user_id = user.id
        async with event_locks.hold(event_id):
            return await with_revision_retries(
                self._update_once, event_id, changes, user_id, label=f"update of event {event_id}"
            )

    async def _update_once(self, event_id: str, changes: dict, user_id: str) -> Event:
        event = await self._get_owned_event(event_id, user_id, "update")

        new_capacity = changes.get("max_participants")
        if new_capacity is not None:
            count = await db_count_participants_for_event(self.session, event_id)
            if count > new_capacity:
                raise ConflictError(
                    f"maxParticipants cannot be lower than the current number of participants ({count})"
                )

        if not changes:
            return event
        return await db_update_event(self.session, event.id, event.rev, changes)

    async def delete_event(self, event_id: str, user: User) -> CascadeResult:
        """
        Delete an event owned by ``user`` together with all of its RSVPs.

        Participants are removed one by one; a failing removal is logged and
        does not stop the others. The event itself is deleted only while its
        revision is unchanged, so an RSVP committed during the cascade restarts
        it instead of being left behind.
        """
        user_id = user.id
        async with event_locks.hold(event_id):
            return await with_revision_retries(
                self._delete_once, event_id, user_id, label=f"deletion of event {event_id}"
            )

    async def _delete_once(self, event_id: str, user_id: str) -> CascadeResult:
        event = await self._get_owned_event(event_id, user_id, "delete")
        event_rev = event.rev

        participants = await db_list_participants_for_event(self.session, event_id)
        targets = [(p.id, p.rev) for p in participants]

        failed = await self._delete_participants(event_id, targets)
        if failed:
            failed = await self._delete_participants(event_id, failed)

        await db_delete_event(self.session, event_id, event_rev)

        result = CascadeResult(
            event_id=event_id,
            removed_participants=len(targets) - len(failed),
            failed_participants=[participant_id for participant_id, _ in failed],
        )
        if failed:
            logger.error(
                f"Event {event_id} deleted but {len(failed)} participant(s) could not be removed: "
                f"{result.failed_participants}"
            )
        logger.info(f"User {user_id} deleted event {event_id} and {result.removed_participants} RSVP(s)")
        return result

    async def _delete_participants(
        self, event_id: str, targets: List[Tuple[str, str]]
    ) -> List[Tuple[str, str]]:
        failed = []
        for participant_id, rev in targets:
            try:
                await db_delete_participant(self.session, participant_id, rev)
            except RevisionConflictError:
                logger.debug(f"Participant {participant_id} of event {event_id} already removed")
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Failed to delete participant {participant_id} of event {event_id}: {e}")
                failed.append((participant_id, rev))
        return failed

    async def _get_owned_event(self, event_id: str, user_id: str, action: str) -> Event:
        event = await self.get_event(event_id)
        if event.creator_id != user_id:
            raise AuthorizationError(f"Not authorized to {action} this event")
        return event
