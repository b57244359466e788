"""
Unit tests for the event and RSVP services.
Tests the RSVP cascade on event deletion and cancellation edge cases.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from eventhub.core.logging import logger
from eventhub.db.repositories import (
    create_participant,
    delete_participant,
    get_event,
    list_participants_for_event,
)
from eventhub.db.session import AsyncSessionLocal
from eventhub.schemas import RSVPCreate
from eventhub.services import event_service, rsvp_service
from eventhub.services.event_service import EventService
from eventhub.services.rsvp_service import RSVPService


@pytest.mark.unit
@pytest.mark.asyncio
class TestEventCascade:

    async def test_cascade_removes_every_rsvp(self, db_session, test_event, test_rsvp, other_user, test_organizer):
        event_id = test_event.id
        await RSVPService(db_session).create_rsvp(RSVPCreate(event_id=event_id), other_user)

        result = await EventService(db_session).delete_event(event_id, test_organizer)

        assert result.event_id == event_id
        assert result.removed_participants == 2
        assert result.failed_participants == []
        assert await list_participants_for_event(db_session, event_id) == []

    async def test_failed_rsvp_delete_does_not_stop_cascade(
        self, db_session, make_user, test_event, test_user, other_user, test_organizer, monkeypatch
    ):
        event_id = test_event.id
        third = await make_user("third@example.com", "Third")
        rsvps = RSVPService(db_session)
        ids = [
            (await rsvps.create_rsvp(RSVPCreate(event_id=event_id), user)).id
            for user in (test_user, other_user, third)
        ]
        stuck = ids[1]
        attempts = []

        async def failing_delete(session, participant_id, rev):
            if participant_id == stuck:
                attempts.append(participant_id)
                raise SQLAlchemyError("disk I/O error")
            await delete_participant(session, participant_id, rev)

        monkeypatch.setattr(event_service, "db_delete_participant", failing_delete)

        result = await EventService(db_session).delete_event(event_id, test_organizer)

        assert result.failed_participants == [stuck]
        assert result.removed_participants == 2
        # retried once before giving up
        assert attempts == [stuck, stuck]
        assert await get_event(db_session, event_id) is None
        remaining = await list_participants_for_event(db_session, event_id)
        assert [p.id for p in remaining] == [stuck]

    async def test_rsvp_committed_mid_cascade_is_removed_too(
        self, db_session, test_event, test_rsvp, other_user, test_organizer, monkeypatch
    ):
        event_id = test_event.id
        late_user = (other_user.id, other_user.name, other_user.email)
        late_ids = []

        async def delete_then_interleave(session, participant_id, rev):
            await delete_participant(session, participant_id, rev)
            if not late_ids:
                # Another worker's RSVP lands between the listing and the event delete
                async with AsyncSessionLocal() as other:
                    event = await get_event(other, event_id)
                    late = await create_participant(other, event, *late_user)
                    late_ids.append(late.id)

        monkeypatch.setattr(event_service, "db_delete_participant", delete_then_interleave)

        result = await EventService(db_session).delete_event(event_id, test_organizer)

        assert len(late_ids) == 1
        assert result.failed_participants == []
        assert await get_event(db_session, event_id) is None
        assert await list_participants_for_event(db_session, event_id) == []


@pytest.mark.unit
@pytest.mark.asyncio
class TestCancelForEvent:

    async def test_several_matches_cancel_the_earliest(
        self, db_session, test_event, test_user, other_user, monkeypatch
    ):
        event_id, user_id = test_event.id, test_user.id
        rsvps = RSVPService(db_session)
        await rsvps.create_rsvp(RSVPCreate(event_id=event_id), test_user)
        later = await rsvps.create_rsvp(RSVPCreate(event_id=event_id), other_user)
        later_id = later.id

        async def duplicated_matches(session, event_id, user_id):
            # The unique (event, user) constraint keeps real duplicates out of the table
            return await list_participants_for_event(session, event_id)

        monkeypatch.setattr(rsvp_service, "db_list_participants_for_event_and_user", duplicated_matches)
        messages = []
        handler_id = logger.add(messages.append, level="ERROR", format="{message}")
        try:
            await rsvps.cancel_rsvp_for_event(event_id, user_id, test_user)
        finally:
            logger.remove(handler_id)

        remaining = await list_participants_for_event(db_session, event_id)
        assert [p.id for p in remaining] == [later_id]
        assert any("2 RSVPs" in message for message in messages)
