"""
Repository layer for database operations.

Provides async functions for CRUD operations on User, Event, and Participant
entities. Events and participants carry a revision token (``rev``); updates
and deletes name the revision they read and affect nothing if it changed in
the meantime, in which case RevisionConflictError is raised.
"""
from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.db.models.user import User
from eventhub.db.models.event import Event
from eventhub.db.models.participant import Participant
from eventhub.schemas import UserCreate, EventCreate
from eventhub.core.exceptions import ConflictError, RevisionConflictError
from eventhub.core.security import hash_password
from typing import Optional, List
from datetime import datetime, timezone
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_revision(previous: Optional[str] = None) -> str:
    """
    Build the revision token that follows ``previous``.

    Tokens look like ``"3-9f86d081884c7d659a2feaa0c55ad015"``: a generation
    counter followed by a random suffix, so two writers starting from the same
    revision never produce the same token.
    """
    generation = int(previous.split("-", 1)[0]) if previous else 0
    return f"{generation + 1}-{uuid.uuid4().hex}"


# Users

async def create_user(db: AsyncSession, user_in: UserCreate) -> User:
    """
    Create a new user with hashed password.

    Args:
        db: Database session
        user_in: User registration data

    Returns:
        Created User object
    """
    user = User(
        email=user_in.email.lower(),
        hashed_password=hash_password(user_in.password),
        name=user_in.name,
        created_at=utcnow(),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    q = select(User).where(User.email == email.lower())
    res = await db.execute(q)
    return res.scalars().first()


async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
    q = select(User).where(User.id == user_id)
    res = await db.execute(q)
    return res.scalars().first()


# Events

async def create_event(db: AsyncSession, payload: EventCreate, creator: User) -> Event:
    """
    Create a new event owned by ``creator``.

    Args:
        db: Database session
        payload: Event creation data
        creator: User creating the event

    Returns:
        Created Event object
    """
    now = utcnow()
    ev = Event(
        **payload.model_dump(),
        rev=next_revision(),
        creator_id=creator.id,
        creator_name=creator.name,
        created_at=now,
        updated_at=now,
    )
    db.add(ev)
    await db.commit()
    await db.refresh(ev)
    return ev


async def get_event(db: AsyncSession, event_id: str) -> Optional[Event]:
    # populate_existing: callers re-read inside retry loops and need fresh revisions
    q = select(Event).where(Event.id == event_id).execution_options(populate_existing=True)
    res = await db.execute(q)
    return res.scalars().first()


async def list_events(db: AsyncSession) -> List[Event]:
    q = select(Event).order_by(Event.created_at.desc())
    res = await db.execute(q)
    return list(res.scalars().all())


async def list_events_by_creator(db: AsyncSession, creator_id: str) -> List[Event]:
    q = select(Event).where(Event.creator_id == creator_id).order_by(Event.date)
    res = await db.execute(q)
    return list(res.scalars().all())


async def update_event(db: AsyncSession, event_id: str, rev: str, changes: dict) -> Event:
    """
    Apply ``changes`` to the event if it is still at revision ``rev``.

    Raises:
        RevisionConflictError: If the event changed or vanished since it was read
    """
    q = (
        update(Event)
        .where(Event.id == event_id, Event.rev == rev)
        .values(**changes, rev=next_revision(rev), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(q)
    if res.rowcount != 1:
        await db.rollback()
        raise RevisionConflictError()
    await db.commit()
    return await get_event(db, event_id)


async def delete_event(db: AsyncSession, event_id: str, rev: str) -> None:
    """
    Delete the event document if it is still at revision ``rev``.

    Raises:
        RevisionConflictError: If the event changed or vanished since it was read
    """
    res = await db.execute(
        delete(Event)
        .where(Event.id == event_id, Event.rev == rev)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise RevisionConflictError()
    await db.commit()


# Participants

async def get_participant(db: AsyncSession, participant_id: str) -> Optional[Participant]:
    q = select(Participant).where(Participant.id == participant_id)
    res = await db.execute(q)
    return res.scalars().first()


async def list_participants_for_event(db: AsyncSession, event_id: str) -> List[Participant]:
    q = (
        select(Participant)
        .where(Participant.event_id == event_id)
        .order_by(Participant.rsvp_date)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def list_participants_for_user(db: AsyncSession, user_id: str) -> List[Participant]:
    q = select(Participant).where(Participant.user_id == user_id).order_by(Participant.rsvp_date)
    res = await db.execute(q)
    return list(res.scalars().all())


async def list_participants_for_event_and_user(
    db: AsyncSession, event_id: str, user_id: str
) -> List[Participant]:
    q = (
        select(Participant)
        .where(Participant.event_id == event_id, Participant.user_id == user_id)
        .order_by(Participant.rsvp_date)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def count_participants_for_event(db: AsyncSession, event_id: str) -> int:
    q = select(func.count(Participant.id)).where(Participant.event_id == event_id)
    res = await db.execute(q)
    return res.scalar() or 0


async def create_participant(
    db: AsyncSession,
    event: Event,
    user_id: str,
    user_name: Optional[str],
    user_email: Optional[str],
) -> Participant:
    """
    Insert an RSVP for ``event``, guarded by the event's revision.

    The event revision is bumped in the same transaction as the insert, so two
    writers that checked capacity against the same revision cannot both commit.

    Raises:
        RevisionConflictError: If the event changed or vanished since it was read
        ConflictError: If the user already holds an RSVP for the event
    """
    event_id, event_rev = event.id, event.rev
    bump = (
        update(Event)
        .where(Event.id == event_id, Event.rev == event_rev)
        .values(rev=next_revision(event_rev))
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(bump)
    if res.rowcount != 1:
        await db.rollback()
        raise RevisionConflictError()

    participant = Participant(
        rev=next_revision(),
        event_id=event_id,
        user_id=user_id,
        user_name=user_name,
        user_email=user_email,
        event_title=event.title,
        event_date=event.date,
        rsvp_date=utcnow(),
    )
    db.add(participant)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Already RSVP'd to this event")
    await db.refresh(participant)
    return participant


async def delete_participant(db: AsyncSession, participant_id: str, rev: str) -> None:
    """
    Delete the participant document if it is still at revision ``rev``.

    Raises:
        RevisionConflictError: If the participant changed or is already gone
    """
    res = await db.execute(
        delete(Participant)
        .where(Participant.id == participant_id, Participant.rev == rev)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        await db.rollback()
        raise RevisionConflictError()
    await db.commit()
