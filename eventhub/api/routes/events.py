from fastapi import APIRouter, Depends, status
from eventhub.schemas import (
    EventCreate,
    EventUpdate,
    EventDetailOut,
    EventResponse,
    EventListResponse,
    MessageResponse,
)
from eventhub.db.session import get_session
from eventhub.services.event_service import EventService
from eventhub.auth import get_current_user
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(session)


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    payload: EventCreate,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    ev = await event_service.create_event(payload, user)
    return {"message": "Event created successfully", "event": ev}


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    """List all events, newest first."""
    return {"events": await event_service.list_events()}


@router.get("/creator/{user_id}", response_model=EventListResponse)
async def list_events_by_creator_endpoint(
    user_id: str,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    return {"events": await event_service.list_events_by_creator(user_id)}


@router.get("/{event_id}", response_model=EventDetailOut)
async def get_event_detail(
    event_id: str,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    return await event_service.get_event_detail(event_id)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event_endpoint(
    event_id: str,
    payload: EventUpdate,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    """
    Update an event. Creator only; omitted fields keep their current value.
    """
    ev = await event_service.update_event(event_id, payload, user)
    return {"message": "Event updated successfully", "event": ev}


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event_endpoint(
    event_id: str,
    user=Depends(get_current_user),
    event_service: EventService = Depends(get_event_service)
):
    """
    Delete an event and every RSVP linked to it. Creator only.
    """
    await event_service.delete_event(event_id, user)
    return {"message": "Event and linked RSVPs deleted successfully"}
