from fastapi import APIRouter, Depends, status
from eventhub.schemas import (
    RSVPCreate,
    ParticipantOut,
    ParticipantResponse,
    ParticipantListResponse,
    RSVPListResponse,
    MessageResponse,
)
from eventhub.db.session import get_session
from eventhub.services.rsvp_service import RSVPService
from eventhub.auth import get_current_user
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/participants", tags=["participants"])


def get_rsvp_service(session: AsyncSession = Depends(get_session)) -> RSVPService:
    return RSVPService(session)


@router.post("", response_model=ParticipantResponse, status_code=status.HTTP_201_CREATED)
async def create_rsvp_endpoint(
    payload: RSVPCreate,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    participant = await rsvp_service.create_rsvp(payload, user)
    return {"message": "RSVP successful", "participant": participant}


@router.get("/event/{event_id}", response_model=ParticipantListResponse)
async def list_event_participants(
    event_id: str,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    participants = await rsvp_service.list_for_event(event_id)
    return {"participants": participants, "count": len(participants)}


# Declared before /{participant_id} so "my-rsvps" is not taken for an id
@router.get("/my-rsvps", response_model=RSVPListResponse)
async def list_my_rsvps(
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    return {"rsvps": await rsvp_service.list_for_user(user.id)}


@router.get("/user/{user_id}", response_model=RSVPListResponse)
async def list_user_rsvps(
    user_id: str,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    return {"rsvps": await rsvp_service.list_for_user(user_id)}


@router.get("/{participant_id}", response_model=ParticipantOut)
async def get_participant_endpoint(
    participant_id: str,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    return await rsvp_service.get_participant(participant_id)


@router.delete("/event/{event_id}/user/{user_id}", response_model=MessageResponse)
async def cancel_rsvp_for_event_endpoint(
    event_id: str,
    user_id: str,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    """Cancel the caller's RSVP for an event (alternative to cancelling by id)."""
    await rsvp_service.cancel_rsvp_for_event(event_id, user_id, user)
    return {"message": "RSVP cancelled successfully"}


@router.delete("/{participant_id}", response_model=MessageResponse)
async def cancel_rsvp_endpoint(
    participant_id: str,
    user=Depends(get_current_user),
    rsvp_service: RSVPService = Depends(get_rsvp_service)
):
    await rsvp_service.cancel_rsvp(participant_id, user)
    return {"message": "RSVP cancelled successfully"}
