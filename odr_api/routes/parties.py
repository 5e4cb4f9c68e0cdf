"""
Party and invitation routes.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from odr_api.controllers.disputes import DisputeController
from odr_api.models.party import DisputePartyResponse, InvitationAcceptRequest, PartyInviteRequest
from odr_api.routes.dependencies import get_actor_id, get_dispute_controller

router = APIRouter()


@router.post("/disputes/{dispute_id}/parties", response_model=DisputePartyResponse, status_code=201)
def invite_party(
    dispute_id: str,
    request: PartyInviteRequest,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """
    Invite a counterparty by email. Owner only.

    Returns:
        The invited party, including its invitation code
    """
    return controller.invite_party(actor_id, dispute_id, request)


@router.get("/disputes/{dispute_id}/parties", response_model=List[DisputePartyResponse])
def list_parties(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """All parties of a dispute, removed ones included."""
    return controller.list_parties(actor_id, dispute_id)


@router.get("/disputes/{dispute_id}/parties/lookup", response_model=DisputePartyResponse)
def find_party_by_email(
    dispute_id: str,
    email: str = Query(..., min_length=3),
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Find a party of this dispute by email."""
    return controller.find_party_by_email(actor_id, dispute_id, email)


@router.delete("/parties/{party_id}", response_model=DisputePartyResponse)
def remove_party(
    party_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Soft-remove a party. Owner only."""
    return controller.remove_party(actor_id, party_id)


@router.post("/invitations/accept", response_model=DisputePartyResponse)
def accept_invitation(
    request: InvitationAcceptRequest,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """
    Accept an invitation code and join the dispute as the caller.

    Args:
        request: The invitation code received by email

    Returns:
        The now active party
    """
    return controller.accept_invitation(actor_id, request.invitation_code)
