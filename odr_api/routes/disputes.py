"""
Dispute routes.
"""

from typing import List

from fastapi import APIRouter, Depends

from odr_api.controllers.disputes import DisputeController
from odr_api.models.dispute import DisputeCreateRequest, DisputeResponse, DisputeUpdateRequest
from odr_api.routes.dependencies import get_actor_id, get_dispute_controller

router = APIRouter()


@router.post("/disputes", response_model=DisputeResponse, status_code=201)
def create_dispute(
    request: DisputeCreateRequest,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """
    File a new dispute owned by the caller.

    Args:
        request: Dispute details

    Returns:
        DisputeResponse in pending status
    """
    return controller.create_dispute(actor_id, request)


@router.get("/disputes", response_model=List[DisputeResponse])
def list_disputes(
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Disputes the caller owns or has joined."""
    return controller.list_disputes(actor_id)


@router.get("/disputes/{dispute_id}", response_model=DisputeResponse)
def get_dispute(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Get one dispute."""
    return controller.get_dispute(actor_id, dispute_id)


@router.patch("/disputes/{dispute_id}", response_model=DisputeResponse)
def update_dispute(
    dispute_id: str,
    request: DisputeUpdateRequest,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """
    Edit dispute fields or change its status.

    Args:
        dispute_id: The dispute UUID
        request: Fields to change; status changes are owner-only

    Returns:
        Updated DisputeResponse
    """
    return controller.update_dispute(actor_id, dispute_id, request)
