"""
Activity log routes.
"""

from typing import List

from fastapi import APIRouter, Depends

from odr_api.controllers.disputes import DisputeController
from odr_api.models.activity import ActivityRecordRequest, ActivityReport, DisputeActivityResponse
from odr_api.routes.dependencies import get_actor_id, get_dispute_controller

router = APIRouter()


@router.post(
    "/disputes/{dispute_id}/activities",
    response_model=DisputeActivityResponse,
    status_code=201,
)
def record_activity(
    dispute_id: str,
    request: ActivityRecordRequest,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Record a client-side event such as a shared document."""
    return controller.record_activity(actor_id, dispute_id, request)


@router.get("/disputes/{dispute_id}/activities", response_model=List[DisputeActivityResponse])
def list_activities(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """Activity log of a dispute, newest first."""
    return controller.list_activities(actor_id, dispute_id)


@router.get("/disputes/{dispute_id}/activity-report", response_model=ActivityReport)
def activity_report(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: DisputeController = Depends(get_dispute_controller),
):
    """
    Aggregated activity report.

    Returns:
        Totals by type and user, top users, daily timeline and recent activities
    """
    return controller.activity_report(actor_id, dispute_id)
