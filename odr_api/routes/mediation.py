"""
Mediation session routes.
"""

from typing import List

from fastapi import APIRouter, Depends

from odr_api.controllers.mediation import MediationController
from odr_api.models.mediation import (
    MediationMessageResponse,
    MediationSessionResponse,
    MessagePostRequest,
    SessionCreateRequest,
    SessionWithMessages,
)
from odr_api.routes.dependencies import get_actor_id, get_mediation_controller

router = APIRouter()


@router.post(
    "/disputes/{dispute_id}/mediation-sessions",
    response_model=MediationSessionResponse,
    status_code=201,
)
def create_session(
    dispute_id: str,
    request: SessionCreateRequest,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """
    Open a mediation session. Owner only.

    Moves the dispute into mediation.
    """
    return controller.create_session(actor_id, dispute_id, request)


@router.get(
    "/disputes/{dispute_id}/mediation-sessions",
    response_model=List[MediationSessionResponse],
)
def list_sessions(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """Sessions of a dispute, newest first."""
    return controller.list_sessions(actor_id, dispute_id)


@router.get("/mediation-sessions/by-code/{session_code}", response_model=MediationSessionResponse)
def get_session_by_code(
    session_code: str,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """Find a session by its join code."""
    return controller.get_session_by_code(actor_id, session_code)


@router.get("/mediation-sessions/{session_id}", response_model=SessionWithMessages)
def get_session(
    session_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """Session details with its full message history."""
    return controller.get_session(actor_id, session_id)


@router.post(
    "/mediation-sessions/{session_id}/messages",
    response_model=List[MediationMessageResponse],
    status_code=201,
)
def post_message(
    session_id: str,
    request: MessagePostRequest,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """
    Post a message to a session.

    Returns:
        The posted message, followed by the AI mediator's reply when the
        session is AI-assisted
    """
    return controller.post_message(actor_id, session_id, request)


@router.get(
    "/mediation-sessions/{session_id}/messages",
    response_model=List[MediationMessageResponse],
)
def get_messages(
    session_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """Messages of a session in turn order."""
    return controller.get_messages(actor_id, session_id)


@router.post("/mediation-sessions/{session_id}/summarize", response_model=MediationSessionResponse)
def summarize_session(
    session_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: MediationController = Depends(get_mediation_controller),
):
    """
    Summarize and complete a session, resolving its dispute.
    Owner or mediator only; repeating the call returns the stored summary.
    """
    return controller.summarize(actor_id, session_id)
