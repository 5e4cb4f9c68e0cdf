"""
Settlement proposal and signature routes.
"""

from typing import List

from fastapi import APIRouter, Depends

from odr_api.controllers.settlements import SettlementController
from odr_api.models.settlement import (
    DigitalSignatureResponse,
    ProposalCreateRequest,
    ProposalUpdateRequest,
    SettlementProposalResponse,
    SignatureIssuedResponse,
    SignatureVerifyRequest,
)
from odr_api.routes.dependencies import get_actor_id, get_settlement_controller

router = APIRouter()


@router.post(
    "/disputes/{dispute_id}/settlement-proposals",
    response_model=SettlementProposalResponse,
    status_code=201,
)
def create_proposal(
    dispute_id: str,
    request: ProposalCreateRequest,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """Create a settlement proposal, as a draft unless submit is set."""
    return controller.create_proposal(actor_id, dispute_id, request)


@router.get(
    "/disputes/{dispute_id}/settlement-proposals",
    response_model=List[SettlementProposalResponse],
)
def list_proposals(
    dispute_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """Proposals of a dispute, newest first."""
    return controller.list_proposals(actor_id, dispute_id)


@router.get("/settlement-proposals/{proposal_id}", response_model=SettlementProposalResponse)
def get_proposal(
    proposal_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """Get one proposal."""
    return controller.get_proposal(actor_id, proposal_id)


@router.patch("/settlement-proposals/{proposal_id}", response_model=SettlementProposalResponse)
def update_proposal(
    proposal_id: str,
    request: ProposalUpdateRequest,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """
    Edit a draft or change a proposal's status.

    Args:
        proposal_id: The proposal UUID
        request: Field edits and/or the target status

    Returns:
        Updated SettlementProposalResponse
    """
    return controller.update_proposal(actor_id, proposal_id, request)


@router.post(
    "/settlement-proposals/{proposal_id}/signatures",
    response_model=SignatureIssuedResponse,
    status_code=201,
)
def create_signature(
    proposal_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """
    Sign an accepted proposal.

    Returns:
        The pending signature and the verification code needed to confirm it
    """
    return controller.create_signature(actor_id, proposal_id)


@router.get(
    "/settlement-proposals/{proposal_id}/signatures",
    response_model=List[DigitalSignatureResponse],
)
def list_signatures(
    proposal_id: str,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """Signatures on a proposal, without verification codes."""
    return controller.list_signatures(actor_id, proposal_id)


@router.post("/signatures/{signature_id}/verify", response_model=DigitalSignatureResponse)
def verify_signature(
    signature_id: str,
    request: SignatureVerifyRequest,
    actor_id: str = Depends(get_actor_id),
    controller: SettlementController = Depends(get_settlement_controller),
):
    """Confirm a signature with its verification code."""
    return controller.verify_signature(actor_id, signature_id, request)
