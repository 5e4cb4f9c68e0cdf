"""
Settlement controller for proposals and signatures.
"""

from typing import List

from odr_api.controllers.base import BaseController
from odr_api.models.settlement import (
    DigitalSignatureResponse,
    ProposalCreateRequest,
    ProposalUpdateRequest,
    SettlementProposalResponse,
    SignatureIssuedResponse,
    SignatureVerifyRequest,
)
from odr_api.services.container import ServiceContainer


class SettlementController(BaseController):
    """Controller for settlement proposal and signature operations."""

    def __init__(self, services: ServiceContainer):
        self.settlements = services.settlements

    def create_proposal(
        self,
        actor_id: str,
        dispute_id: str,
        request: ProposalCreateRequest,
    ) -> SettlementProposalResponse:
        return self._run(
            "creating settlement proposal",
            self.settlements.create_proposal,
            actor_id,
            dispute_id,
            request,
        )

    def list_proposals(self, actor_id: str, dispute_id: str) -> List[SettlementProposalResponse]:
        return self._run(
            "listing settlement proposals", self.settlements.list_proposals, actor_id, dispute_id
        )

    def get_proposal(self, actor_id: str, proposal_id: str) -> SettlementProposalResponse:
        return self._run(
            "fetching settlement proposal", self.settlements.get_proposal, actor_id, proposal_id
        )

    def update_proposal(
        self,
        actor_id: str,
        proposal_id: str,
        request: ProposalUpdateRequest,
    ) -> SettlementProposalResponse:
        return self._run(
            "updating settlement proposal",
            self.settlements.update_proposal,
            actor_id,
            proposal_id,
            request,
        )

    def create_signature(self, actor_id: str, proposal_id: str) -> SignatureIssuedResponse:
        return self._run("creating signature", self.settlements.create_signature, actor_id, proposal_id)

    def list_signatures(self, actor_id: str, proposal_id: str) -> List[DigitalSignatureResponse]:
        return self._run("listing signatures", self.settlements.list_signatures, actor_id, proposal_id)

    def verify_signature(
        self,
        actor_id: str,
        signature_id: str,
        request: SignatureVerifyRequest,
    ) -> DigitalSignatureResponse:
        return self._run(
            "verifying signature",
            self.settlements.verify_signature,
            actor_id,
            signature_id,
            request.verification_code,
        )
