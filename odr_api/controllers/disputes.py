"""
Dispute controller.
Covers disputes, their parties and their activity log.
"""

from typing import List

from odr_api.controllers.base import BaseController
from odr_api.models.activity import ActivityRecordRequest, ActivityReport, DisputeActivityResponse
from odr_api.models.dispute import DisputeCreateRequest, DisputeResponse, DisputeUpdateRequest
from odr_api.models.party import DisputePartyResponse, PartyInviteRequest
from odr_api.services.container import ServiceContainer


class DisputeController(BaseController):
    """Controller for dispute, party and activity operations."""

    def __init__(self, services: ServiceContainer):
        self.disputes = services.disputes
        self.parties = services.parties
        self.activity_log = services.activity_log

    # Disputes

    def create_dispute(self, actor_id: str, request: DisputeCreateRequest) -> DisputeResponse:
        return self._run("creating dispute", self.disputes.create_dispute, actor_id, request)

    def get_dispute(self, actor_id: str, dispute_id: str) -> DisputeResponse:
        return self._run("fetching dispute", self.disputes.get_dispute, actor_id, dispute_id)

    def list_disputes(self, actor_id: str) -> List[DisputeResponse]:
        return self._run("listing disputes", self.disputes.list_disputes, actor_id)

    def update_dispute(
        self,
        actor_id: str,
        dispute_id: str,
        request: DisputeUpdateRequest,
    ) -> DisputeResponse:
        return self._run(
            "updating dispute", self.disputes.update_dispute, actor_id, dispute_id, request
        )

    # Parties

    def invite_party(
        self,
        actor_id: str,
        dispute_id: str,
        request: PartyInviteRequest,
    ) -> DisputePartyResponse:
        return self._run("inviting party", self.parties.invite, actor_id, dispute_id, request)

    def accept_invitation(self, actor_id: str, invitation_code: str) -> DisputePartyResponse:
        return self._run(
            "accepting invitation", self.parties.accept_invitation, invitation_code, actor_id
        )

    def remove_party(self, actor_id: str, party_id: str) -> DisputePartyResponse:
        return self._run("removing party", self.parties.remove, actor_id, party_id)

    def list_parties(self, actor_id: str, dispute_id: str) -> List[DisputePartyResponse]:
        return self._run("listing parties", self.parties.list_parties, actor_id, dispute_id)

    def find_party_by_email(self, actor_id: str, dispute_id: str, email: str) -> DisputePartyResponse:
        return self._run(
            "looking up party", self.parties.get_party_by_email, actor_id, dispute_id, email
        )

    # Activity log

    def record_activity(
        self,
        actor_id: str,
        dispute_id: str,
        request: ActivityRecordRequest,
    ) -> DisputeActivityResponse:
        return self._run(
            "recording activity",
            self.activity_log.record_activity,
            actor_id,
            dispute_id,
            request.activity_type,
            request.payload,
        )

    def list_activities(self, actor_id: str, dispute_id: str) -> List[DisputeActivityResponse]:
        return self._run(
            "listing activities", self.activity_log.list_activities, actor_id, dispute_id
        )

    def activity_report(self, actor_id: str, dispute_id: str) -> ActivityReport:
        return self._run("building activity report", self.activity_log.report, actor_id, dispute_id)
