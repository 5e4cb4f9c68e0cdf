"""
Party registry.
Invites counterparties by email, binds them to user accounts when they
accept their invitation code, and soft-removes them.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from odr_api.config.policy import MediationPolicy
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.errors import ConflictError, DatabaseError, NotFoundError
from odr_api.models.activity import ActivityType
from odr_api.models.dispute import DisputeResponse
from odr_api.models.party import (
    DisputePartyCreate,
    DisputePartyResponse,
    DisputePartyUpdate,
    PartyInviteRequest,
    PartyStatus,
)
from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog
from odr_api.utils.codes import generate_token, generate_unique_code
from odr_api.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)

InvitationNotifier = Callable[[DisputePartyResponse, DisputeResponse], Dict[str, Any]]


class PartyRegistry:
    """Manages dispute parties and their invitation codes."""

    def __init__(
        self,
        party_dao: DisputePartyDAO,
        access: AccessControl,
        activity_log: ActivityLog,
        policy: MediationPolicy,
        notifier: Optional[InvitationNotifier] = None,
    ):
        self.party_dao = party_dao
        self.access = access
        self.activity_log = activity_log
        self.policy = policy
        self.notifier = notifier

    def _new_invitation_code(self) -> str:
        return generate_unique_code(
            lambda: generate_token(self.policy.invitation_code_bytes),
            lambda code: self.party_dao.get_party_by_invitation_code(code) is not None,
            max_attempts=self.policy.max_generation_attempts,
        )

    def invite(
        self,
        actor_id: str,
        dispute_id: str,
        request: PartyInviteRequest,
    ) -> DisputePartyResponse:
        """
        Invite a counterparty to a dispute.

        Args:
            actor_id: Must own the dispute
            dispute_id: Dispute UUID
            request: Invitee email, role and optional contact details

        Returns:
            The new party in invited status

        Raises:
            ConflictError: The email already has a live party row on this dispute
        """
        dispute = self.access.require_owner(actor_id, dispute_id)
        email = request.email.strip().lower()

        if self.party_dao.get_party_by_email(dispute_id, email) is not None:
            raise ConflictError(f"{email} is already a party to this dispute")

        party = self.party_dao.create_party(
            DisputePartyCreate(
                dispute_id=dispute_id,
                email=email,
                role=request.role,
                name=request.name,
                phone=request.phone,
                invitation_code=self._new_invitation_code(),
            )
        )
        try:
            self.activity_log.record(
                dispute_id,
                actor_id,
                ActivityType.PARTY_ADDED,
                {"party_id": party.id, "email": email, "role": party.role.value},
            )
        except DatabaseError:
            self.party_dao.delete_party(party.id)
            raise
        logger.info(f"Invited {email} to dispute {dispute_id} as {party.role.value}")

        self._notify(party, dispute)
        return party

    def _notify(self, party: DisputePartyResponse, dispute: DisputeResponse) -> None:
        if self.notifier is None:
            return
        result = self.notifier(party, dispute)
        if result.get("status") != "sent":
            logger.warning(
                f"Invitation email to {party.email} not sent: {result.get('error', 'unknown error')}"
            )

    def accept_invitation(self, invitation_code: str, user_id: str) -> DisputePartyResponse:
        """
        Bind a user to the party row behind an invitation code.

        Raises:
            NotFoundError: Unknown code
            ConflictError: The code was already used, or the party was removed
        """
        party = self.party_dao.get_party_by_invitation_code(invitation_code)
        if party is None:
            raise NotFoundError("Invitation not found")
        if party.status != PartyStatus.INVITED:
            raise ConflictError("Invitation has already been used or revoked")

        now = utc_now()
        accepted = self.party_dao.update_party(
            party.id,
            DisputePartyUpdate(
                user_id=user_id,
                status=PartyStatus.ACTIVE,
                joined_at=now,
                updated_at=now,
            ),
            expected_status=PartyStatus.INVITED,
        )
        if accepted is None:
            raise ConflictError("Invitation has already been used or revoked")

        try:
            self.activity_log.record(
                party.dispute_id,
                user_id,
                ActivityType.PARTY_JOINED,
                {"party_id": party.id, "role": party.role.value},
            )
        except DatabaseError:
            # Hand the invitation back so the same code can be retried
            self.party_dao.update_party(
                party.id,
                DisputePartyUpdate(
                    user_id=party.user_id,
                    status=PartyStatus.INVITED,
                    joined_at=party.joined_at,
                    updated_at=party.updated_at,
                ),
                expected_status=PartyStatus.ACTIVE,
            )
            raise
        logger.info(f"User {user_id} joined dispute {party.dispute_id}")
        return accepted

    def remove(self, actor_id: str, party_id: str) -> DisputePartyResponse:
        """Soft-remove a party. Only the dispute owner may do this."""
        party = self.party_dao.get_party_by_id(party_id)
        if party is None:
            raise NotFoundError(f"Party {party_id} not found")
        self.access.require_owner(actor_id, party.dispute_id)

        if party.status == PartyStatus.REMOVED:
            return party

        removed = self.party_dao.update_party(
            party_id,
            DisputePartyUpdate(status=PartyStatus.REMOVED, updated_at=utc_now()),
            expected_status=party.status,
        )
        if removed is None:
            raise ConflictError("Party changed while removing, please retry")

        try:
            self.activity_log.record(
                party.dispute_id,
                actor_id,
                ActivityType.PARTY_REMOVED,
                {"party_id": party_id, "email": party.email},
            )
        except DatabaseError:
            self.party_dao.update_party(
                party_id,
                DisputePartyUpdate(status=party.status, updated_at=party.updated_at),
                expected_status=PartyStatus.REMOVED,
            )
            raise
        return removed

    def list_parties(self, actor_id: str, dispute_id: str) -> List[DisputePartyResponse]:
        self.access.require_access(actor_id, dispute_id)
        return self.party_dao.get_parties_by_dispute(dispute_id)

    def get_party_by_email(
        self,
        actor_id: str,
        dispute_id: str,
        email: str,
    ) -> DisputePartyResponse:
        """Look up a live party of one dispute by email."""
        self.access.require_access(actor_id, dispute_id)
        party = self.party_dao.get_party_by_email(dispute_id, email.strip().lower())
        if party is None:
            raise NotFoundError(f"No party with email {email} on this dispute")
        return party
