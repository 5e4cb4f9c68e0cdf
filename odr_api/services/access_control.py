"""
Access control for disputes.
Answers whether an actor is the owner, an active party or the current
mediator of a dispute. Lookups never raise on unknown ids; the require_*
helpers turn a negative answer into a domain error.
"""

import logging
from typing import Optional

from odr_api.daos.dispute_dao import DisputeDAO
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.daos.mediation_dao import MediationSessionDAO
from odr_api.errors import ForbiddenError, NotFoundError
from odr_api.models.dispute import DisputeResponse
from odr_api.models.party import DisputePartyResponse

logger = logging.getLogger(__name__)


class AccessControl:
    """Single arbiter of cross-entity authorization."""

    def __init__(
        self,
        dispute_dao: DisputeDAO,
        party_dao: DisputePartyDAO,
        session_dao: MediationSessionDAO,
    ):
        self.dispute_dao = dispute_dao
        self.party_dao = party_dao
        self.session_dao = session_dao

    def is_owner(self, user_id: Optional[str], dispute_id: str) -> bool:
        if not user_id:
            return False
        dispute = self.dispute_dao.get_dispute_by_id(dispute_id)
        return dispute is not None and dispute.user_id == user_id

    def party_by_user(self, dispute_id: str, user_id: Optional[str]) -> Optional[DisputePartyResponse]:
        """Active party row bound to user_id on this dispute, if any."""
        if not user_id:
            return None
        return self.party_dao.get_active_party_by_user(dispute_id, user_id)

    def is_party(self, user_id: Optional[str], dispute_id: str) -> bool:
        return self.party_by_user(dispute_id, user_id) is not None

    def is_mediator(self, user_id: Optional[str], dispute_id: str) -> bool:
        """True if user_id mediates the session the dispute currently points at."""
        if not user_id:
            return False
        dispute = self.dispute_dao.get_dispute_by_id(dispute_id)
        if dispute is None or not dispute.mediation_session_id:
            return False
        session = self.session_dao.get_session_by_id(dispute.mediation_session_id)
        return session is not None and session.mediator_id == user_id

    def can_access(self, user_id: Optional[str], dispute_id: str) -> bool:
        return (
            self.is_owner(user_id, dispute_id)
            or self.is_party(user_id, dispute_id)
            or self.is_mediator(user_id, dispute_id)
        )

    def require_dispute(self, dispute_id: str) -> DisputeResponse:
        """Load a dispute without any actor check, raising NotFoundError if missing."""
        dispute = self.dispute_dao.get_dispute_by_id(dispute_id)
        if dispute is None:
            raise NotFoundError(f"Dispute {dispute_id} not found")
        return dispute

    def require_access(self, user_id: Optional[str], dispute_id: str) -> DisputeResponse:
        """
        Load a dispute the actor may act on.

        Raises:
            NotFoundError: If the dispute does not exist
            ForbiddenError: If the actor is not owner, party or mediator
        """
        dispute = self.require_dispute(dispute_id)
        if not self.can_access(user_id, dispute_id):
            logger.info(f"Access denied for user {user_id} on dispute {dispute_id}")
            raise ForbiddenError("You do not have access to this dispute")
        return dispute

    def require_owner(self, user_id: Optional[str], dispute_id: str) -> DisputeResponse:
        """Load a dispute and check that the actor owns it."""
        dispute = self.require_dispute(dispute_id)
        if not user_id or dispute.user_id != user_id:
            logger.info(f"Owner check failed for user {user_id} on dispute {dispute_id}")
            raise ForbiddenError("Only the dispute owner can perform this action")
        return dispute

    def require_owner_or_mediator(self, user_id: Optional[str], dispute_id: str) -> DisputeResponse:
        dispute = self.require_dispute(dispute_id)
        if not (self.is_owner(user_id, dispute_id) or self.is_mediator(user_id, dispute_id)):
            logger.info(f"Owner or mediator check failed for user {user_id} on dispute {dispute_id}")
            raise ForbiddenError("Only the dispute owner or the mediator can perform this action")
        return dispute
