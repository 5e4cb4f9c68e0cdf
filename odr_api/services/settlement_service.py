"""
Settlement proposals and digital signatures.

Proposals move draft -> proposed -> accepted | rejected | withdrawn and are
immutable once terminal. A signature is a verification-code confirmation on
an accepted proposal: it is stored pending and verified exactly once.
"""

import hmac
import logging
from datetime import timedelta
from typing import List

from odr_api.config.policy import MediationPolicy
from odr_api.daos.settlement_dao import DigitalSignatureDAO, SettlementProposalDAO
from odr_api.errors import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
)
from odr_api.models.activity import ActivityType
from odr_api.models.dispute import TERMINAL_STATUSES
from odr_api.models.settlement import (
    AUTHOR_TRANSITIONS,
    PROPOSAL_TRANSITIONS,
    RESPONSE_TRANSITIONS,
    DigitalSignatureCreate,
    DigitalSignatureResponse,
    ProposalCreateRequest,
    ProposalStatus,
    ProposalUpdateRequest,
    SettlementProposalCreate,
    SettlementProposalResponse,
    SettlementProposalUpdate,
    SignatureIssuedResponse,
)
from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog
from odr_api.utils.codes import generate_numeric_code
from odr_api.utils.datetime_utils import as_utc, utc_now

logger = logging.getLogger(__name__)

STATUS_ACTIVITIES = {
    ProposalStatus.PROPOSED: ActivityType.PROPOSAL_PROPOSED,
    ProposalStatus.ACCEPTED: ActivityType.PROPOSAL_ACCEPTED,
    ProposalStatus.REJECTED: ActivityType.PROPOSAL_REJECTED,
    ProposalStatus.WITHDRAWN: ActivityType.PROPOSAL_WITHDRAWN,
}

EDITABLE_FIELDS = ("title", "terms", "document_id")


def is_expired(proposal: SettlementProposalResponse) -> bool:
    return proposal.expires_at is not None and as_utc(proposal.expires_at) <= utc_now()


class SettlementService:
    """Settlement proposal and signature workflows."""

    def __init__(
        self,
        proposal_dao: SettlementProposalDAO,
        signature_dao: DigitalSignatureDAO,
        access: AccessControl,
        activity_log: ActivityLog,
        policy: MediationPolicy,
    ):
        self.proposal_dao = proposal_dao
        self.signature_dao = signature_dao
        self.access = access
        self.activity_log = activity_log
        self.policy = policy

    def _load_proposal(self, proposal_id: str) -> SettlementProposalResponse:
        proposal = self.proposal_dao.get_proposal_by_id(proposal_id)
        if proposal is None:
            raise NotFoundError(f"Settlement proposal {proposal_id} not found")
        return proposal

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def create_proposal(
        self,
        actor_id: str,
        dispute_id: str,
        request: ProposalCreateRequest,
    ) -> SettlementProposalResponse:
        """
        Create a settlement proposal on a dispute.

        The expiry window defaults to the policy value and is capped at the
        policy maximum. With submit=True the proposal skips the draft stage.

        Raises:
            InvalidTransitionError: The dispute is resolved or closed
        """
        dispute = self.access.require_access(actor_id, dispute_id)
        if dispute.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Cannot propose a settlement on a {dispute.status.value} dispute"
            )

        days = min(
            request.expires_in_days or self.policy.default_expiry_days,
            self.policy.max_expiry_days,
        )
        status = ProposalStatus.PROPOSED if request.submit else ProposalStatus.DRAFT

        proposal = self.proposal_dao.create_proposal(
            SettlementProposalCreate(
                dispute_id=dispute_id,
                proposed_by=actor_id,
                title=request.title,
                terms=request.terms,
                document_id=request.document_id,
                status=status,
                expires_at=utc_now() + timedelta(days=days),
            )
        )
        try:
            self.activity_log.record(
                dispute_id,
                actor_id,
                ActivityType.PROPOSAL_CREATED,
                {"proposal_id": proposal.id, "title": proposal.title, "status": status.value},
            )
        except DatabaseError:
            self.proposal_dao.delete_proposal(proposal.id)
            raise
        return proposal

    def list_proposals(self, actor_id: str, dispute_id: str) -> List[SettlementProposalResponse]:
        self.access.require_access(actor_id, dispute_id)
        return self.proposal_dao.get_proposals_by_dispute(dispute_id)

    def get_proposal(self, actor_id: str, proposal_id: str) -> SettlementProposalResponse:
        proposal = self._load_proposal(proposal_id)
        self.access.require_access(actor_id, proposal.dispute_id)
        return proposal

    def update_proposal(
        self,
        actor_id: str,
        proposal_id: str,
        request: ProposalUpdateRequest,
    ) -> SettlementProposalResponse:
        """
        Edit a draft or move a proposal along its state machine.

        Args:
            actor_id: Authenticated user
            proposal_id: Proposal UUID
            request: Field edits and/or a target status

        Returns:
            The updated proposal

        Raises:
            ForbiddenError: Wrong actor for the edit or transition
            InvalidTransitionError: Terminal proposal, illegal transition,
                edits outside draft, or a response to an expired proposal
        """
        proposal = self._load_proposal(proposal_id)
        self.access.require_access(actor_id, proposal.dispute_id)

        requested = request.model_dump(exclude_unset=True)
        fields = {
            key: requested[key]
            for key in EDITABLE_FIELDS
            if key in requested and (requested[key] is not None or key == "document_id")
        }
        target = requested.get("status")
        if target is not None and ProposalStatus(target) == proposal.status:
            target = None

        if not PROPOSAL_TRANSITIONS[proposal.status]:
            raise InvalidTransitionError(f"A {proposal.status.value} proposal can no longer change")

        is_author = actor_id == proposal.proposed_by
        values = dict(fields)

        if fields:
            if proposal.status != ProposalStatus.DRAFT:
                raise InvalidTransitionError("Only draft proposals can be edited")
            if not is_author:
                raise ForbiddenError("Only the author can edit a proposal")

        if target is not None:
            target = ProposalStatus(target)
            if target not in PROPOSAL_TRANSITIONS[proposal.status]:
                raise InvalidTransitionError(
                    f"Cannot move proposal from {proposal.status.value} to {target.value}"
                )
            if target in AUTHOR_TRANSITIONS and not is_author:
                raise ForbiddenError("Only the author can submit or withdraw a proposal")
            if target in RESPONSE_TRANSITIONS:
                if is_author:
                    raise ForbiddenError("The author cannot respond to their own proposal")
                if is_expired(proposal):
                    raise InvalidTransitionError("The proposal has expired")
                values["responded_by"] = actor_id
                values["responded_at"] = utc_now()
            values["status"] = target

        if not values:
            return proposal

        values["updated_at"] = utc_now()
        updated = self.proposal_dao.update_proposal(
            proposal_id,
            SettlementProposalUpdate(**values),
            expected_status=proposal.status,
        )
        if updated is None:
            raise InvalidTransitionError("Proposal changed while updating, please retry")

        entries = []
        if fields:
            entries.append(self.activity_log.entry(
                proposal.dispute_id,
                actor_id,
                ActivityType.PROPOSAL_UPDATED,
                {"proposal_id": proposal_id, "fields": sorted(fields.keys())},
            ))
        if target is not None:
            entries.append(self.activity_log.entry(
                proposal.dispute_id,
                actor_id,
                STATUS_ACTIVITIES[target],
                {"proposal_id": proposal_id, "from": proposal.status.value, "to": target.value},
            ))
        try:
            self.activity_log.record_many(entries)
        except DatabaseError:
            self.proposal_dao.update_proposal(
                proposal_id,
                SettlementProposalUpdate(**{name: getattr(proposal, name) for name in values}),
                expected_status=updated.status,
            )
            logger.warning(f"Rolled back proposal {proposal_id}: its activity could not be recorded")
            raise

        if target is not None:
            logger.info(f"Proposal {proposal_id} moved {proposal.status.value} -> {target.value}")
        return updated

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    def create_signature(self, actor_id: str, proposal_id: str) -> SignatureIssuedResponse:
        """
        Request a signature on an accepted proposal.

        The verification code is returned here and never again.

        Raises:
            InvalidTransitionError: The proposal is not accepted
            ConflictError: The actor already has a signature on this proposal
        """
        proposal = self._load_proposal(proposal_id)
        self.access.require_access(actor_id, proposal.dispute_id)
        if proposal.status != ProposalStatus.ACCEPTED:
            raise InvalidTransitionError("Only accepted proposals can be signed")

        existing = self.signature_dao.get_signatures_by_proposal(proposal_id)
        if any(s.signer_id == actor_id for s in existing):
            raise ConflictError("You have already signed this proposal")

        code = generate_numeric_code(self.policy.verification_code_digits)
        signature = self.signature_dao.create_signature(
            DigitalSignatureCreate(
                proposal_id=proposal_id,
                signer_id=actor_id,
                verification_code=code,
                signed_at=utc_now(),
            )
        )
        try:
            self.activity_log.record(
                proposal.dispute_id,
                actor_id,
                ActivityType.SIGNATURE_REQUESTED,
                {"proposal_id": proposal_id, "signature_id": signature.id},
            )
        except DatabaseError:
            self.signature_dao.delete_signature(signature.id)
            raise
        return SignatureIssuedResponse(signature=signature.public(), verification_code=code)

    def list_signatures(self, actor_id: str, proposal_id: str) -> List[DigitalSignatureResponse]:
        proposal = self._load_proposal(proposal_id)
        self.access.require_access(actor_id, proposal.dispute_id)
        return [s.public() for s in self.signature_dao.get_signatures_by_proposal(proposal_id)]

    def verify_signature(
        self,
        actor_id: str,
        signature_id: str,
        verification_code: str,
    ) -> DigitalSignatureResponse:
        """
        Confirm a signature with its verification code.

        Idempotent: an already verified signature is returned unchanged
        whatever code is supplied. A wrong code changes nothing.

        Raises:
            NotFoundError: Unknown signature or wrong code
            ForbiddenError: Actor is not the signer
            InvalidTransitionError: The proposal is no longer accepted
        """
        signature = self.signature_dao.get_signature_by_id(signature_id)
        if signature is None:
            raise NotFoundError("Signature not found or invalid verification code")
        proposal = self._load_proposal(signature.proposal_id)
        self.access.require_access(actor_id, proposal.dispute_id)
        if signature.signer_id != actor_id:
            raise ForbiddenError("Only the signer can verify this signature")

        if signature.is_verified:
            return signature.public()

        if proposal.status != ProposalStatus.ACCEPTED:
            raise InvalidTransitionError("Signatures can only be verified on accepted proposals")

        if not hmac.compare_digest(
            signature.verification_code.encode(), verification_code.strip().encode()
        ):
            raise NotFoundError("Signature not found or invalid verification code")

        verified = self.signature_dao.mark_verified(signature_id, utc_now())
        if verified is None:
            # Verified concurrently
            current = self.signature_dao.get_signature_by_id(signature_id)
            return current.public()

        try:
            self.activity_log.record(
                proposal.dispute_id,
                actor_id,
                ActivityType.SIGNATURE_VERIFIED,
                {"proposal_id": proposal.id, "signature_id": signature_id},
            )
        except DatabaseError:
            self.signature_dao.clear_verification(signature_id)
            raise
        logger.info(f"Signature {signature_id} verified")
        return verified.public()
