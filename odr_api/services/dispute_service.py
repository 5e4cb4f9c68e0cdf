"""
Dispute lifecycle management.
Owns the dispute status state machine:
pending -> active -> mediation -> resolved, with closed reachable from any
non-resolved state.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from odr_api.daos.dispute_dao import DisputeDAO
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.errors import DatabaseError, ForbiddenError, InvalidTransitionError, NotFoundError
from odr_api.models.activity import ActivityType, DisputeActivityCreate
from odr_api.models.dispute import (
    MANUAL_TRANSITIONS,
    MEDIATION_START_STATUSES,
    DisputeCreate,
    DisputeCreateRequest,
    DisputeResponse,
    DisputeStatus,
    DisputeUpdate,
    DisputeUpdateRequest,
)
from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog
from odr_api.utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class DisputeLifecycle:
    """Creates, reads and transitions disputes."""

    def __init__(
        self,
        dispute_dao: DisputeDAO,
        party_dao: DisputePartyDAO,
        access: AccessControl,
        activity_log: ActivityLog,
    ):
        self.dispute_dao = dispute_dao
        self.party_dao = party_dao
        self.access = access
        self.activity_log = activity_log

    def create_dispute(self, actor_id: str, request: DisputeCreateRequest) -> DisputeResponse:
        """
        File a new dispute owned by the actor.

        Args:
            actor_id: Authenticated user filing the dispute
            request: Dispute details

        Returns:
            The created dispute, in pending status
        """
        dispute = self.dispute_dao.create_dispute(
            DisputeCreate(
                user_id=actor_id,
                title=request.title,
                description=request.description,
                parties=request.parties,
                dispute_type=request.dispute_type,
                supporting_documents=request.supporting_documents,
            )
        )
        try:
            self.activity_log.record(
                dispute.id,
                actor_id,
                ActivityType.DISPUTE_CREATED,
                {"title": dispute.title, "dispute_type": dispute.dispute_type},
            )
        except DatabaseError:
            self.dispute_dao.delete_dispute(dispute.id)
            raise
        logger.info(f"Dispute {dispute.id} created by user {actor_id}")
        return dispute

    def get_dispute(self, actor_id: str, dispute_id: str) -> DisputeResponse:
        return self.access.require_access(actor_id, dispute_id)

    def list_disputes(self, actor_id: str) -> List[DisputeResponse]:
        """Disputes the actor owns or has joined as an active party, newest first."""
        disputes: Dict[str, DisputeResponse] = {
            d.id: d for d in self.dispute_dao.get_disputes_by_user(actor_id)
        }
        joined_ids = [
            p.dispute_id
            for p in self.party_dao.get_active_parties_by_user(actor_id)
            if p.dispute_id not in disputes
        ]
        if joined_ids:
            for dispute in self.dispute_dao.get_disputes_by_ids(joined_ids):
                disputes[dispute.id] = dispute
        return sorted(disputes.values(), key=lambda d: d.created_at, reverse=True)

    def update_dispute(
        self,
        actor_id: str,
        dispute_id: str,
        request: DisputeUpdateRequest,
    ) -> DisputeResponse:
        """
        Edit dispute fields and, for the owner, perform manual status changes.

        Manual status changes are limited to pending -> active and closing a
        non-resolved dispute. Mediation and resolution only happen through
        session operations.

        Raises:
            NotFoundError: Unknown dispute
            ForbiddenError: Actor has no access, or a non-owner asked for a status change
            InvalidTransitionError: The status change is not allowed from the current state
        """
        dispute = self.access.require_access(actor_id, dispute_id)

        # Explicit nulls are ignored except for the AI analysis blob
        patch = {
            key: value
            for key, value in request.model_dump(exclude_unset=True).items()
            if value is not None or key == "ai_analysis"
        }
        target: Optional[DisputeStatus] = patch.pop("status", None)
        if target is not None and DisputeStatus(target) == dispute.status:
            target = None

        if target is not None:
            target = DisputeStatus(target)
            if dispute.user_id != actor_id:
                raise ForbiddenError("Only the dispute owner can change its status")
            if target not in MANUAL_TRANSITIONS[dispute.status]:
                raise InvalidTransitionError(
                    f"Cannot move dispute from {dispute.status.value} to {target.value}"
                )

        if not patch and target is None:
            return dispute

        values = dict(patch)
        values["updated_at"] = utc_now()
        if target is not None:
            values["status"] = target

        updated = self.dispute_dao.update_dispute(
            dispute_id,
            DisputeUpdate(**values),
            expected_status=dispute.status if target is not None else None,
        )
        if updated is None:
            self._raise_stale(dispute_id)

        entries = []
        if patch:
            entries.append(self.activity_log.entry(
                dispute_id,
                actor_id,
                ActivityType.DISPUTE_UPDATED,
                {"fields": sorted(patch.keys())},
            ))
        if target is not None:
            entries.append(self.activity_log.entry(
                dispute_id,
                actor_id,
                ActivityType.STATUS_CHANGED,
                {"from": dispute.status.value, "to": target.value},
            ))
        try:
            self.activity_log.record_many(entries)
        except DatabaseError:
            self._restore(dispute, values.keys(), expected_status=target)
            raise

        if target is not None:
            logger.info(f"Dispute {dispute_id} moved {dispute.status.value} -> {target.value}")
        return updated

    def start_mediation(
        self,
        dispute_id: str,
        session_id: str,
        actor_id: str,
        activities: Sequence[DisputeActivityCreate] = (),
    ) -> DisputeResponse:
        """
        Move a dispute into mediation and point it at the new session.

        Args:
            dispute_id: Dispute UUID
            session_id: The session the dispute now points at
            actor_id: Who started the session
            activities: Further activities stored in the same write as the
                status change

        Raises:
            NotFoundError: Unknown dispute
            InvalidTransitionError: Dispute is already in mediation, resolved or closed
            DatabaseError: The activities could not be recorded; the dispute is
                left as it was
        """
        dispute = self.dispute_dao.get_dispute_by_id(dispute_id)
        if dispute is None:
            raise NotFoundError(f"Dispute {dispute_id} not found")
        if dispute.status not in MEDIATION_START_STATUSES:
            raise InvalidTransitionError(
                f"Cannot start mediation on a {dispute.status.value} dispute"
            )

        updated = self.dispute_dao.update_dispute(
            dispute_id,
            DisputeUpdate(
                status=DisputeStatus.MEDIATION,
                mediation_session_id=session_id,
                updated_at=utc_now(),
            ),
            expected_status=dispute.status,
        )
        if updated is None:
            self._raise_stale(dispute_id)

        status_changed = self.activity_log.entry(
            dispute_id,
            actor_id,
            ActivityType.STATUS_CHANGED,
            {
                "from": dispute.status.value,
                "to": DisputeStatus.MEDIATION.value,
                "session_id": session_id,
            },
        )
        try:
            self.activity_log.record_many([status_changed, *activities])
        except DatabaseError:
            self._restore(
                dispute,
                ("status", "mediation_session_id", "updated_at"),
                expected_status=DisputeStatus.MEDIATION,
            )
            raise
        return updated

    def complete_mediation(
        self,
        dispute_id: str,
        actor_id: Optional[str] = None,
        session_id: Optional[str] = None,
        activities: Sequence[DisputeActivityCreate] = (),
    ) -> DisputeResponse:
        """
        Resolve a dispute after its session was summarized.

        Only a dispute still in mediation is resolved; any other status is
        returned unchanged so a closed dispute is never reopened and a
        resolved one is not resolved twice. The given activities are recorded
        either way, in the same write as dispute_resolved when there is one.
        """
        dispute = self.dispute_dao.get_dispute_by_id(dispute_id)
        if dispute is None:
            raise NotFoundError(f"Dispute {dispute_id} not found")
        if dispute.status != DisputeStatus.MEDIATION:
            self.activity_log.record_many(activities)
            return dispute

        now = utc_now()
        updated = self.dispute_dao.update_dispute(
            dispute_id,
            DisputeUpdate(status=DisputeStatus.RESOLVED, resolved_at=now, updated_at=now),
            expected_status=DisputeStatus.MEDIATION,
        )
        if updated is None:
            # Someone else moved the dispute first
            current = self.dispute_dao.get_dispute_by_id(dispute_id)
            if current is None:
                raise NotFoundError(f"Dispute {dispute_id} not found")
            self.activity_log.record_many(activities)
            return current

        resolved = self.activity_log.entry(
            dispute_id,
            actor_id,
            ActivityType.DISPUTE_RESOLVED,
            {"from": DisputeStatus.MEDIATION.value, "session_id": session_id},
        )
        try:
            self.activity_log.record_many([resolved, *activities])
        except DatabaseError:
            self._restore(
                dispute,
                ("status", "resolved_at", "updated_at"),
                expected_status=DisputeStatus.RESOLVED,
            )
            raise
        logger.info(f"Dispute {dispute_id} resolved")
        return updated

    def _restore(
        self,
        previous: DisputeResponse,
        fields: Iterable[str],
        expected_status: Optional[DisputeStatus] = None,
    ) -> None:
        """Write back the previous values of fields after a failed activity write."""
        restored = DisputeUpdate(**{name: getattr(previous, name) for name in fields})
        self.dispute_dao.update_dispute(previous.id, restored, expected_status=expected_status)
        logger.warning(f"Rolled back dispute {previous.id}: its activity could not be recorded")

    def _raise_stale(self, dispute_id: str) -> None:
        if self.dispute_dao.get_dispute_by_id(dispute_id) is None:
            raise NotFoundError(f"Dispute {dispute_id} not found")
        raise InvalidTransitionError("Dispute status changed while updating, please retry")
