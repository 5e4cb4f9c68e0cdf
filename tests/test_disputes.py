"""
Tests for the dispute lifecycle
"""

import pytest

from odr_api.errors import ForbiddenError, InvalidTransitionError, NotFoundError
from odr_api.models.activity import ActivityType
from odr_api.models.dispute import DisputeStatus, DisputeUpdateRequest
from odr_api.models.mediation import SessionCreateRequest
from tests.conftest import OUTSIDER, OWNER, PARTY, file_dispute


def activity_types(db):
    return [row["activity_type"] for row in db.rows("dispute_activities")]


class TestDisputeLifecycle:
    """Creation, edits and status transitions"""

    def test_create_starts_pending(self, services, db):
        """A new dispute is pending, unresolved and logged"""
        dispute = file_dispute(services)

        assert dispute.status == DisputeStatus.PENDING
        assert dispute.user_id == OWNER
        assert dispute.resolved_at is None
        assert activity_types(db) == [ActivityType.DISPUTE_CREATED.value]

    def test_list_includes_owned_and_joined(self, services, joined_dispute):
        """Parties see disputes they joined, outsiders see nothing"""
        other = file_dispute(services, owner=PARTY, title="Second dispute")

        assert {d.id for d in services.disputes.list_disputes(PARTY)} == {joined_dispute.id, other.id}
        assert [d.id for d in services.disputes.list_disputes(OWNER)] == [joined_dispute.id]
        assert services.disputes.list_disputes(OUTSIDER) == []

    def test_party_can_edit_fields(self, services, joined_dispute, db):
        """Active parties may edit descriptive fields"""
        updated = services.disputes.update_dispute(
            PARTY, joined_dispute.id, DisputeUpdateRequest(description="Deposit was $1,200.")
        )

        assert updated.description == "Deposit was $1,200."
        assert updated.status == DisputeStatus.PENDING
        assert ActivityType.DISPUTE_UPDATED.value in activity_types(db)

    def test_party_cannot_change_status(self, services, joined_dispute):
        """Status changes are reserved to the owner"""
        with pytest.raises(ForbiddenError):
            services.disputes.update_dispute(
                PARTY, joined_dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED)
            )

    def test_outsider_cannot_read_or_edit(self, services, dispute):
        with pytest.raises(ForbiddenError):
            services.disputes.get_dispute(OUTSIDER, dispute.id)
        with pytest.raises(ForbiddenError):
            services.disputes.update_dispute(OUTSIDER, dispute.id, DisputeUpdateRequest(title="x"))

    def test_unknown_dispute(self, services):
        with pytest.raises(NotFoundError):
            services.disputes.get_dispute(OWNER, "missing")

    def test_manual_transitions(self, services, dispute, db):
        """pending -> active -> closed is allowed and logged"""
        active = services.disputes.update_dispute(
            OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.ACTIVE)
        )
        closed = services.disputes.update_dispute(
            OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED)
        )

        assert active.status == DisputeStatus.ACTIVE
        assert closed.status == DisputeStatus.CLOSED
        assert closed.resolved_at is None
        assert activity_types(db).count(ActivityType.STATUS_CHANGED.value) == 2

    @pytest.mark.parametrize("target", [DisputeStatus.MEDIATION, DisputeStatus.RESOLVED])
    def test_session_only_statuses_are_rejected(self, services, dispute, target):
        """Mediation and resolution only happen through sessions"""
        with pytest.raises(InvalidTransitionError):
            services.disputes.update_dispute(OWNER, dispute.id, DisputeUpdateRequest(status=target))

    def test_closed_dispute_cannot_reopen(self, services, dispute):
        services.disputes.update_dispute(OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED))

        with pytest.raises(InvalidTransitionError):
            services.disputes.update_dispute(
                OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.ACTIVE)
            )

    def test_same_status_is_a_no_op(self, services, dispute, db):
        before = len(db.rows("dispute_activities"))
        result = services.disputes.update_dispute(
            OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.PENDING)
        )

        assert result.status == DisputeStatus.PENDING
        assert len(db.rows("dispute_activities")) == before

    def test_complete_mediation_resolves_once(self, services, dispute):
        """Only a dispute in mediation is resolved; repeats are no-ops"""
        session = services.mediation.create_session(
            OWNER, dispute.id, SessionCreateRequest(ai_assistance=False)
        )

        resolved = services.disputes.complete_mediation(dispute.id, OWNER, session.id)
        again = services.disputes.complete_mediation(dispute.id, OWNER, session.id)

        assert resolved.status == DisputeStatus.RESOLVED
        assert resolved.resolved_at is not None
        assert again.resolved_at == resolved.resolved_at

    def test_complete_mediation_leaves_closed_dispute(self, services, dispute):
        """A closed dispute is never resolved"""
        services.disputes.update_dispute(OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED))

        result = services.disputes.complete_mediation(dispute.id, OWNER)

        assert result.status == DisputeStatus.CLOSED
        assert result.resolved_at is None

    def test_resolved_at_matches_status(self, services, db):
        """resolved_at is set exactly when the status is resolved"""
        first = file_dispute(services, title="One")
        second = file_dispute(services, title="Two")
        services.mediation.create_session(OWNER, first.id, SessionCreateRequest(ai_assistance=False))
        services.disputes.complete_mediation(first.id, OWNER)
        services.disputes.update_dispute(OWNER, second.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED))

        for row in db.rows("disputes"):
            assert (row.get("resolved_at") is not None) == (row["status"] == DisputeStatus.RESOLVED.value)
