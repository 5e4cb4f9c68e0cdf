"""
Tests for the activity log and activity report
"""

from datetime import datetime, timedelta, timezone

import pytest

from odr_api.errors import DatabaseError, ForbiddenError, ValidationFailedError
from odr_api.models.activity import ActivityType, DisputeActivityResponse
from odr_api.models.dispute import DisputeStatus, DisputeUpdateRequest
from odr_api.models.mediation import MessagePostRequest, SessionCreateRequest
from odr_api.models.party import PartyInviteRequest, PartyRole, PartyStatus
from odr_api.services.activity_service import build_activity_report
from tests.conftest import OUTSIDER, OWNER, PARTY, file_dispute

DAY = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def activity(n, user_id, activity_type=ActivityType.MESSAGE_SENT, at=DAY):
    return DisputeActivityResponse(
        id=f"a{n}",
        dispute_id="d1",
        user_id=user_id,
        activity_type=activity_type.value,
        created_at=at + timedelta(minutes=n),
    )


def activity_types(db):
    return [row["activity_type"] for row in db.rows("dispute_activities")]


def invite(services, dispute_id, email="party@example.com"):
    return services.parties.invite(
        OWNER, dispute_id, PartyInviteRequest(email=email, role=PartyRole.RESPONDENT)
    )


class TestBuildActivityReport:
    """Pure aggregation"""

    def test_empty_log(self):
        report = build_activity_report("d1", [])

        assert report.total_activities == 0
        assert report.activity_counts == {}
        assert report.top_users == []
        assert report.recent_activities == []

    def test_counts_reconcile(self):
        activities = (
            [activity(i, "u1") for i in range(4)]
            + [activity(10 + i, "u2", ActivityType.PARTY_JOINED) for i in range(2)]
            + [activity(20 + i, None, ActivityType.AI_RESPONSE_GENERATED) for i in range(3)]
        )
        report = build_activity_report("d1", activities)

        assert report.total_activities == 9
        assert sum(report.activity_counts.values()) == report.total_activities
        assert sum(report.counts_by_user.values()) == report.total_activities
        assert report.counts_by_user == {"u1": 4, "system": 3, "u2": 2}
        assert report.activity_counts[ActivityType.AI_RESPONSE_GENERATED.value] == 3

    def test_top_users_sorted_and_limited(self):
        activities = []
        n = 0
        for user, count in [("u1", 1), ("u2", 6), ("u3", 3), ("u4", 5), ("u5", 2), ("u6", 4)]:
            for _ in range(count):
                activities.append(activity(n, user))
                n += 1

        report = build_activity_report("d1", activities, top_users=5)

        assert [(u.user_id, u.count) for u in report.top_users] == [
            ("u2", 6), ("u4", 5), ("u6", 4), ("u3", 3), ("u5", 2),
        ]
        assert report.counts_by_user["u1"] == 1

    def test_system_actor_in_top_users(self):
        report = build_activity_report("d1", [activity(0, None), activity(1, None), activity(2, "u1")])
        assert report.top_users[0].user_id is None
        assert report.top_users[0].count == 2

    def test_timeline_by_day(self):
        activities = [
            activity(0, "u1", at=DAY),
            activity(1, "u1", at=DAY),
            activity(0, "u1", at=DAY + timedelta(days=2)),
        ]
        report = build_activity_report("d1", activities)

        assert report.timeline == {"2026-03-01": 2, "2026-03-03": 1}

    def test_recent_is_newest_first_and_limited(self):
        activities = [activity(i, "u1") for i in range(15)]
        report = build_activity_report("d1", list(reversed(activities)), recent_activities=10)

        assert [a.id for a in report.recent_activities] == [f"a{i}" for i in range(14, 4, -1)]

    def test_same_input_same_report(self):
        activities = [activity(i, "u1" if i % 2 else None) for i in range(7)]
        assert build_activity_report("d1", activities) == build_activity_report("d1", list(reversed(activities)))


class TestActivityLog:
    """Recording through the services"""

    def test_workflow_is_logged(self, services, joined_dispute):
        session = services.mediation.create_session(OWNER, joined_dispute.id, SessionCreateRequest())
        services.mediation.post_message(PARTY, session.id, MessagePostRequest(content="Hello"))

        types = [a.activity_type for a in services.activity_log.list_activities(OWNER, joined_dispute.id)]

        assert types[-1] == ActivityType.DISPUTE_CREATED.value
        for expected in (
            ActivityType.PARTY_ADDED,
            ActivityType.PARTY_JOINED,
            ActivityType.STATUS_CHANGED,
            ActivityType.SESSION_STARTED,
            ActivityType.MESSAGE_SENT,
            ActivityType.AI_RESPONSE_GENERATED,
        ):
            assert expected.value in types

    def test_report_reconciles_for_real_workflow(self, services, joined_dispute):
        session = services.mediation.create_session(OWNER, joined_dispute.id, SessionCreateRequest())
        services.mediation.post_message(PARTY, session.id, MessagePostRequest(content="Hello"))
        services.mediation.summarize(OWNER, session.id)

        report = services.activity_log.report(PARTY, joined_dispute.id)

        assert report.total_activities == sum(report.activity_counts.values())
        assert report.total_activities == sum(report.counts_by_user.values())
        assert report.counts_by_user["system"] >= 2
        assert report.counts_by_user[OWNER] >= 1
        assert report.counts_by_user[PARTY] >= 1

    def test_record_client_activity(self, services, joined_dispute):
        recorded = services.activity_log.record_activity(
            PARTY, joined_dispute.id, ActivityType.DOCUMENT_SHARED, {"document_id": "doc-1"}
        )

        assert recorded.user_id == PARTY
        assert recorded.payload == {"document_id": "doc-1"}

    def test_outsider_cannot_read_or_write(self, services, dispute):
        with pytest.raises(ForbiddenError):
            services.activity_log.report(OUTSIDER, dispute.id)
        with pytest.raises(ForbiddenError):
            services.activity_log.list_activities(OUTSIDER, dispute.id)
        with pytest.raises(ForbiddenError):
            services.activity_log.record_activity(OUTSIDER, dispute.id, ActivityType.DOCUMENT_SHARED)

    def test_server_only_types_are_rejected(self, services, joined_dispute, db):
        before = len(db.rows("dispute_activities"))

        with pytest.raises(ValidationFailedError):
            services.activity_log.record_activity(PARTY, joined_dispute.id, ActivityType.DISPUTE_RESOLVED)

        report = services.activity_log.report(OWNER, joined_dispute.id)
        assert len(db.rows("dispute_activities")) == before
        assert ActivityType.DISPUTE_RESOLVED.value not in report.activity_counts


class TestFailedActivityWrites:
    """A state change and its activity are stored together or not at all"""

    def test_log_failure_fails_the_operation(self, services, db):
        dispute = file_dispute(services)
        request = DisputeUpdateRequest(title="Renamed", status=DisputeStatus.ACTIVE)
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            services.disputes.update_dispute(OWNER, dispute.id, request)

        unchanged = services.disputes.get_dispute(OWNER, dispute.id)
        assert unchanged.title == dispute.title
        assert unchanged.status == DisputeStatus.PENDING
        assert "dispute_updated" not in activity_types(db)

        retried = services.disputes.update_dispute(OWNER, dispute.id, request)
        assert retried.title == "Renamed"
        assert retried.status == DisputeStatus.ACTIVE

    def test_failed_filing_leaves_no_dispute(self, services, db):
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            file_dispute(services)

        assert db.rows("disputes") == []
        assert services.disputes.list_disputes(OWNER) == []

    def test_failed_invite_leaves_no_party(self, services, dispute, db, sent_invitations):
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            invite(services, dispute.id)

        assert db.rows("dispute_parties") == []
        assert sent_invitations == []
        assert invite(services, dispute.id).status == PartyStatus.INVITED

    def test_failed_join_can_be_retried(self, services, dispute, db):
        invited = invite(services, dispute.id)
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            services.parties.accept_invitation(invited.invitation_code, PARTY)

        row = next(r for r in db.rows("dispute_parties") if r["id"] == invited.id)
        assert row["status"] == PartyStatus.INVITED.value
        assert row["user_id"] is None
        assert not services.access.is_party(PARTY, dispute.id)
        assert "party_joined" not in activity_types(db)

        joined = services.parties.accept_invitation(invited.invitation_code, PARTY)
        assert joined.status == PartyStatus.ACTIVE
        assert activity_types(db).count("party_joined") == 1

    def test_failed_removal_keeps_party(self, services, joined_dispute, db):
        party = services.parties.list_parties(OWNER, joined_dispute.id)[0]
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            services.parties.remove(OWNER, party.id)

        assert services.access.is_party(PARTY, joined_dispute.id)
        assert services.parties.remove(OWNER, party.id).status == PartyStatus.REMOVED
