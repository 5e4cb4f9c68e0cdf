"""
Tests for the mediation session coordinator
"""

import threading
from contextlib import contextmanager

import pytest

from odr_api.errors import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
)
from odr_api.models.dispute import DisputeStatus, DisputeUpdateRequest
from odr_api.models.mediation import (
    MessagePostRequest,
    MessageRole,
    SessionCreateRequest,
    SessionStatus,
)
from odr_api.services.ai_mediator import MediatorAdapter
from odr_api.utils.locks import SessionLockRegistry
from tests.conftest import MEDIATOR, OUTSIDER, OWNER, PARTY, SUMMARY_JSON, file_dispute
from tests.fakes import FailingProvider


def open_session(services, dispute_id, ai=True, mediator_id=MEDIATOR):
    return services.mediation.create_session(
        OWNER, dispute_id, SessionCreateRequest(mediator_id=mediator_id, ai_assistance=ai)
    )


def post(services, actor, session_id, content):
    return services.mediation.post_message(actor, session_id, MessagePostRequest(content=content))


def activity_types(db):
    return [row["activity_type"] for row in db.rows("dispute_activities")]


class RecordingLocks(SessionLockRegistry):
    """Lock registry that remembers which sessions are currently held."""

    def __init__(self):
        super().__init__()
        self.held = []

    @contextmanager
    def hold(self, session_id):
        with super().hold(session_id):
            self.held.append(session_id)
            try:
                yield
            finally:
                self.held.remove(session_id)


class TestSessions:
    """Opening sessions"""

    def test_create_moves_dispute_to_mediation(self, services, dispute):
        session = open_session(services, dispute.id)
        current = services.disputes.get_dispute(OWNER, dispute.id)

        assert session.status == SessionStatus.SCHEDULED
        assert session.session_code
        assert current.status == DisputeStatus.MEDIATION
        assert current.mediation_session_id == session.id

    def test_ai_session_posts_welcome(self, services, dispute, provider):
        provider.responses = ["Welcome, I'm your AI Mediator."]
        session = open_session(services, dispute.id)

        messages = services.mediation.get_messages(OWNER, session.id)
        assert [(m.role, m.content) for m in messages] == [(MessageRole.AI, "Welcome, I'm your AI Mediator.")]

    def test_welcome_falls_back(self, services, dispute, policy):
        services.mediation.adapter = MediatorAdapter([FailingProvider()])
        session = open_session(services, dispute.id)

        messages = services.mediation.get_messages(OWNER, session.id)
        assert messages[0].content == policy.fallback_welcome(dispute.dispute_type)

    def test_no_welcome_without_ai(self, services, dispute):
        session = open_session(services, dispute.id, ai=False)
        assert services.mediation.get_messages(OWNER, session.id) == []

    def test_only_owner_creates(self, services, joined_dispute):
        with pytest.raises(ForbiddenError):
            services.mediation.create_session(PARTY, joined_dispute.id, SessionCreateRequest())

    @pytest.mark.parametrize("final", ["closed", "resolved"])
    def test_terminal_dispute_cannot_return_to_mediation(self, services, dispute, final):
        if final == "closed":
            services.disputes.update_dispute(
                OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED)
            )
        else:
            session = open_session(services, dispute.id, ai=False)
            services.mediation.summarize(OWNER, session.id)

        with pytest.raises(InvalidTransitionError):
            open_session(services, dispute.id)
        assert services.disputes.get_dispute(OWNER, dispute.id).status.value == final

    def test_second_open_session_conflicts(self, services, dispute):
        open_session(services, dispute.id, ai=False)
        with pytest.raises(ConflictError):
            open_session(services, dispute.id, ai=False)

    def test_lookup_by_code(self, services, joined_dispute):
        session = open_session(services, joined_dispute.id, ai=False)

        assert services.mediation.get_session_by_code(PARTY, session.session_code).id == session.id
        with pytest.raises(NotFoundError):
            services.mediation.get_session_by_code(PARTY, "nope")
        with pytest.raises(ForbiddenError):
            services.mediation.get_session_by_code(OUTSIDER, session.session_code)

    def test_failed_dispute_transition_closes_orphan_session(self, services, dispute, db):
        db.fail_next("disputes", "update")

        with pytest.raises(DatabaseError):
            open_session(services, dispute.id, ai=False)

        # The next attempt is not blocked by the orphaned session
        session = open_session(services, dispute.id, ai=False)
        assert services.disputes.get_dispute(OWNER, dispute.id).mediation_session_id == session.id

    def test_failed_start_record_leaves_dispute_pending(self, services, dispute, db):
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            open_session(services, dispute.id, ai=False)

        current = services.disputes.get_dispute(OWNER, dispute.id)
        assert current.status == DisputeStatus.PENDING
        assert current.mediation_session_id is None
        assert "session_started" not in activity_types(db)

        session = open_session(services, dispute.id, ai=False)
        assert services.disputes.get_dispute(OWNER, dispute.id).mediation_session_id == session.id
        assert activity_types(db).count("session_started") == 1

    def test_welcome_is_posted_under_the_session_lock(self, services, dispute, provider):
        locks = RecordingLocks()
        services.mediation.locks = locks
        held_during_calls = []
        complete = provider.complete

        def recording_complete(messages, max_tokens=1000, json_mode=False):
            held_during_calls.append(list(locks.held))
            return complete(messages, max_tokens=max_tokens, json_mode=json_mode)

        provider.complete = recording_complete
        session = open_session(services, dispute.id)

        assert held_during_calls == [[session.id]]
        assert locks.held == []

    def test_unstored_welcome_does_not_fail_the_session(self, services, dispute, db):
        db.fail_next("mediation_messages", "insert")

        session = open_session(services, dispute.id)

        assert services.mediation.get_messages(OWNER, session.id) == []
        assert services.disputes.get_dispute(OWNER, dispute.id).status == DisputeStatus.MEDIATION
        assert "ai_response_generated" not in activity_types(db)


class TestMessages:
    """Posting and AI replies"""

    def test_user_message_gets_ai_reply(self, services, joined_dispute, provider):
        provider.responses = ["Welcome."]
        session = open_session(services, joined_dispute.id)

        posted = post(services, PARTY, session.id, "I propose $500")

        assert [m.role for m in posted] == [MessageRole.USER, MessageRole.AI]
        assert posted[1].sentiment == "neutral"
        assert posted[1].user_id is None
        history = services.mediation.get_messages(PARTY, session.id)
        assert [m.role for m in history] == [MessageRole.AI, MessageRole.USER, MessageRole.AI]

    def test_mediator_messages_get_no_ai_reply(self, services, dispute):
        session = open_session(services, dispute.id)
        posted = post(services, MEDIATOR, session.id, "Let's take a short break.")

        assert [m.role for m in posted] == [MessageRole.MEDIATOR]

    def test_adapter_failure_posts_fallback(self, services, joined_dispute, policy):
        services.mediation.adapter = MediatorAdapter([FailingProvider(), FailingProvider()])
        session = open_session(services, joined_dispute.id)

        posted = post(services, PARTY, session.id, "Hello?")

        assert posted[1].role == MessageRole.AI
        assert posted[1].content == policy.fallback_reply
        assert posted[1].sentiment is None

    def test_first_message_starts_session(self, services, joined_dispute):
        session = open_session(services, joined_dispute.id, ai=False)
        post(services, PARTY, session.id, "Hi")

        assert services.mediation.get_session(OWNER, session.id).status == SessionStatus.IN_PROGRESS

    def test_outsider_cannot_post_or_read(self, services, joined_dispute):
        session = open_session(services, joined_dispute.id, ai=False)

        with pytest.raises(ForbiddenError):
            post(services, OUTSIDER, session.id, "Hi")
        with pytest.raises(ForbiddenError):
            services.mediation.get_messages(OUTSIDER, session.id)

    def test_unknown_session(self, services):
        with pytest.raises(NotFoundError):
            post(services, OWNER, "missing", "Hi")

    def test_completed_session_rejects_messages(self, services, joined_dispute):
        session = open_session(services, joined_dispute.id, ai=False)
        services.mediation.summarize(OWNER, session.id)

        with pytest.raises(InvalidTransitionError):
            post(services, PARTY, session.id, "One more thing")

    def test_history_is_sent_to_the_adapter(self, services, joined_dispute, provider):
        session = open_session(services, joined_dispute.id)
        post(services, OWNER, session.id, "First point")
        post(services, PARTY, session.id, "Second point")

        last_messages = provider.calls[-1]["messages"]
        contents = [m["content"] for m in last_messages]
        assert "First point" in contents
        assert "Second point" in contents
        assert contents.index("First point") < contents.index("Second point")

    def test_ai_reply_follows_its_trigger_under_concurrency(self, services, joined_dispute):
        """Concurrent posts never interleave an AI reply away from its trigger"""
        session = open_session(services, joined_dispute.id)
        errors = []

        def worker(actor, n):
            try:
                for i in range(5):
                    post(services, actor, session.id, f"{actor} message {n}-{i}")
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=worker, args=(OWNER, 1)),
            threading.Thread(target=worker, args=(PARTY, 2)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        messages = services.mediation.get_messages(OWNER, session.id)
        timestamps = [m.created_at for m in messages]
        assert timestamps == sorted(timestamps)

        # Skip the welcome message, then every human turn is followed by one AI reply
        turns = messages[1:]
        assert len(turns) == 20
        for human, reply in zip(turns[0::2], turns[1::2]):
            assert human.role == MessageRole.USER
            assert reply.role == MessageRole.AI

    def test_failed_post_record_stores_nothing(self, services, joined_dispute, db):
        session = open_session(services, joined_dispute.id)
        before = services.mediation.get_messages(PARTY, session.id)
        db.fail_next("dispute_activities", "insert")

        with pytest.raises(DatabaseError):
            post(services, PARTY, session.id, "I propose $500")

        assert services.mediation.get_messages(PARTY, session.id) == before
        assert services.mediation.get_session(PARTY, session.id).status == SessionStatus.SCHEDULED

        posted = post(services, PARTY, session.id, "I propose $500")
        assert [m.role for m in posted] == [MessageRole.USER, MessageRole.AI]
        assert services.mediation.get_session(PARTY, session.id).status == SessionStatus.IN_PROGRESS


class TestSummaries:
    """Summarizing and closing out a session"""

    def test_summarize_completes_and_resolves(self, services, joined_dispute, provider):
        session = open_session(services, joined_dispute.id)
        post(services, PARTY, session.id, "I propose $500")
        provider.responses = [SUMMARY_JSON]

        completed = services.mediation.summarize(MEDIATOR, session.id)
        dispute = services.disputes.get_dispute(OWNER, joined_dispute.id)

        assert completed.status == SessionStatus.COMPLETED
        assert completed.summary == "The parties agreed on a payment of $500."
        assert completed.recommendations == ["Draft a settlement proposal", "Sign within 14 days"]
        assert completed.completed_at is not None
        assert dispute.status == DisputeStatus.RESOLVED
        assert dispute.resolved_at is not None

    def test_summarize_twice_is_a_no_op(self, services, dispute, provider):
        session = open_session(services, dispute.id, ai=False)
        provider.responses = [SUMMARY_JSON]
        first = services.mediation.summarize(OWNER, session.id)
        calls = len(provider.calls)

        second = services.mediation.summarize(OWNER, session.id)

        assert second.summary == first.summary
        assert second.completed_at == first.completed_at
        assert len(provider.calls) == calls

    def test_party_cannot_summarize(self, services, joined_dispute):
        session = open_session(services, joined_dispute.id, ai=False)
        with pytest.raises(ForbiddenError):
            services.mediation.summarize(PARTY, session.id)

    def test_summary_falls_back(self, services, dispute, policy):
        session = open_session(services, dispute.id, ai=False)
        services.mediation.adapter = MediatorAdapter([FailingProvider()])

        completed = services.mediation.summarize(OWNER, session.id)

        assert completed.summary == policy.fallback_summary(dispute.dispute_type)
        assert completed.recommendations == policy.fallback_recommendations

    def test_summarize_closed_dispute_keeps_it_closed(self, services, dispute):
        session = open_session(services, dispute.id, ai=False)
        services.disputes.update_dispute(OWNER, dispute.id, DisputeUpdateRequest(status=DisputeStatus.CLOSED))

        completed = services.mediation.summarize(OWNER, session.id)
        current = services.disputes.get_dispute(OWNER, dispute.id)

        assert completed.status == SessionStatus.COMPLETED
        assert current.status == DisputeStatus.CLOSED
        assert current.resolved_at is None

    def test_transient_dispute_failure_is_retried(self, services, dispute, db):
        session = open_session(services, dispute.id, ai=False)
        db.fail_next("disputes", "update", times=1)

        completed = services.mediation.summarize(OWNER, session.id)

        assert completed.status == SessionStatus.COMPLETED
        assert services.disputes.get_dispute(OWNER, dispute.id).status == DisputeStatus.RESOLVED

    def test_persistent_dispute_failure_reverts_session(self, services, dispute, db):
        session = open_session(services, dispute.id, ai=False)
        db.fail_next("disputes", "update", times=10)

        with pytest.raises(DatabaseError):
            services.mediation.summarize(OWNER, session.id)

        reverted = services.mediation.get_session(OWNER, session.id)
        assert reverted.status == SessionStatus.SCHEDULED
        assert reverted.summary is None
        assert reverted.completed_at is None
        assert services.disputes.get_dispute(OWNER, dispute.id).status == DisputeStatus.MEDIATION

    def test_persistent_record_failure_reverts_session(self, services, dispute, db):
        session = open_session(services, dispute.id, ai=False)
        db.fail_next("dispute_activities", "insert", times=10)

        with pytest.raises(DatabaseError):
            services.mediation.summarize(OWNER, session.id)

        current = services.disputes.get_dispute(OWNER, dispute.id)
        assert services.mediation.get_session(OWNER, session.id).status == SessionStatus.SCHEDULED
        assert current.status == DisputeStatus.MEDIATION
        assert current.resolved_at is None
        assert "dispute_resolved" not in activity_types(db)
        assert "session_completed" not in activity_types(db)

        db.fail_next("dispute_activities", "insert", times=0)
        services.mediation.summarize(OWNER, session.id)
        assert services.disputes.get_dispute(OWNER, dispute.id).status == DisputeStatus.RESOLVED
        assert activity_types(db).count("session_completed") == 1

    def test_new_session_after_resolution_is_refused(self, services):
        dispute = file_dispute(services)
        session = open_session(services, dispute.id, ai=False)
        services.mediation.summarize(OWNER, session.id)

        with pytest.raises(InvalidTransitionError):
            open_session(services, dispute.id, ai=False)
