"""
Mediation session coordinator.
Owns mediation sessions and their append-only message history, invokes the
AI mediator for assisted sessions and closes out a dispute when a session
is summarized.
"""

import logging
from typing import List, Optional, Tuple

from odr_api.config.policy import MediationPolicy
from odr_api.daos.mediation_dao import MediationMessageDAO, MediationSessionDAO
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.errors import (
    AdapterUnavailableError,
    ConflictError,
    DatabaseError,
    InvalidTransitionError,
    NotFoundError,
)
from odr_api.models.activity import ActivityType, DisputeActivityCreate
from odr_api.models.ai import ConversationTurn, DisputeContext, MediationSummary
from odr_api.models.dispute import TERMINAL_STATUSES, DisputeResponse
from odr_api.models.mediation import (
    MediationMessageCreate,
    MediationMessageResponse,
    MediationSessionCreate,
    MediationSessionResponse,
    MediationSessionUpdate,
    MessagePostRequest,
    MessageRole,
    SessionCreateRequest,
    SessionStatus,
    SessionWithMessages,
)
from odr_api.models.party import PartyStatus
from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog
from odr_api.services.ai_mediator import MediatorAdapter
from odr_api.services.dispute_service import DisputeLifecycle
from odr_api.utils.codes import generate_token, generate_unique_code
from odr_api.utils.datetime_utils import utc_now
from odr_api.utils.locks import SessionLockRegistry

logger = logging.getLogger(__name__)


class MediationCoordinator:
    """
    Coordinates mediation sessions.

    Posting a message and generating the AI reply to it run under a
    per-session lock, so an AI reply always directly follows the human
    message that triggered it.
    """

    def __init__(
        self,
        session_dao: MediationSessionDAO,
        message_dao: MediationMessageDAO,
        party_dao: DisputePartyDAO,
        disputes: DisputeLifecycle,
        access: AccessControl,
        activity_log: ActivityLog,
        adapter: MediatorAdapter,
        policy: MediationPolicy,
        locks: Optional[SessionLockRegistry] = None,
        completion_retries: int = 2,
    ):
        self.session_dao = session_dao
        self.message_dao = message_dao
        self.party_dao = party_dao
        self.disputes = disputes
        self.access = access
        self.activity_log = activity_log
        self.adapter = adapter
        self.policy = policy
        self.locks = locks or SessionLockRegistry()
        self.completion_retries = completion_retries

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_session(self, session_id: str) -> MediationSessionResponse:
        session = self.session_dao.get_session_by_id(session_id)
        if session is None:
            raise NotFoundError(f"Mediation session {session_id} not found")
        return session

    def _authorize(self, actor_id: str, session: MediationSessionResponse) -> DisputeResponse:
        """Owner, active party, or the mediator assigned to this session."""
        if actor_id and actor_id == session.mediator_id:
            return self.access.require_dispute(session.dispute_id)
        return self.access.require_access(actor_id, session.dispute_id)

    def _context(self, dispute: DisputeResponse) -> DisputeContext:
        parties = [
            f"{p.name or p.email} ({p.role.value})"
            for p in self.party_dao.get_parties_by_dispute(dispute.id)
            if p.status != PartyStatus.REMOVED
        ]
        return DisputeContext(
            dispute_type=dispute.dispute_type,
            title=dispute.title,
            description=dispute.description,
            parties=parties or [dispute.parties],
            jurisdiction=self.policy.jurisdiction,
            language=self.policy.language,
            mediation_style=self.policy.mediation_style,
            style_description=self.policy.style_description(),
            requires_confidentiality=self.policy.requires_confidentiality,
        )

    @staticmethod
    def _turns(messages: List[MediationMessageResponse]) -> List[ConversationTurn]:
        return [ConversationTurn(role=m.role.value, content=m.content) for m in messages]

    def _new_session_code(self) -> str:
        return generate_unique_code(
            lambda: generate_token(self.policy.session_code_bytes),
            lambda code: self.session_dao.get_session_by_code(code) is not None,
            max_attempts=self.policy.max_generation_attempts,
        )

    def _create_ai_message(
        self,
        session: MediationSessionResponse,
        content: str,
        sentiment: Optional[str],
    ) -> MediationMessageResponse:
        return self.message_dao.create_message(
            MediationMessageCreate(
                session_id=session.id,
                user_id=None,
                role=MessageRole.AI,
                content=content,
                sentiment=sentiment,
            )
        )

    def _ai_activity(
        self,
        session: MediationSessionResponse,
        message: MediationMessageResponse,
        kind: str,
        fallback: bool,
    ) -> DisputeActivityCreate:
        return self.activity_log.entry(
            session.dispute_id,
            None,
            ActivityType.AI_RESPONSE_GENERATED,
            {"session_id": session.id, "message_id": message.id, "kind": kind, "fallback": fallback},
        )

    def _discard_messages(self, messages: List[MediationMessageResponse]) -> None:
        for message in messages:
            self.message_dao.delete_message(message.id)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def create_session(
        self,
        actor_id: str,
        dispute_id: str,
        request: SessionCreateRequest,
    ) -> MediationSessionResponse:
        """
        Open a mediation session and move the dispute into mediation.

        Args:
            actor_id: Must own the dispute
            dispute_id: Dispute UUID
            request: Mediator, AI assistance flag and optional schedule

        Returns:
            The new session in scheduled status

        Raises:
            InvalidTransitionError: The dispute is resolved or closed
            ConflictError: Another session of this dispute is not completed yet
        """
        dispute = self.access.require_owner(actor_id, dispute_id)
        if dispute.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Cannot start mediation on a {dispute.status.value} dispute"
            )

        open_sessions = [
            s for s in self.session_dao.get_sessions_by_dispute(dispute_id)
            if s.status != SessionStatus.COMPLETED
        ]
        if open_sessions:
            raise ConflictError(
                f"Dispute already has an open mediation session ({open_sessions[0].id})"
            )

        session = self.session_dao.create_session(
            MediationSessionCreate(
                dispute_id=dispute_id,
                session_code=self._new_session_code(),
                mediator_id=request.mediator_id,
                ai_assistance=request.ai_assistance,
                scheduled_at=request.scheduled_at,
            )
        )

        session_started = self.activity_log.entry(
            dispute_id,
            actor_id,
            ActivityType.SESSION_STARTED,
            {
                "session_id": session.id,
                "mediator_id": session.mediator_id,
                "ai_assistance": session.ai_assistance,
            },
        )
        try:
            dispute = self.disputes.start_mediation(
                dispute_id, session.id, actor_id, activities=[session_started]
            )
        except Exception:
            # Close the orphaned session so it does not block the next attempt
            self.session_dao.update_session(
                session.id,
                MediationSessionUpdate(status=SessionStatus.COMPLETED, completed_at=utc_now()),
            )
            raise
        logger.info(f"Mediation session {session.id} opened for dispute {dispute_id}")

        if session.ai_assistance and self.policy.post_welcome_message:
            with self.locks.hold(session.id):
                self._post_welcome(session, dispute)

        return session

    def _post_welcome(self, session: MediationSessionResponse, dispute: DisputeResponse) -> None:
        """
        Post the AI welcome message. Callers hold the session lock.

        The session is already open at this point, so a welcome that cannot
        be stored is logged and dropped rather than failing the session.
        """
        try:
            text = self.adapter.welcome_message(self._context(dispute))
            fallback = False
        except AdapterUnavailableError as e:
            logger.warning(f"Welcome message for session {session.id} fell back: {e.message}")
            text = self.policy.fallback_welcome(dispute.dispute_type)
            fallback = True

        message = None
        try:
            message = self._create_ai_message(session, text, None)
            self.activity_log.record_many([self._ai_activity(session, message, "welcome", fallback)])
        except DatabaseError as e:
            if message is not None:
                self._discard_messages([message])
            logger.error(f"Welcome message for session {session.id} not stored: {e.message}")

    def get_session(self, actor_id: str, session_id: str) -> MediationSessionResponse:
        session = self._load_session(session_id)
        self._authorize(actor_id, session)
        return session

    def get_session_by_code(self, actor_id: str, session_code: str) -> MediationSessionResponse:
        session = self.session_dao.get_session_by_code(session_code)
        if session is None:
            raise NotFoundError("Mediation session not found")
        self._authorize(actor_id, session)
        return session

    def list_sessions(self, actor_id: str, dispute_id: str) -> List[MediationSessionResponse]:
        self.access.require_access(actor_id, dispute_id)
        return self.session_dao.get_sessions_by_dispute(dispute_id)

    def get_messages(self, actor_id: str, session_id: str) -> List[MediationMessageResponse]:
        """Full message history of a session in turn order."""
        session = self._load_session(session_id)
        self._authorize(actor_id, session)
        return self.message_dao.get_messages_by_session(session_id)

    def get_session_details(self, actor_id: str, session_id: str) -> SessionWithMessages:
        session = self._load_session(session_id)
        self._authorize(actor_id, session)
        return SessionWithMessages(
            session=session,
            messages=self.message_dao.get_messages_by_session(session_id),
        )

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def post_message(
        self,
        actor_id: str,
        session_id: str,
        request: MessagePostRequest,
    ) -> List[MediationMessageResponse]:
        """
        Post a message and, for AI-assisted sessions, the AI reply to it.

        Args:
            actor_id: Owner, active party or the session's mediator
            session_id: Session UUID
            request: Message content

        Returns:
            The stored messages: the posted one, followed by the AI reply if any

        Raises:
            InvalidTransitionError: The session is already completed
        """
        dispute = self._authorize(actor_id, self._load_session(session_id))

        with self.locks.hold(session_id):
            session = self._load_session(session_id)
            if session.status == SessionStatus.COMPLETED:
                raise InvalidTransitionError("Cannot post to a completed mediation session")

            role = MessageRole.MEDIATOR if actor_id == session.mediator_id else MessageRole.USER
            history = self.message_dao.get_messages_by_session(session_id)

            message = self.message_dao.create_message(
                MediationMessageCreate(
                    session_id=session_id,
                    user_id=actor_id,
                    role=role,
                    content=request.content,
                )
            )
            posted = [message]
            entries = [self.activity_log.entry(
                session.dispute_id,
                actor_id,
                ActivityType.MESSAGE_SENT,
                {"session_id": session_id, "message_id": message.id, "role": role.value},
            )]
            started = False
            try:
                if session.ai_assistance and role != MessageRole.MEDIATOR:
                    reply, fallback = self._reply_to(session, dispute, history, message)
                    posted.append(reply)
                    entries.append(self._ai_activity(session, reply, "reply", fallback))

                if session.status == SessionStatus.SCHEDULED:
                    started = self.session_dao.update_session(
                        session_id,
                        MediationSessionUpdate(status=SessionStatus.IN_PROGRESS),
                        expected_status=SessionStatus.SCHEDULED,
                    ) is not None

                self.activity_log.record_many(entries)
            except DatabaseError:
                # The post and its reply are stored together with their activities or not at all
                if started:
                    self.session_dao.update_session(
                        session_id,
                        MediationSessionUpdate(status=SessionStatus.SCHEDULED),
                        expected_status=SessionStatus.IN_PROGRESS,
                    )
                self._discard_messages(posted)
                raise

        return posted

    def _reply_to(
        self,
        session: MediationSessionResponse,
        dispute: DisputeResponse,
        history: List[MediationMessageResponse],
        message: MediationMessageResponse,
    ) -> Tuple[MediationMessageResponse, bool]:
        """Store the AI reply to message. Returns it with whether the fallback text was used."""
        try:
            reply = self.adapter.generate_reply(
                self._context(dispute),
                self._turns(history),
                ConversationTurn(role=message.role.value, content=message.content),
            )
            text, sentiment, fallback = reply.text, reply.sentiment, False
        except AdapterUnavailableError as e:
            logger.warning(f"AI reply for session {session.id} fell back: {e.message}")
            text, sentiment, fallback = self.policy.fallback_reply, None, True
        return self._create_ai_message(session, text, sentiment), fallback

    # ------------------------------------------------------------------
    # Summaries
    # ------------------------------------------------------------------

    def summarize(self, actor_id: str, session_id: str) -> MediationSessionResponse:
        """
        Summarize a session, complete it and resolve its dispute.

        Calling this on a completed session returns it unchanged.

        Raises:
            ForbiddenError: Actor is neither the dispute owner nor the mediator
            DatabaseError: The dispute could not be resolved, or the activities
                recorded, after retries; the session is reverted to its previous status
        """
        session = self._load_session(session_id)
        if actor_id and actor_id == session.mediator_id:
            dispute = self.access.require_dispute(session.dispute_id)
        else:
            dispute = self.access.require_owner_or_mediator(actor_id, session.dispute_id)

        with self.locks.hold(session_id):
            session = self._load_session(session_id)
            if session.status == SessionStatus.COMPLETED:
                return session

            messages = self.message_dao.get_messages_by_session(session_id)
            result = self._summarize(session, dispute, messages)

            completed = self.session_dao.update_session(
                session_id,
                MediationSessionUpdate(
                    status=SessionStatus.COMPLETED,
                    summary=result.summary,
                    recommendations=result.recommendations,
                    completed_at=utc_now(),
                ),
                expected_status=session.status,
            )
            if completed is None:
                raise InvalidTransitionError("Session status changed while summarizing, please retry")

            session_completed = self.activity_log.entry(
                session.dispute_id,
                actor_id,
                ActivityType.SESSION_COMPLETED,
                {"session_id": session_id, "message_count": len(messages)},
            )
            self._resolve_dispute(session, actor_id, session_completed)
            logger.info(f"Mediation session {session_id} completed")
        return completed

    def _summarize(
        self,
        session: MediationSessionResponse,
        dispute: DisputeResponse,
        messages: List[MediationMessageResponse],
    ) -> MediationSummary:
        try:
            return self.adapter.summarize(self._context(dispute), self._turns(messages))
        except AdapterUnavailableError as e:
            logger.warning(f"Summary for session {session.id} fell back: {e.message}")
            return MediationSummary(
                summary=self.policy.fallback_summary(dispute.dispute_type),
                recommendations=self.policy.fallback_recommendations,
            )

    def _resolve_dispute(
        self,
        previous: MediationSessionResponse,
        actor_id: str,
        session_completed: DisputeActivityCreate,
    ) -> None:
        """
        Resolve the dispute of a just-completed session.

        The dispute transition and its activities, session_completed included,
        are retried on store errors. If they still fail, the session is put
        back to its previous status and the error is raised.
        """
        last_error: Optional[DatabaseError] = None
        for attempt in range(1 + self.completion_retries):
            try:
                self.disputes.complete_mediation(
                    previous.dispute_id, actor_id, previous.id, activities=[session_completed]
                )
                return
            except DatabaseError as e:
                last_error = e
                logger.warning(
                    f"Resolving dispute {previous.dispute_id} failed (attempt {attempt + 1}): {e.message}"
                )

        self.session_dao.update_session(
            previous.id,
            MediationSessionUpdate(
                status=previous.status,
                summary=previous.summary,
                recommendations=previous.recommendations,
                completed_at=None,
            ),
        )
        logger.error(f"Reverted session {previous.id} after failing to resolve its dispute")
        raise last_error
