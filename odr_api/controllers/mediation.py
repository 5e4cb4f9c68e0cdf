"""
Mediation controller for sessions and their messages.
"""

from typing import List

from odr_api.controllers.base import BaseController
from odr_api.models.mediation import (
    MediationMessageResponse,
    MediationSessionResponse,
    MessagePostRequest,
    SessionCreateRequest,
    SessionWithMessages,
)
from odr_api.services.container import ServiceContainer


class MediationController(BaseController):
    """Controller for mediation session operations."""

    def __init__(self, services: ServiceContainer):
        self.mediation = services.mediation

    def create_session(
        self,
        actor_id: str,
        dispute_id: str,
        request: SessionCreateRequest,
    ) -> MediationSessionResponse:
        return self._run(
            "creating mediation session",
            self.mediation.create_session,
            actor_id,
            dispute_id,
            request,
        )

    def list_sessions(self, actor_id: str, dispute_id: str) -> List[MediationSessionResponse]:
        return self._run("listing mediation sessions", self.mediation.list_sessions, actor_id, dispute_id)

    def get_session(self, actor_id: str, session_id: str) -> SessionWithMessages:
        return self._run(
            "fetching mediation session", self.mediation.get_session_details, actor_id, session_id
        )

    def get_session_by_code(self, actor_id: str, session_code: str) -> MediationSessionResponse:
        return self._run(
            "fetching mediation session", self.mediation.get_session_by_code, actor_id, session_code
        )

    def post_message(
        self,
        actor_id: str,
        session_id: str,
        request: MessagePostRequest,
    ) -> List[MediationMessageResponse]:
        return self._run("posting message", self.mediation.post_message, actor_id, session_id, request)

    def get_messages(self, actor_id: str, session_id: str) -> List[MediationMessageResponse]:
        return self._run("fetching messages", self.mediation.get_messages, actor_id, session_id)

    def summarize(self, actor_id: str, session_id: str) -> MediationSessionResponse:
        return self._run("summarizing session", self.mediation.summarize, actor_id, session_id)
