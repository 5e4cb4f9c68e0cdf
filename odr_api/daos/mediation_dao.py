"""
Data Access Object for mediation sessions and messages.
Messages are insert-only; the DAO exposes no update for them.
"""

from typing import List, Optional
from supabase import Client

from odr_api.errors import DatabaseError
from odr_api.models.mediation import (
    MediationSessionCreate,
    MediationSessionUpdate,
    MediationSessionResponse,
    MediationMessageCreate,
    MediationMessageResponse,
    SessionStatus,
)


class MediationSessionDAO:
    """Handles database operations for mediation_sessions table."""

    def __init__(self, db_client: Client):
        """Initialize MediationSessionDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "mediation_sessions"

    def create_session(self, session: MediationSessionCreate) -> MediationSessionResponse:
        """
        Create a new mediation session.

        Args:
            session: MediationSessionCreate model with session data

        Returns:
            MediationSessionResponse: The created session record
        """
        try:
            data = session.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating mediation session: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create mediation session record")

        return MediationSessionResponse(**response.data[0])

    def get_session_by_id(self, session_id: str) -> Optional[MediationSessionResponse]:
        """Retrieve a session by its UUID."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("id", session_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching mediation session: {str(e)}")

        if response.data and len(response.data) > 0:
            return MediationSessionResponse(**response.data[0])

        return None

    def get_session_by_code(self, session_code: str) -> Optional[MediationSessionResponse]:
        """Retrieve a session by its join code."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("session_code", session_code)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching session by code: {str(e)}")

        if response.data and len(response.data) > 0:
            return MediationSessionResponse(**response.data[0])

        return None

    def get_sessions_by_dispute(self, dispute_id: str) -> List[MediationSessionResponse]:
        """
        Get all sessions of a dispute.

        Args:
            dispute_id: The dispute UUID

        Returns:
            Sessions ordered newest first
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching mediation sessions: {str(e)}")

        return [MediationSessionResponse(**record) for record in response.data or []]

    def update_session(
        self,
        session_id: str,
        update: MediationSessionUpdate,
        expected_status: Optional[SessionStatus] = None,
    ) -> Optional[MediationSessionResponse]:
        """
        Update a session record.

        Args:
            session_id: The session UUID
            update: Fields to write
            expected_status: When given, only update if the row still has this status

        Returns:
            Updated MediationSessionResponse, None if no row matched
        """
        try:
            data = update.model_dump(mode="json", exclude_unset=True)
            query = self.db.table(self.table_name).update(data).eq("id", session_id)
            if expected_status is not None:
                query = query.eq("status", expected_status.value)
            response = query.execute()
        except Exception as e:
            raise DatabaseError(f"Database error while updating mediation session: {str(e)}")

        if response.data and len(response.data) > 0:
            return MediationSessionResponse(**response.data[0])

        return None


class MediationMessageDAO:
    """Handles database operations for mediation_messages table."""

    def __init__(self, db_client: Client):
        """Initialize MediationMessageDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "mediation_messages"

    def create_message(self, message: MediationMessageCreate) -> MediationMessageResponse:
        """
        Append a message to a session.

        Args:
            message: MediationMessageCreate model with message data

        Returns:
            MediationMessageResponse: The stored message
        """
        try:
            data = message.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating mediation message: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create mediation message record")

        return MediationMessageResponse(**response.data[0])

    def get_messages_by_session(self, session_id: str) -> List[MediationMessageResponse]:
        """
        Retrieve all messages of a session in turn order.

        Args:
            session_id: The session UUID

        Returns:
            List of MediationMessageResponse ordered by creation time
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("session_id", session_id)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching mediation messages: {str(e)}")

        return [MediationMessageResponse(**record) for record in response.data or []]

    def delete_message(self, message_id: str) -> bool:
        """Delete a message. Only used to roll back a post whose audit record failed."""
        try:
            response = (
                self.db.table(self.table_name)
                .delete()
                .eq("id", message_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while deleting mediation message: {str(e)}")

        return response.data is not None and len(response.data) > 0
