"""
Data Access Object for dispute parties.
Handles all database operations for the dispute_parties table.
"""

from typing import List, Optional
from supabase import Client

from odr_api.errors import DatabaseError
from odr_api.models.party import (
    DisputePartyCreate,
    DisputePartyUpdate,
    DisputePartyResponse,
    PartyStatus,
)


class DisputePartyDAO:
    """Handles database operations for dispute_parties table."""

    def __init__(self, db_client: Client):
        """Initialize DisputePartyDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "dispute_parties"

    def create_party(self, party: DisputePartyCreate) -> DisputePartyResponse:
        """
        Create a new party invitation.

        Args:
            party: DisputePartyCreate model with invitation data

        Returns:
            DisputePartyResponse: The created party record
        """
        try:
            data = party.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating party: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create party record")

        return DisputePartyResponse(**response.data[0])

    def get_party_by_id(self, party_id: str) -> Optional[DisputePartyResponse]:
        """Retrieve a party by its UUID."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("id", party_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching party: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputePartyResponse(**response.data[0])

        return None

    def get_parties_by_dispute(self, dispute_id: str) -> List[DisputePartyResponse]:
        """
        Get all parties of a dispute, ordered by role.

        Args:
            dispute_id: The dispute UUID

        Returns:
            List of DisputePartyResponse objects, removed parties included
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .order("role", desc=False)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching parties: {str(e)}")

        return [DisputePartyResponse(**record) for record in response.data or []]

    def get_party_by_invitation_code(self, invitation_code: str) -> Optional[DisputePartyResponse]:
        """Look a party up by its globally unique invitation code."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("invitation_code", invitation_code)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching party by code: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputePartyResponse(**response.data[0])

        return None

    def get_party_by_email(self, dispute_id: str, email: str) -> Optional[DisputePartyResponse]:
        """
        Find the non-removed party with this email on one dispute.
        The same email may be a party on unrelated disputes.
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .eq("email", email.lower())
                .neq("status", PartyStatus.REMOVED.value)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching party by email: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputePartyResponse(**response.data[0])

        return None

    def get_active_party_by_user(self, dispute_id: str, user_id: str) -> Optional[DisputePartyResponse]:
        """Find the active party row bound to a user on a dispute."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .eq("user_id", user_id)
                .eq("status", PartyStatus.ACTIVE.value)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching party by user: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputePartyResponse(**response.data[0])

        return None

    def get_active_parties_by_user(self, user_id: str) -> List[DisputePartyResponse]:
        """All active party rows of a user, across disputes."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("user_id", user_id)
                .eq("status", PartyStatus.ACTIVE.value)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching parties by user: {str(e)}")

        return [DisputePartyResponse(**record) for record in response.data or []]

    def update_party(
        self,
        party_id: str,
        update: DisputePartyUpdate,
        expected_status: Optional[PartyStatus] = None,
    ) -> Optional[DisputePartyResponse]:
        """
        Update a party record.

        Args:
            party_id: The party UUID
            update: Fields to write
            expected_status: When given, the row is only updated if it still
                has this status

        Returns:
            Updated DisputePartyResponse, None if no row matched
        """
        try:
            data = update.model_dump(mode="json", exclude_unset=True)
            query = self.db.table(self.table_name).update(data).eq("id", party_id)
            if expected_status is not None:
                query = query.eq("status", expected_status.value)
            response = query.execute()
        except Exception as e:
            raise DatabaseError(f"Database error while updating party: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputePartyResponse(**response.data[0])

        return None

    def delete_party(self, party_id: str) -> bool:
        """Delete a party row. Used to roll back a failed invitation."""
        try:
            response = (
                self.db.table(self.table_name)
                .delete()
                .eq("id", party_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while deleting party: {str(e)}")

        return response.data is not None and len(response.data) > 0
