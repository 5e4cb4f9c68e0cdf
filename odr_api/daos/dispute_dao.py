"""
Data Access Object for disputes.
Handles all database operations for the disputes table.
"""

from typing import List, Optional
from supabase import Client

from odr_api.errors import DatabaseError
from odr_api.models.dispute import DisputeCreate, DisputeUpdate, DisputeResponse, DisputeStatus


class DisputeDAO:
    """Handles database operations for disputes table."""

    def __init__(self, db_client: Client):
        """
        Initialize DisputeDAO.

        Args:
            db_client: Supabase client shared by the application
        """
        self.db = db_client
        self.table_name = "disputes"

    def create_dispute(self, dispute: DisputeCreate) -> DisputeResponse:
        """
        Create a new dispute record.

        Args:
            dispute: DisputeCreate model with dispute data

        Returns:
            DisputeResponse: The created dispute record

        Raises:
            DatabaseError: If database operation fails
        """
        try:
            data = dispute.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating dispute: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create dispute record")

        return DisputeResponse(**response.data[0])

    def get_dispute_by_id(self, dispute_id: str) -> Optional[DisputeResponse]:
        """
        Retrieve a dispute by its UUID.

        Args:
            dispute_id: The UUID of the dispute

        Returns:
            DisputeResponse if found, None otherwise
        """
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("id", dispute_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching dispute: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputeResponse(**response.data[0])

        return None

    def get_disputes_by_user(self, user_id: str) -> List[DisputeResponse]:
        """Get all disputes owned by a user, newest first."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching disputes by user: {str(e)}")

        return [DisputeResponse(**record) for record in response.data or []]

    def get_disputes_by_ids(self, dispute_ids: List[str]) -> List[DisputeResponse]:
        """Get disputes for a list of UUIDs, newest first."""
        if not dispute_ids:
            return []

        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .in_("id", dispute_ids)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching disputes: {str(e)}")

        return [DisputeResponse(**record) for record in response.data or []]

    def update_dispute(
        self,
        dispute_id: str,
        update: DisputeUpdate,
        expected_status: Optional[DisputeStatus] = None,
    ) -> Optional[DisputeResponse]:
        """
        Update a dispute record.

        Args:
            dispute_id: The UUID of the dispute
            update: DisputeUpdate model; only explicitly set fields are written
            expected_status: When given, the row is only updated if it still
                has this status (compare-and-set for status transitions)

        Returns:
            DisputeResponse if updated, None if not found or the status moved on
        """
        try:
            data = update.model_dump(mode="json", exclude_unset=True)
            query = self.db.table(self.table_name).update(data).eq("id", dispute_id)
            if expected_status is not None:
                query = query.eq("status", expected_status.value)
            response = query.execute()
        except Exception as e:
            raise DatabaseError(f"Database error while updating dispute: {str(e)}")

        if response.data and len(response.data) > 0:
            return DisputeResponse(**response.data[0])

        return None

    def delete_dispute(self, dispute_id: str) -> bool:
        """Delete a dispute by ID. Used to roll back a failed creation."""
        try:
            response = (
                self.db.table(self.table_name)
                .delete()
                .eq("id", dispute_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while deleting dispute: {str(e)}")

        return response.data is not None and len(response.data) > 0
