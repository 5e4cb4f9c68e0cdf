"""
Data Access Object for the dispute activity log.
Insert and read only.
"""

from typing import List
from supabase import Client

from odr_api.errors import DatabaseError
from odr_api.models.activity import DisputeActivityCreate, DisputeActivityResponse


class DisputeActivityDAO:
    """Handles database operations for dispute_activities table."""

    def __init__(self, db_client: Client):
        """Initialize DisputeActivityDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "dispute_activities"

    def create_activity(self, activity: DisputeActivityCreate) -> DisputeActivityResponse:
        """
        Append an activity record.

        Args:
            activity: DisputeActivityCreate model

        Returns:
            DisputeActivityResponse: The stored activity

        Raises:
            DatabaseError: If the row could not be written
        """
        try:
            data = activity.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while recording activity: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to record activity")

        return DisputeActivityResponse(**response.data[0])

    def create_activities(self, activities: List[DisputeActivityCreate]) -> List[DisputeActivityResponse]:
        """
        Append several activities in a single insert.

        One insert statement is all-or-nothing, so the activities that
        describe one state change are stored together or not at all.
        """
        try:
            data = [a.model_dump(mode="json", exclude_none=False) for a in activities]
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while recording activities: {str(e)}")

        if not response.data or len(response.data) != len(activities):
            raise DatabaseError("Failed to record activities")

        return [DisputeActivityResponse(**record) for record in response.data]

    def get_activities_by_dispute(self, dispute_id: str) -> List[DisputeActivityResponse]:
        """All activities of a dispute, newest first."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching activities: {str(e)}")

        return [DisputeActivityResponse(**record) for record in response.data or []]
