"""
Data Access Objects for settlement proposals and digital signatures.
"""

from datetime import datetime
from typing import List, Optional
from supabase import Client

from odr_api.errors import DatabaseError
from odr_api.models.settlement import (
    SettlementProposalCreate,
    SettlementProposalUpdate,
    SettlementProposalResponse,
    ProposalStatus,
    DigitalSignatureCreate,
    DigitalSignatureRecord,
)


class SettlementProposalDAO:
    """Handles database operations for settlement_proposals table."""

    def __init__(self, db_client: Client):
        """Initialize SettlementProposalDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "settlement_proposals"

    def create_proposal(self, proposal: SettlementProposalCreate) -> SettlementProposalResponse:
        """
        Create a new settlement proposal.

        Args:
            proposal: SettlementProposalCreate model

        Returns:
            SettlementProposalResponse: The created proposal
        """
        try:
            data = proposal.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating settlement proposal: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create settlement proposal record")

        return SettlementProposalResponse(**response.data[0])

    def get_proposal_by_id(self, proposal_id: str) -> Optional[SettlementProposalResponse]:
        """Retrieve a proposal by its UUID."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("id", proposal_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching settlement proposal: {str(e)}")

        if response.data and len(response.data) > 0:
            return SettlementProposalResponse(**response.data[0])

        return None

    def get_proposals_by_dispute(self, dispute_id: str) -> List[SettlementProposalResponse]:
        """Get all proposals of a dispute, newest first."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("dispute_id", dispute_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching settlement proposals: {str(e)}")

        return [SettlementProposalResponse(**record) for record in response.data or []]

    def update_proposal(
        self,
        proposal_id: str,
        update: SettlementProposalUpdate,
        expected_status: Optional[ProposalStatus] = None,
    ) -> Optional[SettlementProposalResponse]:
        """
        Update a proposal.

        Args:
            proposal_id: The proposal UUID
            update: Fields to write
            expected_status: When given, only update if the row still has this status

        Returns:
            Updated SettlementProposalResponse, None if no row matched
        """
        try:
            data = update.model_dump(mode="json", exclude_unset=True)
            query = self.db.table(self.table_name).update(data).eq("id", proposal_id)
            if expected_status is not None:
                query = query.eq("status", expected_status.value)
            response = query.execute()
        except Exception as e:
            raise DatabaseError(f"Database error while updating settlement proposal: {str(e)}")

        if response.data and len(response.data) > 0:
            return SettlementProposalResponse(**response.data[0])

        return None

    def delete_proposal(self, proposal_id: str) -> bool:
        """Delete a proposal. Used to roll back a failed creation."""
        try:
            response = (
                self.db.table(self.table_name)
                .delete()
                .eq("id", proposal_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while deleting settlement proposal: {str(e)}")

        return response.data is not None and len(response.data) > 0


class DigitalSignatureDAO:
    """Handles database operations for digital_signatures table."""

    def __init__(self, db_client: Client):
        """Initialize DigitalSignatureDAO with the shared Supabase client."""
        self.db = db_client
        self.table_name = "digital_signatures"

    def create_signature(self, signature: DigitalSignatureCreate) -> DigitalSignatureRecord:
        """Store a pending (unverified) signature."""
        try:
            data = signature.model_dump(mode="json", exclude_none=False)
            response = self.db.table(self.table_name).insert(data).execute()
        except Exception as e:
            raise DatabaseError(f"Database error while creating signature: {str(e)}")

        if not response.data or len(response.data) == 0:
            raise DatabaseError("Failed to create signature record")

        return DigitalSignatureRecord(**response.data[0])

    def get_signature_by_id(self, signature_id: str) -> Optional[DigitalSignatureRecord]:
        """Retrieve a signature, verification code included."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("id", signature_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching signature: {str(e)}")

        if response.data and len(response.data) > 0:
            return DigitalSignatureRecord(**response.data[0])

        return None

    def get_signatures_by_proposal(self, proposal_id: str) -> List[DigitalSignatureRecord]:
        """All signatures of a proposal, oldest first."""
        try:
            response = (
                self.db.table(self.table_name)
                .select("*")
                .eq("proposal_id", proposal_id)
                .order("created_at", desc=False)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while fetching signatures: {str(e)}")

        return [DigitalSignatureRecord(**record) for record in response.data or []]

    def mark_verified(self, signature_id: str, verified_at: datetime) -> Optional[DigitalSignatureRecord]:
        """
        Stamp verified_at on a signature that is not yet verified.

        Args:
            signature_id: The signature UUID
            verified_at: Timestamp to store

        Returns:
            The updated record, or None if the row was already verified
        """
        try:
            response = (
                self.db.table(self.table_name)
                .update({"verified_at": verified_at.isoformat()})
                .eq("id", signature_id)
                .is_("verified_at", "null")
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while verifying signature: {str(e)}")

        if response.data and len(response.data) > 0:
            return DigitalSignatureRecord(**response.data[0])

        return None

    def clear_verification(self, signature_id: str) -> Optional[DigitalSignatureRecord]:
        """Reset verified_at to null. Rolls back a verification whose audit record failed."""
        try:
            response = (
                self.db.table(self.table_name)
                .update({"verified_at": None})
                .eq("id", signature_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while resetting signature: {str(e)}")

        if response.data and len(response.data) > 0:
            return DigitalSignatureRecord(**response.data[0])

        return None

    def delete_signature(self, signature_id: str) -> bool:
        """Delete a signature. Used to roll back a failed signature request."""
        try:
            response = (
                self.db.table(self.table_name)
                .delete()
                .eq("id", signature_id)
                .execute()
            )
        except Exception as e:
            raise DatabaseError(f"Database error while deleting signature: {str(e)}")

        return response.data is not None and len(response.data) > 0
