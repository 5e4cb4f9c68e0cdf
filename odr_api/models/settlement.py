"""
Pydantic models for settlement proposals and digital signatures.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ProposalStatus(str, Enum):
    """Settlement proposal status values."""
    DRAFT = "draft"
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


PROPOSAL_TRANSITIONS = {
    ProposalStatus.DRAFT: {ProposalStatus.PROPOSED, ProposalStatus.WITHDRAWN},
    ProposalStatus.PROPOSED: {
        ProposalStatus.ACCEPTED,
        ProposalStatus.REJECTED,
        ProposalStatus.WITHDRAWN,
    },
    ProposalStatus.ACCEPTED: set(),
    ProposalStatus.REJECTED: set(),
    ProposalStatus.WITHDRAWN: set(),
}

# Only the author may move a proposal into these states
AUTHOR_TRANSITIONS = {ProposalStatus.PROPOSED, ProposalStatus.WITHDRAWN}

# Only a counterparty may move a proposal into these states
RESPONSE_TRANSITIONS = {ProposalStatus.ACCEPTED, ProposalStatus.REJECTED}


# ============================================================================
# PROPOSAL MODELS
# ============================================================================

class SettlementProposalCreate(BaseModel):
    """Model for creating a settlement proposal."""
    dispute_id: str
    proposed_by: str = Field(..., description="Author user ID")
    title: str = Field(..., min_length=1)
    terms: str = Field(..., min_length=1, description="Offered settlement terms")
    document_id: Optional[str] = Field(None, description="Shared document attached to the offer")
    status: ProposalStatus = Field(default=ProposalStatus.DRAFT)
    expires_at: Optional[datetime] = None


class SettlementProposalUpdate(BaseModel):
    """Model for updating a proposal. Only set fields are written."""
    title: Optional[str] = None
    terms: Optional[str] = None
    document_id: Optional[str] = None
    status: Optional[ProposalStatus] = None
    expires_at: Optional[datetime] = None
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SettlementProposalResponse(BaseModel):
    """Model for settlement proposal response."""
    id: str = Field(..., description="Proposal UUID")
    dispute_id: str
    proposed_by: str
    title: str
    terms: str
    document_id: Optional[str] = None
    status: ProposalStatus
    expires_at: Optional[datetime] = None
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ============================================================================
# SIGNATURE MODELS
# ============================================================================

class DigitalSignatureCreate(BaseModel):
    """Model for creating a pending signature."""
    proposal_id: str
    signer_id: str
    verification_code: str
    signed_at: datetime


class DigitalSignatureResponse(BaseModel):
    """Signature as returned by reads. The verification code is never exposed."""
    id: str = Field(..., description="Signature UUID")
    proposal_id: str
    signer_id: str
    signed_at: datetime
    verified_at: Optional[datetime] = Field(None, description="Set once the code is confirmed")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @property
    def is_verified(self) -> bool:
        return self.verified_at is not None


class DigitalSignatureRecord(DigitalSignatureResponse):
    """Stored signature row including its verification code."""
    verification_code: str

    def public(self) -> DigitalSignatureResponse:
        return DigitalSignatureResponse(**self.model_dump(exclude={"verification_code"}))


class SignatureIssuedResponse(BaseModel):
    """Returned once when a signature is requested; carries the code to confirm."""
    signature: DigitalSignatureResponse
    verification_code: str


# ============================================================================
# REQUEST MODELS
# ============================================================================

class ProposalCreateRequest(BaseModel):
    """Body of POST /disputes/{id}/settlement-proposals."""
    title: str = Field(..., min_length=1)
    terms: str = Field(..., min_length=1)
    document_id: Optional[str] = None
    expires_in_days: Optional[int] = Field(None, ge=1)
    submit: bool = Field(default=False, description="Create directly in proposed status")


class ProposalUpdateRequest(BaseModel):
    """Body of PATCH /settlement-proposals/{id}."""
    title: Optional[str] = Field(None, min_length=1)
    terms: Optional[str] = Field(None, min_length=1)
    document_id: Optional[str] = None
    status: Optional[ProposalStatus] = None


class SignatureVerifyRequest(BaseModel):
    """Body of POST /signatures/{id}/verify."""
    verification_code: str = Field(..., min_length=1)
