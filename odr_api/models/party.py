"""
Pydantic models for dispute parties and invitations.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PartyStatus(str, Enum):
    """Invitation status of a party."""
    INVITED = "invited"
    ACTIVE = "active"
    REMOVED = "removed"


class PartyRole(str, Enum):
    """Role a party plays in the dispute."""
    CLAIMANT = "claimant"
    RESPONDENT = "respondent"
    WITNESS = "witness"
    REPRESENTATIVE = "representative"
    OBSERVER = "observer"
    OTHER = "other"


class DisputePartyCreate(BaseModel):
    """Model for creating a party invitation."""
    dispute_id: str = Field(..., description="Owning dispute UUID")
    email: str = Field(..., description="Invitee email address")
    role: PartyRole = Field(default=PartyRole.RESPONDENT)
    name: Optional[str] = Field(None, description="Invitee display name")
    phone: Optional[str] = Field(None, description="Invitee phone number")
    invitation_code: str = Field(..., description="Globally unique invitation code")
    status: PartyStatus = Field(default=PartyStatus.INVITED)


class DisputePartyUpdate(BaseModel):
    """Model for updating a party. Only set fields are written."""
    user_id: Optional[str] = None
    status: Optional[PartyStatus] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    joined_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DisputePartyResponse(BaseModel):
    """Model for party response."""
    id: str = Field(..., description="Party UUID")
    dispute_id: str
    user_id: Optional[str] = Field(None, description="Bound user once the invitation is accepted")
    email: str
    role: PartyRole
    name: Optional[str] = None
    phone: Optional[str] = None
    invitation_code: str
    status: PartyStatus
    joined_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PartyInviteRequest(BaseModel):
    """Body of POST /disputes/{id}/parties."""
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    role: PartyRole = PartyRole.RESPONDENT
    name: Optional[str] = None
    phone: Optional[str] = None


class InvitationAcceptRequest(BaseModel):
    """Body of POST /invitations/accept."""
    invitation_code: str = Field(..., min_length=1)
