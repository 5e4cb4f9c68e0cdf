"""
Pydantic models for disputes.
The dispute status state machine is declared here as well.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# ENUMS
# ============================================================================

class DisputeStatus(str, Enum):
    """Lifecycle status of a dispute."""
    PENDING = "pending"
    ACTIVE = "active"
    MEDIATION = "mediation"
    RESOLVED = "resolved"
    CLOSED = "closed"


class DisputeType(str, Enum):
    """Kinds of disputes a user can file."""
    LANDLORD_TENANT = "landlord_tenant"
    EMPLOYMENT = "employment"
    CONTRACT = "contract"
    FAMILY = "family"
    BUSINESS = "business"
    CONSUMER = "consumer"
    OTHER = "other"


# Status changes a caller may request through a plain update.
# mediation and resolved are only reachable through session operations.
MANUAL_TRANSITIONS = {
    DisputeStatus.PENDING: {DisputeStatus.ACTIVE, DisputeStatus.CLOSED},
    DisputeStatus.ACTIVE: {DisputeStatus.CLOSED},
    DisputeStatus.MEDIATION: {DisputeStatus.CLOSED},
    DisputeStatus.RESOLVED: set(),
    DisputeStatus.CLOSED: set(),
}

# Statuses from which a mediation session may be opened
MEDIATION_START_STATUSES = {DisputeStatus.PENDING, DisputeStatus.ACTIVE}

TERMINAL_STATUSES = {DisputeStatus.RESOLVED, DisputeStatus.CLOSED}


# ============================================================================
# DISPUTE MODELS
# ============================================================================

class DisputeCreate(BaseModel):
    """Model for creating a new dispute record."""
    user_id: str = Field(..., description="Owning user ID")
    title: str = Field(..., min_length=1, description="Short dispute title")
    description: str = Field(..., min_length=1, description="What the dispute is about")
    parties: str = Field(..., min_length=1, description="Free-text description of the parties")
    dispute_type: DisputeType = Field(..., description="Kind of dispute")
    status: DisputeStatus = Field(default=DisputeStatus.PENDING)
    supporting_documents: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="References to supporting documents"
    )


class DisputeUpdate(BaseModel):
    """Model for updating a dispute. Only set fields are written."""
    title: Optional[str] = None
    description: Optional[str] = None
    parties: Optional[str] = None
    dispute_type: Optional[DisputeType] = None
    status: Optional[DisputeStatus] = None
    supporting_documents: Optional[List[Dict[str, Any]]] = None
    ai_analysis: Optional[Dict[str, Any]] = None
    mediation_session_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DisputeResponse(BaseModel):
    """Model for dispute response."""
    id: str = Field(..., description="Dispute UUID")
    user_id: str = Field(..., description="Owning user ID")
    title: str
    description: str
    parties: str
    dispute_type: str
    status: DisputeStatus
    mediation_session_id: Optional[str] = Field(None, description="Current mediation session")
    ai_analysis: Optional[Dict[str, Any]] = None
    supporting_documents: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
    resolved_at: Optional[datetime] = Field(None, description="Set only while resolved")

    class Config:
        from_attributes = True


# ============================================================================
# REQUEST MODELS
# ============================================================================

class DisputeCreateRequest(BaseModel):
    """Body of POST /disputes."""
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    parties: str = Field(..., min_length=1)
    dispute_type: DisputeType
    supporting_documents: List[Dict[str, Any]] = Field(default_factory=list)


class DisputeUpdateRequest(BaseModel):
    """Body of PATCH /disputes/{id}."""
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    parties: Optional[str] = Field(None, min_length=1)
    dispute_type: Optional[DisputeType] = None
    status: Optional[DisputeStatus] = None
    supporting_documents: Optional[List[Dict[str, Any]]] = None
    ai_analysis: Optional[Dict[str, Any]] = None
