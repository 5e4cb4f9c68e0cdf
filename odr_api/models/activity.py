"""
Activity log models
Append-only audit trail of every state-changing action on a dispute
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ActivityType(str, Enum):
    """Types of actions recorded against a dispute"""
    # Dispute lifecycle
    DISPUTE_CREATED = "dispute_created"
    DISPUTE_UPDATED = "dispute_updated"
    STATUS_CHANGED = "status_changed"
    DISPUTE_RESOLVED = "dispute_resolved"

    # Parties
    PARTY_ADDED = "party_added"
    PARTY_JOINED = "party_joined"
    PARTY_REMOVED = "party_removed"

    # Mediation
    SESSION_STARTED = "session_started"
    MESSAGE_SENT = "message_sent"
    AI_RESPONSE_GENERATED = "ai_response_generated"
    SESSION_COMPLETED = "session_completed"

    # Settlements
    PROPOSAL_CREATED = "proposal_created"
    PROPOSAL_UPDATED = "proposal_updated"
    PROPOSAL_PROPOSED = "proposal_proposed"
    PROPOSAL_ACCEPTED = "proposal_accepted"
    PROPOSAL_REJECTED = "proposal_rejected"
    PROPOSAL_WITHDRAWN = "proposal_withdrawn"
    SIGNATURE_REQUESTED = "signature_requested"
    SIGNATURE_VERIFIED = "signature_verified"

    # Client-reported
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_SHARED = "document_shared"


# Only these may be recorded by clients; everything else is emitted by the
# services alongside the state change it describes
CLIENT_ACTIVITY_TYPES = frozenset({
    ActivityType.DOCUMENT_UPLOADED,
    ActivityType.DOCUMENT_SHARED,
})


class DisputeActivityCreate(BaseModel):
    """Model for appending an activity."""
    dispute_id: str
    user_id: Optional[str] = Field(None, description="Actor; None for system and AI actions")
    activity_type: ActivityType
    payload: Dict[str, Any] = Field(default_factory=dict)


class DisputeActivityResponse(BaseModel):
    """Stored activity row."""
    id: str
    dispute_id: str
    user_id: Optional[str] = None
    activity_type: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    class Config:
        from_attributes = True


class UserActivityCount(BaseModel):
    """Activity count for one actor."""
    user_id: Optional[str] = Field(None, description="None stands for system/AI actions")
    count: int


class ActivityReport(BaseModel):
    """Aggregated view over a dispute's activity log."""
    dispute_id: str
    total_activities: int = 0
    activity_counts: Dict[str, int] = Field(default_factory=dict, description="Count by activity type")
    counts_by_user: Dict[str, int] = Field(
        default_factory=dict,
        description="Count by actor; 'system' collects actions without a user"
    )
    top_users: List[UserActivityCount] = Field(default_factory=list)
    timeline: Dict[str, int] = Field(default_factory=dict, description="ISO date -> count")
    recent_activities: List[DisputeActivityResponse] = Field(default_factory=list)


class ActivityRecordRequest(BaseModel):
    """Body of POST /disputes/{id}/activities."""
    activity_type: ActivityType
    payload: Dict[str, Any] = Field(default_factory=dict)
