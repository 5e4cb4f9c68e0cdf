"""
Pydantic models for mediation sessions and their messages.
Messages are append-only; there is no update model for them.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


# ============================================================================
# ENUMS
# ============================================================================

class SessionStatus(str, Enum):
    """Mediation session status values."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class MessageRole(str, Enum):
    """Author role of a mediation message."""
    USER = "user"
    MEDIATOR = "mediator"
    AI = "ai"


# ============================================================================
# SESSION MODELS
# ============================================================================

class MediationSessionCreate(BaseModel):
    """Model for creating a mediation session."""
    dispute_id: str = Field(..., description="Owning dispute UUID")
    session_code: str = Field(..., description="Unique code used to join the session")
    mediator_id: Optional[str] = Field(None, description="Assigned human mediator")
    ai_assistance: bool = Field(default=True, description="Whether the AI mediator replies")
    status: SessionStatus = Field(default=SessionStatus.SCHEDULED)
    scheduled_at: Optional[datetime] = None


class MediationSessionUpdate(BaseModel):
    """Model for updating a session. Only set fields are written."""
    status: Optional[SessionStatus] = None
    summary: Optional[str] = None
    recommendations: Optional[List[str]] = None
    completed_at: Optional[datetime] = None


class MediationSessionResponse(BaseModel):
    """Model for mediation session response."""
    id: str = Field(..., description="Session UUID")
    dispute_id: str
    session_code: str
    mediator_id: Optional[str] = None
    ai_assistance: bool = True
    status: SessionStatus
    summary: Optional[str] = None
    recommendations: Optional[List[str]] = None
    scheduled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================================================
# MESSAGE MODELS
# ============================================================================

class MediationMessageCreate(BaseModel):
    """Model for appending a message to a session."""
    session_id: str = Field(..., description="Session UUID")
    user_id: Optional[str] = Field(None, description="Author; None for AI messages")
    role: MessageRole
    content: str = Field(..., min_length=1)
    sentiment: Optional[str] = Field(None, description="Sentiment tag from the AI mediator")


class MediationMessageResponse(BaseModel):
    """Model for mediation message response."""
    id: str = Field(..., description="Message UUID")
    session_id: str
    user_id: Optional[str] = None
    role: MessageRole
    content: str
    sentiment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SessionWithMessages(BaseModel):
    """Session with its full ordered message history."""
    session: MediationSessionResponse
    messages: List[MediationMessageResponse]


# ============================================================================
# REQUEST MODELS
# ============================================================================

class SessionCreateRequest(BaseModel):
    """Body of POST /disputes/{id}/mediation-sessions."""
    mediator_id: Optional[str] = None
    ai_assistance: bool = True
    scheduled_at: Optional[datetime] = None


class MessagePostRequest(BaseModel):
    """Body of POST /mediation-sessions/{id}/messages."""
    content: str = Field(..., min_length=1)
