"""
Result and input records exchanged with the AI mediator providers.
Provider output is validated and defaulted here, not in the services.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class Sentiment(str, Enum):
    """Sentiment labels the mediator may attach to a message."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    MIXED = "mixed"


SENTIMENT_LABELS = {s.value for s in Sentiment}


class ConversationTurn(BaseModel):
    """One message of the history sent to a provider."""
    role: str
    content: str


class DisputeContext(BaseModel):
    """What the mediator knows about the dispute."""
    dispute_type: str
    title: str
    description: str
    parties: List[str] = Field(default_factory=list)
    jurisdiction: str = "Canada"
    language: str = "English"
    mediation_style: str = "facilitative"
    style_description: str = ""
    requires_confidentiality: bool = True


class MediatorReply(BaseModel):
    """Drafted mediator reply plus the sentiment of the triggering message."""
    text: str
    sentiment: Optional[str] = None

    @field_validator("text", mode="before")
    @classmethod
    def _text_not_blank(cls, v: Any) -> str:
        text = str(v or "").strip()
        if not text:
            raise ValueError("Mediator reply is empty")
        return text

    @field_validator("sentiment", mode="before")
    @classmethod
    def _known_sentiment(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        label = str(v).strip().lower()
        return label if label in SENTIMENT_LABELS else None


class MediationSummary(BaseModel):
    """Summary and next-step recommendations for a session."""
    summary: str
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_not_blank(cls, v: Any) -> str:
        text = str(v or "").strip()
        if not text:
            raise ValueError("Summary is empty")
        return text

    @field_validator("recommendations", mode="before")
    @classmethod
    def _as_list(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [line.strip("-• ").strip() for line in v.splitlines() if line.strip()]
        if isinstance(v, list):
            return [str(item).strip() for item in v if str(item).strip()]
        return []
