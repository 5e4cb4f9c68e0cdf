"""Pydantic models for API request/response validation."""

from odr_api.models.dispute import (
    DisputeStatus,
    DisputeType,
    DisputeCreate,
    DisputeUpdate,
    DisputeResponse,
    DisputeCreateRequest,
    DisputeUpdateRequest,
)
from odr_api.models.party import (
    PartyStatus,
    PartyRole,
    DisputePartyCreate,
    DisputePartyUpdate,
    DisputePartyResponse,
    PartyInviteRequest,
    InvitationAcceptRequest,
)
from odr_api.models.mediation import (
    SessionStatus,
    MessageRole,
    MediationSessionCreate,
    MediationSessionUpdate,
    MediationSessionResponse,
    MediationMessageCreate,
    MediationMessageResponse,
    SessionWithMessages,
    SessionCreateRequest,
    MessagePostRequest,
)
from odr_api.models.settlement import (
    ProposalStatus,
    SettlementProposalCreate,
    SettlementProposalUpdate,
    SettlementProposalResponse,
    DigitalSignatureCreate,
    DigitalSignatureResponse,
    DigitalSignatureRecord,
    SignatureIssuedResponse,
    ProposalCreateRequest,
    ProposalUpdateRequest,
    SignatureVerifyRequest,
)
from odr_api.models.activity import (
    CLIENT_ACTIVITY_TYPES,
    ActivityType,
    DisputeActivityCreate,
    DisputeActivityResponse,
    ActivityReport,
    UserActivityCount,
    ActivityRecordRequest,
)
from odr_api.models.ai import (
    ConversationTurn,
    DisputeContext,
    MediatorReply,
    MediationSummary,
)

__all__ = [
    "DisputeStatus",
    "DisputeType",
    "DisputeCreate",
    "DisputeUpdate",
    "DisputeResponse",
    "DisputeCreateRequest",
    "DisputeUpdateRequest",
    "PartyStatus",
    "PartyRole",
    "DisputePartyCreate",
    "DisputePartyUpdate",
    "DisputePartyResponse",
    "PartyInviteRequest",
    "InvitationAcceptRequest",
    "SessionStatus",
    "MessageRole",
    "MediationSessionCreate",
    "MediationSessionUpdate",
    "MediationSessionResponse",
    "MediationMessageCreate",
    "MediationMessageResponse",
    "SessionWithMessages",
    "SessionCreateRequest",
    "MessagePostRequest",
    "ProposalStatus",
    "SettlementProposalCreate",
    "SettlementProposalUpdate",
    "SettlementProposalResponse",
    "DigitalSignatureCreate",
    "DigitalSignatureResponse",
    "DigitalSignatureRecord",
    "SignatureIssuedResponse",
    "ProposalCreateRequest",
    "ProposalUpdateRequest",
    "SignatureVerifyRequest",
    "CLIENT_ACTIVITY_TYPES",
    "ActivityType",
    "DisputeActivityCreate",
    "DisputeActivityResponse",
    "ActivityReport",
    "UserActivityCount",
    "ActivityRecordRequest",
    "ConversationTurn",
    "DisputeContext",
    "MediatorReply",
    "MediationSummary",
]
