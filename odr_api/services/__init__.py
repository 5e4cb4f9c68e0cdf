"""Domain services for disputes, parties, mediation, settlements and the activity log."""

from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog, build_activity_report
from odr_api.services.dispute_service import DisputeLifecycle
from odr_api.services.party_service import PartyRegistry
from odr_api.services.mediation_service import MediationCoordinator
from odr_api.services.settlement_service import SettlementService
from odr_api.services.ai_mediator import (
    MediatorAdapter,
    MediatorProvider,
    OpenAIMediatorProvider,
    GroqMediatorProvider,
)
from odr_api.services.container import ServiceContainer, build_services

__all__ = [
    "AccessControl",
    "ActivityLog",
    "build_activity_report",
    "DisputeLifecycle",
    "PartyRegistry",
    "MediationCoordinator",
    "SettlementService",
    "MediatorAdapter",
    "MediatorProvider",
    "OpenAIMediatorProvider",
    "GroqMediatorProvider",
    "ServiceContainer",
    "build_services",
]
