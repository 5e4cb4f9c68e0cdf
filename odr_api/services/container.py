"""
Service wiring.
Builds every service around one explicit database client so nothing
reaches for a global store.
"""

from dataclasses import dataclass
from typing import Optional

from supabase import Client

from odr_api.config.policy import MediationPolicy
from odr_api.config.settings import Settings
from odr_api.daos.activity_dao import DisputeActivityDAO
from odr_api.daos.dispute_dao import DisputeDAO
from odr_api.daos.mediation_dao import MediationMessageDAO, MediationSessionDAO
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.daos.settlement_dao import DigitalSignatureDAO, SettlementProposalDAO
from odr_api.services.access_control import AccessControl
from odr_api.services.activity_service import ActivityLog
from odr_api.services.ai_mediator import MediatorAdapter
from odr_api.services.dispute_service import DisputeLifecycle
from odr_api.services.mediation_service import MediationCoordinator
from odr_api.services.party_service import InvitationNotifier, PartyRegistry
from odr_api.services.settlement_service import SettlementService


@dataclass
class ServiceContainer:
    """All services of the application, sharing one store handle."""

    access: AccessControl
    activity_log: ActivityLog
    disputes: DisputeLifecycle
    parties: PartyRegistry
    mediation: MediationCoordinator
    settlements: SettlementService


def build_services(
    db_client: Client,
    settings: Settings,
    policy: Optional[MediationPolicy] = None,
    adapter: Optional[MediatorAdapter] = None,
    notifier: Optional[InvitationNotifier] = None,
) -> ServiceContainer:
    """
    Wire DAOs and services together.

    Args:
        db_client: Supabase client (or a compatible stand-in)
        settings: Application settings
        policy: Mediation policy; loaded from settings.policy_path when omitted
        adapter: AI mediator adapter; built from settings when omitted
        notifier: Called with (party, dispute) after an invitation is created

    Returns:
        ServiceContainer with every service ready to use
    """
    policy = policy or MediationPolicy(settings.policy_path)
    adapter = adapter or MediatorAdapter.from_settings(settings)

    dispute_dao = DisputeDAO(db_client)
    party_dao = DisputePartyDAO(db_client)
    session_dao = MediationSessionDAO(db_client)

    access = AccessControl(dispute_dao, party_dao, session_dao)
    activity_log = ActivityLog(DisputeActivityDAO(db_client), access, policy)
    disputes = DisputeLifecycle(dispute_dao, party_dao, access, activity_log)

    return ServiceContainer(
        access=access,
        activity_log=activity_log,
        disputes=disputes,
        parties=PartyRegistry(party_dao, access, activity_log, policy, notifier=notifier),
        mediation=MediationCoordinator(
            session_dao,
            MediationMessageDAO(db_client),
            party_dao,
            disputes,
            access,
            activity_log,
            adapter,
            policy,
        ),
        settlements=SettlementService(
            SettlementProposalDAO(db_client),
            DigitalSignatureDAO(db_client),
            access,
            activity_log,
            policy,
        ),
    )
