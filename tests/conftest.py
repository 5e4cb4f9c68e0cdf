"""
Shared fixtures: an in-memory store, a scripted AI mediator and the wired services.
"""

import json

import pytest

from odr_api.config.policy import MediationPolicy
from odr_api.config.settings import Settings
from odr_api.models.dispute import DisputeCreateRequest, DisputeType
from odr_api.models.party import PartyInviteRequest, PartyRole
from odr_api.services.ai_mediator import MediatorAdapter
from odr_api.services.container import build_services
from tests.fakes import FakeSupabase, ScriptedProvider

OWNER = "user-owner"
PARTY = "user-party"
MEDIATOR = "user-mediator"
OUTSIDER = "user-outsider"

REPLY_JSON = json.dumps({"response": "Thank you. What outcome would work for you?", "sentiment": "neutral"})
SUMMARY_JSON = json.dumps({
    "summary": "The parties agreed on a payment of $500.",
    "recommendations": ["Draft a settlement proposal", "Sign within 14 days"],
})


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def policy():
    return MediationPolicy()


@pytest.fixture
def provider():
    return ScriptedProvider(default=REPLY_JSON)


@pytest.fixture
def adapter(provider):
    return MediatorAdapter([provider])


@pytest.fixture
def sent_invitations():
    return []


@pytest.fixture
def services(db, policy, adapter, sent_invitations):
    def notifier(party, dispute):
        sent_invitations.append((party, dispute))
        return {"status": "sent", "to": party.email}

    return build_services(db, Settings(), policy=policy, adapter=adapter, notifier=notifier)


def file_dispute(services, owner=OWNER, **overrides):
    data = {
        "title": "Unpaid rent deposit",
        "description": "Landlord kept the full deposit after move-out.",
        "parties": "Tenant and landlord",
        "dispute_type": DisputeType.LANDLORD_TENANT,
    }
    data.update(overrides)
    return services.disputes.create_dispute(owner, DisputeCreateRequest(**data))


def join_party(services, dispute_id, user_id=PARTY, email="party@example.com", owner=OWNER):
    party = services.parties.invite(
        owner, dispute_id, PartyInviteRequest(email=email, role=PartyRole.RESPONDENT)
    )
    return services.parties.accept_invitation(
        party.invitation_code, user_id
    )


@pytest.fixture
def dispute(services):
    return file_dispute(services)


@pytest.fixture
def joined_dispute(services, dispute):
    join_party(services, dispute.id)
    return dispute
