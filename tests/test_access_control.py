"""
Tests for AccessControl
"""

import logging

import pytest

from odr_api.errors import ForbiddenError, NotFoundError
from odr_api.models.mediation import SessionCreateRequest
from odr_api.models.party import PartyInviteRequest
from tests.conftest import MEDIATOR, OUTSIDER, OWNER, PARTY, join_party


class TestAccessControl:
    """Owner, party and mediator lookups"""

    def test_owner_lookup(self, services, dispute):
        """Only the filing user owns the dispute"""
        assert services.access.is_owner(OWNER, dispute.id)
        assert not services.access.is_owner(PARTY, dispute.id)

    def test_unknown_ids_are_false_not_errors(self, services):
        """Lookups on unknown disputes answer False or None"""
        assert services.access.is_owner(OWNER, "missing") is False
        assert services.access.is_party(PARTY, "missing") is False
        assert services.access.is_mediator(MEDIATOR, "missing") is False
        assert services.access.party_by_user("missing", PARTY) is None

    def test_invited_party_is_not_a_party_until_accepted(self, services, dispute):
        """An invitation alone grants no access"""
        services.parties.invite(OWNER, dispute.id, PartyInviteRequest(email="late@example.com"))
        assert not services.access.is_party(PARTY, dispute.id)

        join_party(services, dispute.id, user_id=PARTY, email="party@example.com")
        assert services.access.is_party(PARTY, dispute.id)
        assert services.access.party_by_user(dispute.id, PARTY).user_id == PARTY

    def test_removed_party_loses_access(self, services, dispute):
        """Soft removal revokes party access"""
        party = join_party(services, dispute.id)
        services.parties.remove(OWNER, party.id)

        assert not services.access.is_party(PARTY, dispute.id)
        with pytest.raises(ForbiddenError):
            services.access.require_access(PARTY, dispute.id)

    def test_mediator_of_current_session(self, services, dispute):
        """The mediator of the dispute's current session gets access"""
        assert not services.access.is_mediator(MEDIATOR, dispute.id)

        services.mediation.create_session(
            OWNER, dispute.id, SessionCreateRequest(mediator_id=MEDIATOR, ai_assistance=False)
        )

        assert services.access.is_mediator(MEDIATOR, dispute.id)
        assert services.access.can_access(MEDIATOR, dispute.id)

    def test_require_helpers(self, services, dispute):
        """require_* raise NotFound for unknown disputes and Forbidden for outsiders"""
        with pytest.raises(NotFoundError):
            services.access.require_access(OWNER, "missing")
        with pytest.raises(ForbiddenError):
            services.access.require_access(OUTSIDER, dispute.id)
        with pytest.raises(ForbiddenError):
            services.access.require_owner(PARTY, dispute.id)

        assert services.access.require_owner(OWNER, dispute.id).id == dispute.id

    def test_owner_or_mediator_denial_is_logged(self, services, dispute, caplog):
        """A refused owner-or-mediator check leaves a log line naming the user"""
        with caplog.at_level(logging.INFO, logger="odr_api.services.access_control"):
            with pytest.raises(ForbiddenError):
                services.access.require_owner_or_mediator(PARTY, dispute.id)

        assert any(
            "Owner or mediator check failed" in record.getMessage() and PARTY in record.getMessage()
            for record in caplog.records
        )
        assert services.access.require_owner_or_mediator(OWNER, dispute.id).id == dispute.id
