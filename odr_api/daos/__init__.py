"""Data Access Objects (DAOs) for database operations."""

from odr_api.daos.dispute_dao import DisputeDAO
from odr_api.daos.party_dao import DisputePartyDAO
from odr_api.daos.mediation_dao import MediationSessionDAO, MediationMessageDAO
from odr_api.daos.settlement_dao import SettlementProposalDAO, DigitalSignatureDAO
from odr_api.daos.activity_dao import DisputeActivityDAO

__all__ = [
    "DisputeDAO",
    "DisputePartyDAO",
    "MediationSessionDAO",
    "MediationMessageDAO",
    "SettlementProposalDAO",
    "DigitalSignatureDAO",
    "DisputeActivityDAO",
]
