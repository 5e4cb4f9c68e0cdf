"""Controllers translating service results and errors for the HTTP layer."""

from odr_api.controllers.disputes import DisputeController
from odr_api.controllers.mediation import MediationController
from odr_api.controllers.settlements import SettlementController

__all__ = ["DisputeController", "MediationController", "SettlementController"]
