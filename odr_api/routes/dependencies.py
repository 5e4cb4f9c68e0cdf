"""
FastAPI dependencies: the acting user and the controllers.
Tests swap the service container through app.dependency_overrides[get_services].
"""

from functools import lru_cache, partial
from typing import Optional

from fastapi import Depends, Header, HTTPException

from odr_api.config.database import get_db
from odr_api.config.settings import get_settings
from odr_api.controllers.disputes import DisputeController
from odr_api.controllers.mediation import MediationController
from odr_api.controllers.settlements import SettlementController
from odr_api.services.container import ServiceContainer, build_services
from odr_api.services.email_service import send_invitation_email


def get_actor_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """Authenticated user id, supplied by the auth layer in front of the API."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


@lru_cache(maxsize=1)
def get_services() -> ServiceContainer:
    settings = get_settings()
    return build_services(
        get_db(),
        settings,
        notifier=partial(send_invitation_email, settings=settings),
    )


def get_dispute_controller(services: ServiceContainer = Depends(get_services)) -> DisputeController:
    return DisputeController(services)


def get_mediation_controller(services: ServiceContainer = Depends(get_services)) -> MediationController:
    return MediationController(services)


def get_settlement_controller(services: ServiceContainer = Depends(get_services)) -> SettlementController:
    return SettlementController(services)
