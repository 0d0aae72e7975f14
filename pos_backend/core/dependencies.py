"""
FastAPI dependencies: authentication and service wiring
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
import structlog

from pos_backend.core.auth import actor_from_token
from pos_backend.core.config import get_settings
from pos_backend.core.database import get_session
from pos_backend.schemas.token import Actor
from pos_backend.services import (
    OrderService, OrderStatusMachine, PaymentLedger, AuditTrail,
    TableOccupancyTracker, SqlProductCatalog, StaticRestaurantSettings,
    OrderNumberGenerator,
)

logger = structlog.get_logger(__name__)
security = HTTPBearer()


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Actor:
    """Get the acting staff member from the bearer JWT"""
    actor = actor_from_token(credentials.credentials)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug("User authenticated", user_id=str(actor.user_id), role=actor.role)
    return actor


def get_order_service(session: Session = Depends(get_session)) -> OrderService:
    settings = get_settings()
    return OrderService(
        session,
        catalog=SqlProductCatalog(),
        restaurant_settings=StaticRestaurantSettings(settings.TAX_RATE),
        table_tracker=TableOccupancyTracker(session),
        order_numbers=OrderNumberGenerator(session, settings.ORDER_NUMBER_PREFIX),
    )


def get_status_machine(session: Session = Depends(get_session)) -> OrderStatusMachine:
    return OrderStatusMachine(session, AuditTrail(session), TableOccupancyTracker(session))


def get_payment_ledger(
    session: Session = Depends(get_session),
    status_machine: OrderStatusMachine = Depends(get_status_machine),
) -> PaymentLedger:
    return PaymentLedger(session, status_machine)


def get_audit_trail(session: Session = Depends(get_session)) -> AuditTrail:
    return AuditTrail(session)


def get_table_tracker(session: Session = Depends(get_session)) -> TableOccupancyTracker:
    return TableOccupancyTracker(session)
