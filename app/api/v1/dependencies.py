# app/api/v1/dependencies.py
"""
FastAPI dependencies: caller identity, database-backed store and the
provider orchestrator.
"""

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from jose import JWTError
from typing import Optional
import logging

from app.db.database import get_db
from app.models.models import User
from app.core.config import settings
from app.core.security import decode_access_token
from services.amadeus_client import AmadeusClient
from services.exceptions import UnauthorizedError
from services.flight_store import FlightStore
from services.offer_orchestrator import OfferOrchestrator

logger = logging.getLogger(__name__)

# Tokens are issued elsewhere; this only reads the bearer header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        UnauthorizedError: 401 if token is missing, invalid or the user is gone
    """
    if not token:
        raise UnauthorizedError("Not authenticated")

    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise UnauthorizedError("Could not validate credentials")
    except (TypeError, ValueError):
        logger.warning("Token carries no usable 'sub' claim")
        raise UnauthorizedError("Could not validate credentials")

    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"User {user_id} not found in database")
        raise UnauthorizedError("Could not validate credentials")
    return user


def get_provider_client(request: Request) -> AmadeusClient:
    """The application-wide provider client created at startup."""
    client = getattr(request.app.state, "provider_client", None)
    if client is None:
        # lifespan owns the client and closes it on shutdown
        raise RuntimeError("Provider client not initialised; application lifespan has not run")
    return client


def get_orchestrator(client=Depends(get_provider_client)) -> OfferOrchestrator:
    return OfferOrchestrator(client, timeout_s=settings.PROVIDER_TIMEOUT_S)


def get_flight_store(db: AsyncSession = Depends(get_db)) -> FlightStore:
    return FlightStore(db)
