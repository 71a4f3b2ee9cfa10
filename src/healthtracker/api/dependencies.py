"""
API Dependencies

FastAPI dependency providers: process-wide clients, per-request
services bound to a database session, and Firebase bearer-token
authentication.
"""

import re
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger
from healthtracker.domain.models.ticket import generate_session_id
from healthtracker.infrastructure.database import get_async_session
from healthtracker.infrastructure.database.repositories import DeviceRepository, TicketRepository
from healthtracker.infrastructure.firebase import (
    FirebaseAdminClient,
    FirebaseNotConfiguredError,
    InvalidAuthTokenError,
    get_firebase_client,
)
from healthtracker.infrastructure.llm import LLMProvider, OpenAIProvider
from healthtracker.infrastructure.monitoring import set_user_context
from healthtracker.infrastructure.nutrition import UsdaClient
from healthtracker.infrastructure.sms import TwilioSmsGateway
from healthtracker.services.admin import AdminUserService, SmsService
from healthtracker.services.chat import HealthChatService, WorkoutChatService
from healthtracker.services.tickets import TicketOwner, TicketService

logger = get_logger(__name__)

TICKET_SESSION_HEADER = "X-Ticket-Session"
# Matches tickets.session_id String(64); anything else gets a fresh id
_SESSION_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


class AdminAuthError(Exception):
    """Bearer authentication failed; carries the HTTP status to report."""

    def __init__(self, message: str, status_code: int = status.HTTP_401_UNAUTHORIZED) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# Process-wide clients

@lru_cache()
def get_llm_provider() -> LLMProvider:
    return OpenAIProvider()


@lru_cache()
def get_sms_gateway() -> TwilioSmsGateway:
    return TwilioSmsGateway()


@lru_cache()
def get_usda_client() -> UsdaClient:
    return UsdaClient()


def get_firebase() -> FirebaseAdminClient:
    return get_firebase_client()


# Services

def get_health_chat_service(
    provider: LLMProvider = Depends(get_llm_provider),
) -> HealthChatService:
    settings = get_settings().openai
    return HealthChatService(
        provider,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )


def get_workout_chat_service(
    provider: LLMProvider = Depends(get_llm_provider),
) -> WorkoutChatService:
    return WorkoutChatService(provider)


def get_sms_service(
    gateway: TwilioSmsGateway = Depends(get_sms_gateway),
    firebase: FirebaseAdminClient = Depends(get_firebase),
) -> SmsService:
    return SmsService(gateway, firebase)


def get_ticket_service(
    session: AsyncSession = Depends(get_async_session),
) -> TicketService:
    return TicketService(TicketRepository(session))


def get_admin_user_service(
    session: AsyncSession = Depends(get_async_session),
    firebase: FirebaseAdminClient = Depends(get_firebase),
) -> AdminUserService:
    return AdminUserService(DeviceRepository(session), firebase, firebase)


# Authentication

def _parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


async def authenticate(authorization: Optional[str], firebase: FirebaseAdminClient) -> dict:
    """
    Verify a bearer Firebase ID token.

    Returns:
        Decoded token claims

    Raises:
        AdminAuthError: 401 for a missing or rejected token, 500 when the
            Admin SDK is not configured
    """
    token = _parse_bearer(authorization)
    if token is None:
        raise AdminAuthError("No token provided")
    try:
        claims = await firebase.verify_id_token(token)
    except InvalidAuthTokenError as e:
        raise AdminAuthError("Invalid authentication token") from e
    except FirebaseNotConfiguredError as e:
        logger.error("Token verification unavailable", error=str(e))
        raise AdminAuthError(
            "Firebase Admin SDK not properly configured",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ) from e
    return claims


def is_admin_claims(claims: dict) -> bool:
    admin_email = get_settings().admin_email
    return bool(admin_email) and claims.get("email") == admin_email


async def get_current_claims(
    authorization: Optional[str] = Header(None),
    firebase: FirebaseAdminClient = Depends(get_firebase),
) -> dict:
    try:
        claims = await authenticate(authorization, firebase)
    except AdminAuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    if claims.get("uid"):
        set_user_context(claims["uid"])
    return claims


async def get_optional_claims(
    authorization: Optional[str] = Header(None),
    firebase: FirebaseAdminClient = Depends(get_firebase),
) -> Optional[dict]:
    """Claims when a bearer token is sent; anonymous otherwise."""
    if authorization is None:
        return None
    return await get_current_claims(authorization, firebase)


async def require_admin(claims: dict = Depends(get_current_claims)) -> dict:
    if not is_admin_claims(claims):
        logger.warning("Admin access denied", uid=claims.get("uid"))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return claims


async def get_ticket_owner(
    response: Response,
    x_ticket_session: Optional[str] = Header(None),
    claims: Optional[dict] = Depends(get_optional_claims),
) -> TicketOwner:
    """Caller identity for ticket routes; a session id is issued when absent or malformed."""
    session_id = (x_ticket_session or "").strip()
    if not _SESSION_ID.fullmatch(session_id):
        if session_id:
            logger.warning("Rejected malformed ticket session id", length=len(session_id))
        session_id = generate_session_id()
    response.headers[TICKET_SESSION_HEADER] = session_id
    return TicketOwner(
        session_id=session_id,
        user_id=claims.get("uid") if claims else None,
    )
