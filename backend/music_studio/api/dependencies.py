"""
API Dependencies

FastAPI dependency injection for authentication, the plan catalog and the
services built on top of the request's database session.

Security: bearer tokens are HS256 JWTs signed with JWT_SECRET; the `sub`
claim is the user id. Never decode without verification.
"""

import logging
from functools import lru_cache
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from music_studio.config.settings import get_settings
from music_studio.domain.plans import PlanCatalog, load_plan_catalog
from music_studio.infrastructure.ai.gemini_service import GeminiService, get_gemini_service
from music_studio.infrastructure.payments.razorpay_service import (
    RazorpayService,
    get_razorpay_service,
)
from music_studio.infrastructure.exceptions import NotFoundError
from music_studio.services.entitlement_guard import EntitlementGuard
from music_studio.services.payment_service import PaymentService
from music_studio.services.subscription_service import SubscriptionService


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _decode_token(token: str, secret: str) -> dict:
    """Verify a JWT signed with the shared secret."""
    settings = get_settings()
    options = {"require": ["exp", "sub"]}
    if settings.jwt_audience:
        return jwt.decode(
            token,
            secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.jwt_algorithm],
        options={**options, "verify_aud": False},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract and verify the user ID from a bearer JWT.

    Without JWT_SECRET in development the raw token is taken as the user id.

    Returns:
        Authenticated user ID (``sub`` claim).

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    settings = get_settings()

    if not settings.jwt_secret:
        if settings.is_development:
            logger.debug("JWT_SECRET unset, using bearer token as user id")
            return token
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication is not configured",
        )

    try:
        payload = _decode_token(token, settings.jwt_secret)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        logger.warning("JWT verification failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return user_id


# =============================================================================
# Re-export DB dependencies for a single import source
# Routers should import from api.dependencies, not db.dependencies directly.
# =============================================================================
from music_studio.infrastructure.db.dependencies import (  # noqa: E402, F401
    SessionDep,
    UserRepoDep,
    SubscriptionRepoDep,
    SongRepoDep,
    PracticeSessionRepoDep,
    AIGenerationRepoDep,
    PaymentRepoDep,
    EntitlementRepoDep,
)


# =============================================================================
# Service Providers
# =============================================================================

@lru_cache
def get_plan_catalog() -> PlanCatalog:
    """Plan catalog from PLAN_CATALOG_PATH, or the built-in defaults."""
    return load_plan_catalog(get_settings().plan_catalog_path)


CatalogDep = Annotated[PlanCatalog, Depends(get_plan_catalog)]
CurrentUserDep = Annotated[str, Depends(get_current_user_id)]


async def get_registered_user_id(user_id: CurrentUserDep, users: UserRepoDep) -> str:
    """
    Authenticated user that also has a users row.

    Required before inserting rows that reference users.id.

    Raises:
        NotFoundError: no row for the token's subject (404)
    """
    if await users.get_by_id(user_id) is None:
        raise NotFoundError("User not found", table="users")
    return user_id


RegisteredUserDep = Annotated[str, Depends(get_registered_user_id)]


async def get_entitlement_guard(
    store: EntitlementRepoDep,
    catalog: CatalogDep,
) -> EntitlementGuard:
    return EntitlementGuard(store, catalog)


async def get_subscription_service(
    repo: SubscriptionRepoDep,
    catalog: CatalogDep,
) -> SubscriptionService:
    return SubscriptionService(repo, catalog)


async def get_payment_service(
    payments: PaymentRepoDep,
    subscriptions: SubscriptionRepoDep,
    subscription_service: Annotated[SubscriptionService, Depends(get_subscription_service)],
    catalog: CatalogDep,
    gateway: Annotated[RazorpayService, Depends(get_razorpay_service)],
) -> PaymentService:
    return PaymentService(gateway, payments, subscriptions, subscription_service, catalog)


GuardDep = Annotated[EntitlementGuard, Depends(get_entitlement_guard)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
GeminiDep = Annotated[GeminiService, Depends(get_gemini_service)]
