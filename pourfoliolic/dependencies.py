import logging

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.models.user import User
from pourfoliolic.services import auth_service
from pourfoliolic.services.email_service import send_welcome_email

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def _authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    db: AsyncSession,
) -> User | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None

    redis_client = getattr(request.app.state, "redis", None)
    try:
        claims = await auth_service.verify_firebase_token(credentials.credentials, redis_client)
    except ValueError as e:
        logger.info("Rejected ID token: %s", e)
        return None
    except httpx.HTTPError:
        logger.warning("Could not fetch Firebase signing keys", exc_info=True)
        return None

    user, is_new = await auth_service.upsert_user(db, claims)
    if is_new and user.email:
        await send_welcome_email(user.email, user.first_name)
    return user


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await _authenticate(request, credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user, but anonymous requests get None instead of a 401."""
    return await _authenticate(request, credentials, db)
