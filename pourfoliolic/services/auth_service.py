import json
import logging
import re
import uuid
from datetime import datetime, timezone

import httpx
from jose import JWTError, jwt
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.config import settings
from pourfoliolic.exceptions import NotFoundError
from pourfoliolic.models.user import User
from pourfoliolic.schemas.user import USERNAME_PATTERN

logger = logging.getLogger(__name__)

FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"
JWKS_CACHE_KEY = "firebase:jwks"

RESERVED_USERNAMES = {"admin", "api", "me", "support", "pourfoliolic"}


async def fetch_firebase_jwks(redis_client=None) -> dict:
    """Fetch Google's signing keys for Firebase ID tokens, cached in Redis when available."""
    if redis_client is not None:
        cached = await redis_client.get(JWKS_CACHE_KEY)
        if cached:
            return json.loads(cached)

    async with httpx.AsyncClient(timeout=10.0) as client:
        resp = await client.get(settings.FIREBASE_JWKS_URL)
        resp.raise_for_status()
        jwks = resp.json()

    if redis_client is not None:
        await redis_client.set(
            JWKS_CACHE_KEY, json.dumps(jwks), ex=settings.FIREBASE_JWKS_CACHE_SECONDS
        )
    return jwks


async def verify_firebase_token(id_token: str, redis_client=None) -> dict:
    """Verify a Firebase ID token against Google's JWKS. Returns decoded claims."""
    try:
        unverified_header = jwt.get_unverified_header(id_token)
    except JWTError:
        raise ValueError("Malformed ID token")

    kid = unverified_header.get("kid")
    jwks = await fetch_firebase_jwks(redis_client)

    key = None
    for k in jwks.get("keys", []):
        if k.get("kid") == kid:
            key = k
            break

    if key is None:
        raise ValueError("Firebase signing key not found")

    try:
        claims = jwt.decode(
            id_token,
            key,
            algorithms=["RS256"],
            audience=settings.FIREBASE_PROJECT_ID,
            issuer=f"{FIREBASE_ISSUER_PREFIX}{settings.FIREBASE_PROJECT_ID}",
        )
    except JWTError as e:
        raise ValueError(f"Invalid ID token: {e}")

    if not claims.get("sub"):
        raise ValueError("ID token has no subject")

    claims.setdefault("uid", claims["sub"])
    return claims


def split_name(name: str | None) -> tuple[str | None, str | None]:
    if not name:
        return None, None
    parts = name.split(" ")
    first = parts[0] or None
    last = " ".join(parts[1:]) or None
    return first, last


async def upsert_user(db: AsyncSession, claims: dict) -> tuple[User, bool]:
    """Create or refresh a user from verified token claims. Returns (user, is_new)."""
    firebase_uid = claims["uid"]
    first_name, last_name = split_name(claims.get("name"))

    result = await db.execute(select(User).where(User.firebase_uid == firebase_uid))
    user = result.scalar_one_or_none()
    is_new = user is None

    if user is None:
        user = User(
            id=uuid.uuid4(),
            firebase_uid=firebase_uid,
            email=claims.get("email"),
            first_name=first_name,
            last_name=last_name,
            profile_image_url=claims.get("picture"),
            theme="system",
            dashboard_json={},
        )
        db.add(user)
        logger.info("Created user for firebase uid %s", firebase_uid)
    else:
        # Profile edits made in-app win over provider data
        if claims.get("email"):
            user.email = claims["email"]
        if not user.first_name and first_name:
            user.first_name = first_name
            user.last_name = last_name
        if not user.profile_image_url and claims.get("picture"):
            user.profile_image_url = claims["picture"]
        user.updated_at = datetime.now(timezone.utc)

    await db.flush()
    await db.refresh(user)
    return user, is_new


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User")
    return user


async def update_profile(db: AsyncSession, user_id: uuid.UUID, data: dict) -> User:
    user = await get_user(db, user_id)
    for key, value in data.items():
        setattr(user, key, value.strip() if isinstance(value, str) else value)
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(user)
    return user


async def update_preferences(
    db: AsyncSession,
    user_id: uuid.UUID,
    theme: str | None = None,
    dashboard_widgets: list[dict] | None = None,
) -> User:
    """Update theme and dashboard layout. Widget order is the list order."""
    user = await get_user(db, user_id)
    if theme is not None:
        user.theme = theme
    if dashboard_widgets is not None:
        seen = set()
        widgets = []
        for widget in dashboard_widgets:
            if widget["id"] in seen:
                raise ValueError(f"Duplicate dashboard widget '{widget['id']}'")
            seen.add(widget["id"])
            widgets.append({"id": widget["id"], "visible": widget["visible"]})
        dashboard = dict(user.dashboard_json or {})
        dashboard["widgets"] = widgets
        user.dashboard_json = dashboard
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(user)
    return user


async def check_username(
    db: AsyncSession, username: str, user_id: uuid.UUID | None = None
) -> tuple[bool, str | None]:
    """Return (available, reason). Comparison is case-insensitive."""
    if not re.match(USERNAME_PATTERN, username):
        return False, "Only letters, numbers, and underscores (3-20 characters)"
    if username.lower() in RESERVED_USERNAMES:
        return False, "Username is reserved"

    result = await db.execute(
        select(User.id).where(func.lower(User.username) == username.lower())
    )
    owner_id = result.scalar_one_or_none()
    if owner_id is not None and owner_id != user_id:
        return False, "Username is already taken"
    return True, None


async def set_username(db: AsyncSession, user_id: uuid.UUID, username: str) -> User:
    user = await get_user(db, user_id)
    available, reason = await check_username(db, username, user.id)
    if not available:
        raise ValueError(reason)

    user.username = username
    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(user)
    logger.info("User %s claimed username %s", user.id, username)
    return user


async def delete_account(db: AsyncSession, user_id: uuid.UUID) -> bool:
    db_user = await db.get(User, user_id)
    if db_user is None:
        return False
    await db.delete(db_user)
    await db.flush()
    return True
