import json
import time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from jose import jwk, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.config import settings
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.services.auth_service import (
    JWKS_CACHE_KEY,
    split_name,
    upsert_user,
    verify_firebase_token,
)

from tests.factories import make_drink

PROJECT_ID = "pourfoliolic-test"
KEY_ID = "test-key-1"


@pytest.fixture
def signing_key():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, algorithm="RS256").to_dict()
    public_jwk["kid"] = KEY_ID
    return private_pem, {"keys": [public_jwk]}


@pytest.fixture
def firebase_project(monkeypatch):
    monkeypatch.setattr(settings, "FIREBASE_PROJECT_ID", PROJECT_ID)


@pytest.fixture
async def jwks_cache(signing_key, fake_redis):
    redis = fake_redis
    await redis.set(JWKS_CACHE_KEY, json.dumps(signing_key[1]))
    return redis


def make_token(private_pem, kid=KEY_ID, **overrides):
    now = int(time.time())
    claims = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "sub": "firebase_uid_abc",
        "iat": now,
        "exp": now + 3600,
        "email": "newbie@example.com",
        "name": "Ada Lovelace King",
        "picture": "https://example.com/ada.png",
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


def test_split_name():
    assert split_name("Ada Lovelace King") == ("Ada", "Lovelace King")
    assert split_name("Ada") == ("Ada", None)
    assert split_name(None) == (None, None)


@pytest.mark.asyncio
async def test_verify_firebase_token(firebase_project, signing_key, jwks_cache):
    token = make_token(signing_key[0])
    claims = await verify_firebase_token(token, jwks_cache)
    assert claims["uid"] == "firebase_uid_abc"
    assert claims["email"] == "newbie@example.com"


@pytest.mark.asyncio
async def test_verify_rejects_wrong_audience(firebase_project, signing_key, jwks_cache):
    token = make_token(signing_key[0], aud="someone-else")
    with pytest.raises(ValueError):
        await verify_firebase_token(token, jwks_cache)


@pytest.mark.asyncio
async def test_verify_rejects_expired_token(firebase_project, signing_key, jwks_cache):
    past = int(time.time()) - 7200
    token = make_token(signing_key[0], iat=past, exp=past + 60)
    with pytest.raises(ValueError):
        await verify_firebase_token(token, jwks_cache)


@pytest.mark.asyncio
async def test_verify_rejects_unknown_key(firebase_project, signing_key, jwks_cache):
    token = make_token(signing_key[0], kid="rotated-away")
    with pytest.raises(ValueError, match="signing key"):
        await verify_firebase_token(token, jwks_cache)


@pytest.mark.asyncio
async def test_verify_rejects_garbage(jwks_cache):
    with pytest.raises(ValueError, match="Malformed"):
        await verify_firebase_token("not-a-jwt", jwks_cache)


@pytest.mark.asyncio
async def test_jwks_fetched_once_then_cached(firebase_project, signing_key, fake_redis):
    redis = fake_redis
    response = MagicMock()
    response.json.return_value = signing_key[1]
    response.raise_for_status.return_value = None

    with patch("pourfoliolic.services.auth_service.httpx.AsyncClient") as client_cls:
        client = client_cls.return_value.__aenter__.return_value
        client.get = AsyncMock(return_value=response)

        await verify_firebase_token(make_token(signing_key[0]), redis)
        await verify_firebase_token(make_token(signing_key[0]), redis)

        assert client.get.await_count == 1
    assert JWKS_CACHE_KEY in redis._store


@pytest.mark.asyncio
async def test_upsert_user_creates_then_refreshes(db_session: AsyncSession):
    claims = {
        "uid": "firebase_new_1",
        "email": "new@example.com",
        "name": "New Taster",
        "picture": "https://example.com/a.png",
    }
    user, is_new = await upsert_user(db_session, claims)
    assert is_new is True
    assert user.first_name == "New"
    assert user.last_name == "Taster"
    assert user.theme == "system"

    user.first_name = "Edited"
    await db_session.flush()

    again, is_new = await upsert_user(db_session, {**claims, "email": "changed@example.com"})
    assert is_new is False
    assert again.id == user.id
    assert again.email == "changed@example.com"
    assert again.first_name == "Edited"


@pytest.mark.asyncio
async def test_get_current_user_without_token(db_session: AsyncSession):
    request = MagicMock()
    with pytest.raises(HTTPException) as exc:
        await get_current_user(request=request, credentials=None, db=db_session)
    assert exc.value.status_code == 401


@pytest.mark.asyncio
async def test_get_me(client, test_user):
    response = await client.get("/api/auth/user")
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(test_user.id)
    assert data["username"] == "taster"
    assert data["theme"] == "system"


@pytest.mark.asyncio
async def test_update_profile(client):
    response = await client.patch(
        "/api/auth/user", json={"bio": "  Peat lover  ", "first_name": "Tess"}
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "Peat lover"
    assert response.json()["first_name"] == "Tess"


@pytest.mark.asyncio
async def test_update_preferences(client):
    response = await client.patch(
        "/api/auth/preferences",
        json={
            "theme": "dark",
            "dashboard_widgets": [
                {"id": "stats", "visible": True},
                {"id": "recommendations", "visible": False},
            ],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["theme"] == "dark"
    assert data["dashboard_json"]["widgets"][1] == {"id": "recommendations", "visible": False}


@pytest.mark.asyncio
async def test_update_preferences_rejects_bad_theme(client):
    response = await client.patch("/api/auth/preferences", json={"theme": "neon"})
    assert response.status_code == 400
    assert "theme" in response.json()["detail"]


@pytest.mark.asyncio
async def test_update_preferences_rejects_duplicate_widgets(client):
    response = await client.patch(
        "/api/auth/preferences",
        json={"dashboard_widgets": [{"id": "stats"}, {"id": "stats"}]},
    )
    assert response.status_code == 400
    assert "Duplicate" in response.json()["detail"]


@pytest.mark.asyncio
async def test_check_username(client, second_user):
    response = await client.get("/api/username/check/new_name")
    assert response.json() == {"username": "new_name", "available": True, "reason": None}

    response = await client.get("/api/username/check/FRIEND")
    assert response.json()["available"] is False
    assert response.json()["reason"] == "Username is already taken"

    response = await client.get("/api/username/check/admin")
    assert response.json()["reason"] == "Username is reserved"

    response = await client.get("/api/username/check/ab")
    assert response.json()["available"] is False


@pytest.mark.asyncio
async def test_own_username_is_available_to_self(client):
    response = await client.get("/api/username/check/taster")
    assert response.json()["available"] is True


@pytest.mark.asyncio
async def test_set_username(client):
    response = await client.post("/api/username/set", json={"username": "peat_head"})
    assert response.status_code == 200
    assert response.json()["username"] == "peat_head"


@pytest.mark.asyncio
async def test_set_username_taken(client, second_user):
    response = await client.post("/api/username/set", json={"username": "friend"})
    assert response.status_code == 409
    assert response.json()["detail"] == "Username is already taken"


@pytest.mark.asyncio
async def test_set_username_invalid(client):
    response = await client.post("/api/username/set", json={"username": "no spaces!"})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("username:")


@pytest.mark.asyncio
async def test_export_account(client, db_session, test_user):
    await make_drink(db_session, test_user)
    response = await client.get("/api/auth/account/export")
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["id"] == str(test_user.id)
    assert len(data["drinks"]) == 1
    assert data["drinks"][0]["rating"] == 4.5
    assert data["drinks"][0]["price"] == 95
    assert data["drinks"][0]["user_id"] == str(test_user.id)


@pytest.mark.asyncio
async def test_delete_account(client, db_session, test_user):
    response = await client.delete("/api/auth/account")
    assert response.status_code == 204

    response = await client.get("/api/drinks")
    assert response.status_code == 200
    assert response.json() == []
