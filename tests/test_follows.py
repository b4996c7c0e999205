import uuid

import pytest
from sqlalchemy import func, select

from pourfoliolic.models.follow import Follow
from pourfoliolic.services import social_service

from tests.factories import make_drink, make_follow


@pytest.mark.asyncio
async def test_follow_creates_pending_request(client, second_user):
    response = await client.post(f"/api/community/follow/{second_user.id}")
    assert response.status_code == 200
    assert response.json() == {"status": "pending"}

    response = await client.get(f"/api/community/follow/{second_user.id}/status")
    assert response.json()["status"] == "pending"


@pytest.mark.asyncio
async def test_follow_twice_is_not_duplicated(client, db_session, test_user, second_user):
    await client.post(f"/api/community/follow/{second_user.id}")
    response = await client.post(f"/api/community/follow/{second_user.id}")
    assert response.json() == {"status": "already_pending"}

    result = await db_session.execute(
        select(func.count(Follow.id)).where(
            Follow.follower_id == test_user.id, Follow.following_id == second_user.id
        )
    )
    assert result.scalar_one() == 1


@pytest.mark.asyncio
async def test_follow_when_already_following(client, db_session, test_user, second_user):
    await make_follow(db_session, test_user, second_user)
    response = await client.post(f"/api/community/follow/{second_user.id}")
    assert response.json() == {"status": "already_following"}


@pytest.mark.asyncio
async def test_cannot_follow_self(client, test_user):
    response = await client.post(f"/api/community/follow/{test_user.id}")
    assert response.status_code == 400
    assert "yourself" in response.json()["detail"]


@pytest.mark.asyncio
async def test_follow_unknown_user(client):
    response = await client.post(f"/api/community/follow/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_accept_follow_request(client, auth, test_user, second_user):
    await client.post(f"/api/community/follow/{second_user.id}")

    auth.use(second_user)
    response = await client.get("/api/community/follow-requests")
    requests = response.json()
    assert len(requests) == 1
    assert requests[0]["user"]["id"] == str(test_user.id)

    response = await client.post(f"/api/community/follow-requests/{test_user.id}/accept")
    assert response.status_code == 200
    assert response.json() == {"status": "accepted"}

    response = await client.get("/api/community/followers")
    assert [u["id"] for u in response.json()] == [str(test_user.id)]

    auth.use(test_user)
    response = await client.get("/api/community/following")
    following = response.json()
    assert [u["id"] for u in following] == [str(second_user.id)]
    assert following[0]["follow_status"] == "accepted"


@pytest.mark.asyncio
async def test_accept_requires_pending_request_addressed_to_me(client, auth, test_user, second_user):
    await client.post(f"/api/community/follow/{second_user.id}")

    # The requester cannot accept their own outgoing request
    response = await client.post(f"/api/community/follow-requests/{second_user.id}/accept")
    assert response.status_code == 404

    auth.use(second_user)
    assert (await client.post(f"/api/community/follow-requests/{test_user.id}/accept")).status_code == 200
    # Accepting again is a no-op
    assert (await client.post(f"/api/community/follow-requests/{test_user.id}/accept")).status_code == 404


@pytest.mark.asyncio
async def test_decline_follow_request(client, auth, test_user, second_user):
    await client.post(f"/api/community/follow/{second_user.id}")

    auth.use(second_user)
    response = await client.post(f"/api/community/follow-requests/{test_user.id}/decline")
    assert response.status_code == 200

    auth.use(test_user)
    response = await client.get(f"/api/community/follow/{second_user.id}/status")
    assert response.json()["status"] == "none"


@pytest.mark.asyncio
async def test_sent_requests(client, second_user, third_user):
    await client.post(f"/api/community/follow/{second_user.id}")
    await client.post(f"/api/community/follow/{third_user.id}")

    response = await client.get("/api/community/follow-requests/sent")
    assert {r["user"]["username"] for r in response.json()} == {"friend", "stranger"}


@pytest.mark.asyncio
async def test_unfollow(client, db_session, test_user, second_user):
    await make_follow(db_session, test_user, second_user)
    response = await client.delete(f"/api/community/follow/{second_user.id}")
    assert response.status_code == 204

    response = await client.delete(f"/api/community/follow/{second_user.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_remove_follower(client, db_session, test_user, second_user):
    await make_follow(db_session, second_user, test_user)
    response = await client.delete(f"/api/community/followers/{second_user.id}")
    assert response.status_code == 204
    assert (await client.get("/api/community/followers")).json() == []


@pytest.mark.asyncio
async def test_follow_request_notifies_target(client, auth, second_user):
    await client.post(f"/api/community/follow/{second_user.id}")

    auth.use(second_user)
    response = await client.get("/api/notifications")
    notifications = response.json()
    assert len(notifications) == 1
    assert notifications[0]["type"] == "follow_request"
    assert notifications[0]["actor"]["username"] == "taster"


@pytest.mark.asyncio
async def test_mutual_followers(db_session, test_user, second_user, third_user):
    await make_follow(db_session, test_user, second_user)
    await make_follow(db_session, second_user, test_user)
    await make_follow(db_session, test_user, third_user)

    assert await social_service.are_mutual_followers(db_session, test_user.id, second_user.id)
    assert not await social_service.are_mutual_followers(db_session, test_user.id, third_user.id)

    connections = await social_service.get_connections(db_session, test_user.id)
    assert [u.id for u in connections] == [second_user.id]


@pytest.mark.asyncio
async def test_search_users(client, second_user, third_user):
    response = await client.get("/api/community/search-users", params={"q": "FRI"})
    assert response.status_code == 200
    results = response.json()
    assert [u["username"] for u in results] == ["friend"]
    assert results[0]["follow_status"] == "none"

    # The searcher never finds themself
    response = await client.get("/api/community/search-users", params={"q": "taster"})
    usernames = [u["username"] for u in response.json()]
    assert "taster" not in usernames


@pytest.mark.asyncio
async def test_search_users_blank_query(client, second_user):
    response = await client.get("/api/community/search-users", params={"q": "   "})
    assert response.json() == []


@pytest.mark.asyncio
async def test_suggested_users(client, db_session, test_user, second_user, third_user):
    await make_drink(db_session, third_user)
    await make_drink(db_session, third_user, name="Talisker 10")
    await make_follow(db_session, test_user, second_user, status="pending")

    response = await client.get("/api/community/suggested-users")
    suggestions = response.json()
    assert [u["username"] for u in suggestions] == ["stranger"]
    assert suggestions[0]["drinks_count"] == 2


@pytest.mark.asyncio
async def test_profile_hides_private_drinks_from_strangers(client, db_session, auth, second_user, third_user):
    await make_drink(db_session, second_user, name="Public Pour")
    await make_drink(db_session, second_user, name="Secret Stash", is_private=True)
    await make_follow(db_session, third_user, second_user)

    response = await client.get(f"/api/community/users/{second_user.id}")
    assert response.status_code == 200
    profile = response.json()
    assert [d["name"] for d in profile["drinks"]] == ["Public Pour"]
    assert profile["followers_count"] == 1
    assert profile["follow_status"] == "none"

    auth.use(third_user)
    profile = (await client.get(f"/api/community/users/{second_user.id}")).json()
    assert {d["name"] for d in profile["drinks"]} == {"Public Pour", "Secret Stash"}
    assert profile["follow_status"] == "accepted"

    auth.use(second_user)
    profile = (await client.get(f"/api/community/users/{second_user.id}")).json()
    assert profile["drinks_count"] == 2


@pytest.mark.asyncio
async def test_profile_anonymous(client, db_session, auth, second_user):
    await make_drink(db_session, second_user, is_private=True)
    auth.use(None)
    profile = (await client.get(f"/api/community/users/{second_user.id}")).json()
    assert profile["drinks"] == []
    assert profile["follow_status"] == "none"


@pytest.mark.asyncio
async def test_profile_unknown_user(client):
    response = await client.get(f"/api/community/users/{uuid.uuid4()}")
    assert response.status_code == 404
