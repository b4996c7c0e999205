import uuid

import pytest
from sqlalchemy import select

from pourfoliolic.models.drink import Drink

from tests.factories import make_drink

DRINK = {
    "name": "Château Margaux 2015",
    "maker": "Château Margaux",
    "type": "wine",
    "subtype": "Bordeaux",
    "rating": 4.8,
    "nose": ["cassis", "violet"],
    "palate": ["blackcurrant", "cedar"],
    "finish": "Long and silky",
    "price": 650,
    "location": "Paris",
}


@pytest.mark.asyncio
async def test_create_drink(client, test_user):
    response = await client.post("/api/drinks", json=DRINK)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Château Margaux 2015"
    assert data["user_id"] == str(test_user.id)
    assert data["rating"] == 4.8
    assert data["currency"] == "USD"
    assert data["is_private"] is False


@pytest.mark.asyncio
async def test_create_drink_rounds_rating(client):
    response = await client.post("/api/drinks", json={**DRINK, "rating": 3.74})
    assert response.status_code == 201
    assert response.json()["rating"] == 3.7


@pytest.mark.asyncio
async def test_create_drink_validation(client):
    response = await client.post("/api/drinks", json={**DRINK, "rating": 7})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("rating:")

    response = await client.post("/api/drinks", json={**DRINK, "type": "soda"})
    assert response.status_code == 400

    payload = dict(DRINK)
    del payload["maker"]
    response = await client.post("/api/drinks", json=payload)
    assert response.status_code == 400
    assert "maker" in response.json()["detail"]


@pytest.mark.asyncio
async def test_list_only_own_drinks(client, db_session, test_user, second_user):
    await make_drink(db_session, test_user, name="Mine")
    await make_drink(db_session, second_user, name="Theirs")

    response = await client.get("/api/drinks")
    assert response.status_code == 200
    assert [d["name"] for d in response.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_list_drinks_filters(client, db_session, test_user):
    await make_drink(db_session, test_user, name="Lagavulin 16", type="spirit", rating=4.5, price=95)
    await make_drink(db_session, test_user, name="Pliny the Elder", maker="Russian River", type="beer", rating=4.9, price=8)
    await make_drink(db_session, test_user, name="House Red", maker="Barefoot", type="wine", rating=2.5, price=9)

    response = await client.get("/api/drinks", params={"type": "beer"})
    assert [d["name"] for d in response.json()] == ["Pliny the Elder"]

    response = await client.get("/api/drinks", params={"min_rating": 4, "max_price": 50})
    assert [d["name"] for d in response.json()] == ["Pliny the Elder"]

    response = await client.get("/api/drinks", params={"maker": "river"})
    assert [d["name"] for d in response.json()] == ["Pliny the Elder"]

    response = await client.get("/api/drinks", params={"search": "LAGA"})
    assert [d["name"] for d in response.json()] == ["Lagavulin 16"]


@pytest.mark.asyncio
async def test_list_drinks_sorting(client, db_session, test_user):
    await make_drink(db_session, test_user, name="B", rating=3.0)
    await make_drink(db_session, test_user, name="A", rating=5.0)
    await make_drink(db_session, test_user, name="C", rating=4.0)

    response = await client.get("/api/drinks", params={"sort_by": "rating"})
    assert [d["name"] for d in response.json()] == ["A", "C", "B"]

    response = await client.get("/api/drinks", params={"sort_by": "name", "sort_order": "asc"})
    assert [d["name"] for d in response.json()] == ["A", "B", "C"]

    response = await client.get("/api/drinks", params={"sort_by": "colour"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_get_drink(client, db_session, test_user, second_user):
    mine = await make_drink(db_session, test_user, is_private=True)
    public = await make_drink(db_session, second_user)
    hidden = await make_drink(db_session, second_user, is_private=True)

    assert (await client.get(f"/api/drinks/{mine.id}")).status_code == 200
    assert (await client.get(f"/api/drinks/{public.id}")).status_code == 200

    response = await client.get(f"/api/drinks/{hidden.id}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Drink not found"


@pytest.mark.asyncio
async def test_get_missing_drink(client):
    response = await client.get(f"/api/drinks/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_drink(client, db_session, test_user):
    drink = await make_drink(db_session, test_user)
    response = await client.patch(
        f"/api/drinks/{drink.id}", json={"rating": 4.0, "is_private": True, "mood": "cosy"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["rating"] == 4.0
    assert data["is_private"] is True
    assert data["mood"] == "cosy"
    assert data["name"] == "Lagavulin 16"


@pytest.mark.asyncio
async def test_update_drink_with_put(client, db_session, test_user):
    drink = await make_drink(db_session, test_user)
    response = await client.put(f"/api/drinks/{drink.id}", json={"name": "Renamed"})
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["maker"] == "Lagavulin"


@pytest.mark.asyncio
async def test_update_drink_ignores_null_required_fields(client, db_session, test_user):
    drink = await make_drink(db_session, test_user)
    response = await client.patch(f"/api/drinks/{drink.id}", json={"name": None, "subtype": None})
    assert response.status_code == 200
    assert response.json()["name"] == "Lagavulin 16"
    assert response.json()["subtype"] is None


@pytest.mark.asyncio
async def test_update_other_users_drink_forbidden(client, db_session, second_user):
    drink = await make_drink(db_session, second_user)
    response = await client.patch(f"/api/drinks/{drink.id}", json={"rating": 1})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_drink(client, db_session, test_user):
    drink = await make_drink(db_session, test_user)
    response = await client.delete(f"/api/drinks/{drink.id}")
    assert response.status_code == 204
    assert (await client.get(f"/api/drinks/{drink.id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_other_users_drink_forbidden(client, db_session, second_user):
    drink = await make_drink(db_session, second_user)
    response = await client.delete(f"/api/drinks/{drink.id}")
    assert response.status_code == 403

    result = await db_session.execute(select(Drink.id).where(Drink.id == drink.id))
    assert result.scalar_one_or_none() == drink.id
