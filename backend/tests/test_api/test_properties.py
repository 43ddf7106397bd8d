"""Tests for property CRUD and browsing endpoints."""

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


def _payload(**overrides) -> dict:
    data = {
        "title": "Harbour Flat",
        "description": "Sea views.",
        "price_per_night": "120.00",
        "images": ["a.jpg", "b.jpg"],
    }
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# POST /api/v1/properties
# ---------------------------------------------------------------------------


class TestCreateProperty:
    async def test_create_success(self, client: AsyncClient, auth_headers: dict, test_provider) -> None:
        response = await client.post("/api/v1/properties", json=_payload(), headers=auth_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Harbour Flat"
        assert data["owner_id"] == str(test_provider.id)
        assert Decimal(data["price_per_night"]) == Decimal("120.00")
        assert data["images"] == ["a.jpg", "b.jpg"]
        assert data["inventory"] == []
        assert "id" in data

    async def test_create_with_inventory(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            "/api/v1/properties",
            json=_payload(
                inventory=[
                    {"date": "2030-06-02", "available": False},
                    {"date": "2030-06-01", "available": True},
                ]
            ),
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["inventory"] == [
            {"date": "2030-06-01", "available": True},
            {"date": "2030-06-02", "available": False},
        ]

    async def test_owner_cannot_be_spoofed(self, client: AsyncClient, auth_headers: dict, test_provider) -> None:
        response = await client.post(
            "/api/v1/properties",
            json=_payload(owner_id=str(uuid.uuid4())),
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["owner_id"] == str(test_provider.id)

    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/properties", json=_payload())
        assert response.status_code == 401

    async def test_missing_title(self, client: AsyncClient, auth_headers: dict) -> None:
        payload = _payload()
        del payload["title"]
        response = await client.post("/api/v1/properties", json=payload, headers=auth_headers)
        assert response.status_code == 422

    async def test_negative_price(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            "/api/v1/properties", json=_payload(price_per_night="-1"), headers=auth_headers
        )
        assert response.status_code == 422

    async def test_duplicate_inventory_dates(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            "/api/v1/properties",
            json=_payload(inventory=[{"date": "2030-06-01", "available": True}, {"date": "2030-06-01", "available": False}]),
            headers=auth_headers,
        )
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/properties, /available, /mine, /{id}
# ---------------------------------------------------------------------------


class TestReadProperties:
    async def test_list_is_public(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get("/api/v1/properties")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == test_property["id"]

    async def test_detail_is_public(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get(f"/api/v1/properties/{test_property['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Test Cottage"
        assert len(data["inventory"]) == 10

    async def test_detail_not_found(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/v1/properties/{uuid.uuid4()}")
        assert response.status_code == 404

    async def test_available_in_window(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get("/api/v1/properties/available", params={"start": "2030-06-05", "end": "2030-06-20"})
        assert response.status_code == 200
        assert [p["id"] for p in response.json()["items"]] == [test_property["id"]]

    async def test_available_excludes_out_of_window(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.get("/api/v1/properties/available", params={"start": "2030-07-01", "end": "2030-07-14"})
        assert response.status_code == 200
        assert response.json()["total"] == 0

    async def test_available_reversed_window(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/properties/available", params={"start": "2030-07-14", "end": "2030-07-01"})
        assert response.status_code == 422

    async def test_mine_only_lists_own(
        self,
        client: AsyncClient,
        test_property: dict,
        other_auth_headers: dict,
        auth_headers: dict,
    ) -> None:
        mine = await client.get("/api/v1/properties/mine", headers=auth_headers)
        assert mine.json()["total"] == 1

        theirs = await client.get("/api/v1/properties/mine", headers=other_auth_headers)
        assert theirs.status_code == 200
        assert theirs.json()["total"] == 0


# ---------------------------------------------------------------------------
# PUT / DELETE /api/v1/properties/{id}
# ---------------------------------------------------------------------------


class TestUpdateProperty:
    async def test_owner_updates(self, client: AsyncClient, auth_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"title": "Renamed Cottage", "price_per_night": "150.00"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed Cottage"
        assert Decimal(data["price_per_night"]) == Decimal("150.00")
        assert data["description"] == test_property["description"]

    async def test_non_owner_forbidden(self, client: AsyncClient, other_auth_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"title": "Hijacked"},
            headers=other_auth_headers,
        )
        assert response.status_code == 403

    async def test_owner_field_rejected(self, client: AsyncClient, auth_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/v1/properties/{test_property['id']}",
            json={"owner_id": str(uuid.uuid4())},
            headers=auth_headers,
        )
        assert response.status_code == 422

    async def test_requires_auth(self, client: AsyncClient, test_property: dict) -> None:
        response = await client.put(f"/api/v1/properties/{test_property['id']}", json={"title": "x"})
        assert response.status_code == 401

    async def test_unknown_property(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.put(f"/api/v1/properties/{uuid.uuid4()}", json={"title": "x"}, headers=auth_headers)
        assert response.status_code == 404


class TestDeleteProperty:
    async def test_owner_deletes(self, client: AsyncClient, auth_headers: dict, test_property: dict) -> None:
        response = await client.delete(f"/api/v1/properties/{test_property['id']}", headers=auth_headers)
        assert response.status_code == 200

        follow_up = await client.get(f"/api/v1/properties/{test_property['id']}")
        assert follow_up.status_code == 404

    async def test_non_owner_forbidden(self, client: AsyncClient, other_auth_headers: dict, test_property: dict) -> None:
        response = await client.delete(f"/api/v1/properties/{test_property['id']}", headers=other_auth_headers)
        assert response.status_code == 403
