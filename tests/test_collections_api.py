"""
Collection endpoint tests: listing, sorting, creation, updates and cascade delete.
"""

import pytest


class TestListCollections:
    async def test_total_ignores_pagination(self, client, store):
        owner = await store.user("Owner")
        for i in range(7):
            await store.collection(owner, name=f"C{i}")

        res = await client.get("/collections", params={"page": 2, "limit": 3})
        assert res.status_code == 200
        data = res.json()
        assert len(data["collections"]) <= 3
        assert [c["name"] for c in data["collections"]] == ["C3", "C4", "C5"]
        assert data["pagination"]["total"] == 7
        assert data["pagination"]["totalPages"] == 3
        assert data["pagination"]["hasNext"] is True
        assert data["pagination"]["hasPrev"] is True

    async def test_bid_count_without_nested_bids(self, client, market):
        data = (await client.get("/collections")).json()
        by_name = {c["name"]: c for c in data["collections"]}
        assert by_name["Lamps"]["bidCount"] == 3
        assert by_name["Rugs"]["bidCount"] == 1
        assert "bids" not in by_name["Lamps"]
        assert by_name["Lamps"]["owner"]["name"] == "Alice"

    async def test_include_bids(self, client, market):
        data = (await client.get("/collections", params={"includeBids": "true"})).json()
        lamps = next(c for c in data["collections"] if c["name"] == "Lamps")
        assert len(lamps["bids"]) == lamps["bidCount"] == 3
        assert {b["user"]["name"] for b in lamps["bids"]} == {"Bob", "Carol"}

    async def test_empty_collection_has_zero_bids(self, client, store):
        owner = await store.user("Owner")
        await store.collection(owner, name="Bare")
        data = (await client.get("/collections", params={"includeBids": "true"})).json()
        assert data["collections"][0]["bidCount"] == 0
        assert data["collections"][0]["bids"] == []

    @pytest.mark.parametrize(
        "sort_by, sort_order, expected",
        [
            ("name", "asc", ["Lamps", "Rugs"]),
            ("name", "desc", ["Rugs", "Lamps"]),
            ("price", "desc", ["Rugs", "Lamps"]),
            ("stocks", "asc", ["Rugs", "Lamps"]),
            ("owner", "desc", ["Rugs", "Lamps"]),
        ],
    )
    async def test_sorting(self, client, market, sort_by, sort_order, expected):
        res = await client.get("/collections", params={"sortBy": sort_by, "sortOrder": sort_order})
        assert [c["name"] for c in res.json()["collections"]] == expected

    async def test_unknown_sort_key(self, client, market):
        res = await client.get("/collections", params={"sortBy": "color"})
        assert res.status_code == 400
        assert "sortBy" in res.json()["error"]

    async def test_unknown_sort_order(self, client, market):
        res = await client.get("/collections", params={"sortOrder": "sideways"})
        assert res.status_code == 400


class TestCreateCollection:
    async def test_create(self, client, market):
        alice = market["users"]["alice"]
        res = await client.post(
            "/collections",
            json={"name": "Vases", "description": "Blue", "stocks": 4, "price": 19.99, "ownerId": alice.id},
        )
        assert res.status_code == 200
        body = res.json()
        assert body["id"]
        assert body["name"] == "Vases"
        assert body["price"] == 19.99
        assert body["ownerId"] == alice.id
        assert body["owner"]["email"] == alice.email
        assert body["bids"] == []

    async def test_negative_stock_is_a_storage_failure(self, client, market):
        alice = market["users"]["alice"]
        res = await client.post(
            "/collections",
            json={"name": "Bad", "description": "", "stocks": -1, "price": 1, "ownerId": alice.id},
        )
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to create collection"}

    async def test_unknown_owner_is_a_storage_failure(self, client, store, market):
        res = await client.post(
            "/collections",
            json={"name": "Orphan", "description": "", "stocks": 1, "price": 1, "ownerId": 777},
        )
        assert res.status_code == 500
        assert res.json() == {"error": "Failed to create collection"}
        listed = (await client.get("/collections")).json()
        assert listed["pagination"]["total"] == 2


class TestUpdateCollection:
    async def test_owner_cannot_be_changed(self, client, store, market):
        lamps = market["collections"]["lamps"]
        bob = market["users"]["bob"]
        res = await client.put(
            "/collections",
            json={"id": lamps.id, "name": "Lamps & Shades", "stocks": 9, "ownerId": bob.id},
        )
        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Lamps & Shades"
        assert body["stocks"] == 9
        assert body["ownerId"] == lamps.owner_id
        assert body["owner"]["name"] == "Alice"
        assert len(body["bids"]) == 3

        stored = await store.get_collection(lamps.id)
        assert stored.owner_id == lamps.owner_id
        assert stored.description == "Lamps description"
        assert stored.price == 50.0

    async def test_missing_collection(self, client, market):
        res = await client.put("/collections", json={"id": 9999, "name": "x"})
        assert res.status_code == 404
        assert res.json() == {"error": "Collection not found"}


class TestDeleteCollection:
    async def test_cascades_to_bids(self, client, store, market):
        lamps = market["collections"]["lamps"]
        res = await client.request("DELETE", "/collections", json={"id": lamps.id})
        assert res.status_code == 200
        assert res.json() == {"success": True}

        assert await store.get_collection(lamps.id) is None
        assert await store.bids_for(lamps.id) == []
        listed = (await client.get("/bids", params={"collection_id": lamps.id})).json()
        assert listed["bids"] == []
        # the other collection keeps its bid
        assert len(await store.bids_for(market["collections"]["rugs"].id)) == 1

    async def test_missing_collection(self, client, market):
        res = await client.request("DELETE", "/collections", json={"id": 9999})
        assert res.status_code == 404
