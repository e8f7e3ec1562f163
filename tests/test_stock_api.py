import asyncio

from httpx import ASGITransport, AsyncClient

from tests.helpers import create_product, current_quantity, ledger_balance, movement_count


class TestStockListing:
    async def test_list_is_enriched_with_product_and_status(self, stock_client, database):
        low = await create_product(database, "S-LOW", name="Alpha", price="2.50", quantity=5)
        normal = await create_product(database, "S-NORMAL", name="Bravo", quantity=50)
        high = await create_product(database, "S-HIGH", name="Charlie", quantity=100)

        body = (await stock_client.get("/api/stock")).json()

        assert body["success"] is True
        assert body["count"] == 3
        rows = {r["product_id"]: r for r in body["data"]}
        assert rows[low]["status"] == "LOW"
        assert rows[normal]["status"] == "NORMAL"
        assert rows[high]["status"] == "HIGH"
        assert rows[low]["product_name"] == "Alpha"
        assert rows[low]["sku"] == "S-LOW"
        assert rows[low]["price"] == 2.5
        assert [r["product_name"] for r in body["data"]] == ["Alpha", "Bravo", "Charlie"]

    async def test_get_by_product(self, stock_client, database):
        pid = await create_product(database, "S-ONE", quantity=10)

        body = (await stock_client.get(f"/api/stock/product/{pid}")).json()
        assert body["data"]["quantity"] == 10
        assert body["data"]["status"] == "NORMAL"

    async def test_get_by_unknown_product(self, stock_client):
        resp = await stock_client.get("/api/stock/product/555")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Stock not found"}

    async def test_low_stock_alerts(self, stock_client, database):
        await create_product(database, "A-3", quantity=3)
        await create_product(database, "A-0", quantity=0)
        await create_product(database, "A-5", quantity=5)
        await create_product(database, "A-40", quantity=40)

        body = (await stock_client.get("/api/stock/alerts/low")).json()
        assert body["count"] == 3
        assert [r["sku"] for r in body["data"]] == ["A-0", "A-3", "A-5"]
        assert all(r["status"] == "LOW" for r in body["data"])


class TestStockMovementsEndpoints:
    async def test_stock_in(self, stock_client, database):
        pid = await create_product(database, "M-IN", quantity=10)

        resp = await stock_client.post(
            "/api/stock/in", json={"product_id": pid, "quantity": 5, "reason": "restock"}
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Stock entry registered successfully"
        assert body["data"]["product_id"] == pid
        assert body["data"]["previous_quantity"] == 10
        assert body["data"]["new_quantity"] == 15
        assert await current_quantity(database, pid) == 15

        history = (await stock_client.get(f"/api/stock/movements/{pid}")).json()["data"]
        assert history[0]["movement_type"] == "IN"
        assert history[0]["reason"] == "restock"
        assert (history[0]["previous_quantity"], history[0]["new_quantity"]) == (10, 15)

    async def test_stock_out_turns_status_low(self, stock_client, database):
        pid = await create_product(database, "M-OUT", quantity=3, min_stock=5)

        resp = await stock_client.post("/api/stock/out", json={"product_id": pid, "quantity": 1})

        assert resp.status_code == 200
        assert resp.json()["message"] == "Stock exit registered successfully"
        assert resp.json()["data"]["new_quantity"] == 2
        stock = (await stock_client.get(f"/api/stock/product/{pid}")).json()["data"]
        assert (stock["quantity"], stock["status"]) == (2, "LOW")

    async def test_insufficient_stock(self, stock_client, database):
        pid = await create_product(database, "M-SHORT", quantity=3)
        before = await movement_count(database, pid)

        resp = await stock_client.post("/api/stock/out", json={"product_id": pid, "quantity": 10})

        assert resp.status_code == 400
        assert resp.json() == {
            "success": False,
            "error": "Insufficient stock",
            "available": 3,
            "requested": 10,
        }
        assert await current_quantity(database, pid) == 3
        assert await movement_count(database, pid) == before

    async def test_unknown_product(self, stock_client):
        resp = await stock_client.post("/api/stock/in", json={"product_id": 77, "quantity": 1})
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Product not found"}

    async def test_invalid_bodies(self, stock_client, database):
        pid = await create_product(database, "M-BAD", quantity=2)
        bad_bodies = [
            {"product_id": pid},
            {"product_id": pid, "quantity": 0},
            {"product_id": pid, "quantity": -4},
            {"product_id": pid, "quantity": 1.5},
            {"quantity": 3},
            {"product_id": 0, "quantity": 3},
            {"product_id": pid, "quantity": 2**63},
            {"product_id": 2**63, "quantity": 1},
            {"product_id": pid, "quantity": 2**31},
        ]
        for body in bad_bodies:
            resp = await stock_client.post("/api/stock/out", json=body)
            assert resp.status_code == 400, body
            assert resp.json()["success"] is False
        assert await current_quantity(database, pid) == 2
        assert await movement_count(database, pid) == 1

    async def test_storage_overflow_still_answers_with_envelope(self, apps):
        transport = ASGITransport(app=apps["stock"], raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            resp = await client.get(f"/api/stock/product/{2**63}")

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}

    async def test_concurrent_requests_keep_invariant(self, stock_client, database):
        pid = await create_product(database, "M-RACE", quantity=20)

        responses = await asyncio.gather(
            *(stock_client.post("/api/stock/in", json={"product_id": pid, "quantity": 2}) for _ in range(8)),
            *(stock_client.post("/api/stock/out", json={"product_id": pid, "quantity": 3}) for _ in range(8)),
        )

        assert all(r.status_code == 200 for r in responses)
        assert await current_quantity(database, pid) == 20 + 16 - 24
        assert await ledger_balance(database, pid) == 12


class TestMovementHistory:
    async def test_newest_first_and_scoped_to_product(self, stock_client, database):
        a = await create_product(database, "H-A")
        b = await create_product(database, "H-B")
        for qty in (1, 2, 3):
            await stock_client.post("/api/stock/in", json={"product_id": a, "quantity": qty})
        await stock_client.post("/api/stock/in", json={"product_id": b, "quantity": 9})

        body = (await stock_client.get(f"/api/stock/movements/{a}")).json()
        assert body["count"] == 3
        assert [m["quantity"] for m in body["data"]] == [3, 2, 1]
        assert all(m["product_id"] == a for m in body["data"])
        assert body["data"][0]["sku"] == "H-A"

        everything = (await stock_client.get("/api/stock/movements")).json()
        assert everything["count"] == 4
        assert everything["data"][0]["product_id"] == b

    async def test_history_is_capped_at_100(self, stock_client, database):
        pid = await create_product(database, "H-CAP")
        for _ in range(105):
            await stock_client.post("/api/stock/in", json={"product_id": pid, "quantity": 1})

        body = (await stock_client.get(f"/api/stock/movements/{pid}")).json()
        assert body["count"] == 100
        assert body["data"][0]["new_quantity"] == 105
        assert body["data"][-1]["new_quantity"] == 6

    async def test_unknown_product_has_empty_history(self, stock_client):
        body = (await stock_client.get("/api/stock/movements/8080")).json()
        assert body == {"success": True, "data": [], "count": 0}
