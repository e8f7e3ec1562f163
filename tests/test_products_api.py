from tests.helpers import create_product, current_quantity


async def _create(client, **overrides):
    body = {"name": "Mouse Logitech", "sku": "LOG-M185", "price": 45.5, "category": "Accessories"}
    body.update(overrides)
    return await client.post("/api/products", json=body)


class TestCreateProduct:
    async def test_create_returns_201_and_opens_stock(self, products_client, stock_client, database):
        resp = await _create(products_client, description="Wireless")

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Product created successfully"
        data = body["data"]
        assert data["name"] == "Mouse Logitech"
        assert data["sku"] == "LOG-M185"
        assert data["price"] == 45.5
        assert data["description"] == "Wireless"

        assert await current_quantity(database, data["id"]) == 0
        stock = (await stock_client.get(f"/api/stock/product/{data['id']}")).json()["data"]
        assert (stock["quantity"], stock["min_stock"], stock["max_stock"]) == (0, 5, 100)
        assert stock["status"] == "LOW"

    async def test_stock_thresholds_come_from_settings(self, products_client, stock_client, settings):
        settings.default_min_stock = 2
        settings.default_max_stock = 20

        pid = (await _create(products_client)).json()["data"]["id"]

        stock = (await stock_client.get(f"/api/stock/product/{pid}")).json()["data"]
        assert (stock["min_stock"], stock["max_stock"]) == (2, 20)

    async def test_missing_required_fields(self, products_client):
        resp = await products_client.post("/api/products", json={"name": "No sku"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert "sku" in body["error"]
        assert "data" not in body

    async def test_blank_name_rejected(self, products_client):
        resp = await _create(products_client, name="   ")
        assert resp.status_code == 400

    async def test_negative_price_rejected(self, products_client):
        resp = await _create(products_client, price=-1)
        assert resp.status_code == 400
        assert "price" in resp.json()["error"]

    async def test_zero_price_allowed(self, products_client):
        resp = await _create(products_client, price=0)
        assert resp.status_code == 201
        assert resp.json()["data"]["price"] == 0

    async def test_duplicate_sku_conflicts(self, products_client):
        assert (await _create(products_client)).status_code == 201
        resp = await _create(products_client, name="Other")
        assert resp.status_code == 409
        assert resp.json() == {"success": False, "error": "SKU already exists"}


class TestReadProducts:
    async def test_list_filters_and_order(self, products_client, database):
        await create_product(database, "KB-1", name="Teclado", category="Accessories")
        await create_product(database, "MON-24", name="Monitor", category="Electronics")
        await create_product(database, "CAB-HDMI", name="Cable HDMI", category=None)

        body = (await products_client.get("/api/products")).json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [p["name"] for p in body["data"]] == ["Cable HDMI", "Monitor", "Teclado"]

        by_cat = (await products_client.get("/api/products", params={"category": "Electronics"})).json()
        assert [p["sku"] for p in by_cat["data"]] == ["MON-24"]

        by_name = (await products_client.get("/api/products", params={"search": "hdmi"})).json()
        assert [p["sku"] for p in by_name["data"]] == ["CAB-HDMI"]

        by_sku = (await products_client.get("/api/products", params={"search": "KB-"})).json()
        assert [p["name"] for p in by_sku["data"]] == ["Teclado"]

    async def test_get_by_id(self, products_client, database):
        pid = await create_product(database, "GET-1", name="Webcam", price="120.00")

        body = (await products_client.get(f"/api/products/{pid}")).json()
        assert body["data"]["id"] == pid
        assert body["data"]["price"] == 120.0

    async def test_get_unknown(self, products_client):
        resp = await products_client.get("/api/products/424242")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "Product not found"}

    async def test_non_numeric_id_is_a_validation_error(self, products_client):
        resp = await products_client.get("/api/products/abc")
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    async def test_categories_are_distinct_and_sorted(self, products_client, database):
        await create_product(database, "C-1", category="Electronics")
        await create_product(database, "C-2", category="Accessories")
        await create_product(database, "C-3", category="Electronics")
        await create_product(database, "C-4", category=None)

        body = (await products_client.get("/api/products/categories/list")).json()
        assert body == {"success": True, "data": ["Accessories", "Electronics"]}


class TestUpdateDeleteProduct:
    async def test_partial_update(self, products_client, database):
        pid = await create_product(database, "UPD-1", name="Old", price="5.00", category="A")

        resp = await products_client.put(f"/api/products/{pid}", json={"name": "New", "price": 7.25})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["name"] == "New"
        assert data["price"] == 7.25
        assert data["sku"] == "UPD-1"
        assert data["category"] == "A"

    async def test_update_to_taken_sku_conflicts(self, products_client, database):
        await create_product(database, "TAKEN")
        pid = await create_product(database, "MINE")

        resp = await products_client.put(f"/api/products/{pid}", json={"sku": "TAKEN"})
        assert resp.status_code == 409

    async def test_update_unknown(self, products_client):
        resp = await products_client.put("/api/products/999", json={"name": "x"})
        assert resp.status_code == 404

    async def test_delete_removes_stock_and_ledger(self, products_client, stock_client, database):
        pid = await create_product(database, "DEL-1", quantity=4)

        resp = await products_client.delete(f"/api/products/{pid}")
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Product deleted successfully"}

        assert (await products_client.get(f"/api/products/{pid}")).status_code == 404
        assert await current_quantity(database, pid) is None
        movements = (await stock_client.get(f"/api/stock/movements/{pid}")).json()
        assert movements["count"] == 0

    async def test_delete_unknown(self, products_client):
        resp = await products_client.delete("/api/products/31337")
        assert resp.status_code == 404
