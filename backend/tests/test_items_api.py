from boutique_pos.services import identifier_service


def _create(client, **overrides):
    payload = {
        "name": "Block Print Kurta",
        "category": "Apparel",
        "selling_price_cents": 89900,
        "purchase_price_cents": 50000,
        "stock": 8,
    }
    payload.update(overrides)
    return client.post("/api/items", json=payload)


def test_create_generates_sku_and_barcode(client, db_session):
    resp = _create(client)
    assert resp.status_code == 201
    item = resp.get_json()["item"]
    assert item["sku"].startswith("APP-BLO-")
    assert identifier_service.is_valid_ean13(item["barcode"])
    assert item["barcode"].startswith("200")
    assert item["stock"] == 8
    assert item["min_stock"] == 5
    assert item["unit"] == "pcs"


def test_create_keeps_given_identifiers(client, db_session):
    resp = _create(client, sku="CUSTOM-1", barcode=" 4006381333931 ")
    assert resp.status_code == 201
    item = resp.get_json()["item"]
    assert item["sku"] == "CUSTOM-1"
    assert item["barcode"] == "4006381333931"


def test_create_requires_fields(client, db_session):
    resp = client.post("/api/items", json={"name": "No price"})
    assert resp.status_code == 400
    assert "Missing required fields" in resp.get_json()["error"]


def test_create_rejects_bad_values(client, db_session):
    assert _create(client, selling_price_cents=-1).status_code == 400
    assert _create(client, selling_price_cents=12.5).status_code == 400
    assert _create(client, stock=-3).status_code == 400
    assert _create(client, barcode="12-34").status_code == 400
    assert _create(client, is_admin=True).status_code == 400


def test_duplicate_barcode_conflicts(client, db_session):
    assert _create(client, barcode="2001234567890").status_code == 201
    resp = _create(client, name="Other", barcode="2001234567890")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Barcode already exists for another item"


def test_update_item(client, db_session):
    item = _create(client).get_json()["item"]

    resp = client.put(f"/api/items/{item['id']}", json={"selling_price_cents": 99900, "min_stock": 2})
    assert resp.status_code == 200
    updated = resp.get_json()["item"]
    assert updated["selling_price_cents"] == 99900
    assert updated["min_stock"] == 2


def test_update_cannot_set_stock(client, db_session):
    item = _create(client).get_json()["item"]
    resp = client.put(f"/api/items/{item['id']}", json={"stock": 100})
    assert resp.status_code == 400


def test_update_barcode_conflict(client, db_session):
    first = _create(client, barcode="2001234567890").get_json()["item"]
    second = _create(client, name="Second").get_json()["item"]

    resp = client.put(f"/api/items/{second['id']}", json={"barcode": first["barcode"]})
    assert resp.status_code == 409

    # Re-saving an item's own barcode is fine
    resp = client.put(f"/api/items/{first['id']}", json={"barcode": first["barcode"]})
    assert resp.status_code == 200


def test_update_missing_item(client, db_session):
    assert client.put("/api/items/999", json={"name": "x"}).status_code == 404


def test_get_and_delete(client, db_session):
    item = _create(client).get_json()["item"]

    assert client.get(f"/api/items/{item['id']}").status_code == 200
    assert client.delete(f"/api/items/{item['id']}").status_code == 200
    assert client.get(f"/api/items/{item['id']}").status_code == 404
    assert client.delete(f"/api/items/{item['id']}").status_code == 404


def test_barcode_scan(client, db_session):
    item = _create(client, barcode="2001234567890").get_json()["item"]

    resp = client.get("/api/items/barcode/2001234567890")
    assert resp.status_code == 200
    assert resp.get_json()["item"]["id"] == item["id"]

    resp = client.get("/api/items/barcode/2009999999999")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Item with barcode 2009999999999 not found"


def test_scan_sees_price_change(client, db_session):
    item = _create(client, barcode="2001234567890").get_json()["item"]
    client.get("/api/items/barcode/2001234567890")

    client.put(f"/api/items/{item['id']}", json={"selling_price_cents": 100})

    resp = client.get("/api/items/barcode/2001234567890")
    assert resp.get_json()["item"]["selling_price_cents"] == 100


def test_list_search_and_low_stock(client, db_session):
    _create(client, name="Silk Saree", category="Sarees", stock=2, min_stock=3)
    _create(client, name="Cotton Kurta", stock=20)

    data = client.get("/api/items?q=silk").get_json()
    assert data["count"] == 1
    assert data["items"][0]["name"] == "Silk Saree"

    low = client.get("/api/items/low-stock").get_json()
    assert [i["name"] for i in low["items"]] == ["Silk Saree"]
    assert low["items"][0]["is_low_stock"] is True

    assert client.get("/api/items?low_stock=1").get_json()["count"] == 1
    assert client.get("/api/items/categories").get_json()["categories"] == ["Apparel", "Sarees"]


def test_list_pagination(client, db_session):
    for n in range(3):
        _create(client, name=f"Item {n}")
    data = client.get("/api/items?page=2&per_page=2").get_json()
    assert data["count"] == 1
    assert data["pagination"]["total"] == 3
    assert data["pagination"]["has_prev"] is True

    data = client.get("/api/items?page=1&per_page=-5").get_json()
    assert data["count"] == 1
    assert data["pagination"]["per_page"] == 1
    assert data["pagination"]["total_pages"] == 3


def test_identifier_routes(client, db_session):
    resp = client.post("/api/identifiers/barcode", json={})
    assert resp.status_code == 201
    assert identifier_service.is_valid_ean13(resp.get_json()["barcode"])

    resp = client.post("/api/identifiers/sku", json={"category": "Jewellery", "name": "Jhumka"})
    assert resp.status_code == 201
    assert resp.get_json()["sku"].startswith("JEW-JHU-")

    resp = client.post("/api/identifiers/sku", json={"category": "Jewellery"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please enter category and name first"

    for url in ("/api/identifiers/barcode", "/api/identifiers/sku"):
        resp = client.post(url, json=["Jewellery", "Jhumka"])
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid JSON payload"

    resp = client.get("/api/identifiers/barcode/4006381333931/validate")
    assert resp.get_json() == {"barcode": "4006381333931", "valid_ean13": True, "in_use": False}


def test_health(client, db_session):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "healthy"
