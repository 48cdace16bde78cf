from techphone.utils.helpers import utcnow

from conftest import add_product


def test_list_envelope_and_pagination(client, db):
    for i in range(5):
        add_product(db, name=f"Phone {i}", price=1000 + i)

    resp = client.get("/api/products", params={"pageSize": 2, "page": 2, "orderBy": "price", "ascending": "true"})
    assert resp.status_code == 200
    body = resp.json()
    assert [p["name"] for p in body["data"]] == ["Phone 2", "Phone 3"]
    assert body["count"] == 5
    assert body["pagination"] == {"page": 2, "pageSize": 2, "totalPages": 3}


def test_list_without_count(client, db):
    add_product(db)
    body = client.get("/api/products", params={"count": "null"}).json()
    assert body["count"] is None
    assert body["pagination"]["totalPages"] is None
    assert len(body["data"]) == 1


def test_list_projects_fields(client, db):
    add_product(db, name="Galaxy")
    body = client.get("/api/products", params={"fields": "id,name"}).json()
    assert set(body["data"][0]) == {"id", "name"}


def test_category_matches_singular_and_plural(client, db):
    add_product(db, name="A", category="phones")
    add_product(db, name="B", category="phone")
    add_product(db, name="C", category="laptop")
    body = client.get("/api/products", params={"category": "Phone"}).json()
    assert sorted(p["name"] for p in body["data"]) == ["A", "B"]


def test_soft_deleted_hidden_from_listing(client, db):
    add_product(db, name="Live")
    add_product(db, name="Gone", deleted_at=utcnow())
    names = [p["name"] for p in client.get("/api/products").json()["data"]]
    assert names == ["Live"]
    all_names = [p["name"] for p in client.get("/api/products", params={"isActive": "false"}).json()["data"]]
    assert sorted(all_names) == ["Gone", "Live"]


def test_bad_sort_column_is_400(client):
    resp = client.get("/api/products", params={"orderBy": "secret"})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_search(client, db):
    add_product(db, name="iPhone 15 Pro", brand="Apple")
    add_product(db, name="iPhone 11", brand="Apple", condition="used")
    add_product(db, name="Galaxy", brand="Samsung")

    body = client.get("/api/products/search", params={"q": "iphone"}).json()
    assert [p["name"] for p in body["data"]] == ["iPhone 15 Pro"]
    assert set(body["data"][0]) == {"id", "name", "price", "image", "category"}

    assert client.get("/api/products/search", params={"q": "  "}).json() == {"data": []}
    assert client.get("/api/products/search").json() == {"data": []}


def test_get_product(client, db):
    product = add_product(db, name="Pixel 8")
    resp = client.get(f"/api/products/{product.id}")
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Pixel 8"

    missing = client.get("/api/products/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Product not found"}


def test_writes_require_permission(client, customer):
    payload = {"name": "Pixel", "price": 100, "category": "phone"}
    assert client.post("/api/products", json=payload).status_code == 401
    assert client.post("/api/products", json=payload, headers=customer["headers"]).status_code == 403


def test_admin_crud_and_soft_delete(client, admin):
    headers = admin["headers"]
    resp = client.post("/api/products", json={"name": "Pixel 9", "price": 19990000, "category": "phone",
                                              "brand": None}, headers=headers)
    assert resp.status_code == 201
    product = resp.json()["data"]
    assert product["brand"] is None
    assert product["stock"] == 0

    resp = client.put(f"/api/products/{product['id']}", json={"price": 18990000, "name": None}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["price"] == 18990000
    assert resp.json()["data"]["name"] == "Pixel 9"

    resp = client.delete(f"/api/products/{product['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["deleted_at"] is not None
    assert client.get("/api/products").json()["data"] == []

    resp = client.post(f"/api/products/{product['id']}/restore", headers=headers)
    assert resp.json()["data"]["deleted_at"] is None
    assert len(client.get("/api/products").json()["data"]) == 1


def test_create_validates_body(client, admin):
    resp = client.post("/api/products", json={"name": "X", "price": -1, "category": "phone"},
                       headers=admin["headers"])
    assert resp.status_code == 400
    assert "price" in resp.json()["error"]


def test_update_and_delete_missing_product(client, admin):
    assert client.put("/api/products/nope", json={"price": 1}, headers=admin["headers"]).status_code == 404
    assert client.delete("/api/products/nope", headers=admin["headers"]).status_code == 404


def test_unknown_route_and_method(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found", "path": "/api/nothing-here"}
    assert client.patch("/api/products").status_code == 405
