"""
HTTP-level tests for the categories, products and tags routers.
"""
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from models.log import Log


def product_payload(catalog, **overrides):
    payload = {
        "name": "Basketball",
        "price": 100.0,
        "stock": 3,
        "category_id": catalog.categories["Shoes"],
        "tag_ids": [catalog.tags["red"], catalog.tags["gold"]],
    }
    payload.update(overrides)
    return payload


def audit_actions(store, status="SUCCESS"):
    session = store.session()
    try:
        return [row.action for row in session.query(Log).filter(Log.status == status).order_by(Log.id)]
    finally:
        session.close()


# ---- PRODUCTS ----
def test_list_products_includes_category_and_tags(client, catalog) -> None:
    res = client.get("/api/products")
    assert res.status_code == 200
    body = res.json()
    assert len(body) == 5

    shirt = next(p for p in body if p["name"] == "Plain T-Shirt")
    assert shirt["category"]["name"] == "Shirts"
    assert {t["name"] for t in shirt["tags"]} == {"pop culture", "green"}


def test_get_missing_product_is_404(client, catalog) -> None:
    res = client.get("/api/products/9999")
    assert res.status_code == 404
    assert "9999" in res.json()["detail"]


def test_create_product(client, catalog, store) -> None:
    res = client.post("/api/products", json=product_payload(catalog))
    assert res.status_code == 201
    body = res.json()
    assert body["name"] == "Basketball"
    assert body["price"] == 100.0
    assert {t["id"] for t in body["tags"]} == {catalog.tags["red"], catalog.tags["gold"]}
    assert "PRODUCT_CREATE" in audit_actions(store)


def test_create_product_accepts_camel_case_tag_ids(client, catalog) -> None:
    payload = product_payload(catalog)
    payload["tagIds"] = payload.pop("tag_ids")

    res = client.post("/api/products", json=payload)

    assert res.status_code == 201
    assert len(res.json()["tags"]) == 2


def test_create_product_without_tags(client, catalog) -> None:
    payload = product_payload(catalog)
    del payload["tag_ids"]

    res = client.post("/api/products", json=payload)

    assert res.status_code == 201
    assert res.json()["tags"] == []


def test_create_product_with_unknown_tag_is_400(client, catalog, store) -> None:
    res = client.post("/api/products", json=product_payload(catalog, tag_ids=[catalog.tags["red"], 555]))
    assert res.status_code == 400
    detail = res.json()["detail"]
    assert detail["field"] == "tag_ids"
    assert detail["ids"] == [555]
    assert "PRODUCT_CREATE" in audit_actions(store, status="FAIL")


def test_create_product_with_unknown_category_is_400(client, catalog) -> None:
    res = client.post("/api/products", json=product_payload(catalog, category_id=404))
    assert res.status_code == 400
    assert res.json()["detail"]["field"] == "category_id"


def test_create_product_validation(client, catalog) -> None:
    assert client.post("/api/products", json=product_payload(catalog, price=-1)).status_code == 422
    assert client.post("/api/products", json=product_payload(catalog, stock=-5)).status_code == 422
    assert client.post("/api/products", json=product_payload(catalog, name="   ")).status_code == 422

    payload = product_payload(catalog)
    del payload["category_id"]
    assert client.post("/api/products", json=payload).status_code == 422


def test_price_above_column_range_is_422(client, catalog) -> None:
    assert client.post("/api/products", json=product_payload(catalog, price=100000000)).status_code == 422

    product_id = catalog.products["Cargo Shorts"]
    assert client.patch(f"/api/products/{product_id}", json={"price": 1e9}).status_code == 422


def test_put_replaces_fields_and_reconciles_tags(client, catalog) -> None:
    product_id = catalog.products["Running Sneakers"]
    payload = {
        "name": "Rob Zombie Vinyl Record",
        "price": 90.0,
        "stock": 2,
        "category_id": catalog.categories["Music"],
        "tag_ids": [catalog.tags["rock music"], catalog.tags["pop culture"]],
    }

    res = client.put(f"/api/products/{product_id}", json=payload)

    assert res.status_code == 200
    body = res.json()
    assert body["tags_before"] == sorted([catalog.tags["rock music"], catalog.tags["red"]])
    assert body["tags_after"] == sorted([catalog.tags["rock music"], catalog.tags["pop culture"]])
    assert body["changed_fields"] == ["category_id", "name", "stock"]
    assert body["product"]["category"]["name"] == "Music"


def test_put_requires_every_scalar_field(client, catalog) -> None:
    product_id = catalog.products["Running Sneakers"]
    res = client.put(f"/api/products/{product_id}", json={"price": 10.0})
    assert res.status_code == 422


def test_patch_price_only_keeps_tags(client, catalog) -> None:
    product_id = catalog.products["Branded Baseball Hat"]
    before = client.get(f"/api/products/{product_id}").json()

    res = client.patch(f"/api/products/{product_id}", json={"price": 25.0})

    assert res.status_code == 200
    body = res.json()
    assert body["product"]["price"] == 25.0
    assert body["changed_fields"] == ["price"]
    assert body["tags_before"] == body["tags_after"]
    assert body["product"]["tags"] == before["tags"]


def test_patch_with_empty_tag_list_clears_tags(client, catalog) -> None:
    product_id = catalog.products["Cargo Shorts"]

    res = client.patch(f"/api/products/{product_id}", json={"tag_ids": []})

    assert res.status_code == 200
    assert res.json()["tags_after"] == []
    assert client.get(f"/api/products/{product_id}").json()["tags"] == []


def test_patch_that_changes_nothing_is_400(client, catalog, store) -> None:
    product_id = catalog.products["Plain T-Shirt"]
    current = client.get(f"/api/products/{product_id}").json()

    res = client.patch(
        f"/api/products/{product_id}",
        json={"price": current["price"], "tag_ids": [t["id"] for t in current["tags"]]},
    )

    assert res.status_code == 400
    assert "no change" in res.json()["detail"]
    assert "PRODUCT_EDIT" in audit_actions(store, status="FAIL")


def test_patch_missing_product_is_404(client, catalog) -> None:
    assert client.patch("/api/products/9999", json={"price": 1.0}).status_code == 404


def test_patch_with_unknown_tag_is_400_and_keeps_state(client, catalog) -> None:
    product_id = catalog.products["Plain T-Shirt"]
    before = client.get(f"/api/products/{product_id}").json()

    res = client.patch(f"/api/products/{product_id}", json={"price": 1.0, "tag_ids": [999]})

    assert res.status_code == 400
    assert client.get(f"/api/products/{product_id}").json() == before


def test_delete_product(client, catalog, store) -> None:
    product_id = catalog.products["Cargo Shorts"]

    res = client.delete(f"/api/products/{product_id}")

    assert res.status_code == 200
    assert "Cargo Shorts" in res.json()["detail"]
    assert client.get(f"/api/products/{product_id}").status_code == 404
    assert client.delete(f"/api/products/{product_id}").status_code == 404
    tag = client.get(f"/api/tags/{catalog.tags['gold']}").json()
    assert tag["products"] == []


# ---- CATEGORIES ----
def test_list_categories_with_products(client, catalog) -> None:
    res = client.get("/api/categories")
    assert res.status_code == 200
    hats = next(c for c in res.json() if c["name"] == "Hats")
    assert [p["name"] for p in hats["products"]] == ["Branded Baseball Hat"]


def test_get_category(client, catalog) -> None:
    res = client.get(f"/api/categories/{catalog.categories['Shorts']}")
    assert res.status_code == 200
    assert res.json()["products"][0]["name"] == "Cargo Shorts"
    assert client.get("/api/categories/999").status_code == 404


def test_create_and_rename_category(client, catalog, store) -> None:
    res = client.post("/api/categories", json={"name": "Electronics"})
    assert res.status_code == 201
    category_id = res.json()["id"]
    assert res.json()["products"] == []

    res = client.put(f"/api/categories/{category_id}", json={"name": "Appliances"})
    assert res.status_code == 200
    assert res.json()["name"] == "Appliances"
    assert audit_actions(store)[-2:] == ["CATEGORY_CREATE", "CATEGORY_UPDATE"]


def test_category_name_rules(client, catalog) -> None:
    assert client.post("/api/categories", json={"name": ""}).status_code == 422
    assert client.post("/api/categories", json={"name": "shirts"}).status_code == 409

    shorts = catalog.categories["Shorts"]
    assert client.put(f"/api/categories/{shorts}", json={"name": "Hats"}).status_code == 409
    assert client.put(f"/api/categories/{shorts}", json={"name": "Shorts"}).status_code == 400
    assert client.put("/api/categories/999", json={"name": "Nope"}).status_code == 404


def test_rejected_category_writes_are_audited(client, catalog, store) -> None:
    shorts = catalog.categories["Shorts"]

    assert client.post("/api/categories", json={"name": "Shirts"}).status_code == 409
    assert client.put(f"/api/categories/{shorts}", json={"name": "Shorts"}).status_code == 400
    assert client.put(f"/api/categories/{shorts}", json={"name": "hats"}).status_code == 409
    assert client.put("/api/categories/999", json={"name": "Nope"}).status_code == 404

    assert audit_actions(store, status="FAIL") == [
        "CATEGORY_CREATE", "CATEGORY_UPDATE", "CATEGORY_UPDATE", "CATEGORY_UPDATE",
    ]
    # reads do not write audit rows
    assert client.get("/api/categories/999").status_code == 404
    assert len(audit_actions(store, status="FAIL")) == 4


def test_delete_category_orphans_products_by_default(client, catalog) -> None:
    shoes = catalog.categories["Shoes"]
    product_id = catalog.products["Running Sneakers"]

    res = client.delete(f"/api/categories/{shoes}")

    assert res.status_code == 200
    assert res.json()["policy"] == "orphan"
    assert res.json()["affected_products"] == [product_id]
    product = client.get(f"/api/products/{product_id}").json()
    assert product["category_id"] is None
    assert product["category"] is None
    assert client.delete(f"/api/categories/{shoes}").status_code == 404


def test_delete_category_with_restrict_policy(make_client, catalog) -> None:
    with make_client(CATEGORY_DELETE_POLICY="restrict") as client:
        res = client.delete(f"/api/categories/{catalog.categories['Hats']}")
        assert res.status_code == 409
        assert res.json()["detail"]["product_ids"] == [catalog.products["Branded Baseball Hat"]]


def test_delete_category_with_cascade_policy(make_client, catalog) -> None:
    with make_client(CATEGORY_DELETE_POLICY="cascade") as client:
        res = client.delete(f"/api/categories/{catalog.categories['Hats']}")
        assert res.status_code == 200
        product_id = catalog.products["Branded Baseball Hat"]
        assert client.get(f"/api/products/{product_id}").status_code == 404


# ---- TAGS ----
def test_list_and_get_tags(client, catalog) -> None:
    res = client.get("/api/tags")
    assert res.status_code == 200
    assert len(res.json()) == 8

    red = client.get(f"/api/tags/{catalog.tags['red']}").json()
    assert {p["name"] for p in red["products"]} == {"Running Sneakers", "Branded Baseball Hat"}
    assert client.get("/api/tags/999").status_code == 404


def test_create_rename_and_delete_tag(client, catalog) -> None:
    res = client.post("/api/tags", json={"name": "black"})
    assert res.status_code == 201
    tag_id = res.json()["id"]

    assert client.post("/api/tags", json={"name": "Black"}).status_code == 409
    assert client.put(f"/api/tags/{tag_id}", json={"name": "on sale"}).json()["name"] == "on sale"
    assert client.put(f"/api/tags/{tag_id}", json={"name": "on sale"}).status_code == 400
    assert client.put(f"/api/tags/{tag_id}", json={"name": "blue"}).status_code == 409

    assert client.delete(f"/api/tags/{tag_id}").status_code == 200
    assert client.delete(f"/api/tags/{tag_id}").status_code == 404


def test_rejected_tag_writes_are_audited(client, catalog, store) -> None:
    blue = catalog.tags["blue"]

    assert client.post("/api/tags", json={"name": "Red"}).status_code == 409
    assert client.put(f"/api/tags/{blue}", json={"name": "blue"}).status_code == 400
    assert client.put(f"/api/tags/{blue}", json={"name": "GOLD"}).status_code == 409
    assert client.put("/api/tags/999", json={"name": "black"}).status_code == 404
    assert client.delete("/api/tags/999").status_code == 404

    assert audit_actions(store, status="FAIL") == [
        "TAG_CREATE", "TAG_UPDATE", "TAG_UPDATE", "TAG_UPDATE", "TAG_DELETE",
    ]


def test_tag_delete_store_error_is_500_and_keeps_tag(client, catalog, store, monkeypatch) -> None:
    red = catalog.tags["red"]
    commit = Session.commit
    calls = []

    def commit_fails_once(self):
        calls.append(self)
        if len(calls) == 1:
            raise OperationalError("DELETE FROM tags", {}, Exception("database is locked"))
        return commit(self)

    monkeypatch.setattr(Session, "commit", commit_fails_once)
    res = client.delete(f"/api/tags/{red}")
    monkeypatch.undo()

    assert res.status_code == 500
    assert audit_actions(store, status="FAIL") == ["TAG_DELETE"]
    hat = client.get(f"/api/products/{catalog.products['Branded Baseball Hat']}").json()
    assert red in {t["id"] for t in hat["tags"]}


def test_deleting_a_tag_detaches_it_from_products(client, catalog) -> None:
    red = catalog.tags["red"]

    assert client.delete(f"/api/tags/{red}").status_code == 200

    hat = client.get(f"/api/products/{catalog.products['Branded Baseball Hat']}").json()
    assert red not in {t["id"] for t in hat["tags"]}
    assert {t["name"] for t in hat["tags"]} == {"pop music", "white"}


def test_root(client) -> None:
    res = client.get("/")
    assert res.status_code == 200
    assert "running" in res.json()["message"]
