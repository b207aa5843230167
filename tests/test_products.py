"""
Tests for the product routes, mounted under /api/v1/p.
"""

from decimal import Decimal

BASE = "/api/v1/p/products"


def _create(client, payload, **overrides):
    response = client.post(BASE, json={**payload, **overrides})
    assert response.status_code == 200
    return response.json()


def test_create_product(client, product_payload):
    created = _create(client, product_payload)
    other = _create(client, product_payload, name="Difference Engine")

    assert created["product_id"] != other["product_id"]
    assert created["name"] == "Analytical Engine"
    assert Decimal(str(created["price"])) == Decimal("1999.99")


def test_get_product_and_missing_product(client, product_payload):
    created = _create(client, product_payload)

    found = client.get(f"{BASE}/{created['product_id']}")
    missing = client.get(f"{BASE}/{created['product_id'] + 1}")

    assert found.status_code == 200
    assert found.json()["product_id"] == created["product_id"]
    assert missing.status_code == 404
    assert missing.json()["message"] == "Product not found!"


def test_list_products(client, product_payload):
    _create(client, product_payload)
    _create(client, product_payload, name="Jacquard Loom")

    response = client.get(BASE)

    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Analytical Engine", "Jacquard Loom"]


def test_update_product(client, product_payload):
    created = _create(client, product_payload)
    replacement = {**product_payload, "product_id": created["product_id"], "price": 10.5}

    response = client.put(BASE, json=replacement)

    assert response.status_code == 200
    assert Decimal(str(response.json()["price"])) == Decimal("10.50")
    assert response.json()["product_id"] == created["product_id"]


def test_update_unknown_product_returns_404(client, product_payload):
    response = client.put(BASE, json={**product_payload, "product_id": 5})
    assert response.status_code == 404


def test_delete_product(client, product_payload):
    created = _create(client, product_payload)

    response = client.delete(f"{BASE}/{created['product_id']}")

    assert response.status_code == 200
    assert response.json()["name"] == "Analytical Engine"
    assert client.get(BASE).json() == []
    assert client.delete(f"{BASE}/{created['product_id']}").status_code == 404


def test_search_products_by_name_description_and_category(client, product_payload):
    engine = _create(client, product_payload)
    loom = _create(client, product_payload, name="Jacquard Loom",
                   description="Punched-card weaving", category="textiles")

    by_category = client.get(f"{BASE}/q/textiles")
    by_description = client.get(f"{BASE}/q/Punched")
    by_name = client.get(f"{BASE}/q/Engine")

    assert [p["product_id"] for p in by_category.json()] == [loom["product_id"]]
    assert [p["product_id"] for p in by_description.json()] == [loom["product_id"]]
    assert [p["product_id"] for p in by_name.json()] == [engine["product_id"]]


def test_search_products_without_match(client, product_payload):
    _create(client, product_payload)

    response = client.get(f"{BASE}/q/nothing-like-this")

    assert response.status_code == 404
    assert response.json()["message"] == "product not found!"
