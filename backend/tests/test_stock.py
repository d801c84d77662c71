# Overview: Pytest coverage for stock CRUD endpoints and validation.

"""
Stock API Tests

- Create with user-supplied ids; duplicates conflict
- Quantities are stored as entered (balance is never derived)
- Legacy Rack_no / Size keys are accepted
- Updates cannot change the id; missing items answer 404
"""

import pytest

from tcoffice.extensions import db
from tcoffice.models import StockItem
from tcoffice.validation import ValidationError, enforce_rules_stock_item


def new_item(**overrides):
    item = {
        "id": 101,
        "name": "Cotton Shirt",
        "colour": "Blue",
        "total_quantity": 50,
        "balance_quantity": 20,
        "rack_no": "A-3",
        "size": "M",
        "bulk_retail": "retail",
    }
    item.update(overrides)
    return item


class TestCreateStock:
    def test_create_and_list(self, auth_client):
        response = auth_client.post("/stock", json=new_item())

        assert response.status_code == 201
        assert response.json["id"] == 101
        assert response.json["balance_quantity"] == 20

        listing = auth_client.get("/stock").json
        assert listing["count"] == 1
        assert listing["items"][0]["name"] == "Cotton Shirt"

    def test_balance_not_derived_from_total(self, auth_client):
        response = auth_client.post("/stock", json=new_item(total_quantity=10, balance_quantity=999))
        assert response.status_code == 201
        assert response.json["balance_quantity"] == 999

    def test_defaults(self, auth_client):
        response = auth_client.post("/stock", json={
            "id": 7, "name": "Scarf", "colour": "Red", "total_quantity": 3,
        })
        assert response.status_code == 201
        assert response.json["balance_quantity"] == 0
        assert response.json["bulk_retail"] == "bulk"
        assert response.json["rack_no"] is None

    def test_legacy_keys(self, auth_client):
        payload = new_item()
        payload.pop("rack_no")
        payload.pop("size")
        payload.update({"Rack_no": "B-1", "Size": "XL"})

        response = auth_client.post("/stock", json=payload)

        assert response.status_code == 201
        assert response.json["rack_no"] == "B-1"
        assert response.json["size"] == "XL"

    def test_duplicate_id_conflicts(self, auth_client):
        auth_client.post("/stock", json=new_item())
        response = auth_client.post("/stock", json=new_item(name="Other"))

        assert response.status_code == 409
        assert db.session.get(StockItem, 101).name == "Cotton Shirt"

    @pytest.mark.parametrize("overrides", [
        {"total_quantity": 0},
        {"total_quantity": -5},
        {"total_quantity": 2.5},
        {"balance_quantity": -1},
        {"name": "   "},
        {"id": 0},
        {"bulk_retail": "wholesale"},
        {"unexpected": "field"},
    ])
    def test_invalid_payloads(self, auth_client, overrides):
        response = auth_client.post("/stock", json=new_item(**overrides))
        assert response.status_code == 400
        assert db.session.query(StockItem).count() == 0

    @pytest.mark.parametrize("missing", ["id", "name", "colour", "total_quantity"])
    def test_required_fields(self, auth_client, missing):
        payload = new_item()
        payload.pop(missing)
        response = auth_client.post("/stock", json=payload)
        assert response.status_code == 400
        assert missing in response.json["error"]

    def test_bulk_retail_normalized(self, auth_client):
        response = auth_client.post("/stock", json=new_item(bulk_retail="Retail"))
        assert response.json["bulk_retail"] == "retail"


class TestUpdateStock:
    def test_update_fields(self, auth_client):
        auth_client.post("/stock", json=new_item())

        response = auth_client.put("/stock/101", json={"balance_quantity": 5, "colour": "Green"})

        assert response.status_code == 200
        assert response.json["balance_quantity"] == 5
        assert response.json["colour"] == "Green"
        assert response.json["total_quantity"] == 50
        assert response.json["updated_at"] is not None

    def test_echoed_item_accepted(self, auth_client):
        created = auth_client.post("/stock", json=new_item()).json
        created["name"] = "Linen Shirt"

        response = auth_client.put("/stock/101", json=created)

        assert response.status_code == 200
        assert response.json["name"] == "Linen Shirt"

    def test_id_is_immutable(self, auth_client):
        auth_client.post("/stock", json=new_item())

        response = auth_client.put("/stock/101", json={"id": 202, "name": "Moved"})

        assert response.status_code == 400
        assert db.session.get(StockItem, 202) is None

    def test_update_missing_item(self, auth_client):
        response = auth_client.put("/stock/999", json={"name": "Ghost"})
        assert response.status_code == 404

    def test_update_rejects_zero_total(self, auth_client):
        auth_client.post("/stock", json=new_item())
        assert auth_client.put("/stock/101", json={"total_quantity": 0}).status_code == 400


class TestReadDeleteStock:
    def test_get_single(self, auth_client):
        auth_client.post("/stock", json=new_item())
        assert auth_client.get("/stock/101").json["name"] == "Cotton Shirt"
        assert auth_client.get("/stock/5").status_code == 404

    def test_delete(self, auth_client):
        auth_client.post("/stock", json=new_item())

        response = auth_client.delete("/stock/101")

        assert response.status_code == 200
        assert response.json == {"ok": True}
        assert auth_client.get("/stock").json["count"] == 0

    def test_delete_missing(self, auth_client):
        assert auth_client.delete("/stock/404").status_code == 404

    def test_search(self, auth_client):
        auth_client.post("/stock", json=new_item())
        auth_client.post("/stock", json=new_item(id=102, name="Wool Sweater", rack_no="C-9", bulk_retail="bulk"))

        names = [i["name"] for i in auth_client.get("/stock", query_string={"q": "c-9"}).json["items"]]
        assert names == ["Wool Sweater"]


class TestStockRules:
    def test_creating_requires_positive_id(self):
        with pytest.raises(ValidationError):
            enforce_rules_stock_item({"id": -1, "total_quantity": 1}, creating=True)

    def test_patch_without_quantities_passes(self):
        patch = {"name": "x"}
        enforce_rules_stock_item(patch, creating=False)
        assert patch == {"name": "x"}
