import json

import pytest
from fastapi.testclient import TestClient

from quote_tool.api.main import create_app
from quote_tool.config.settings import Settings


@pytest.fixture
def client(tmp_path):
    return TestClient(create_app(Settings.load(data_dir=tmp_path)))


def sqft_item(**overrides):
    item = {"id": "i1", "type": "Banner", "unitType": "sqft", "width_ft": 4, "height_ft": 2,
            "qty": 1, "grommets": 10}
    item.update(overrides)
    return item


def test_root(client):
    assert client.get("/").json()["status"] == "online"


def test_price_item(client):
    resp = client.post("/pricing/item", json=sqft_item())
    assert resp.status_code == 200
    assert resp.json() == {"id": "i1", "subtotal": 69.0}


def test_price_unsaved_document(client):
    doc = {
        "items": [sqft_item(qty=2)],
        "job": {"hours": 2, "hourlyRate": 75, "taxInstall": False},
        "taxRate": 0.1,
        "discount": 10,
        "discountMode": "percent",
    }
    resp = client.post("/pricing/totals", json=doc)
    assert resp.status_code == 200
    totals = resp.json()
    assert totals["itemsSubtotal"] == 138.0
    assert totals["installTotal"] == 150.0
    assert totals["discount"] == pytest.approx(28.8)
    assert totals["tax"] == pytest.approx(10.92)
    assert totals["total"] == pytest.approx(270.12)


def test_trace(client):
    resp = client.post("/pricing/trace", json={"items": [sqft_item(type="Unknown")]})
    body = resp.json()
    assert body["totals"]["itemsSubtotal"] == 25.0
    assert body["warnings"]
    assert "Minimum" in body["lines"][0]["trace"]


def test_document_lifecycle(client):
    created = client.post("/documents").json()
    assert created["number"].startswith("LVQ-")
    doc_id = created["id"]

    created["items"] = [sqft_item()]
    saved = client.put(f"/documents/{doc_id}", json=created).json()
    assert saved["items"][0]["type"] == "Banner"

    totals = client.get(f"/documents/{doc_id}/totals").json()
    assert totals["itemsSubtotal"] == 69.0

    status = client.post(f"/documents/{doc_id}/status", json={"status": "Approved"})
    assert status.json()["status"] == "Approved"

    invoice = client.post(f"/documents/{doc_id}/convert").json()
    assert invoice["kind"] == "Invoice"
    assert invoice["number"].startswith("LVI-")
    assert invoice["status"] == "Invoiced"

    assert [d["id"] for d in client.get("/documents").json()] == [doc_id]
    assert client.delete(f"/documents/{doc_id}").status_code == 200
    assert client.get(f"/documents/{doc_id}").status_code == 404


def test_bad_status(client):
    doc_id = client.post("/documents").json()["id"]
    assert client.post(f"/documents/{doc_id}/status", json={"status": "Lost"}).status_code == 400
    assert client.post("/documents/missing/status", json={"status": "Paid"}).status_code == 404


def test_import_and_export(client):
    assert client.get("/documents/export").status_code == 404

    bad = client.post("/documents/import", json={"content": json.dumps({"kind": "Quote"})})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Not a valid document"

    doc = {"id": "abc1234", "kind": "Quote", "number": "LVQ-2026-0042", "status": "Quoted",
           "items": [sqft_item()]}
    assert client.post("/documents/import", json={"content": json.dumps(doc)}).status_code == 200

    exported = json.loads(client.get("/documents/export").text)
    assert [d["number"] for d in exported] == ["LVQ-2026-0042"]


def test_pipeline(client):
    doc = {"id": "p1", "status": "Quoted", "items": [sqft_item()]}
    client.post("/documents/import", json={"content": json.dumps(doc)})

    rows = {r["status"]: r for r in client.get("/pipeline").json()}
    assert rows["Quoted"]["count"] == 1
    assert rows["Quoted"]["value"] == 69.0
    assert rows["Quoted"]["pct"] == 100
    assert rows["Draft"]["count"] == 0


def test_price_book_edit_changes_pricing(client):
    book = client.get("/price-book").json()
    book["sqft"]["Banner"] = 10
    resp = client.put("/price-book", json=book)
    assert resp.status_code == 200

    assert client.post("/pricing/item", json=sqft_item()).json()["subtotal"] == 85.0


def test_price_book_rejects_bad_mode(client):
    book = client.get("/price-book").json()
    book["document"]["discount_mode"] = "half"
    assert client.put("/price-book", json=book).status_code == 400


def test_partial_price_book_keeps_default_rates(client):
    defaults = client.get("/price-book").json()
    resp = client.put("/price-book", json={"options": {"lamination_per_sqft": 5, "grommet_each": 1}})
    assert resp.status_code == 200

    book = resp.json()
    assert book["sqft"] == defaults["sqft"]
    assert book["unit"] == defaults["unit"]
    assert book["options"]["grommet_each"] == 1.0
    # 4x2 banner at $8/ft² plus 10 grommets at $1
    assert client.post("/pricing/item", json=sqft_item()).json()["subtotal"] == 74.0
