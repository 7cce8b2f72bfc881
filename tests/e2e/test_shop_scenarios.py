"""
E2E tests for everyday shop scenarios, driven only through the HTTP API.

Scenarios:
- regular: repeat customer who pays in installments and settles well
- defaulter: settles late and is rated untrusted, later debts show it
- duplicate: debt entered twice by mistake and soft-deleted
- lookup: cashier searches before deciding to extend credit
"""

import pytest
from fastapi.testclient import TestClient
from conftest import PHOTO_DATA_URL


def open_debt(client: TestClient, amount: str, **client_fields) -> dict:
    response = client.post("/v1/debts", json={"amount": amount, **client_fields})
    assert response.status_code == 201, response.text
    return response.json()


def pay(client: TestClient, debt_id: int, amount: str, rating: str | None = None) -> dict:
    body = {"paid_amount": amount, "comment": "cash"}
    if rating:
        body["rating"] = rating
    response = client.post(f"/v1/debts/{debt_id}/payments", json=body)
    assert response.status_code == 200, response.text
    return response.json()


NEW_CLIENT = {
    "fullname": "Nurlan Abdyldaev",
    "phone": "+996555123456",
    "address": "Bishkek, Chui 45",
    "photo_data": PHOTO_DATA_URL,
}


@pytest.mark.integration
def test_regular_customer_installments(client: TestClient):
    """
    regular: three installments, then a second debt on the same profile
    Expected: balance reaches zero exactly, reputation good
    """
    debt = open_debt(client, "1200.00", **NEW_CLIENT)

    pay(client, debt["id"], "400.00")
    pay(client, debt["id"], "400.00")
    final = pay(client, debt["id"], "400.00", rating="good")

    assert final["debt"]["status"] == "paid"
    assert final["payment"]["remaining_amount"] == "0.00"

    second = open_debt(client, "80.00", client_id=debt["client_id"])
    assert second["client"]["reputation"] == "good"
    assert second["client"]["photo"] == debt["client"]["photo"]


@pytest.mark.integration
def test_defaulter_is_flagged_on_lookup(client: TestClient):
    """
    defaulter: settles with rating untrusted
    Expected: the next search shows the reputation and no active debt
    """
    debt = open_debt(client, "300.00", **NEW_CLIENT)
    pay(client, debt["id"], "300.00", rating="untrusted")

    hits = client.get("/v1/clients/search", params={"q": "nurlan"}).json()

    assert len(hits) == 1
    assert hits[0]["reputation"] == "untrusted"
    assert hits[0]["has_active_debt"] is False


@pytest.mark.integration
def test_duplicate_entry_is_soft_deleted(client: TestClient):
    """
    duplicate: the same purchase recorded twice
    Expected: one copy moves to the deleted listing with its reason
    """
    original = open_debt(client, "150.00", **NEW_CLIENT)
    duplicate = open_debt(client, "150.00", client_id=original["client_id"])

    response = client.post(f"/v1/debts/{duplicate['id']}/delete", json={"comment": "duplicate entry"})
    assert response.status_code == 200

    active = client.get("/v1/debts", params={"status": "active"}).json()
    deleted = client.get("/v1/debts", params={"status": "deleted"}).json()
    assert [d["id"] for d in active["data"]] == [original["id"]]
    assert [d["id"] for d in deleted["data"]] == [duplicate["id"]]
    assert deleted["data"][0]["delete_comment"] == "duplicate entry"


@pytest.mark.integration
def test_lookup_before_extending_credit(client: TestClient):
    """
    lookup: two namesakes, one still owing
    Expected: both listed, only the one with an open debt flagged
    """
    owing = open_debt(client, "50.00", **NEW_CLIENT)
    settled = open_debt(client, "20.00", **{**NEW_CLIENT, "phone": "+996700999888"})
    pay(client, settled["id"], "20.00", rating="good")

    hits = client.get("/v1/clients/search", params={"q": "Abdyldaev"}).json()
    flags = {h["id"]: h["has_active_debt"] for h in hits}

    assert flags == {owing["client_id"]: True, settled["client_id"]: False}
