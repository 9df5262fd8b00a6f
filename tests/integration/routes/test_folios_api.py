"""
Integration tests for the folio endpoints.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

MANAGER = {"X-User-Id": "user-manager", "X-User-Role": "MANAGER"}
RECEPTIONIST = {"X-User-Id": "user-desk", "X-User-Role": "RECEPTIONIST"}


@pytest.fixture
def folio_url(client: TestClient, seeded: dict[str, Any]) -> str:
    base = f"/properties/{seeded['property_id']}/stays"
    response = client.post(
        base,
        json={
            "room_id": seeded["r1"],
            "start_date": "2024-06-01",
            "end_date": "2024-06-04",
            "guest_name": "Folio Guest",
        },
        headers=MANAGER,
    )
    return f"{base}/{response.json()['reservation']['id']}/folio"


@pytest.mark.integration
def test_room_charge_payment_reversal_flow(client: TestClient, folio_url: str) -> None:
    charge = client.post(f"{folio_url}/room-charges", headers=MANAGER)
    assert charge.status_code == 201
    assert charge.json()["amount_cents"] == 30000

    payment = client.post(
        f"{folio_url}/payments",
        json={"amount_cents": 30000, "payment_method": "CARD", "reference": "A1"},
        headers=MANAGER,
    )
    assert payment.status_code == 201
    assert client.get(folio_url, headers=MANAGER).json()["payment_status"] == "PAID"

    line_id = payment.json()["id"]
    reversal = client.post(f"{folio_url}/lines/{line_id}/reversal", headers=MANAGER)
    assert reversal.status_code == 201
    assert reversal.json()["amount_cents"] == 30000

    again = client.post(f"{folio_url}/lines/{line_id}/reversal", headers=MANAGER)
    assert again.status_code == 409
    assert again.json()["detail"]["code"] == "already_reversed"

    summary = client.get(folio_url, headers=MANAGER).json()
    assert summary["payment_status"] == "UNPAID"
    assert summary["balance_cents"] == 30000

    lines = client.get(f"{folio_url}/lines", headers=RECEPTIONIST)
    assert [line["type"] for line in lines.json()] == ["CHARGE", "PAYMENT", "REVERSAL"]


@pytest.mark.integration
def test_receptionist_can_charge_but_not_take_payments(client: TestClient, folio_url: str) -> None:
    charge = client.post(
        f"{folio_url}/charges",
        json={"amount_cents": 1200, "quantity": 2, "charge_type": "FEE", "description": "Parking"},
        headers=RECEPTIONIST,
    )
    payment = client.post(f"{folio_url}/payments", json={"amount_cents": 100}, headers=RECEPTIONIST)
    room = client.post(f"{folio_url}/room-charges", headers=RECEPTIONIST)

    assert charge.status_code == 201
    assert charge.json()["amount_cents"] == 2400
    assert charge.json()["description"] == "Parking (x2)"
    assert payment.status_code == 403
    assert room.status_code == 403


@pytest.mark.integration
def test_invalid_amounts_are_rejected(client: TestClient, folio_url: str) -> None:
    zero = client.post(f"{folio_url}/charges", json={"amount_cents": 0}, headers=MANAGER)
    fractional = client.post(f"{folio_url}/payments", json={"amount_cents": 10.5}, headers=MANAGER)

    assert zero.status_code == 422
    assert fractional.status_code == 422


@pytest.mark.integration
def test_closed_folio_returns_409(client: TestClient, folio_url: str) -> None:
    closed = client.post(f"{folio_url}/close", headers=MANAGER)
    assert closed.status_code == 200
    assert closed.json()["status"] == "CLOSED"

    response = client.post(f"{folio_url}/charges", json={"amount_cents": 500}, headers=MANAGER)

    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "Folio is closed"


@pytest.mark.integration
def test_unknown_line_returns_404(client: TestClient, folio_url: str) -> None:
    response = client.post(f"{folio_url}/lines/nope/reversal", headers=MANAGER)

    assert response.status_code == 404
