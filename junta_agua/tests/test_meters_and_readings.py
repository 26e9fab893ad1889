from decimal import Decimal

from junta_agua.app import models


def test_create_and_update_meter(client):
    payload = {"code_meter": "M-010", "location": "Barrio Nuevo", "description": "Flores Juan"}
    response = client.post("/meters", json=payload)
    assert response.status_code == 201, response.json()
    assert response.json()["status"] == models.MeterStatus.ACTIVE.value

    duplicate = client.post("/meters", json=payload)
    assert duplicate.status_code == 400
    assert "M-010" in duplicate.json()["detail"]

    update = client.put("/meters/M-010", json={"status": models.MeterStatus.INACTIVE.value})
    assert update.status_code == 200
    assert update.json()["status"] == models.MeterStatus.INACTIVE.value
    assert update.json()["location"] == "Barrio Nuevo"

    assert client.get("/meters/M-404").status_code == 404


def test_list_meters_filters_by_status_and_search(client, seed_basic_data):
    inactive = client.get("/meters", params={"status": models.MeterStatus.INACTIVE.value})
    assert inactive.status_code == 200
    assert [item["code_meter"] for item in inactive.json()["items"]] == ["M-003"]

    search = client.get("/meters", params={"search": "mamani"})
    assert search.json()["total"] == 1
    assert search.json()["items"][0]["code_meter"] == "M-002"


def test_upsert_reading_creates_then_updates(client, seed_basic_data):
    response = client.put(
        "/readings", json={"meter_id": "M-002", "period": "junio  2025", "value": 72}
    )
    assert response.status_code == 201, response.json()
    created = response.json()
    assert created["period"] == "JUNIO 2025"
    assert Decimal(str(created["previous_reading"])) == Decimal("60")
    assert Decimal(str(created["consumption"])) == Decimal("12")

    update = client.put("/readings", json={"meter_id": "M-002", "period": "JUNIO 2025", "value": 75})
    assert update.status_code == 200
    assert update.json()["id"] == created["id"]
    assert Decimal(str(update.json()["consumption"])) == Decimal("15")


def test_upsert_reading_rejects_unknown_meter_and_negative_values(client, seed_basic_data):
    unknown = client.put("/readings", json={"meter_id": "M-404", "period": "MAYO 2025", "value": 1})
    assert unknown.status_code == 400

    negative = client.put("/readings", json={"meter_id": "M-001", "period": "MAYO 2025", "value": -5})
    assert negative.status_code == 422


def test_list_readings_for_period_includes_consumption(client, seed_basic_data):
    response = client.get("/readings", params={"period": "MAYO 2025"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    first = data["items"][0]
    assert first["meter_id"] == "M-001"
    assert Decimal(str(first["previous_reading"])) == Decimal("100")
    assert Decimal(str(first["consumption"])) == Decimal("30")


def test_previous_reading_falls_back_to_latest_value(client, seed_basic_data):
    response = client.get("/readings/M-001/previous", params={"period": "JUNIO 2025"})
    assert response.status_code == 200
    assert Decimal(str(response.json()["previous_reading"])) == Decimal("130")

    first_period = client.get("/readings/M-001/previous", params={"period": "ABRIL 2025"})
    assert first_period.json()["previous_reading"] is None


def test_meter_charges_are_upserted_per_period(client, seed_basic_data):
    first = client.put(
        "/meter-charges/debts", json={"meter_id": "M-002", "period": "mayo 2025", "amount": "4.00"}
    )
    assert first.status_code == 200, first.json()
    assert first.json()["period"] == "MAYO 2025"

    second = client.put(
        "/meter-charges/debts", json={"meter_id": "M-002", "period": "MAYO 2025", "amount": "6.00"}
    )
    assert second.json()["id"] == first.json()["id"]
    assert Decimal(str(second.json()["amount"])) == Decimal("6.00")

    debts = client.get("/meter-charges/debts/MAYO 2025")
    assert [item["meter_id"] for item in debts.json()] == ["M-001", "M-002"]

    garden = client.put(
        "/meter-charges/garden", json={"meter_id": "M-002", "period": "MAYO 2025", "amount": "2"}
    )
    assert garden.status_code == 200

    unknown = client.put(
        "/meter-charges/fines", json={"meter_id": "M-404", "period": "MAYO 2025"}
    )
    assert unknown.status_code == 400

    out_of_range = client.put(
        "/meter-charges/fines",
        json={"meter_id": "M-002", "period": "MAYO 2025", "mora_percentage": 150},
    )
    assert out_of_range.status_code == 422
