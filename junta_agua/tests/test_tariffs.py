from decimal import Decimal

from junta_agua.app import models


def test_create_update_and_delete_tariff(client):
    payload = {
        "name": "Cargo fijo",
        "min_consumption": 0,
        "max_consumption": 15,
        "fixed_charge": "2.00",
    }
    response = client.post("/tariffs", json=payload)
    assert response.status_code == 201, response.json()
    created = response.json()
    assert created["name"] == "Cargo fijo"
    assert Decimal(str(created["fixed_charge"])) == Decimal("2.00")
    assert created["order_index"] == 0
    assert created["status"] == models.TariffStatus.ACTIVE.value

    second = client.post(
        "/tariffs",
        json={"name": "Exceso", "min_consumption": 16, "price_per_unit": "0.40"},
    )
    assert second.status_code == 201
    assert second.json()["order_index"] == 1
    assert second.json()["max_consumption"] is None

    tariff_id = created["id"]
    update_response = client.put(
        f"/tariffs/{tariff_id}",
        json={"fixed_charge": "2.50", "status": models.TariffStatus.INACTIVE.value},
    )
    assert update_response.status_code == 200
    updated = update_response.json()
    assert Decimal(str(updated["fixed_charge"])) == Decimal("2.50")
    assert updated["status"] == models.TariffStatus.INACTIVE.value

    active_only = client.get("/tariffs", params={"include_inactive": False})
    assert [item["name"] for item in active_only.json()["items"]] == ["Exceso"]

    delete_response = client.delete(f"/tariffs/{tariff_id}")
    assert delete_response.status_code == 204
    assert client.get(f"/tariffs/{tariff_id}").status_code == 404


def test_create_tariff_rejects_invalid_bands(client):
    invalid_range = client.post(
        "/tariffs",
        json={"name": "R1", "min_consumption": 20, "max_consumption": 16, "price_per_unit": "0.2"},
    )
    assert invalid_range.status_code == 400
    assert invalid_range.json()["detail"] == "El consumo máximo debe ser mayor al mínimo"

    no_price = client.post("/tariffs", json={"name": "Vacía", "min_consumption": 0})
    assert no_price.status_code == 400
    assert no_price.json()["detail"] == "Debe especificar precio por unidad o cargo fijo"

    blank_name = client.post(
        "/tariffs", json={"name": "   ", "min_consumption": 0, "fixed_charge": "1"}
    )
    assert blank_name.status_code == 400
    assert blank_name.json()["detail"] == "El nombre de la tarifa es requerido"

    negative = client.post(
        "/tariffs", json={"name": "R1", "min_consumption": -1, "price_per_unit": "0.2"}
    )
    assert negative.status_code == 422


def test_update_tariff_validates_merged_values(client, seed_basic_data):
    tariff = seed_basic_data["tariffs"][1]

    response = client.put(f"/tariffs/{tariff.id}", json={"max_consumption": 10})

    assert response.status_code == 400
    assert client.put("/tariffs/9999", json={"name": "X"}).status_code == 404


def test_preview_prices_consumption_with_active_catalog(client, seed_basic_data):
    response = client.get("/tariffs/preview", params={"consumption": 30})

    assert response.status_code == 200, response.json()
    data = response.json()
    assert Decimal(str(data["base_amount"])) == Decimal("2.00")
    assert Decimal(str(data["range_16_20_amount"])) == Decimal("1.00")
    assert Decimal(str(data["range_21_25_amount"])) == Decimal("1.50")
    assert Decimal(str(data["range_26_plus_amount"])) == Decimal("2.50")
    assert Decimal(str(data["tariff_total"])) == Decimal("7.00")
    assert [line["name"] for line in data["breakdown"]] == ["Básico", "16-20", "21-25", "26+"]
