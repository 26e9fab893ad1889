from junta_agua.app import models
from junta_agua.app.services.calculation_params import normalize_param_key


def _param(**overrides):
    payload = {
        "param_key": "Mora Percentage",
        "param_name": "Porcentaje de mora",
        "param_value": "10",
        "category": "mora",
    }
    payload.update(overrides)
    return payload


def test_normalize_param_key():
    assert normalize_param_key("  Multas  Reuniones ") == "multas_reuniones"
    assert normalize_param_key("jardin_amount") == "jardin_amount"


def test_create_and_lookup_param(client):
    response = client.post("/calculation-params", json=_param())
    assert response.status_code == 201, response.json()
    created = response.json()
    assert created["param_key"] == "mora_percentage"
    assert created["param_type"] == models.ParamType.NUMBER.value
    assert created["is_active"] is True

    duplicate = client.post("/calculation-params", json=_param(param_key="mora percentage"))
    assert duplicate.status_code == 400

    by_key = client.get("/calculation-params/by-key/Mora Percentage")
    assert by_key.status_code == 200
    assert by_key.json()["id"] == created["id"]
    assert client.get("/calculation-params/by-key/otro").status_code == 404


def test_param_values_are_checked_against_their_type(client):
    not_a_number = client.post("/calculation-params", json=_param(param_value="diez"))
    assert not_a_number.status_code == 400

    infinite = client.post("/calculation-params", json=_param(param_value="Infinity"))
    assert infinite.status_code == 400

    bad_boolean = client.post(
        "/calculation-params",
        json=_param(param_key="cobrar_jardin", param_type="boolean", param_value="si"),
    )
    assert bad_boolean.status_code == 400

    good_boolean = client.post(
        "/calculation-params",
        json=_param(param_key="cobrar_jardin", param_type="boolean", param_value="TRUE"),
    )
    assert good_boolean.status_code == 201

    created = client.post("/calculation-params", json=_param()).json()
    retyped = client.put(f"/calculation-params/{created['id']}", json={"param_type": "boolean"})
    assert retyped.status_code == 400
    formula = client.put(
        f"/calculation-params/{created['id']}",
        json={"param_type": "formula", "param_value": "deuda * 0.1"},
    )
    assert formula.status_code == 200
    assert formula.json()["param_value"] == "deuda * 0.1"


def test_list_toggle_and_delete_params(client):
    mora = client.post("/calculation-params", json=_param()).json()
    client.post(
        "/calculation-params",
        json=_param(param_key="multas_mingas", param_name="Multa minga", category="multas"),
    )

    assert len(client.get("/calculation-params").json()) == 2
    multas = client.get("/calculation-params", params={"category": "multas"}).json()
    assert [item["param_key"] for item in multas] == ["multas_mingas"]

    toggled = client.post(f"/calculation-params/{mora['id']}/toggle-active")
    assert toggled.status_code == 200
    assert toggled.json()["is_active"] is False
    active = client.get("/calculation-params", params={"active_only": True}).json()
    assert [item["param_key"] for item in active] == ["multas_mingas"]

    assert client.delete(f"/calculation-params/{mora['id']}").status_code == 204
    assert client.get(f"/calculation-params/{mora['id']}").status_code == 404
