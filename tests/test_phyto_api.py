import json

import pytest

from conftest import OTHER_TENANT_ID, TENANT_ID


def _specimen(name: str, portion: str = "1", **overrides) -> dict:
    body = {
        "portion": portion,
        "height": 5.0,
        "cap1": 30.0,
        "cap2": 12.0,
        "registerDate": "2024-03-01T10:00:00Z",
        "scientificName": name,
    }
    body.update(overrides)
    return body


def _payload(*specimens, **overrides) -> dict:
    body = {
        "title": "T",
        "initialDate": "2024-03-01T00:00:00Z",
        "portionQuantity": 1,
        "portionArea": 1,
        "totalArea": 10,
        "sampledArea": 9,
        "projectId": "P1",
        "specimens": list(specimens),
    }
    body.update(overrides)
    return body


@pytest.fixture
def analysis_id(client):
    resp = client.post(
        "/api/v1/phyto-analyses",
        json=_payload(_specimen("Handroanthus albus", "1"), _specimen("Cedrela fissilis", "2")),
    )
    assert resp.status_code == 201
    return resp.json()["id"]


def test_create_aggregate(client, uow):
    resp = client.post(
        "/api/v1/phyto-analyses",
        json=_payload(_specimen("Handroanthus albus"), _specimen("Cedrela fissilis")),
    )

    assert resp.status_code == 201
    analysis_id = resp.json()["id"]
    assert uow.count("phyto_analyses") == 1
    specimens = list(uow.store.table("specimens").values())
    assert len(specimens) == 2
    assert {s["phyto_analysis_id"] for s in specimens} == {analysis_id}
    assert {s["species_id"] for s in specimens} == {"sp-1", "sp-2"}


def test_unknown_species_rolls_back_everything(client, uow):
    resp = client.post(
        "/api/v1/phyto-analyses",
        json=_payload(_specimen("Handroanthus albus"), _specimen("Nonexistent plant")),
    )

    assert resp.status_code == 404
    assert resp.json()["error"] == {
        "code": "not_found",
        "message": "species not found with scientific name: Nonexistent plant",
    }
    assert uow.count("phyto_analyses") == 0
    assert uow.count("specimens") == 0


def test_project_of_another_tenant_is_not_found(client, uow):
    resp = client.post("/api/v1/phyto-analyses", json=_payload(projectId="P2"))

    assert resp.status_code == 404
    assert uow.count("phyto_analyses") == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "  "},
        {"projectId": ""},
        {"portionQuantity": 0},
        {"portionArea": -1},
        {"totalArea": 0},
        {"sampledArea": 0},
        {"initialDate": None},
    ],
)
def test_invalid_analysis_fields(client, uow, overrides):
    resp = client.post("/api/v1/phyto-analyses", json=_payload(**overrides))

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "invalid"
    assert uow.commits == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"portion": ""},
        {"height": 0},
        {"cap1": 0},
        {"cap3": -2},
        {"registerDate": None},
        {"scientificName": " "},
    ],
)
def test_invalid_specimen_fields(client, uow, overrides):
    resp = client.post("/api/v1/phyto-analyses", json=_payload(_specimen("Handroanthus albus", **overrides)))

    assert resp.status_code == 422
    assert uow.count("phyto_analyses") == 0


def test_get_with_specimens_and_indicators(client, analysis_id):
    resp = client.get(f"/api/v1/phyto-analyses/{analysis_id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == analysis_id
    assert body["projectId"] == "P1"
    assert body["project"] == {"id": "P1", "title": "Reforestation"}
    assert body["individualsCount"] == 2
    assert body["speciesCount"] == 2
    assert [s["scientificName"] for s in body["specimens"]] == ["Handroanthus albus", "Cedrela fissilis"]
    assert body["specimens"][0]["volumeM3"] > 0
    indicators = body["indicators"]
    assert indicators["plotsCount"] == 1
    assert indicators["shannonIndex"] > 0
    assert len(indicators["collectorCurve"]) == 3


def test_other_tenant_cannot_read(client, analysis_id):
    resp = client.get(f"/api/v1/phyto-analyses/{analysis_id}", tenant_id=OTHER_TENANT_ID)

    assert resp.status_code == 404


def test_list_filters_and_pages(client, analysis_id):
    client.post("/api/v1/phyto-analyses", json=_payload(title="Second"))

    body = client.get("/api/v1/phyto-analyses", params={"projectId": "P1", "limit": 1}).json()
    assert body["count"] == 1
    assert body["limit"] == 1
    assert body["offset"] == 0

    everything = client.get("/api/v1/phyto-analyses").json()
    assert everything["count"] == 2
    assert everything["limit"] == 50

    assert client.get("/api/v1/phyto-analyses", tenant_id=OTHER_TENANT_ID).json()["count"] == 0


def test_list_by_project(client, analysis_id):
    body = client.get("/api/v1/phyto-analyses/project/P1").json()

    assert [item["id"] for item in body["items"]] == [analysis_id]


def test_list_by_enterprise(client, analysis_id):
    assert client.get(f"/api/v1/phyto-analyses/enterprise/{TENANT_ID}").json()["count"] == 1

    resp = client.get(f"/api/v1/phyto-analyses/enterprise/{OTHER_TENANT_ID}")
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "forbidden"


def test_list_specimens(client, analysis_id):
    body = client.get(f"/api/v1/phyto-analyses/{analysis_id}/specimens").json()

    assert body["count"] == 2
    assert {s["phytoAnalysisId"] for s in body["items"]} == {analysis_id}


def test_update_keeps_project(client, uow, analysis_id):
    resp = client.put(
        f"/api/v1/phyto-analyses/{analysis_id}",
        json={
            "title": "Renamed",
            "initialDate": "2024-04-01T00:00:00Z",
            "portionQuantity": 3,
            "portionArea": 2,
            "totalArea": 20,
            "sampledArea": 6,
            "description": "",
            "projectId": "P2",
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Renamed"
    assert body["portionQuantity"] == 3
    assert body["projectId"] == "P1"
    assert body["description"] is None
    assert uow.store.table("phyto_analyses")[analysis_id]["project_id"] == "P1"


def test_update_revalidates(client, analysis_id):
    resp = client.put(
        f"/api/v1/phyto-analyses/{analysis_id}",
        json={"title": "x", "initialDate": "2024-04-01T00:00:00Z", "portionQuantity": 0,
              "portionArea": 1, "totalArea": 1, "sampledArea": 1},
    )

    assert resp.status_code == 422


def test_update_missing(client):
    resp = client.put(
        "/api/v1/phyto-analyses/missing",
        json={"title": "x", "initialDate": "2024-04-01T00:00:00Z", "portionQuantity": 1,
              "portionArea": 1, "totalArea": 1, "sampledArea": 1},
    )

    assert resp.status_code == 404


def test_delete_cascades(client, uow, analysis_id):
    resp = client.delete(f"/api/v1/phyto-analyses/{analysis_id}")

    assert resp.status_code == 204
    assert resp.content == b""
    assert uow.count("phyto_analyses") == 0
    assert uow.count("specimens") == 0

    assert client.delete(f"/api/v1/phyto-analyses/{analysis_id}").status_code == 404


def test_other_tenant_cannot_delete(client, uow, analysis_id):
    resp = client.delete(f"/api/v1/phyto-analyses/{analysis_id}", tenant_id=OTHER_TENANT_ID)

    assert resp.status_code == 404
    assert uow.count("phyto_analyses") == 1


def _post_json(client, url: str, body: dict):
    # Python's encoder writes NaN/Infinity literals, which the server's JSON parser accepts.
    return client.post(url, content=json.dumps(body), headers={"Content-Type": "application/json"})


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
@pytest.mark.parametrize("field", ["portionArea", "totalArea", "sampledArea"])
def test_non_finite_areas_are_rejected(client, uow, field, value):
    resp = _post_json(client, "/api/v1/phyto-analyses", _payload(**{field: value}))

    assert resp.status_code == 422
    assert resp.json()["error"] == {"code": "invalid", "message": "invalid phyto analysis data"}
    assert uow.count("phyto_analyses") == 0


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
@pytest.mark.parametrize("field", ["height", "cap1", "cap2"])
def test_non_finite_measurements_are_rejected(client, uow, field, value):
    body = _payload(_specimen("Handroanthus albus", **{field: value}))

    resp = _post_json(client, "/api/v1/phyto-analyses", body)

    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "invalid"
    assert uow.count("phyto_analyses") == 0
    assert uow.count("specimens") == 0


def test_non_finite_area_on_update_is_rejected(client, uow, analysis_id):
    body = {"title": "x", "initialDate": "2024-04-01T00:00:00Z", "portionQuantity": 1,
            "portionArea": float("nan"), "totalArea": 1, "sampledArea": 1}

    resp = client.put(f"/api/v1/phyto-analyses/{analysis_id}", content=json.dumps(body),
                      headers={"Content-Type": "application/json"})

    assert resp.status_code == 422
    assert uow.store.table("phyto_analyses")[analysis_id]["portion_area"] == 1
