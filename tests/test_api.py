import io

from tests.sheets import make_xlsx


def _upload(client, template_id, payload, filename="people.xlsx", query=""):
    return client.post(
        f"/api/v1/templates/{template_id}/import{query}",
        data={"file": (io.BytesIO(payload), filename)},
        content_type="multipart/form-data",
    )


def _make_people(client):
    tpl = client.post("/api/v1/templates", json={"name": "People"}).get_json()
    for col in (
        {"name": "Name", "data_type": "string", "required": True},
        {"name": "Age", "data_type": "number"},
        {"name": "Active", "data_type": "boolean"},
    ):
        assert client.post(f"/api/v1/templates/{tpl['id']}/columns", json=col).status_code == 201
    return tpl["id"]


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_template_crud(client):
    tid = _make_people(client)

    body = client.get(f"/api/v1/templates/{tid}").get_json()
    assert [c["name"] for c in body["columns"]] == ["Name", "Age", "Active"]

    assert client.post("/api/v1/templates", json={"name": "People"}).status_code == 400
    assert client.get("/api/v1/templates/999").status_code == 404

    resp = client.delete(f"/api/v1/templates/{tid}/columns/2")
    assert [c["name"] for c in resp.get_json()["columns"]] == ["Name", "Active"]


def test_import_and_list_formatted(client):
    tid = _make_people(client)
    payload = make_xlsx([["Name", "Age", "Active"], ["Ann", 75000, True]])

    resp = _upload(client, tid, payload)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["processed_count"] == 1

    raw = client.get(f"/api/v1/templates/{tid}/records").get_json()
    assert raw["records"][0]["values"] == {"Name": "Ann", "Age": "75000", "Active": "true"}

    shown = client.get(f"/api/v1/templates/{tid}/records?formatted=1").get_json()
    assert shown["records"][0]["values"] == {"Name": "Ann", "Age": "75,000", "Active": "Yes"}


def test_failed_import_is_422(client):
    tid = _make_people(client)
    payload = make_xlsx([["Name", "Age"], ["Ann", "lots"]])

    resp = _upload(client, tid, payload)
    assert resp.status_code == 422
    body = resp.get_json()
    assert body["success"] is False
    assert body["errors"][0]["column"] == "Age"

    listing = client.get(f"/api/v1/templates/{tid}/records").get_json()
    assert listing["total"] == 0


def test_upload_validation(client):
    tid = _make_people(client)

    assert client.post(f"/api/v1/templates/{tid}/import").status_code == 400
    assert _upload(client, tid, b"x", filename="notes.txt").status_code == 400
    assert _upload(client, 999, make_xlsx([["Name"]])).status_code == 404
