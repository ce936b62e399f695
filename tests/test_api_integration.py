from unittest.mock import AsyncMock

from apps.api.main import SECURITY_HEADERS, app, get_store
from linksaver.core.exceptions import FetchError, StorageError
from linksaver.db import LinkStore


def test_add_get_search_and_delete(client, fake_loader) -> None:
    resp = client.post("/", json={"url": "https://example.com/"})
    assert resp.status_code == 201
    data = resp.json()
    assert resp.headers["location"] == f"/{data['id']}"
    assert data["title"] == "Example Domain"
    assert data["description"] == "Illustrative example"
    assert data["is_note"] is False
    assert data["screenshot"] is None
    assert fake_loader.calls == ["https://example.com/"]

    link_id = data["id"]
    resp = client.get(f"/{link_id}")
    assert resp.status_code == 200
    assert resp.json()["url"] == "https://example.com/"

    resp = client.get("/", params={"s": "illustrative"})
    assert [item["id"] for item in resp.json()] == [link_id]
    assert client.get("/", params={"s": "nothing"}).json() == []

    resp = client.delete(f"/{link_id}")
    assert resp.status_code == 204
    assert client.get(f"/{link_id}").status_code == 404
    assert client.get("/").json() == []


def test_list_is_newest_first(client) -> None:
    first = client.post("/", json={"url": "https://a.example/"}).json()["id"]
    second = client.post("/", json={"url": "https://b.example/"}).json()["id"]
    assert [item["id"] for item in client.get("/").json()] == [second, first]


def test_duplicate_is_conflict(client) -> None:
    assert client.post("/", json={"url": "https://example.com/"}).status_code == 201
    resp = client.post("/", json={"url": "https://example.com/"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "URL already exists"


def test_forbidden_url_is_bad_request(client, fake_loader) -> None:
    resp = client.post("/", json={"url": "http://169.254.169.254/latest/meta-data/"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid URL format. Must be a valid HTTP/HTTPS URL"
    assert fake_loader.calls == []


def test_fetch_failure_is_bad_request(client, fake_loader) -> None:
    fake_loader.error = FetchError("no title found in HTML")
    resp = client.post("/", json={"url": "https://example.com/"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Failed to load URL: no title found in HTML"
    assert client.get("/").json() == []


def test_note_roundtrip(client, fake_loader) -> None:
    resp = client.post("/", json={"note_title": "Groceries", "note_text": "milk, eggs, bread"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["is_note"] is True
    assert data["url"].startswith("note:")
    assert data["description"] == "milk, eggs, bread"
    assert fake_loader.calls == []

    found = client.get("/", params={"s": "eggs"}).json()
    assert [item["id"] for item in found] == [data["id"]]


def test_note_validation(client) -> None:
    resp = client.post("/", json={"note_title": "", "note_text": "text"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Note title is required"


def test_edit_link(client) -> None:
    link_id = client.post("/", json={"url": "https://example.com/"}).json()["id"]

    resp = client.patch(f"/{link_id}", json={"title": "Renamed", "description": ""})
    assert resp.status_code == 200
    # an empty description is shown as the title
    assert resp.json()["title"] == "Renamed"
    assert resp.json()["description"] == "Renamed"
    assert [i["id"] for i in client.get("/", params={"s": "renamed"}).json()] == [link_id]

    assert client.patch(f"/{link_id}", json={"title": " "}).status_code == 400
    assert client.patch("/9999", json={"title": "x"}).status_code == 404


def test_unknown_ids(client) -> None:
    assert client.get("/9999").status_code == 404
    assert client.delete("/9999").status_code == 404
    assert client.get("/not-a-number").status_code == 422


def test_storage_failure_is_opaque(client) -> None:
    store = AsyncMock(spec=LinkStore)
    store.get.side_effect = StorageError("get failed: disk I/O error")
    app.dependency_overrides[get_store] = lambda: store

    resp = client.get("/1")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Internal Server Error"


def test_security_headers_on_every_response(client) -> None:
    for resp in (client.get("/"), client.get("/9999")):
        for name, value in SECURITY_HEADERS.items():
            assert resp.headers[name] == value


def test_screenshots_hidden_without_browser(client) -> None:
    assert client.get("/screenshots/" + "a" * 64 + ".png").status_code == 404
    assert client.get("/screenshots/not-a-digest.png").status_code == 404


def test_healthz(client) -> None:
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
