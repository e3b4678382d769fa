from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from lazyforms.extensions import db, get_coordinator
from lazyforms.models import EntryRecord


def create(client, **data):
    data.setdefault("value", "hello")
    data.setdefault("contextType", "all")
    return client.post("/api/entries", json=data)


def test_create_entry_success(client):
    """Test successful creation of a new entry."""
    response = create(client, value="alice", contextType="fieldOnly",
                      contextKey="https://a.com|/login|#user", label="User")
    assert response.status_code == 201
    data = response.get_json()
    assert data["value"] == "alice"
    assert data["label"] == "User"
    assert "id" in data and "createdAt" in data

    record = db.session.get(EntryRecord, data["id"])
    assert record is not None
    assert record.context_key == "https://a.com|/login|#user"


def test_create_all_entry_defaults_key(client):
    data = create(client).get_json()
    assert data["contextKey"] == "*"


@pytest.mark.parametrize("payload", [
    {"value": "x", "contextType": "bogus"},
    {"value": 5, "contextType": "all"},
    {"value": "x", "contextType": "url"},
    {"value": "x", "contextType": "url", "contextKey": "   "},
    {"value": "x", "contextType": "all", "shortcut": "Ctrl+Alt"},
    {"value": "x", "contextType": "all", "order": "first"},
])
def test_create_entry_validation(client, payload):
    response = client.post("/api/entries", json=payload)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_create_entry_missing_body(client):
    response = client.post("/api/entries", data="", content_type="application/json")
    assert response.status_code == 400


def test_create_entry_duplicate_shortcut(client):
    assert create(client, shortcut="Ctrl+Shift+1").status_code == 201
    response = create(client, shortcut="shift+ctrl+1")
    assert response.status_code == 409
    assert "already assigned" in response.get_json()["error"]


def test_create_entry_duplicate_id(client):
    assert create(client, id="fixed").status_code == 201
    assert create(client, id="fixed").status_code == 409


def test_create_entry_integrity_error(client):
    fake_integrity_error = IntegrityError("INSERT...", {}, "orig")
    with patch("lazyforms.entry_service.db.session.commit",
               side_effect=fake_integrity_error) as mock_commit:
        response = create(client)
    assert response.status_code == 409
    mock_commit.assert_called_once()


def test_shortcut_is_normalized(client):
    data = create(client, shortcut="shift+ctrl+a").get_json()
    assert data["shortcut"] == "Ctrl+Shift+A"


def test_list_entries(client):
    create(client, value="one", createdAt=2)
    create(client, value="two", createdAt=1)
    values = [e["value"] for e in client.get("/api/entries").get_json()]
    assert values == ["two", "one"]


def test_read_entry(client):
    entry_id = create(client).get_json()["id"]
    assert client.get(f"/api/entries/{entry_id}").get_json()["id"] == entry_id
    assert client.get("/api/entries/missing").status_code == 404


def test_update_entry(client):
    entry_id = create(client, label="Old").get_json()["id"]
    response = client.put(f"/api/entries/{entry_id}", json={"label": "New", "value": "changed"})
    assert response.status_code == 200
    data = response.get_json()
    assert data["label"] == "New"
    assert data["value"] == "changed"


def test_update_entry_rejects_missing_key(client):
    entry_id = create(client, contextType="url", contextKey="https://a.com/").get_json()["id"]
    response = client.put(f"/api/entries/{entry_id}", json={"contextKey": ""})
    assert response.status_code == 400
    assert client.get(f"/api/entries/{entry_id}").get_json()["contextKey"] == "https://a.com/"


def test_update_entry_shortcut_conflict(client):
    create(client, shortcut="Alt+1")
    entry_id = create(client).get_json()["id"]
    response = client.put(f"/api/entries/{entry_id}", json={"shortcut": "alt+1"})
    assert response.status_code == 409


def test_update_entry_keeps_own_shortcut(client):
    entry_id = create(client, shortcut="Alt+1").get_json()["id"]
    response = client.put(f"/api/entries/{entry_id}", json={"shortcut": "Alt+1"})
    assert response.status_code == 200


def test_update_unknown_entry(client):
    assert client.put("/api/entries/missing", json={"value": "x"}).status_code == 404


def test_delete_entry(client):
    entry_id = create(client).get_json()["id"]
    assert client.delete(f"/api/entries/{entry_id}").status_code == 200
    assert client.delete(f"/api/entries/{entry_id}").status_code == 404
    assert client.get("/api/entries").get_json() == []


def test_reorder_entries(client):
    first = create(client, value="first").get_json()["id"]
    second = create(client, value="second").get_json()["id"]

    response = client.post("/api/entries/reorder", json={"ids": [second, first]})

    assert response.status_code == 200
    orders = {e["id"]: e["order"] for e in client.get("/api/entries").get_json()}
    assert orders == {second: 0, first: 1}


def test_reorder_entries_rejects_bad_payload(client):
    assert client.post("/api/entries/reorder", json={"ids": "nope"}).status_code == 400
    assert client.post("/api/entries/reorder", json={"ids": ["missing"]}).status_code == 404


def test_export_entries(client):
    create(client, value="exported")
    response = client.get("/api/entries/export")
    assert response.status_code == 200
    assert "lazy-forms-config.json" in response.headers["Content-Disposition"]
    document = response.get_json()
    assert document["version"] == 1
    assert [e["value"] for e in document["entries"]] == ["exported"]


def test_import_entries_replaces_collection(client):
    create(client, value="old")
    payload = {"version": 1, "entries": [
        {"id": "a", "value": "one", "contextType": "all", "contextKey": "*", "createdAt": 1},
        {"id": "b", "value": "two", "contextType": "domain",
         "contextKey": "https://a.com", "createdAt": 2},
    ]}

    response = client.post("/api/entries/import", json=payload)

    assert response.status_code == 200
    assert response.get_json() == {"ok": True, "imported": 2}
    assert [e["id"] for e in client.get("/api/entries").get_json()] == ["a", "b"]


@pytest.mark.parametrize("payload", [
    {"entries": "nope"},
    [],
    {"entries": [{"id": "a", "value": "x", "contextType": "all"},
                 {"id": "a", "value": "y", "contextType": "all"}]},
    {"entries": [{"value": "x", "contextType": "weird"}]},
])
def test_import_entries_rejects_invalid_documents(client, payload):
    create(client, value="kept")
    response = client.post("/api/entries/import", json=payload)
    assert response.status_code == 400
    assert [e["value"] for e in client.get("/api/entries").get_json()] == ["kept"]


def test_import_entries_duplicate_shortcuts(client):
    payload = {"entries": [
        {"value": "x", "contextType": "all", "shortcut": "Alt+1"},
        {"value": "y", "contextType": "all", "shortcut": "alt+1"},
    ]}
    assert client.post("/api/entries/import", json=payload).status_code == 409


def test_list_shortcuts(client):
    create(client, shortcut="Ctrl+Shift+1")
    create(client, shortcut="Alt+Q")
    create(client)
    data = client.get("/api/entries/shortcuts").get_json()
    assert data["ok"] is True
    assert sorted(data["keyCombos"]) == ["alt+q", "ctrl+shift+1"]


def test_writes_refresh_resolver_cache(client):
    create(client, value="cached")
    entries = get_coordinator().entries()
    assert [e.value for e in entries] == ["cached"]


@pytest.mark.parametrize("context_type, expected_key", [
    ("fieldOnly", "https://a.com|/login|#user"),
    ("url", "https://a.com/login?next=1"),
    ("domain", "https://a.com"),
    ("all", "*"),
])
def test_create_entry_from_page_info(client, context_type, expected_key):
    page_info = {"url": "https://a.com/login?next=1", "origin": "https://a.com",
                 "pathname": "/login", "selector": "#user"}
    response = create(client, contextType=context_type, pageInfo=page_info)
    assert response.status_code == 201
    assert response.get_json()["contextKey"] == expected_key


def test_create_entry_with_unusable_page_info(client):
    response = create(client, contextType="url", pageInfo={"url": "https://a.com/"})
    assert response.status_code == 400


def test_explicit_context_key_wins_over_page_info(client):
    response = create(client, contextType="domain", contextKey="https://b.com",
                      pageInfo={"url": "https://a.com/", "origin": "https://a.com", "pathname": "/"})
    assert response.get_json()["contextKey"] == "https://b.com"
