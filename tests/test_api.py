"""Tests for the HTTP API."""
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from src.api import main as api_main
from src.config import Config
from src.store.sales_db import SalesDB

FIXTURES_DIR = Path(__file__).parent / "fixtures"
DUMP = FIXTURES_DIR / "ManuGuildHelper.lua"


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(api_main, "sales_db", SalesDB(tmp_path / "api.db"))
    monkeypatch.setattr(Config, "API_KEY", None)
    monkeypatch.setattr(Config, "API_IMPORT_DIR", str(FIXTURES_DIR))
    with TestClient(api_main.app) as test_client:
        yield test_client


def test_health(client):
    """Test the health endpoint."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_import_path_then_stats(client):
    """Test importing a dump by path and reading the counts."""
    response = client.post("/import", json={"path": str(DUMP)})

    assert response.status_code == 200
    body = response.json()
    assert (body["parsed"], body["inserted"], body["skipped"]) == (4, 3, 1)
    assert client.get("/stats").json() == {"total_items": 2, "total_sales": 3}


def test_import_text_twice(client):
    """Test re-importing the same text skips every sale."""
    text = DUMP.read_text(encoding="utf-8")
    client.post("/import", json={"text": text})
    body = client.post("/import", json={"text": text}).json()

    assert body["inserted"] == 0
    assert body["skipped"] == 4
    assert body["source"] == "api"


@pytest.mark.parametrize("payload", [{}, {"path": "a.lua", "text": "x"}])
def test_import_needs_exactly_one_source(client, payload):
    """Test path and text are mutually exclusive and one is required."""
    assert client.post("/import", json=payload).status_code == 422


def test_import_missing_file(client):
    """Test an unreadable dump path is a client error."""
    response = client.post("/import", json={"path": str(FIXTURES_DIR / "nope.lua")})
    assert response.status_code == 400


def test_guilds_and_items(client):
    """Test guild listing and item summaries after an import."""
    client.post("/import", json={"path": str(DUMP)})

    guilds = client.get("/guilds").json()
    assert [g["guild_name"] for g in guilds] == ["Dragons", "Guild 77"]

    items = client.get("/items").json()
    assert len(items) == 2
    assert len(client.get("/items", params={"guild_id": 77}).json()) == 1


def test_item_sales_and_names(client):
    """Test per-item sales and renaming an item."""
    client.post("/import", json={"path": str(DUMP)})
    item_id = client.get("/items", params={"guild_id": 77}).json()[0]["item_id"]

    assert len(client.get(f"/items/{item_id}/sales").json()) == 2
    assert len(client.get(f"/items/{item_id}/sales", params={"guild_id": 5}).json()) == 1

    assert client.get(f"/items/{item_id}/name").json() == {"item_id": item_id, "name": ""}
    response = client.put(f"/items/{item_id}/name", json={"name": "Rubedite Ore"})
    assert response.status_code == 200
    assert client.get(f"/items/{item_id}/name").json()["name"] == "Rubedite Ore"


def test_unknown_item_name(client):
    """Test a missing item is a 404."""
    assert client.get("/items/999/name").status_code == 404
    assert client.put("/items/999/name", json={"name": "x"}).status_code == 404


def test_reports(client):
    """Test the report endpoints return rows for imported sales."""
    client.post("/import", json={"path": str(DUMP)})

    guild_weeks = client.get("/reports/guild-weeks").json()
    assert sum(row["total_sales"] for row in guild_weeks) == 45000 + 60000 + 31000

    item_weeks = client.get("/reports/guild-item-weeks", params={"guild_id": 5}).json()
    assert {row["guild_id"] for row in item_weeks} == {5}
    assert sum(row["total_quantity_sold"] for row in item_weeks) == 201

    guild_items = client.get("/reports/guild-items").json()
    assert len(guild_items) == 3
    assert all("fee_1_percent" in row for row in guild_items)


def test_api_key_required_when_configured(client, monkeypatch):
    """Test endpoints reject requests without the configured key."""
    monkeypatch.setattr(Config, "API_KEY", "secret")

    assert client.get("/stats").status_code == 403
    assert client.get("/stats", headers={"X-API-KEY": "wrong"}).status_code == 403
    assert client.get("/stats", headers={"X-API-KEY": "secret"}).status_code == 200
    assert client.get("/health").status_code == 200


def test_import_relative_path(client):
    """Test a relative path is resolved inside the import directory."""
    response = client.post("/import", json={"path": DUMP.name})

    assert response.status_code == 200
    assert response.json()["inserted"] == 3


@pytest.mark.parametrize("name", ["../test_api.py", "../../pyproject.toml"])
def test_import_path_outside_directory(client, name):
    """Test paths escaping the import directory are refused."""
    assert client.post("/import", json={"path": name}).status_code == 403


def test_import_absolute_path_outside_directory(client, tmp_path):
    """Test an absolute path elsewhere on disk is refused."""
    outside = tmp_path / "dump.lua"
    outside.write_text(DUMP.read_text(encoding="utf-8"), encoding="utf-8")

    assert client.post("/import", json={"path": str(outside)}).status_code == 403
    assert client.get("/stats").json()["total_sales"] == 0


def test_path_imports_disabled_without_directory(client, monkeypatch):
    """Test path imports are refused when no import directory is configured."""
    monkeypatch.setattr(Config, "API_IMPORT_DIR", None)

    assert client.post("/import", json={"path": str(DUMP)}).status_code == 403
    text = DUMP.read_text(encoding="utf-8")
    assert client.post("/import", json={"text": text}).status_code == 200


def test_import_oversized_value_is_server_error(client):
    """Test a value too large to store fails the import cleanly."""
    text = (
        'ManuGuildHelper_SavedData = { [1] = { ["sales"] = { '
        '[1] = { ["l"] = "x", ["p"] = 99999999999999999999 } } } }'
    )
    response = client.post("/import", json={"text": text})

    assert response.status_code == 500
    assert "Error importing sales" in response.json()["detail"]


def test_items_recent_order(client):
    """Test items can be listed by most recent sale."""
    client.post("/import", json={"path": str(DUMP)})

    recent = client.get("/items", params={"order": "recent"}).json()
    assert recent[0]["item_link"].startswith("|H0:item:135146")
    assert client.get("/items", params={"order": "bogus"}).status_code == 422
