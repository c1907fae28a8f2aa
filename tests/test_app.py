# tests/test_app.py
from app.utils.ids import is_valid_id, new_id


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert "running" in res.json()["message"]


def test_unknown_route_returns_json_message(client):
    res = client.get("/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Not Found"}


def test_cors_allows_configured_origin(client):
    res = client.options(
        "/post",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "PATCH",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert res.headers["access-control-allow-credentials"] == "true"


def test_ids_are_opaque_hex():
    value = new_id()
    assert len(value) == 32
    assert is_valid_id(value)
    assert not is_valid_id(value.upper())
    assert not is_valid_id("64b7f0c2e4b0a1a2b3c4d5e6")
    assert not is_valid_id(None)
    assert not is_valid_id("")
