import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from prompt_studio.extensions import db
from prompt_studio.models import StyleProfile


def _create_scene(client, **overrides):
    payload = {"title": "Tavern", "description": "A smoky inn", "tags": "indoor,night"}
    payload.update(overrides)
    response = client.post("/api/scenes", json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_entity_routes_require_login(client):
    for url in ("/api/scenes", "/api/characters", "/api/events", "/api/style-profiles"):
        response = client.get(url)
        assert response.status_code == 401
        assert response.get_json() == {"error": "Authentication required"}


def test_scene_create_and_get_round_trip(auth_client):
    created = _create_scene(auth_client)

    response = auth_client.get(f"/api/scenes/{created['id']}")

    assert response.status_code == 200
    data = response.get_json()
    assert data["title"] == "Tavern"
    assert data["description"] == "A smoky inn"
    assert data["tags"] == "indoor,night"
    assert data["created_at"]


def test_delete_then_get_and_delete_are_not_found(auth_client):
    created = _create_scene(auth_client)

    assert auth_client.delete(f"/api/scenes/{created['id']}").status_code == 200

    missing = auth_client.get(f"/api/scenes/{created['id']}")
    assert missing.status_code == 404
    assert missing.get_json() == {"error": "Scene not found"}
    assert auth_client.delete(f"/api/scenes/{created['id']}").status_code == 404


def test_validation_error_names_field(auth_client):
    response = auth_client.post("/api/characters", json={"name": "", "description": "Brute"})

    assert response.status_code == 400
    data = response.get_json()
    assert data["field"] == "name"
    assert data["error"].startswith("name: ")
    assert "name" in data["errors"]


def test_length_limits_are_enforced(auth_client):
    response = auth_client.post("/api/scenes", json={"title": "x" * 201, "description": "d"})

    assert response.status_code == 400
    assert response.get_json()["field"] == "title"


def test_partial_update_keeps_other_fields(auth_client):
    created = auth_client.post(
        "/api/characters",
        json={"name": "Orc", "description": "Brute", "appearance": "green skin"},
    ).get_json()

    response = auth_client.put(f"/api/characters/{created['id']}", json={"description": "Warlord"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["name"] == "Orc"
    assert data["description"] == "Warlord"
    assert data["appearance"] == "green skin"


def test_update_rejects_empty_payload_and_blank_required_field(auth_client):
    created = _create_scene(auth_client)

    empty = auth_client.put(f"/api/scenes/{created['id']}", json={})
    assert empty.status_code == 400
    assert empty.get_json() == {"error": "No valid fields to update"}

    blank = auth_client.put(f"/api/scenes/{created['id']}", json={"title": "   "})
    assert blank.status_code == 400
    assert blank.get_json()["field"] == "title"


def test_event_type_defaults_to_action(auth_client):
    response = auth_client.post("/api/events", json={"description": "Sword clash", "type": ""})

    assert response.status_code == 201
    assert response.get_json()["type"] == "action"


def test_search_and_paging(auth_client):
    _create_scene(auth_client, title="Dark Forest", description="Twisted trees", tags="outdoor")
    _create_scene(auth_client, title="Harbor", description="Salt and gulls", tags="outdoor,coast")
    _create_scene(auth_client, title="Throne Room", description="Gilded hall", tags="indoor")

    outdoor = auth_client.get("/api/scenes?search=OUTDOOR").get_json()
    assert {scene["title"] for scene in outdoor} == {"Dark Forest", "Harbor"}

    wildcard = auth_client.get("/api/scenes?search=%25").get_json()
    assert wildcard == []

    page = auth_client.get("/api/scenes?limit=1&offset=1").get_json()
    assert len(page) == 1

    clamped = auth_client.get("/api/scenes?limit=0").get_json()
    assert len(clamped) == 1


def test_duplicate_scene_truncates_title(auth_client):
    created = _create_scene(auth_client, title="T" * 200)

    response = auth_client.post(f"/api/scenes/{created['id']}/duplicate")

    assert response.status_code == 201
    copy = response.get_json()
    assert copy["id"] != created["id"]
    assert len(copy["title"]) == 200
    assert copy["description"] == created["description"]


def test_set_default_leaves_single_default(auth_client):
    first = auth_client.post("/api/style-profiles", json={"name": "Noir", "is_default": True}).get_json()
    second = auth_client.post("/api/style-profiles", json={"name": "Pulp", "lighting": "Neon"}).get_json()
    assert first["is_default"] is True
    assert second["is_default"] is False

    response = auth_client.put(f"/api/style-profiles/{second['id']}/set-default")

    assert response.status_code == 200
    assert response.get_json()["is_default"] is True
    defaults = db.session.query(StyleProfile).filter(StyleProfile.is_default.is_(True)).all()
    assert [profile.id for profile in defaults] == [second["id"]]

    listing = auth_client.get("/api/style-profiles").get_json()
    assert listing[0]["id"] == second["id"]


def test_set_default_unknown_profile(auth_client):
    response = auth_client.put("/api/style-profiles/999/set-default")

    assert response.status_code == 404
    assert response.get_json() == {"error": "Style profile not found"}
