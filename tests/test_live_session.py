import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from prompt_studio.extensions import db
from prompt_studio.models import Character, Scene, StyleProfile
from prompt_studio.services.live_session import MAX_RECENT, LiveSessionError, LiveSessionState, RecentPrompt, remix


@pytest.fixture
def library(app_instance):
    scene = Scene(title="Tavern", description="A smoky inn")
    orc = Character(name="Orc", description="Brute", appearance="green skin")
    elf = Character(name="Elf", description="Archer")
    default = StyleProfile(name="Noir", lighting="Moonlight", is_default=True)
    other = StyleProfile(name="Pulp", lighting="Neon")
    db.session.add_all([scene, orc, elf, default, other])
    db.session.commit()
    return {"scene": scene, "orc": orc, "elf": elf, "default": default, "other": other}


def test_session_uses_default_profile(auth_client, library):
    data = auth_client.get("/api/session").get_json()

    assert data["active_profile_id"] is None
    assert data["resolved_profile_id"] == library["default"].id
    assert data["prompt"] == "Moonlight."
    assert data["recent_prompts"] == []


def test_update_toggle_and_override(auth_client, library):
    auth_client.put(
        "/api/session",
        json={
            "active_scene_id": library["scene"].id,
            "active_profile_id": library["other"].id,
            "action_text": "raises a tankard",
            "style_overrides": {"lighting": "Torchlight", "unknown": "ignored"},
        },
    )
    toggled = auth_client.post(f"/api/session/characters/{library['orc'].id}/toggle").get_json()

    assert toggled["selected"] is True
    assert toggled["active_character_ids"] == [library["orc"].id]
    assert toggled["style_overrides"] == {"lighting": "Torchlight"}
    assert toggled["prompt"] == "Torchlight. Setting: A smoky inn. Orc, green skin. raises a tankard."

    cleared = auth_client.delete("/api/session/overrides").get_json()
    assert cleared["style_overrides"] == {}
    assert cleared["prompt"].startswith("Neon.")

    untoggled = auth_client.post(f"/api/session/characters/{library['orc'].id}/toggle").get_json()
    assert untoggled["selected"] is False
    assert untoggled["active_character_ids"] == []


def test_generate_records_recent_entry(auth_client, library):
    auth_client.put(
        "/api/session",
        json={
            "active_scene_id": library["scene"].id,
            "active_character_ids": [library["elf"].id],
            "action_text": "draws a bow",
            "style_overrides": {"mood": "Tense"},
        },
    )

    response = auth_client.post("/api/session/generate")

    assert response.status_code == 200
    data = response.get_json()
    assert data["prompt"] == "Moonlight. Tense. Setting: A smoky inn. Elf, Archer. draws a bow."
    entry = data["entry"]
    assert entry["scene_name"] == "Tavern"
    assert entry["character_ids"] == [library["elf"].id]
    assert entry["profile_id"] == library["default"].id
    assert entry["action"] == "draws a bow"

    state = auth_client.get("/api/session").get_json()
    assert state["action_text"] == ""
    assert state["style_overrides"] == {}
    assert len(state["recent_prompts"]) == 1


def test_generate_rejects_empty_prompt(auth_client):
    response = auth_client.post("/api/session/generate")

    assert response.status_code == 400
    assert "error" in response.get_json()


def test_remix_restores_selection(auth_client, library):
    auth_client.put(
        "/api/session",
        json={"active_scene_id": library["scene"].id, "active_character_ids": [library["orc"].id]},
    )
    auth_client.post("/api/session/generate")
    auth_client.put(
        "/api/session",
        json={"active_scene_id": None, "active_character_ids": [], "action_text": "leftover"},
    )

    response = auth_client.post("/api/session/recent/0/remix")

    assert response.status_code == 200
    data = response.get_json()
    assert data["active_scene_id"] == library["scene"].id
    assert data["active_character_ids"] == [library["orc"].id]
    assert data["action_text"] == ""

    assert auth_client.post("/api/session/recent/5/remix").status_code == 404


def test_recent_prompts_are_capped(auth_client, library):
    auth_client.put("/api/session", json={"active_scene_id": library["scene"].id})
    for index in range(MAX_RECENT + 2):
        auth_client.put("/api/session", json={"action_text": f"beat {index}"})
        auth_client.post("/api/session/generate")

    recent = auth_client.get("/api/session").get_json()["recent_prompts"]

    assert len(recent) == MAX_RECENT
    assert recent[0]["action"] == f"beat {MAX_RECENT + 1}"


def test_session_state_survives_malformed_cookie_data():
    store = {"live": {"active_scene_id": "7", "active_character_ids": [1, "x", True, 2], "recent_prompts": ["bad"]}}

    state = LiveSessionState.load(store)

    assert state.active_scene_id is None
    assert state.active_character_ids == [1, 2]
    assert state.recent_prompts == []


def test_remix_unknown_index_raises():
    state = LiveSessionState(recent_prompts=[RecentPrompt(prompt="x")])

    with pytest.raises(LiveSessionError):
        remix(state, -1)


def test_update_rejects_malformed_selection_fields(auth_client, library):
    auth_client.put("/api/session", json={"style_overrides": {"lighting": "Torchlight"}})

    response = auth_client.put("/api/session", json={"style_overrides": ["lighting", "Neon"], "action_text": "x"})

    assert response.status_code == 400
    data = response.get_json()
    assert data["field"] == "style_overrides"
    assert data["error"].startswith("style_overrides: ")

    bad_ids = auth_client.put("/api/session", json={"active_character_ids": "1,2"})
    assert bad_ids.status_code == 400
    assert bad_ids.get_json()["field"] == "active_character_ids"

    state = auth_client.get("/api/session").get_json()
    assert state["style_overrides"] == {"lighting": "Torchlight"}
    assert state["action_text"] == ""
