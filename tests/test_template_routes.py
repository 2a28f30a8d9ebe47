import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from prompt_studio.extensions import db, socketio
from prompt_studio.models import Character, Event, Scene, StyleProfile, Template


@pytest.fixture
def library(app_instance):
    scene = Scene(title="Tavern", description="A smoky inn")
    orc = Character(name="Orc", description="Brute", appearance="green skin")
    elf = Character(name="Elf", description="Archer")
    event = Event(description="Sword clash", type="combat")
    profile = StyleProfile(name="Noir", lighting="Moonlight", mood="Eerie", ai_style="Midjourney", is_default=True)
    db.session.add_all([scene, orc, elf, event, profile])
    db.session.commit()
    return {"scene": scene, "orc": orc, "elf": elf, "event": event, "profile": profile}


def test_generate_persists_sectioned_template(auth_client, library):
    response = auth_client.post(
        "/api/templates/generate",
        json={
            "title": "Opening",
            "scene_id": library["scene"].id,
            "character_ids": [library["elf"].id, 9999, library["orc"].id],
            "event_ids": [library["event"].id],
            "custom_events": ["The bard flees", ""],
            "composition": "Wide establishing shot",
        },
    )

    assert response.status_code == 201
    data = response.get_json()
    assert data["title"] == "Opening"
    assert [character["name"] for character in data["characters"]] == ["Elf", "Orc"]
    assert data["template_text"] == (
        "Scene: Tavern\nA smoky inn\n\n"
        "Characters:\n- Elf: Archer\n- Orc: Brute (Appearance: green skin)\n\n"
        "Events/Actions:\n1. Sword clash\n2. The bard flees\n\n"
        "Composition: Wide establishing shot"
    )
    assert data["input_snapshot"]["character_ids"] == [library["elf"].id, 9999, library["orc"].id]

    template = db.session.get(Template, data["id"])
    assert template.character_id_list == [library["elf"].id, 9999, library["orc"].id]
    assert template.event_id_list == [library["event"].id]


def test_generate_twice_gives_identical_text_and_two_rows(auth_client, library):
    payload = {"scene_id": library["scene"].id, "character_ids": [library["orc"].id]}

    first = auth_client.post("/api/templates/generate", json=payload).get_json()
    second = auth_client.post("/api/templates/generate", json=payload).get_json()

    assert first["template_text"] == second["template_text"]
    assert first["id"] != second["id"]
    assert first["title"].startswith("Template ")
    assert db.session.query(Template).count() == 2


def test_generate_rejects_empty_template(auth_client, library):
    response = auth_client.post("/api/templates/generate", json={"character_ids": [9999]})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Generated template is empty. Please provide some content."}
    assert db.session.query(Template).count() == 0


def test_generate_validates_id_arrays(auth_client, library):
    response = auth_client.post("/api/templates/generate", json={"character_ids": ["abc"]})

    assert response.status_code == 400
    assert response.get_json()["field"] == "character_ids"


def test_style_profile_fills_missing_style_fields(auth_client, library):
    response = auth_client.post(
        "/api/templates/generate",
        json={
            "scene_id": library["scene"].id,
            "style_profile_id": library["profile"].id,
            "lighting": "Torchlight",
        },
    )

    data = response.get_json()
    assert "Lighting: Torchlight" in data["template_text"]
    assert "Mood: Eerie" in data["template_text"]
    assert "AI Style: Midjourney" in data["template_text"]
    assert data["ai_style"] == "Midjourney"
    assert data["style_profile_id"] == library["profile"].id


def test_generate_broadcasts_to_socket_clients(app_instance, auth_client, library):
    socket_client = socketio.test_client(app_instance)
    socket_client.get_received()

    auth_client.post("/api/templates/generate", json={"scene_id": library["scene"].id})

    received = socket_client.get_received()
    events = [packet for packet in received if packet["name"] == "template-generated"]
    assert len(events) == 1
    assert events[0]["args"][0]["scene"]["title"] == "Tavern"
    socket_client.disconnect()


def test_list_get_and_delete_templates(auth_client, library):
    created = auth_client.post(
        "/api/templates/generate",
        json={"scene_id": library["scene"].id, "custom_prompt": "Epic poster"},
    ).get_json()

    listing = auth_client.get("/api/templates").get_json()
    assert listing[0]["id"] == created["id"]
    assert listing[0]["scene_title"] == "Tavern"

    detail = auth_client.get(f"/api/templates/{created['id']}").get_json()
    assert detail["scene_description"] == "A smoky inn"
    assert detail["input_snapshot"]["custom_prompt"] == "Epic poster"

    assert auth_client.delete(f"/api/templates/{created['id']}").status_code == 200
    assert auth_client.get(f"/api/templates/{created['id']}").status_code == 404


def test_deleted_scene_leaves_template_readable(auth_client, library):
    created = auth_client.post("/api/templates/generate", json={"scene_id": library["scene"].id}).get_json()
    auth_client.delete(f"/api/scenes/{library['scene'].id}")

    detail = auth_client.get(f"/api/templates/{created['id']}").get_json()

    assert detail["scene_id"] is not None
    assert detail["scene_title"] is None


def test_preview_renders_without_persisting(auth_client, library):
    response = auth_client.post(
        "/api/prompts/preview",
        json={
            "scene_id": library["scene"].id,
            "character_ids": [library["orc"].id],
            "action_text": "swings an axe",
            "camera": "Low angle",
        },
    )

    assert response.status_code == 200
    data = response.get_json()
    assert data["style"] == "prose"
    assert data["prompt"] == "Setting: A smoky inn. Orc, green skin. swings an axe. Camera: Low angle."
    assert db.session.query(Template).count() == 0

    sections = auth_client.post(
        "/api/prompts/preview",
        json={"scene_id": library["scene"].id, "output_style": "sections"},
    ).get_json()
    assert sections["prompt"] == "Scene: Tavern\nA smoky inn"


def test_parse_uses_stored_library(auth_client, library):
    response = auth_client.post("/api/prompts/parse", json={"text": "The Orc starts a sword clash in the Tavern"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["matched_scene_id"] == library["scene"].id
    assert data["matched_character_ids"] == [library["orc"].id]
    assert data["matched_event_ids"] == [library["event"].id]


def test_parse_requires_text(auth_client, library):
    response = auth_client.post("/api/prompts/parse", json={})

    assert response.status_code == 400
    assert response.get_json()["field"] == "text"


def test_vocabulary_endpoint(auth_client):
    data = auth_client.get("/api/prompts/vocabulary").get_json()

    assert "Vaporwave" in [preset["label"] for preset in data["presets"]]
    assert data["lightings"]
