import io
import os
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from prompt_studio.extensions import db, socketio
from prompt_studio.models import Image

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, name="scene.png", content=PNG_BYTES, content_type="image/png", **fields):
    data = {"image": (io.BytesIO(content), name, content_type)}
    data.update(fields)
    return client.post("/api/images/upload", data=data, content_type="multipart/form-data")


def _active_ids():
    return [image.id for image in db.session.query(Image).filter(Image.is_active.is_(True)).all()]


@pytest.fixture
def overlay_socket(app_instance):
    socket_client = socketio.test_client(app_instance)
    socket_client.emit("join-overlay")
    socket_client.get_received()
    yield socket_client
    socket_client.disconnect()


def _events(socket_client, name):
    return [packet["args"][0] for packet in socket_client.get_received() if packet["name"] == name]


def test_upload_stores_file_and_activates(app_instance, auth_client):
    response = _upload(auth_client)

    assert response.status_code == 201
    data = response.get_json()
    assert data["is_active"] is True
    assert data["original_name"] == "scene.png"
    assert data["filename"].endswith(".png")
    assert data["url"] == f"/uploads/{data['filename']}"
    stored = Path(app_instance.config["UPLOAD_FOLDER"]) / data["filename"]
    assert stored.read_bytes() == PNG_BYTES

    served = auth_client.get(data["url"])
    assert served.status_code == 200
    assert served.data == PNG_BYTES


def test_only_latest_upload_is_active(auth_client):
    first = _upload(auth_client).get_json()
    second = _upload(auth_client, name="next.jpg", content_type="image/jpeg").get_json()

    assert _active_ids() == [second["id"]]

    activated = auth_client.put(f"/api/images/{first['id']}/activate")
    assert activated.status_code == 200
    assert _active_ids() == [first["id"]]


def test_upload_without_activation(auth_client):
    first = _upload(auth_client).get_json()
    second = _upload(auth_client, set_active="false").get_json()

    assert second["is_active"] is False
    assert _active_ids() == [first["id"]]


def test_non_image_upload_is_rejected(app_instance, auth_client):
    response = _upload(auth_client, name="notes.txt", content=b"hello", content_type="text/plain")

    assert response.status_code == 400
    assert response.get_json() == {"error": "Only image files are allowed"}
    assert db.session.query(Image).count() == 0
    upload_folder = app_instance.config["UPLOAD_FOLDER"]
    assert not os.path.exists(upload_folder) or os.listdir(upload_folder) == []


def test_missing_file_is_rejected(auth_client):
    response = auth_client.post("/api/images/upload", data={}, content_type="multipart/form-data")

    assert response.status_code == 400
    assert response.get_json() == {"error": "No image file provided"}


def test_oversized_upload_is_rejected(app_instance, auth_client):
    app_instance.config["IMAGE_MAX_BYTES"] = 32

    response = _upload(auth_client)

    assert response.status_code == 400
    assert response.get_json()["error"].startswith("File too large.")
    assert db.session.query(Image).count() == 0


def test_request_beyond_content_limit_maps_to_file_size_error(app_instance, auth_client):
    app_instance.config["MAX_CONTENT_LENGTH"] = 16

    response = _upload(auth_client)

    assert response.status_code == 400
    assert response.get_json() == {"error": "File too large. Maximum size is 10MB."}


def test_active_image_is_public(client, auth_client):
    assert client.get("/api/images/active").get_json() is None

    uploaded = _upload(auth_client).get_json()
    auth_client.post("/api/auth/logout")

    response = client.get("/api/images/active")
    assert response.status_code == 200
    assert response.get_json()["id"] == uploaded["id"]
    assert client.get("/api/images").status_code == 401


def test_list_images_active_only(auth_client):
    _upload(auth_client)
    active = _upload(auth_client).get_json()

    listing = auth_client.get("/api/images").get_json()
    assert len(listing) == 2

    only_active = auth_client.get("/api/images?active_only=true").get_json()
    assert [image["id"] for image in only_active] == [active["id"]]


def test_overlay_room_receives_updates(auth_client, overlay_socket):
    uploaded = _upload(auth_client).get_json()
    updates = _events(overlay_socket, "image-update")
    assert [update["id"] for update in updates] == [uploaded["id"]]

    auth_client.put("/api/images/hide")
    assert _events(overlay_socket, "image-update") == [None]
    assert _active_ids() == []

    auth_client.put("/api/images/caption", json={"caption": "  Round two  "})
    assert _events(overlay_socket, "caption-update") == [{"caption": "Round two"}]


def test_clients_outside_overlay_room_only_see_upload_notice(app_instance, auth_client):
    dashboard = socketio.test_client(app_instance)
    dashboard.get_received()

    uploaded = _upload(auth_client).get_json()

    names = [packet["name"] for packet in dashboard.get_received()]
    assert names == ["image-uploaded"]
    assert uploaded["is_active"] is True
    dashboard.disconnect()


def test_delete_active_image_clears_overlay(app_instance, auth_client, overlay_socket):
    uploaded = _upload(auth_client).get_json()
    overlay_socket.get_received()

    response = auth_client.delete(f"/api/images/{uploaded['id']}")

    assert response.status_code == 200
    assert _events(overlay_socket, "image-update") == [None]
    assert not (Path(app_instance.config["UPLOAD_FOLDER"]) / uploaded["filename"]).exists()
    assert auth_client.delete(f"/api/images/{uploaded['id']}").status_code == 404


def test_delete_survives_missing_file(app_instance, auth_client):
    uploaded = _upload(auth_client).get_json()
    (Path(app_instance.config["UPLOAD_FOLDER"]) / uploaded["filename"]).unlink()

    response = auth_client.delete(f"/api/images/{uploaded['id']}")

    assert response.status_code == 200
    assert db.session.query(Image).count() == 0


def test_overlay_page_is_served(client):
    response = client.get("/overlay/")

    assert response.status_code == 200
    assert b"join-overlay" in response.data
    response.close()


def test_get_image_by_id(auth_client):
    uploaded = _upload(auth_client).get_json()

    assert auth_client.get(f"/api/images/{uploaded['id']}").get_json()["filename"] == uploaded["filename"]
    assert auth_client.get("/api/images/999").status_code == 404
