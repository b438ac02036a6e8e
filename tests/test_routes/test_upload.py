import io

import pytest

from nextplay.routes import upload as upload_route
from nextplay.storage import is_image


@pytest.fixture
def saved(monkeypatch):
    calls = []

    def fake_save(owner_id, filename, data, content_type=None):
        calls.append((owner_id, filename, data, content_type))
        return f"https://photos.example.com/injuries/{owner_id}/{filename}"

    monkeypatch.setattr(upload_route, "save_photo", fake_save)
    return calls


def test_upload_images(client, parent, saved):
    files = [
        ("images", ("knee.png", io.BytesIO(b"\x89PNG fake"), "image/png")),
        ("images", ("notes.txt", io.BytesIO(b"just text"), "text/plain")),
        ("images", ("ankle.jpg", io.BytesIO(b"\xff\xd8 fake"), "image/jpeg")),
    ]
    res = client.post("/api/upload", headers=parent["headers"], files=files)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert len(body["urls"]) == 2
    assert [c[1] for c in saved] == ["knee.png", "ankle.jpg"]
    assert saved[0][0] == str(parent["user"]["_id"])


def test_upload_without_images(client, parent, saved):
    res = client.post("/api/upload", headers=parent["headers"], files=[("images", ("a.txt", io.BytesIO(b"x"), "text/plain"))])
    assert res.status_code == 400
    assert res.json()["detail"] == "No images provided"
    assert client.post("/api/upload", headers=parent["headers"], data={"nothing": "here"}).status_code == 400
    assert saved == []


def test_upload_is_for_parents(client, admin, saved):
    files = [("images", ("knee.png", io.BytesIO(b"png"), "image/png"))]
    assert client.post("/api/upload", headers=admin["headers"], files=files).status_code == 403
    assert client.post("/api/upload", files=files).status_code == 401
    assert saved == []


def test_is_image():
    assert is_image("image/png", "a.png")
    assert is_image("image/jpeg", "photo")
    assert not is_image("image/png", "a.exe")
    assert not is_image("application/pdf", "a.pdf")
    assert not is_image(None, "a.png")


def test_upload_without_storage_is_503(client, parent):
    files = [("images", ("knee.png", io.BytesIO(b"png"), "image/png"))]
    res = client.post("/api/upload", headers=parent["headers"], files=files)
    assert res.status_code == 503
    assert res.json()["detail"] == "Photo storage is not available"
