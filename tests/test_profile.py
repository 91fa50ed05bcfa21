# tests/test_profile.py
import os

from modern_mart import config
from modern_mart.models import Order, User

PROFILE = {"firstName": "Alicia", "lastName": "Smythe", "email": "alicia@example.com", "phone": "+15550009"}


def test_update_profile(client, auth_headers):
    r = client.put("/api/profile", json=PROFILE, headers=auth_headers)
    assert r.status_code == 200
    user = r.json()["user"]
    assert (user["first_name"], user["email"]) == ("Alicia", "alicia@example.com")


def test_update_profile_validation(client, auth_headers, make_user):
    make_user(email="taken@example.com")
    assert client.put("/api/profile", json={**PROFILE, "lastName": ""}, headers=auth_headers).status_code == 400
    r = client.put("/api/profile", json={**PROFILE, "email": "taken@example.com"}, headers=auth_headers)
    assert r.status_code == 409


def test_keep_own_email(client, auth_headers, user):
    r = client.put("/api/profile", json={**PROFILE, "email": user.email}, headers=auth_headers)
    assert r.status_code == 200


def test_avatar_upload(client, auth_headers, user, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "AVATARS_DIR", str(tmp_path))
    r = client.post(
        "/api/profile/avatar",
        files={"avatar": ("me.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers,
    )
    assert r.status_code == 200
    url = r.json()["user"]["avatar_url"]
    assert url.startswith(f"/avatars/avatar_{user.id}_") and url.endswith(".png")
    assert os.listdir(tmp_path) == [url.rsplit("/", 1)[1]]


def test_avatar_rejections(client, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "AVATARS_DIR", str(tmp_path))
    assert client.post("/api/profile/avatar", headers=auth_headers).status_code == 400

    r = client.post(
        "/api/profile/avatar",
        files={"avatar": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert "image" in r.json()["detail"]

    monkeypatch.setattr(config, "MAX_AVATAR_BYTES", 4)
    big = client.post(
        "/api/profile/avatar",
        files={"avatar": ("big.jpg", b"0123456789", "image/jpeg")},
        headers=auth_headers,
    )
    assert big.status_code == 413
    assert os.listdir(tmp_path) == []


def test_delete_profile_cascades(client, db_session, auth_headers, user, catalog):
    client.post("/api/cart/add", json={"productId": catalog["tie"]}, headers=auth_headers)
    client.post("/api/orders", json={"items": [{"productId": catalog["tie"], "quantity": 1}]}, headers=auth_headers)

    r = client.delete("/api/profile", headers=auth_headers)
    assert r.status_code == 200

    db_session.expire_all()
    assert db_session.query(User).count() == 0
    assert db_session.query(Order).count() == 0
    assert client.get("/api/auth/profile", headers=auth_headers).status_code == 403


def test_avatar_bytes_are_stored(client, auth_headers, tmp_path, monkeypatch):
    monkeypatch.setattr(config, "AVATARS_DIR", str(tmp_path))
    monkeypatch.setattr(config, "MAX_AVATAR_BYTES", 16)
    payload = b"GIF89a-sixteen!!"
    r = client.post(
        "/api/profile/avatar",
        files={"avatar": ("me.gif", payload, "image/gif")},
        headers=auth_headers,
    )
    assert r.status_code == 200
    stored = tmp_path / r.json()["user"]["avatar_url"].rsplit("/", 1)[1]
    assert stored.read_bytes() == payload
