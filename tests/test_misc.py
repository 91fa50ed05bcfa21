# tests/test_misc.py
import smtplib
import time

import httpx
from fastapi.testclient import TestClient

from modern_mart import config, main
from modern_mart.routes import chatbot, contact


def test_root_and_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Welcome to the Modern Mart API"
    health = client.get("/api/health").json()
    assert health["status"] == "OK"
    assert "timestamp" in health


def test_unknown_route(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json()["detail"] == "Route not found"
    assert "/api/nope" in r.json()["message"]


def test_categories(client, catalog):
    cats = client.get("/api/categories").json()["categories"]
    assert [c["name"] for c in cats] == ["Men - Shirts", "Accessories - Ties"]
    one = client.get(f"/api/categories/{cats[0]['id']}").json()["category"]
    assert one["name"] == "Men - Shirts"
    r = client.get("/api/categories/9999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Category not found"


def test_reviews(client, catalog, user):
    r = client.post("/api/reviews/silk-tie", json={"user_id": user.id, "rating": 4, "comment": "Nice"})
    assert r.status_code == 201
    assert "reviewId" in r.json()

    reviews = client.get("/api/reviews/silk-tie").json()["reviews"]
    assert [(rv["rating"], rv["comment"], rv["first_name"]) for rv in reviews] == [(4, "Nice", "Alice")]

    product = client.get("/api/products/slug/silk-tie").json()["product"]
    assert (product["average_rating"], product["review_count"]) == (4, 1)


def test_review_validation(client, catalog, user):
    assert client.post("/api/reviews/silk-tie", json={"rating": 4}).status_code == 400
    assert client.post("/api/reviews/silk-tie", json={"user_id": user.id, "rating": 6}).status_code == 400
    assert client.post("/api/reviews/silk-tie", json={"user_id": 9999, "rating": 3}).status_code == 404
    assert client.post("/api/reviews/missing", json={"user_id": user.id, "rating": 3}).status_code == 404
    assert client.get("/api/reviews/missing").status_code == 404


def test_recently_visited(client, auth_headers, catalog):
    client.post(f"/api/recently-visited/{catalog['tie']}", headers=auth_headers)
    client.post(f"/api/recently-visited/{catalog['shirt']}", headers=auth_headers)
    client.post(f"/api/recently-visited/{catalog['tie']}", headers=auth_headers)

    visited = client.get("/api/recently-visited", headers=auth_headers).json()["recentlyVisited"]
    assert [v["product_id"] for v in visited] == [catalog["tie"], catalog["shirt"]]
    assert visited[1]["image_url"] == "men-shirts/white.jpg"

    assert client.post("/api/recently-visited/9999", headers=auth_headers).status_code == 404


def test_user_stats(client, auth_headers, catalog):
    empty = client.get("/api/users/stats", headers=auth_headers).json()
    assert empty == {"total_spent": 0, "average_order_value": 0, "favorite_category": None, "last_order_date": None}

    client.post("/api/orders", json={"items": [
        {"productId": catalog["shirt"], "quantity": 1},
        {"productId": catalog["tie"], "quantity": 2},
    ]}, headers=auth_headers)
    client.post("/api/orders", json={"items": [{"productId": catalog["tie"], "quantity": 1}]}, headers=auth_headers)

    stats = client.get("/api/users/stats", headers=auth_headers).json()
    assert stats["total_spent"] == 1350
    assert stats["average_order_value"] == 675
    assert stats["favorite_category"] == "Accessories - Ties"
    assert stats["last_order_date"] is not None


def test_contact(client, monkeypatch):
    sent = []
    monkeypatch.setattr(contact, "send_contact_email", lambda *args: sent.append(args))

    r = client.post("/api/contact", json={"name": "Ann", "email": "ann@example.com", "message": "Hi"})
    assert r.status_code == 200
    assert sent == [("Ann", "ann@example.com", "Hi")]

    missing = client.post("/api/contact", json={"name": "Ann"})
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Please provide name, email, and message."


def test_contact_smtp_failure(client, monkeypatch):
    def boom(*args):
        raise smtplib.SMTPException("down")

    monkeypatch.setattr(contact, "send_contact_email", boom)
    r = client.post("/api/contact", json={"name": "Ann", "email": "ann@example.com", "message": "Hi"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Failed to send message."


def test_contact_without_smtp_logs(monkeypatch, caplog):
    monkeypatch.setattr(config, "SMTP_HOST", None)
    with caplog.at_level("INFO"):
        contact.send_contact_email("Ann", "ann@example.com", "Hello there")
    assert "Hello there" in caplog.text


def test_chatbot(client, monkeypatch):
    prompts = []

    async def fake_reply(prompt):
        prompts.append(prompt)
        return "We ship in 3-7 days."

    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(chatbot, "generate_reply", fake_reply)

    r = client.post("/api/chatbot/response", json={"message": "When will it arrive?"})
    assert r.status_code == 200
    assert r.json() == {"response": "We ship in 3-7 days."}
    assert 'Customer message: "When will it arrive?"' in prompts[0]

    assert client.post("/api/chatbot/response", json={}).status_code == 400


def test_chatbot_unconfigured_and_failing(client, monkeypatch):
    monkeypatch.setattr(config, "GEMINI_API_KEY", None)
    assert client.post("/api/chatbot/response", json={"message": "hi"}).status_code == 503

    async def failing(prompt):
        raise httpx.ConnectError("unreachable")

    monkeypatch.setattr(config, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(chatbot, "generate_reply", failing)
    assert client.post("/api/chatbot/response", json={"message": "hi"}).status_code == 500


def test_rate_limit(client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_MAX_REQUESTS", 2)
    main._ip_hits.clear()
    try:
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/health").status_code == 200
        r = client.get("/api/health")
        assert r.status_code == 429
        assert "Too many requests" in r.json()["detail"]

        # rejected requests leave the window at the limit
        for _ in range(5):
            assert client.get("/api/health").status_code == 429
        assert len(main._ip_hits["testclient"]) == 2
    finally:
        main._ip_hits.clear()


def test_rate_limit_forgets_idle_clients(client, monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_MAX_REQUESTS", 5)
    monkeypatch.setattr(main, "_last_sweep", 0.0)
    main._ip_hits.clear()
    try:
        main._ip_hits["10.0.0.1"] = [time.time() - config.RATE_LIMIT_WINDOW_SEC - 1]
        assert client.get("/api/health").status_code == 200
        assert "10.0.0.1" not in main._ip_hits
        assert list(main._ip_hits) == ["testclient"]
    finally:
        main._ip_hits.clear()


def test_lifespan_creates_tables(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "create_tables", lambda: calls.append(True))
    with TestClient(main.app) as c:
        assert c.get("/api/health").status_code == 200
    assert calls == [True]
