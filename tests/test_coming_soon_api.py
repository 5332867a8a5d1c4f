from datetime import datetime, timedelta

from coming_soon.models.coming_soon_subscriber import ComingSoonSubscriber

SUBSCRIBE_URL = "/api/coming-soon/subscribe"
SUBSCRIBERS_URL = "/api/coming-soon/subscribers"


def test_subscribe_new_email_returns_201(client, db):
    response = client.post(
        SUBSCRIBE_URL,
        json={"email": "A@B.com", "interests": ["vendor"]},
        headers={"user-agent": "landing-test", "x-forwarded-for": "203.0.113.7"},
    )

    assert response.status_code == 201
    assert response.json() == {
        "success": True,
        "message": "Thank you for subscribing! We'll notify you when we launch.",
        "alreadySubscribed": False,
    }

    record = db.query(ComingSoonSubscriber).one()
    assert record.email == "a@b.com"
    assert record.interests == ["vendor"]
    assert record.ip_address == "203.0.113.7"
    assert record.user_agent == "landing-test"


def test_subscribe_existing_email_updates_interests(client, db):
    client.post(SUBSCRIBE_URL, json={"email": "A@B.com", "interests": ["vendor"]})
    response = client.post(SUBSCRIBE_URL, json={"email": "A@B.com", "interests": ["venue"]})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["alreadySubscribed"] is True
    assert "demo" not in body

    record = db.query(ComingSoonSubscriber).one()
    assert record.interests == ["venue"]


def test_subscribe_without_interests(client, db):
    response = client.post(SUBSCRIBE_URL, json={"email": "ana@example.com"})

    assert response.status_code == 201
    assert db.query(ComingSoonSubscriber).one().interests == []


def test_subscribe_invalid_email_returns_400(client, db):
    response = client.post(SUBSCRIBE_URL, json={"email": "not-an-email", "interests": ["vendor"]})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Please provide a valid email address",
    }
    assert db.query(ComingSoonSubscriber).count() == 0


def test_subscribe_missing_email_returns_400(client):
    response = client.post(SUBSCRIBE_URL, json={"interests": ["vendor"]})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_subscribe_unknown_interest_returns_400(client, db):
    response = client.post(SUBSCRIBE_URL, json={"email": "ana@example.com", "interests": ["sponsor"]})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert db.query(ComingSoonSubscriber).count() == 0


def test_subscribe_in_demo_mode(demo_client):
    response = demo_client.post(SUBSCRIBE_URL, json={"email": "ana@example.com", "interests": ["venue"]})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Thank you for subscribing! We'll notify you when we launch.",
        "alreadySubscribed": False,
        "demo": True,
    }


def test_subscribe_unexpected_storage_error_returns_500(client, db_handle):
    assert db_handle.is_available()
    ComingSoonSubscriber.__table__.drop(db_handle.engine)

    response = client.post(SUBSCRIBE_URL, json={"email": "ana@example.com"})

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Server error. Please try again later.",
    }


def test_list_subscribers_newest_first(client, db):
    now = datetime.utcnow()
    db.add_all([
        ComingSoonSubscriber(email="old@example.com", interests=["attending"], subscribed_at=now - timedelta(hours=2)),
        ComingSoonSubscriber(email="new@example.com", interests=["venue"], subscribed_at=now),
    ])
    db.commit()

    response = client.get(SUBSCRIBERS_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [sub["email"] for sub in body["subscribers"]] == ["new@example.com", "old@example.com"]
    first = body["subscribers"][0]
    assert first["interests"] == ["venue"]
    assert first["source"] == "coming-soon-page"
    assert "subscribedAt" in first
    assert "ip_address" not in first


def test_list_subscribers_in_demo_mode_returns_503(demo_client):
    response = demo_client.get(SUBSCRIBERS_URL)

    assert response.status_code == 503
    assert response.json() == {
        "success": False,
        "message": "Database not connected",
        "demo": True,
    }


def test_self_test_endpoint(client, db):
    response = client.post("/api/coming-soon/test")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Test completed"
    assert body["testResult"]["success"] is True
    assert body["testResult"]["alreadySubscribed"] is False
    assert db.query(ComingSoonSubscriber).count() == 1


def test_health_reports_connected_database(client):
    for path in ("/health", "/api/health"):
        response = client.get(path)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["database"] == "connected"
        assert body["database_connected"] is True
        assert body["database_url_configured"] is True


def test_health_reports_demo_mode(demo_client):
    body = demo_client.get("/health").json()

    assert body["database"] == "disconnected"
    assert body["database_connected"] is False
    assert body["database_url_configured"] is False
