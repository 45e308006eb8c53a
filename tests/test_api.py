"""End-to-end tests through the HTTP surface."""

import logging

import pytest
from sqlalchemy.exc import OperationalError

from giftdesk.core.config import Settings
from giftdesk.models import UserRole
from giftdesk.services import enrollment_service

from .conftest import PNG_BYTES, login


@pytest.fixture()
def seeded(make_user, make_enrollments):
    make_user("root", password="admin-pw", role=UserRole.ADMIN)
    make_user("alice", token_number=1)
    make_user("bob", token_number=2)
    make_enrollments(25)


def _gift(client, headers, number, token="T5", image=("card.png", PNG_BYTES, "image/png")):
    files = {"image": image} if image else None
    return client.post(
        "/api/v1/enrollments/gift",
        data={"enrollment_number": number, "token_number": token},
        files=files,
        headers=headers,
    )


def test_health_ok(client):
    r = client.get("/api/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_login_errors_have_identical_shape(client, seeded):
    wrong_password = client.post("/api/v1/auth/login", json={"username": "alice", "password": "nope"})
    unknown_user = client.post("/api/v1/auth/login", json={"username": "zed", "password": "pw"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {"detail": "Invalid credentials"}


def test_login_returns_token_and_summary(client, seeded):
    r = client.post("/api/v1/auth/login", json={"username": "alice", "password": "pw"})
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "alice"
    assert body["user"]["role"] == "user"
    assert body["user"]["gifted_count"] == 0
    assert "password_hash" not in body["user"]

    me = client.get("/api/v1/auth/validate-token", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "alice"


@pytest.mark.parametrize(
    "method,path",
    [
        ("get", "/api/v1/enrollments"),
        ("get", "/api/v1/enrollments/search?enrollment_number=E1"),
        ("get", "/api/v1/admin/dashboard"),
        ("get", "/api/v1/auth/validate-token"),
    ],
)
def test_requests_without_token_are_unauthorized(client, seeded, method, path):
    r = getattr(client, method)(path)
    assert r.status_code == 401
    bad = getattr(client, method)(path, headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


def test_admin_routes_forbidden_for_users(client, seeded):
    headers = login(client, "alice")
    assert client.get("/api/v1/admin/dashboard", headers=headers).status_code == 403
    assert client.get("/api/v1/admin/users", headers=headers).status_code == 403
    r = client.post("/api/v1/admin/users", json={"username": "eve", "password": "pw"}, headers=headers)
    assert r.status_code == 403


def test_admin_creates_user_who_can_log_in(client, seeded):
    headers = login(client, "root", "admin-pw")
    r = client.post(
        "/api/v1/admin/users",
        json={"username": "carol", "password": "carol-pw", "token_number": 3},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["role"] == "user"
    assert r.json()["token_number"] == 3

    dup = client.post("/api/v1/admin/users", json={"username": "carol", "password": "x"}, headers=headers)
    assert dup.status_code == 400
    assert dup.json()["detail"] == "Username already exists"

    login(client, "carol", "carol-pw")


def test_search_and_list(client, seeded):
    headers = login(client, "alice")

    r = client.get("/api/v1/enrollments/search", params={"enrollment_number": "E7"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Person 7"
    assert r.json()["is_gifted"] is False
    assert r.json()["gifted_by"] is None

    missing = client.get("/api/v1/enrollments/search", params={"enrollment_number": "E999"}, headers=headers)
    assert missing.status_code == 404

    page = client.get("/api/v1/enrollments", params={"page": 3, "page_size": 10}, headers=headers).json()
    assert len(page["enrollments"]) == 5
    assert page["total_pages"] == 3
    assert page["total_enrollments"] == 25

    beyond = client.get("/api/v1/enrollments", params={"page": 99, "page_size": 10}, headers=headers).json()
    assert beyond["enrollments"] == []
    assert beyond["total_pages"] == 3

    defaults = client.get("/api/v1/enrollments", params={"page": 0, "page_size": -1}, headers=headers).json()
    assert defaults["current_page"] == 1
    assert defaults["page_size"] == 10


def test_gift_flow(client, seeded, store):
    alice = login(client, "alice")
    bob = login(client, "bob")

    r = _gift(client, alice, "E1", token="T5")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["enrollment_number"] == "E1"
    assert body["is_gifted"] is True
    assert body["token_number"] == "T5"
    assert body["card_image"].startswith("https://objects.test/")
    assert len(store.objects) == 1

    again = _gift(client, bob, "E1", token="T9")
    assert again.status_code == 400
    detail = again.json()["detail"]
    assert detail["message"] == "Gift already distributed"
    assert detail["gifted_by"]["username"] == "alice"
    assert detail["gifted_by"]["token_number"] == 1
    assert detail["gifted_at"].startswith(body["gifted_at"][:19])

    found = client.get("/api/v1/enrollments/search", params={"enrollment_number": "E1"}, headers=bob).json()
    assert found["gifted_by"]["username"] == "alice"
    assert found["token_number"] == "T5"

    me = client.get("/api/v1/auth/validate-token", headers=alice).json()
    assert me["gifted_count"] == 1


def test_gift_input_errors(client, seeded, store):
    headers = login(client, "alice")

    assert _gift(client, headers, "E404").status_code == 404

    missing = _gift(client, headers, "E2", image=None)
    assert missing.status_code == 400
    assert missing.json()["detail"] == "Image is required"

    not_image = _gift(client, headers, "E2", image=("card.pdf", b"%PDF-1.7", "application/pdf"))
    assert not_image.status_code == 400
    assert not_image.json()["detail"] == "Only images are allowed"

    assert store.objects == {}
    r = client.get("/api/v1/enrollments/search", params={"enrollment_number": "E2"}, headers=headers)
    assert r.json()["is_gifted"] is False


def test_storage_outage_is_retryable(client, seeded, store):
    headers = login(client, "alice")
    store.fail = True
    r = _gift(client, headers, "E3")
    assert r.status_code == 503

    untouched = client.get("/api/v1/enrollments/search", params={"enrollment_number": "E3"}, headers=headers)
    assert untouched.json()["is_gifted"] is False
    assert untouched.json()["card_image"] is None

    store.fail = False
    assert _gift(client, headers, "E3").status_code == 200


def test_admin_dashboard_users_and_reconcile(client, seeded):
    alice = login(client, "alice")
    bob = login(client, "bob")
    for number in ("E1", "E2"):
        assert _gift(client, alice, number).status_code == 200
    assert _gift(client, bob, "E3").status_code == 200

    admin = login(client, "root", "admin-pw")
    stats = client.get("/api/v1/admin/dashboard", headers=admin).json()
    assert stats["total_users"] == 2
    assert stats["total_enrollments"] == 25
    assert stats["total_gifted"] == 3
    assert stats["remaining_to_gift"] == 22
    assert [(e["username"], e["count"]) for e in stats["gift_distribution"]] == [("alice", 2), ("bob", 1)]

    users = client.get("/api/v1/admin/users", headers=admin).json()
    by_name = {u["username"]: u for u in users}
    assert set(by_name) == {"alice", "bob"}
    assert by_name["alice"]["gifted_count"] == by_name["alice"]["verified_gift_count"] == 2
    assert [e["enrollment_number"] for e in by_name["alice"]["gifted_enrollments"]] == ["E1", "E2"]

    summary = client.post("/api/v1/admin/reconcile", headers=admin).json()
    assert summary == {"users_checked": 3, "users_corrected": 0, "drift": []}


def test_list_tolerates_huge_and_unparseable_paging(client, seeded):
    headers = login(client, "alice")

    huge = client.get("/api/v1/enrollments", params={"page": str(10**18), "page_size": 10}, headers=headers)
    assert huge.status_code == 200
    assert huge.json()["enrollments"] == []
    assert huge.json()["total_pages"] == 3

    garbled = client.get("/api/v1/enrollments", params={"page": "abc", "page_size": "x"}, headers=headers)
    assert garbled.status_code == 200
    body = garbled.json()
    assert body["current_page"] == 1
    assert body["page_size"] == 10
    assert len(body["enrollments"]) == 10


def test_database_failure_returns_generic_500(client, seeded, monkeypatch, caplog):
    headers = login(client, "alice")

    def broken(*args, **kwargs):
        raise OperationalError("SELECT enrollments", {}, Exception("connection lost"))

    monkeypatch.setattr(enrollment_service, "list_enrollments", broken)
    with caplog.at_level(logging.ERROR, logger="giftdesk.main"):
        r = client.get("/api/v1/enrollments", headers=headers)

    assert r.status_code == 500
    assert r.json() == {"detail": "Internal server error"}
    assert "database error on GET /api/v1/enrollments" in caplog.text
    assert "connection lost" not in r.text


def test_cors_preflight_allows_browser_clients(client):
    r = client.options(
        "/api/v1/enrollments/gift",
        headers={
            "Origin": "http://frontend.test",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]

    health = client.get("/api/v1/health", headers={"Origin": "http://frontend.test"})
    assert health.headers["access-control-allow-origin"] == "*"


def test_cors_origins_parsed_from_comma_list():
    settings = Settings(cors_origins=" http://a.test, http://b.test ,")
    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]
    assert Settings(cors_origins="").cors_origin_list == []
