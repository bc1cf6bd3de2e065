from datetime import datetime, timedelta, timezone

import jwt

from lottopool.models import Ticket
from lottopool.services.reconciliation_service import ReconciliationService

from .conftest import CRON_SECRET, JWT_SECRET


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok", "database": "ok"}, "error": None}


def test_missing_token_is_rejected(client):
    resp = client.post("/check-wins", json={})

    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "unauthorized"
    assert body["error"]["message"] == "Missing authorization token"


def test_wrong_cron_secret_is_rejected(client):
    resp = client.post("/check-wins", headers={"X-Cron-Secret": "nope"})

    assert resp.status_code == 401


def test_cron_secret_without_bearer_prefix_is_rejected(client):
    resp = client.post("/check-wins", headers={"Authorization": CRON_SECRET})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["message"] == "Missing authorization token"


def test_garbage_bearer_token_is_rejected(client):
    resp = client.post("/check-wins", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["message"] == "Invalid or expired token"


def test_expired_token_is_rejected(client, make_user):
    admin = make_user(admin=True)
    token = jwt.encode(
        {"user_id": admin.id, "exp": datetime.now(timezone.utc) - timedelta(minutes=5)},
        JWT_SECRET,
        algorithm="HS256",
    )

    resp = client.post("/check-wins", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_token_for_unknown_user_is_rejected(client, bearer):
    resp = client.post("/check-wins", headers=bearer(999999))

    assert resp.status_code == 401


def test_non_admin_is_forbidden(client, make_user, bearer):
    user = make_user()

    resp = client.post("/check-wins", headers=bearer(user.id))

    assert resp.status_code == 403
    assert resp.get_json()["error"]["code"] == "forbidden"


def test_inactive_admin_is_forbidden(client, make_user, bearer):
    user = make_user(admin=True, admin_active=False)

    resp = client.post("/check-wins", headers=bearer(user.id))

    assert resp.status_code == 403


def test_rejected_caller_changes_nothing(
    client, fresh_session, make_user, bearer, make_pool, make_drawing, make_ticket
):
    make_drawing()
    pool = make_pool()
    ticket = make_ticket(pool, [12, 24, 31, 48, 59], 15)
    user = make_user()

    client.post("/check-wins", headers=bearer(user.id))

    with fresh_session() as s:
        assert s.get(Ticket, ticket.id).checked is False


def test_cron_secret_header_runs_check(client, make_pool, make_drawing, make_ticket, cron_headers):
    make_drawing()
    pool = make_pool(members=2)
    make_ticket(pool, [12, 24, 31, 48, 59], 15)

    resp = client.post("/check-wins", json={"game_type": "powerball"}, headers=cron_headers)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["checked_count"] == 1
    assert body["wins_found"] == 1
    assert isinstance(body["duration_ms"], int)
    assert "error" not in body
    assert body["results"] == [
        {
            "game_type": "powerball",
            "draw_date": "2025-01-04",
            "tickets_checked": 1,
            "wins_found": 1,
            "prize_tiers": {"jackpot": 1},
            "jackpot_amount": 450000000.0,
            "success": True,
        }
    ]


def test_cron_secret_as_bearer_runs_check(client, make_drawing):
    make_drawing()

    resp = client.post("/check-wins", json={"game_type": "powerball"}, headers={"Authorization": f"Bearer {CRON_SECRET}"})

    assert resp.status_code == 200
    assert resp.get_json()["checked_count"] == 0


def test_admin_token_runs_check(client, make_user, bearer, make_drawing):
    make_drawing()
    make_drawing(game_type="mega_millions")
    admin = make_user(admin=True)

    resp = client.get("/check-wins", headers=bearer(admin.id))

    assert resp.status_code == 200
    assert [r["game_type"] for r in resp.get_json()["results"]] == ["powerball", "mega_millions"]


def test_partial_success_is_200_with_failed_game(client, make_drawing, cron_headers):
    make_drawing(game_type="powerball")

    resp = client.post("/check-wins", headers=cron_headers)

    assert resp.status_code == 200
    results = {r["game_type"]: r for r in resp.get_json()["results"]}
    assert results["mega_millions"]["success"] is False
    assert results["mega_millions"]["error"] == "No draw data found"
    assert results["mega_millions"]["jackpot_amount"] is None


def test_total_failure_is_500(client, cron_headers):
    resp = client.post("/check-wins", json={"draw_date": "2025-01-04"}, headers=cron_headers)

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["success"] is False
    assert [r["draw_date"] for r in body["results"]] == ["2025-01-04", "2025-01-04"]


def test_unknown_game_is_a_validation_error(client, cron_headers):
    resp = client.post("/check-wins", json={"game_type": "lotto_max"}, headers=cron_headers)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"]["code"] == "validation_error"
    assert "game_type" in body["error"]["details"]


def test_bad_date_is_a_validation_error(client, cron_headers):
    resp = client.post("/check-wins", json={"draw_date": "01/04/2025"}, headers=cron_headers)

    assert resp.status_code == 400
    assert "draw_date" in resp.get_json()["error"]["details"]


def test_fatal_error_is_reported_with_duration(client, monkeypatch, make_drawing, cron_headers):
    make_drawing()

    def explode(self, session, game, draw_date=None):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(ReconciliationService, "reconcile_game", explode)
    resp = client.post("/check-wins", json={"game_type": "powerball"}, headers=cron_headers)

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "connection reset"
    assert "duration_ms" in body
