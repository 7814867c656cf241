from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from lp_builder.application import credits
from lp_builder.extensions import db
from lp_builder.models.base import utcnow
from lp_builder.models.generation_run import GenerationRun
from lp_builder.models.user_settings import UserSettings


def _auth_user(user_id, created_at):
    return {"id": user_id, "email": f"{user_id}@example.com", "created_at": created_at, "last_sign_in_at": None}


def _run(user_id="u1", type="image", status="succeeded", cost="0.134", created_at=None, model="gemini-3-pro-image-preview"):
    run = GenerationRun(
        user_id=user_id,
        type=type,
        model=model,
        input_prompt="p",
        status=status,
        estimated_cost=Decimal(cost),
        image_count=1 if type == "image" else None,
        duration_ms=100,
    )
    if created_at is not None:
        run.created_at = created_at
    db.session.add(run)
    db.session.commit()
    return run


def test_admin_endpoints_reject_regular_users(client, user):
    _, headers = user

    for method, url in [
        ("get", "/api/v1/admin/users"),
        ("get", "/api/v1/admin/credits"),
        ("get", "/api/v1/admin/stats"),
        ("get", "/api/v1/admin/generation-runs"),
    ]:
        assert getattr(client, method)(url, headers=headers).status_code == 403


def test_list_users_sorts_banned_last_then_newest(client, admin, make_user):
    _, headers = admin
    banned_id, _ = make_user(is_banned=True)
    old_id, _ = make_user()
    new_id, _ = make_user(plan="pro")
    auth_users = [
        _auth_user(banned_id, "2026-03-01T00:00:00Z"),
        _auth_user(old_id, "2026-01-01T00:00:00Z"),
        _auth_user(new_id, "2026-02-01T00:00:00Z"),
    ]

    with patch("lp_builder.clients.storage.list_auth_users", return_value=auth_users):
        res = client.get("/api/v1/admin/users", headers=headers)

    rows = res.get_json()
    assert [r["id"] for r in rows] == [new_id, old_id, banned_id]
    assert rows[0]["plan"] == "pro"
    assert rows[2]["isBanned"] is True
    assert rows[0]["usage"]["totalPages"] == 0


def test_ban_and_unban(client, admin, user):
    admin_id, headers = admin
    user_id, user_headers = user

    res = client.delete("/api/v1/admin/users", json={"userId": user_id, "action": "ban", "reason": "fraud"}, headers=headers)
    assert res.status_code == 200
    assert res.get_json()["isBanned"] is True

    settings = UserSettings.query.filter_by(user_id=user_id).one()
    assert settings.banned_by == admin_id
    assert client.get("/api/v1/user/settings", headers=user_headers).status_code == 403

    res = client.delete("/api/v1/admin/users", json={"userId": user_id, "action": "unban"}, headers=headers)
    assert res.get_json()["isBanned"] is False
    assert res.get_json()["banReason"] is None


def test_ban_requires_valid_action(client, admin):
    _, headers = admin

    res = client.delete("/api/v1/admin/users", json={"userId": "x", "action": "delete"}, headers=headers)

    assert res.status_code == 400


def test_admin_adjusts_credit(client, admin, pro_user):
    _, headers = admin
    user_id, _ = pro_user

    res = client.post("/api/v1/admin/credits", json={"userId": user_id, "amount": "12.5"}, headers=headers)

    assert res.status_code == 200
    body = res.get_json()
    assert body["currentBalanceUsd"] == 12.5
    assert body["transaction"]["type"] == "adjustment"
    assert "Credit granted by admin" in body["transaction"]["description"]

    summary = client.get(f"/api/v1/admin/credits?userId={user_id}", headers=headers).get_json()
    assert summary["currentBalanceUsd"] == 12.5

    balances = client.get("/api/v1/admin/credits", headers=headers).get_json()
    assert [b["userId"] for b in balances] == [user_id]


def test_admin_credit_validation(client, admin):
    _, headers = admin

    assert client.post("/api/v1/admin/credits", json={"userId": "u1"}, headers=headers).status_code == 400
    assert client.post("/api/v1/admin/credits", json={"userId": "u1", "amount": "lots"}, headers=headers).status_code == 400


def test_generation_stats(client, admin):
    _, headers = admin
    _run()
    _run(type="copy", model="gemini-2.0-flash", cost="0.001")
    _run(status="failed")
    _run(created_at=utcnow() - timedelta(days=40))

    res = client.get("/api/v1/admin/stats?days=30", headers=headers)

    body = res.get_json()
    assert body["period"]["days"] == 30
    assert body["summary"]["totalCalls"] == 3
    assert body["summary"]["totalImages"] == 2
    assert body["summary"]["totalCost"] == 0.269
    assert body["errorRate"]["failed"] == 1
    assert {m["model"]: m["count"] for m in body["byModel"]} == {
        "gemini-3-pro-image-preview": 2,
        "gemini-2.0-flash": 1,
    }
    assert {t["type"] for t in body["byType"]} == {"image", "copy"}
    assert len(body["daily"]) in (30, 31)


def test_stats_days_must_be_positive(client, admin):
    _, headers = admin

    assert client.get("/api/v1/admin/stats?days=0", headers=headers).status_code == 400
    assert client.get("/api/v1/admin/stats?days=abc", headers=headers).status_code == 400


def test_generation_runs_are_cursor_paginated(client, admin):
    _, headers = admin
    now = utcnow()
    for i in range(5):
        _run(created_at=now - timedelta(minutes=i))

    first = client.get("/api/v1/admin/generation-runs?limit=2", headers=headers).get_json()
    assert len(first["items"]) == 2
    assert first["pagination"]["has_more"] is True

    cursor = first["pagination"]["next_cursor"]
    second = client.get("/api/v1/admin/generation-runs", query_string={"limit": 2, "cursor": cursor}, headers=headers).get_json()
    third = client.get(
        "/api/v1/admin/generation-runs",
        query_string={"limit": 2, "cursor": second["pagination"]["next_cursor"]},
        headers=headers,
    ).get_json()

    seen = [r["id"] for page in (first, second, third) for r in page["items"]]
    assert len(seen) == len(set(seen)) == 5
    assert third["pagination"] == {"has_more": False, "next_cursor": None}


def test_generation_runs_reject_bad_cursor(client, admin):
    _, headers = admin

    res = client.get("/api/v1/admin/generation-runs?cursor=garbage", headers=headers)

    assert res.status_code == 400


def test_balance_listing_includes_users_without_settings(client, admin):
    _, headers = admin
    credits.get_or_create_balance("solo")

    assert [b["userId"] for b in client.get("/api/v1/admin/credits", headers=headers).get_json()] == ["solo"]
