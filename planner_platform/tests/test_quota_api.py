"""HTTP tests for the quota blueprint."""

from __future__ import annotations

from planner_app.models import QuotaAdjustmentLog


def test_current_quota_is_created_on_first_read(client, auth_headers):
    resp = client.get("/api/quota/current", headers=auth_headers)

    assert resp.status_code == 200
    quota = resp.get_json()["quota"]
    assert quota["total_allowed"] == 20
    assert quota["generations_used"] == 0
    assert quota["remaining"] == 20


def test_request_more_quota(client, auth_headers):
    resp = client.post(
        "/api/quota/request",
        json={"requested_amount": 5, "reason": "Planning two projects this month"},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    data = resp.get_json()
    assert data["quota"]["total_allowed"] == 25
    assert data["adjustment"]["status"] == "approved"
    assert QuotaAdjustmentLog.query.count() == 1


def test_request_more_quota_validation(client, auth_headers):
    resp = client.post(
        "/api/quota/request",
        json={"requested_amount": 500, "reason": "short"},
        headers=auth_headers,
    )

    assert resp.status_code == 400
    assert set(resp.get_json()["errors"]) == {"requested_amount", "reason"}
    assert QuotaAdjustmentLog.query.count() == 0


def test_history_lists_recent_months(client, auth_headers):
    client.get("/api/quota/current", headers=auth_headers)

    history = client.get("/api/quota/history?months=4", headers=auth_headers).get_json()["history"]

    assert len(history) == 4
    assert history[0]["id"] is not None
    assert all(item["id"] is None for item in history[1:])
    assert all(item["remaining"] == 20 for item in history)


def test_quota_requires_identity(client):
    assert client.get("/api/quota/current").status_code == 401
