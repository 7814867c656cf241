from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from lp_builder.extensions import db


def test_health_reports_database_up(client):
    res = client.get("/api/v1/health")

    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "healthy"
    assert body["services"] == {"database": "up"}
    assert body["timestamp"]


def test_health_reports_unhealthy_when_database_fails(client):
    error = OperationalError("SELECT 1", {}, Exception("connection refused"))
    with patch.object(db.session, "execute", side_effect=error):
        res = client.get("/api/v1/health")

    assert res.status_code == 503
    assert res.get_json()["status"] == "unhealthy"


def test_openapi_document_is_served(client):
    res = client.get("/openapi/lp-builder.yaml")

    assert res.status_code == 200
    assert b"LP Builder API" in res.data
