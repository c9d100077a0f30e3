from app.core.config import settings
from app.repositories.request_log import RequestLogRepository


def test_correlation_id_header_present_on_404(client):
    resp = client.get("/this-path-does-not-exist")
    assert resp.status_code == 404
    assert "X-Correlation-ID" in resp.headers


def test_incoming_correlation_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Correlation-ID": "  dispatch-trace-1  "})
    assert resp.status_code == 200
    assert resp.headers["X-Correlation-ID"] == "dispatch-trace-1"

    resp = client.get("/health", headers={"X-Correlation-ID": "x" * 200})
    assert resp.headers["X-Correlation-ID"] == "x" * 64


def test_failed_request_is_recorded_with_error_code(client, db, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.post("/jobs/5150/claims", headers={"X-Correlation-ID": "trace-missing-job"})
    assert resp.status_code == 404
    assert resp.json()["correlation_id"] == "trace-missing-job"

    rows = RequestLogRepository(db).list_by_correlation_id("trace-missing-job")
    assert len(rows) == 1
    row = rows[0]
    assert row.direction == "inbound"
    assert row.method == "POST"
    assert row.raw_path == "/jobs/5150/claims"
    assert row.status_code == 404
    assert row.error_code == "JOB_NOT_FOUND"
    assert row.user_id == vendor_user.id
    assert row.vendor_id == vendor_user.vendor_id


def test_request_logging_can_be_disabled(client, db, monkeypatch):
    monkeypatch.setattr(settings, "ENABLE_REQUEST_LOGGING", False)
    resp = client.get("/health", headers={"X-Correlation-ID": "trace-quiet"})
    assert resp.headers["X-Correlation-ID"] == "trace-quiet"
    assert RequestLogRepository(db).list_by_correlation_id("trace-quiet") == []
