from app.db.models.job import Job


def test_job_id_path_injection_returns_422(client, act_as, dispatcher):
    act_as(dispatcher)
    # Path param expects int; injection-like string should fail validation
    resp = client.get("/jobs/1 OR 1=1")
    assert resp.status_code == 422


def test_assignment_id_path_injection_returns_422(client, act_as, dispatcher):
    act_as(dispatcher)
    resp = client.patch("/assignments/1; DROP TABLE jobs;--", json={"status": "arrived"})
    assert resp.status_code == 422


def test_assignment_query_params_injection_returns_422(client, act_as, dispatcher):
    act_as(dispatcher)
    # skip and limit are ints; injection-like strings should fail
    resp = client.get("/assignments?skip=0; DROP TABLE assignments;--&limit=100")
    assert resp.status_code == 422


def test_city_filter_is_matched_literally(client, act_as, db, make_job, vendor_user):
    make_job(city="Austin")
    make_job(city="Houston")
    act_as(vendor_user)

    resp = client.get("/jobs/available", params={"city": "%' OR 1=1--"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["total"] == 0
    assert resp.json()["items"] == []

    # LIKE wildcards are escaped too
    resp = client.get("/jobs/available", params={"city": "_"})
    assert resp.json()["total"] == 0
    assert db.query(Job).count() == 2


def test_body_injection_on_bulk_claim_returns_422(client, act_as, vendor_user):
    act_as(vendor_user)
    # Body model expects a list of ints
    resp = client.post("/jobs/confirm", json={"job_ids": ["2 OR 2=2"]})
    assert resp.status_code == 422
