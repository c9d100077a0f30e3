from datetime import datetime
from io import BytesIO

from PIL import Image

from app.db.models.assignment import Assignment
from app.db.models.job import Job
from app.db.models.part import Part
from app.db.models.photo import Photo


def _job_payload(**overrides):
    payload = {
        "so_number": "SO-7001",
        "customer_name": "Ana",
        "customer_last_name": "Lopez",
        "customer_address": "9 Elm St",
        "customer_city": "Dallas",
        "customer_state": "TX",
        "customer_zip": "75201",
        "customer_phone": "214-555-0199",
        "appliance_type": "Washer",
        "service_description": "Drum will not spin",
        "scheduled_date": "2026-11-04T10:00:00",
        "scheduled_time_window": "10:00-14:00",
        "internal_notes": "customer called twice",
    }
    payload.update(overrides)
    return payload


def test_available_jobs_are_ordered_by_date_then_urgency(client, act_as, make_job, vendor_user):
    day_one = datetime(2026, 11, 2, 9, 0)
    day_two = datetime(2026, 11, 3, 9, 0)
    later_low = make_job(scheduled_date=day_two, priority="low")
    first_medium = make_job(scheduled_date=day_one, priority="medium")
    first_urgent = make_job(scheduled_date=day_one, priority="urgent")
    first_high = make_job(scheduled_date=day_one, priority="high")
    second_medium = make_job(scheduled_date=day_one, priority="medium")
    make_job(status="assigned")
    make_job(status="on_hold")

    act_as(vendor_user)
    resp = client.get("/jobs/available")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [j["id"] for j in body["items"]] == [
        first_urgent,
        first_high,
        first_medium,
        second_medium,
        later_low,
    ]
    assert body["total"] == 5
    assert body["total_pages"] == 1


def test_available_jobs_filter_and_paginate(client, act_as, make_job, vendor_user):
    austin = [make_job(city="Austin", appliance_type="Refrigerator") for _ in range(3)]
    make_job(city="Round Rock", appliance_type="Refrigerator")
    make_job(city="Austin", appliance_type="Dryer")
    act_as(vendor_user)

    resp = client.get("/jobs/available", params={"city": "AUS", "appliance_type": "fridge"})
    assert resp.json()["total"] == 0

    resp = client.get("/jobs/available", params={"city": "aus", "appliance_type": "refrig", "page_size": 2})
    body = resp.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert [j["id"] for j in body["items"]] == austin[:2]

    resp = client.get("/jobs/available", params={"city": "aus", "appliance_type": "refrig", "page_size": 2, "page": 2})
    assert [j["id"] for j in resp.json()["items"]] == austin[2:]

    resp = client.get("/jobs/available", params={"page": 9})
    assert resp.json()["items"] == []
    assert resp.json()["total"] == 5


def test_available_jobs_page_size_is_bounded(client, act_as, vendor_user):
    act_as(vendor_user)
    assert client.get("/jobs/available", params={"page_size": 101}).status_code == 422
    assert client.get("/jobs/available", params={"page": 0}).status_code == 422


def test_job_board_hides_internal_notes(client, act_as, dispatcher, vendor_user):
    act_as(dispatcher)
    resp = client.post("/jobs", json=_job_payload())
    assert resp.status_code == 201, resp.text
    job = resp.json()
    assert job["internal_notes"] == "customer called twice"
    assert job["created_by"] == dispatcher.id

    act_as(vendor_user)
    item = client.get("/jobs/available").json()["items"][0]
    assert item["id"] == job["id"]
    assert "internal_notes" not in item
    assert "created_by" not in item


def test_job_detail_hides_internal_notes_from_vendors(client, db, act_as, make_job, dispatcher, vendor_user):
    job_id = make_job(so_number="SO-4400")
    job = db.get(Job, job_id)
    job.internal_notes = "customer owes $400, do not extend credit"
    db.commit()

    act_as(vendor_user)
    for path in (f"/jobs/{job_id}", "/jobs/so/so-4400"):
        resp = client.get(path)
        assert resp.status_code == 200, resp.text
        assert resp.json()["id"] == job_id
        assert "internal_notes" not in resp.json()
        assert "created_by" not in resp.json()

    act_as(dispatcher)
    resp = client.get(f"/jobs/{job_id}")
    assert resp.json()["internal_notes"] == "customer owes $400, do not extend credit"
    resp = client.get("/jobs/so/SO-4400")
    assert resp.json()["internal_notes"] == "customer owes $400, do not extend credit"


def test_assignment_detail_job_omits_internal_notes(client, db, claimed):
    job = db.get(Job, claimed.job_id)
    job.internal_notes = "dispatcher only"
    db.commit()

    resp = client.get(f"/assignments/{claimed.assignment_id}")
    assert resp.status_code == 200, resp.text
    assert resp.json()["job"]["id"] == claimed.job_id
    assert "internal_notes" not in resp.json()["job"]


def test_lookup_by_unknown_service_order(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.get("/jobs/so/SO-0000")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "JOB_NOT_FOUND"


def test_dispatcher_lists_every_job_by_status(client, act_as, make_job, dispatcher, vendor_user):
    available = [make_job(), make_job()]
    held = make_job(status="on_hold")
    done = make_job(status="completed")

    act_as(dispatcher)
    resp = client.get("/jobs")
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total"] == 4
    assert sorted(j["id"] for j in body["items"]) == sorted(available + [held, done])
    assert "internal_notes" in body["items"][0]

    resp = client.get("/jobs", params={"status": "on_hold"})
    assert [j["id"] for j in resp.json()["items"]] == [held]

    resp = client.get("/jobs", params={"status": "available", "page_size": 1})
    assert resp.json()["total"] == 2
    assert resp.json()["total_pages"] == 2
    assert len(resp.json()["items"]) == 1

    assert client.get("/jobs", params={"status": "archived"}).status_code == 422

    act_as(vendor_user)
    resp = client.get("/jobs")
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PERMISSION_DENIED"


def test_duplicate_service_order_is_rejected(client, act_as, dispatcher):
    act_as(dispatcher)
    assert client.post("/jobs", json=_job_payload()).status_code == 201
    resp = client.post("/jobs", json=_job_payload(so_number="so-7001"))
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "SO_NUMBER_EXISTS"


def test_invalid_job_payloads(client, act_as, dispatcher):
    act_as(dispatcher)
    assert client.post("/jobs", json=_job_payload(so_number="   ")).status_code == 422
    assert client.post("/jobs", json=_job_payload(priority="critical")).status_code == 422
    assert client.post("/jobs", json=_job_payload(customer_email="not-an-email")).status_code == 422


def test_vendor_cannot_publish_jobs(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.post("/jobs", json=_job_payload())
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PERMISSION_DENIED"


def test_unknown_job_is_not_found(client, act_as, dispatcher):
    act_as(dispatcher)
    resp = client.get("/jobs/4040")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "JOB_NOT_FOUND"


def test_partial_update_and_manual_hold(client, act_as, db, make_job, dispatcher):
    job_id = make_job()
    act_as(dispatcher)

    resp = client.put(f"/jobs/{job_id}", json={"priority": "urgent", "notes": "gate code 1234"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["priority"] == "urgent"
    assert body["notes"] == "gate code 1234"
    assert body["customer_city"] == "Austin"

    resp = client.put(f"/jobs/{job_id}", json={"status": "on_hold", "customer_name": None})
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "on_hold"
    assert resp.json()["customer_name"] == "Dana"
    assert client.get("/jobs/available").json()["total"] == 0

    resp = client.put(f"/jobs/{job_id}", json={"status": "available"})
    assert resp.json()["status"] == "available"


def test_assigned_status_cannot_be_set_by_hand(client, act_as, make_job, dispatcher):
    job_id = make_job()
    act_as(dispatcher)
    resp = client.put(f"/jobs/{job_id}", json={"status": "assigned"})
    assert resp.status_code == 422


def test_manual_status_conflicts_with_active_assignment(client, act_as, claimed, dispatcher):
    act_as(dispatcher)
    resp = client.put(f"/jobs/{claimed.job_id}", json={"status": "available"})
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "JOB_STATUS_CONFLICT"
    assert client.get(f"/jobs/{claimed.job_id}").json()["status"] == "assigned"


def test_delete_job_removes_everything_beneath_it(client, act_as, db, claimed, dispatcher, storage):
    part = client.post(
        f"/assignments/{claimed.assignment_id}/parts",
        json={"part_number": "DRN-1", "part_name": "Drain pump", "quantity": 1, "unit_cost": 60.0},
    ).json()
    buf = BytesIO()
    Image.new("RGB", (4, 4), "green").save(buf, format="PNG")
    buf.seek(0)
    resp = client.post(f"/parts/{part['id']}/photos", files=[("files", ("pump.png", buf, "image/png"))])
    assert resp.status_code == 201, resp.text
    photo_url = resp.json()[0]["url"]

    act_as(dispatcher)
    resp = client.delete(f"/jobs/{claimed.job_id}")
    assert resp.status_code == 200, resp.text
    assert resp.json()["deleted_id"] == claimed.job_id

    db.expire_all()
    assert db.get(Job, claimed.job_id) is None
    assert db.query(Assignment).count() == 0
    assert db.query(Part).count() == 0
    assert db.query(Photo).count() == 0
    assert storage.removed == [photo_url]

    assert client.delete(f"/jobs/{claimed.job_id}").status_code == 404
