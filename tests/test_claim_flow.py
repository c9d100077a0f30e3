import threading

from app.db.session import SessionLocal
from app.db.models.assignment import Assignment
from app.db.models.job import Job
from app.db.models.vendor import Vendor
from app.repositories.assignment import AssignmentRepository
from app.repositories.job import JobRepository
from app.repositories.part import PartRepository
from app.repositories.vendor import VendorRepository
from app.schemas.auth import CallerContext
from app.services.assignment_services import AssignmentService
from app.services.claim_services import ClaimService
from app.services.exceptions import ServiceError
from app.services.job_services import JobService
from app.services.ledger_services import LedgerService


def _claim_service(session) -> ClaimService:
    job_service = JobService(job_repo=JobRepository(session))
    assignment_repo = AssignmentRepository(session)
    vendor_repo = VendorRepository(session)
    assignment_service = AssignmentService(
        assignment_repo=assignment_repo,
        vendor_repo=vendor_repo,
        job_service=job_service,
        ledger=LedgerService(part_repo=PartRepository(session)),
    )
    return ClaimService(
        job_service=job_service,
        assignment_service=assignment_service,
        assignment_repo=assignment_repo,
        vendor_repo=vendor_repo,
    )


def test_claim_creates_assignment_and_marks_job_assigned(client, act_as, dispatcher, vendor_user):
    act_as(dispatcher)
    resp = client.post("/jobs", json={
        "so_number": " so-1001 ",
        "customer_name": "Dana",
        "customer_last_name": "Reyes",
        "customer_address": "1 Main St",
        "customer_city": "Austin",
        "customer_state": "TX",
        "customer_zip": "78701",
        "customer_phone": "512-555-0100",
        "appliance_type": "Dishwasher",
        "service_description": "Leaking at the door",
        "scheduled_date": "2026-11-03T09:00:00",
        "scheduled_time_window": "08:00-12:00",
        "priority": "high",
    })
    assert resp.status_code == 201, resp.text
    job = resp.json()
    assert job["so_number"] == "SO-1001"
    assert job["status"] == "available"

    act_as(vendor_user)
    resp = client.post(f"/jobs/{job['id']}/claims", json={"vendor_notes": "bringing a gasket"})
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["job_id"] == job["id"]
    assignment = body["assignment"]
    assert assignment["status"] == "assigned"
    assert assignment["vendor_id"] == vendor_user.vendor_id
    assert assignment["vendor_notes"] == "bringing a gasket"
    assert assignment["scheduled_arrival"].startswith("2026-11-03T09:00:00")

    resp = client.get(f"/jobs/{job['id']}")
    assert resp.status_code == 200
    assert resp.json()["status"] == "assigned"

    resp = client.get("/vendors/me")
    assert resp.status_code == 200, resp.text
    assert resp.json()["stats"]["total_jobs"] == 1


def test_claim_without_body_is_accepted(client, act_as, make_job, vendor_user):
    job_id = make_job()
    act_as(vendor_user)
    resp = client.post(f"/jobs/{job_id}/claims")
    assert resp.status_code == 201, resp.text
    assert resp.json()["assignment"]["vendor_notes"] is None


def test_second_vendor_gets_job_unavailable(client, act_as, db, claimed, make_vendor, make_user):
    other = act_as(make_user(vendor_id=make_vendor()))
    resp = client.post(f"/jobs/{claimed.job_id}/claims")
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "JOB_UNAVAILABLE"

    assert db.query(Assignment).filter(Assignment.job_id == claimed.job_id).count() == 1
    assert db.get(Vendor, other.vendor_id).total_jobs == 0


def test_same_vendor_claiming_twice_is_a_duplicate(client, claimed):
    resp = client.post(f"/jobs/{claimed.job_id}/claims")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error_code"] == "DUPLICATE_CLAIM"
    assert body["details"]["assignment_id"] == claimed.assignment_id


def test_claim_unknown_job_is_not_found(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.post("/jobs/9999/claims")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "JOB_NOT_FOUND"


def test_claim_requires_a_vendor_profile(client, act_as, make_job, make_user):
    job_id = make_job()
    act_as(make_user(vendor_id=None))
    resp = client.post(f"/jobs/{job_id}/claims")
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "VENDOR_PROFILE_REQUIRED"


def test_inactive_vendor_cannot_claim(client, act_as, db, make_job, make_vendor, make_user):
    job_id = make_job()
    act_as(make_user(vendor_id=make_vendor(is_active=False)))
    resp = client.post(f"/jobs/{job_id}/claims")
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "VENDOR_INACTIVE"
    assert db.get(Job, job_id).status == "available"


def test_claim_of_job_on_hold_is_unavailable(client, act_as, make_job, vendor_user):
    job_id = make_job(status="on_hold")
    act_as(vendor_user)
    resp = client.post(f"/jobs/{job_id}/claims")
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "JOB_UNAVAILABLE"


def test_conditional_update_refuses_stale_read(db, make_job):
    job_id = make_job()
    stale = SessionLocal()
    try:
        # Loaded while still available
        assert stale.get(Job, job_id).status == "available"

        assert JobRepository(db).mark_assigned(job_id) is True
        db.commit()

        repo = JobRepository(stale)
        assert repo.mark_assigned(job_id) is False
        stale.rollback()
        assert repo.get_by_id(job_id).status == "assigned"
    finally:
        stale.close()


def test_concurrent_claims_exactly_one_wins(make_job, make_vendor):
    job_id = make_job()
    vendor_ids = [make_vendor() for _ in range(6)]
    barrier = threading.Barrier(len(vendor_ids))
    outcomes = {}

    def _claim(vendor_id):
        session = SessionLocal()
        try:
            caller = CallerContext(
                user_id=vendor_id,
                role="registered_user",
                vendor_id=vendor_id,
                permissions=frozenset({"view_assigned_jobs"}),
            )
            service = _claim_service(session)
            barrier.wait()
            try:
                assignment = service.claim(job_id, caller, session)
                outcomes[vendor_id] = ("claimed", assignment.id)
            except ServiceError as e:
                outcomes[vendor_id] = ("rejected", e.error_code)
        finally:
            session.close()

    threads = [threading.Thread(target=_claim, args=(vid,)) for vid in vendor_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(outcomes) == len(vendor_ids)
    winners = [vid for vid, (kind, _) in outcomes.items() if kind == "claimed"]
    assert len(winners) == 1
    assert all(
        outcome == ("rejected", "JOB_UNAVAILABLE")
        for vid, outcome in outcomes.items()
        if vid != winners[0]
    )

    check = SessionLocal()
    try:
        assignments = check.query(Assignment).filter(Assignment.job_id == job_id).all()
        assert [a.vendor_id for a in assignments] == winners
        assert check.get(Job, job_id).status == "assigned"
        totals = {v.id: v.total_jobs for v in check.query(Vendor).all()}
        assert totals[winners[0]] == 1
        assert sum(totals.values()) == 1
    finally:
        check.close()


def test_bulk_claim_reports_each_job(client, act_as, make_job, vendor_user):
    open_job = make_job()
    taken_job = make_job(status="assigned")
    act_as(vendor_user)

    resp = client.post("/jobs/confirm", json={"job_ids": [open_job, taken_job, 4242]})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [c["job_id"] for c in body["confirmed"]] == [open_job]
    failures = {f["job_id"]: f["error_code"] for f in body["failed"]}
    assert failures == {taken_job: "JOB_UNAVAILABLE", 4242: "JOB_NOT_FOUND"}

    resp = client.get(f"/jobs/{open_job}")
    assert resp.json()["status"] == "assigned"


def test_bulk_claim_without_vendor_profile_fails_up_front(client, act_as, make_job, make_user):
    job_id = make_job()
    act_as(make_user(vendor_id=None))
    resp = client.post("/jobs/confirm", json={"job_ids": [job_id]})
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "VENDOR_PROFILE_REQUIRED"


def test_bulk_claim_rejects_empty_list(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.post("/jobs/confirm", json={"job_ids": []})
    assert resp.status_code == 422


def test_cancelled_assignment_returns_job_to_board(client, act_as, claimed, make_vendor, make_user):
    resp = client.patch(f"/assignments/{claimed.assignment_id}", json={"status": "cancelled"})
    assert resp.status_code == 200, resp.text

    resp = client.get("/jobs/available")
    assert [j["id"] for j in resp.json()["items"]] == [claimed.job_id]

    second = act_as(make_user(vendor_id=make_vendor()))
    resp = client.post(f"/jobs/{claimed.job_id}/claims")
    assert resp.status_code == 201, resp.text
    assert resp.json()["assignment"]["vendor_id"] == second.vendor_id

    # The first vendor's cancelled assignment no longer counts as a claim
    act_as(claimed.user)
    resp = client.post(f"/jobs/{claimed.job_id}/claims")
    assert resp.status_code == 409
    assert resp.json()["error_code"] == "JOB_UNAVAILABLE"
