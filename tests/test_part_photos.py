from io import BytesIO

from PIL import Image

from app.core.config import settings
from app.db.models.photo import Photo


def _png(name="photo.png", color="red"):
    buf = BytesIO()
    Image.new("RGB", (4, 4), color).save(buf, format="PNG")
    buf.seek(0)
    return ("files", (name, buf, "image/png"))


def _part(client, assignment_id):
    resp = client.post(
        f"/assignments/{assignment_id}/parts",
        json={"part_number": "IGN-4", "part_name": "Igniter", "quantity": 1, "unit_cost": 48.0},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_part_photos_are_stored_and_listed(client, claimed, storage):
    part = _part(client, claimed.assignment_id)
    resp = client.post(
        f"/parts/{part['id']}/photos",
        files=[_png("old igniter.png"), _png("new.png", "blue")],
        data={"description": "before and after"},
    )
    assert resp.status_code == 201, resp.text
    photos = resp.json()
    assert len(photos) == 2
    for photo in photos:
        assert photo["part_id"] == part["id"]
        assert photo["assignment_id"] == claimed.assignment_id
        assert photo["photo_type"] == "part"
        assert photo["mime_type"] == "image/png"
        assert photo["description"] == "before and after"
        assert photo["url"].startswith(f"assignments/{claimed.assignment_id}/parts/{part['id']}/")
        assert photo["url"] in storage.objects
    assert photos[0]["original_name"] == "old igniter.png"
    assert " " not in photos[0]["filename"]

    parts = client.get(f"/assignments/{claimed.assignment_id}/parts").json()
    assert len(parts[0]["photos"]) == 2
    # Photos never change cost totals
    assert client.get(f"/assignments/{claimed.assignment_id}").json()["total_parts_cost"] == 48.0


def test_removing_part_photos_is_all_or_nothing(client, db, claimed, storage):
    part = _part(client, claimed.assignment_id)
    photos = client.post(f"/parts/{part['id']}/photos", files=[_png(), _png("b.png")]).json()
    ids = [p["id"] for p in photos]

    resp = client.request("DELETE", f"/parts/{part['id']}/photos", json={"photo_ids": [ids[0], 9999]})
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "PHOTO_NOT_FOUND"
    assert db.query(Photo).count() == 2
    assert storage.removed == []

    resp = client.request("DELETE", f"/parts/{part['id']}/photos", json={"photo_ids": ids})
    assert resp.status_code == 200, resp.text
    assert resp.json()["removed_photo_ids"] == sorted(ids)
    assert db.query(Photo).count() == 0
    assert sorted(storage.removed) == sorted(p["url"] for p in photos)


def test_deleting_a_part_removes_its_photos(client, db, claimed, storage):
    part = _part(client, claimed.assignment_id)
    photo = client.post(f"/parts/{part['id']}/photos", files=[_png()]).json()[0]

    assert client.delete(f"/parts/{part['id']}").status_code == 200
    assert db.query(Photo).count() == 0
    assert storage.removed == [photo["url"]]


def test_assignment_photos_by_type(client, claimed, storage):
    resp = client.post(
        f"/assignments/{claimed.assignment_id}/photos",
        files=[_png()],
        data={"photo_type": "before", "description": "as found"},
    )
    assert resp.status_code == 201, resp.text
    photo = resp.json()[0]
    assert photo["photo_type"] == "before"
    assert photo["part_id"] is None
    assert photo["url"].startswith(f"assignments/{claimed.assignment_id}/before/")

    detail = client.get(f"/assignments/{claimed.assignment_id}").json()
    assert [p["id"] for p in detail["photos"]] == [photo["id"]]

    resp = client.delete(f"/assignments/{claimed.assignment_id}/photos/{photo['id']}")
    assert resp.status_code == 200, resp.text
    assert resp.json()["deleted_id"] == photo["id"]
    assert storage.objects == {}

    resp = client.delete(f"/assignments/{claimed.assignment_id}/photos/{photo['id']}")
    assert resp.status_code == 404


def test_non_image_upload_is_rejected(client, db, claimed, storage):
    resp = client.post(
        f"/assignments/{claimed.assignment_id}/photos",
        files=[("files", ("notes.png", BytesIO(b"definitely not an image"), "image/png"))],
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVALID_FILE_TYPE"
    assert storage.objects == {}
    assert db.query(Photo).count() == 0


def test_oversized_upload_is_rejected(client, claimed, storage, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PHOTO_SIZE_MB", 1)
    big = BytesIO(b"\x89PNG\r\n\x1a\n" + b"\x00" * (1024 * 1024 + 1))
    resp = client.post(
        f"/assignments/{claimed.assignment_id}/photos",
        files=[("files", ("big.png", big, "image/png"))],
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "FILE_SIZE_LIMIT_EXCEEDED"
    assert storage.objects == {}


def test_failed_batch_leaves_nothing_behind(client, db, claimed, storage):
    files = [_png("good.png"), ("files", ("bad.png", BytesIO(b"nope"), "image/png"))]
    resp = client.post(f"/assignments/{claimed.assignment_id}/photos", files=files)
    assert resp.status_code == 400
    assert storage.objects == {}
    assert len(storage.removed) == 1
    assert db.query(Photo).count() == 0


def test_storage_outage_is_reported(client, db, claimed, storage):
    storage.fail_puts = True
    resp = client.post(f"/assignments/{claimed.assignment_id}/photos", files=[_png()])
    assert resp.status_code == 502
    assert resp.json()["error_code"] == "FILE_STORAGE_ERROR"
    assert db.query(Photo).count() == 0


def test_too_many_photos_in_one_upload(client, claimed, monkeypatch):
    monkeypatch.setattr(settings, "MAX_PHOTOS_PER_UPLOAD", 2)
    resp = client.post(
        f"/assignments/{claimed.assignment_id}/photos",
        files=[_png("1.png"), _png("2.png"), _png("3.png")],
    )
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "VALIDATION_ERROR"


def test_other_vendor_cannot_attach_photos(client, act_as, claimed, make_vendor, make_user, storage):
    part = _part(client, claimed.assignment_id)
    act_as(make_user(vendor_id=make_vendor()))
    resp = client.post(f"/parts/{part['id']}/photos", files=[_png()])
    assert resp.status_code == 403
    assert storage.objects == {}
