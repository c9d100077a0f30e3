import random
from decimal import Decimal

import pytest

from app.db.models.assignment import Assignment
from app.db.models.part import Part


def _add_part(client, assignment_id, quantity, unit_cost, number="P-1", name="Part"):
    return client.post(
        f"/assignments/{assignment_id}/parts",
        json={"part_number": number, "part_name": name, "quantity": quantity, "unit_cost": unit_cost},
    )


def _assignment(client, assignment_id):
    return client.get(f"/assignments/{assignment_id}").json()


def test_totals_follow_part_additions_and_removals(client, claimed):
    resp = _add_part(client, claimed.assignment_id, 2, 65.0, number="CMP-2", name="Start relay")
    assert resp.status_code == 201, resp.text
    first = resp.json()
    assert first["line_total"] == 130.0
    assert first["added_by"] == claimed.user.id
    assert _assignment(client, claimed.assignment_id)["total_parts_cost"] == 130.0

    second = _add_part(client, claimed.assignment_id, 3, 25.0, number="FLT-9", name="Water filter").json()
    body = _assignment(client, claimed.assignment_id)
    assert body["total_parts_cost"] == 205.0
    assert body["total_cost"] == 205.0

    resp = client.delete(f"/parts/{first['id']}")
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_parts_cost"] == 75.0

    parts = client.get(f"/assignments/{claimed.assignment_id}/parts").json()
    assert [p["id"] for p in parts] == [second["id"]]


def test_labor_cost_is_kept_when_parts_change(client, claimed):
    client.patch(f"/assignments/{claimed.assignment_id}", json={"total_labor_cost": 90.0})
    _add_part(client, claimed.assignment_id, 1, 10.5)
    body = _assignment(client, claimed.assignment_id)
    assert body["total_labor_cost"] == 90.0
    assert body["total_parts_cost"] == 10.5
    assert body["total_cost"] == 100.5


def test_totals_match_line_items_after_random_mutations(client, db, claimed):
    rng = random.Random(20261017)
    live = []
    for _ in range(25):
        if live and rng.random() < 0.35:
            part_id = live.pop(rng.randrange(len(live)))
            assert client.delete(f"/parts/{part_id}").status_code == 200
        else:
            resp = _add_part(client, claimed.assignment_id, rng.randint(1, 5), round(rng.uniform(0, 200), 2))
            assert resp.status_code == 201, resp.text
            live.append(resp.json()["id"])

        db.expire_all()
        assignment = db.get(Assignment, claimed.assignment_id)
        line_totals = [p.line_total for p in db.query(Part).filter(Part.assignment_id == claimed.assignment_id)]
        assert assignment.total_parts_cost == sum(line_totals, Decimal("0"))
        assert assignment.total_cost == assignment.total_parts_cost + assignment.total_labor_cost


def test_fractional_amounts_add_up_exactly(client, db, claimed):
    resp = _add_part(client, claimed.assignment_id, 1, 0.1)
    assert resp.status_code == 201, resp.text
    resp = client.patch(f"/assignments/{claimed.assignment_id}", json={"total_labor_cost": 0.2})
    assert resp.status_code == 200, resp.text
    assert resp.json()["total_cost"] == 0.3

    db.expire_all()
    assignment = db.get(Assignment, claimed.assignment_id)
    assert assignment.total_parts_cost == Decimal("0.10")
    assert assignment.total_labor_cost == Decimal("0.20")
    assert assignment.total_cost == Decimal("0.30")
    assert assignment.total_cost == assignment.total_parts_cost + assignment.total_labor_cost

    # Three parts at 0.1 each must still total exactly 0.30 plus labor
    _add_part(client, claimed.assignment_id, 2, 0.1, number="P-2")
    db.expire_all()
    assignment = db.get(Assignment, claimed.assignment_id)
    assert assignment.total_parts_cost == Decimal("0.30")
    assert assignment.total_cost == Decimal("0.50")


def test_unit_cost_is_kept_to_the_cent(client, claimed):
    part = _add_part(client, claimed.assignment_id, 3, 19.999).json()
    assert part["unit_cost"] == 20.0
    assert part["line_total"] == 60.0
    assert _assignment(client, claimed.assignment_id)["total_parts_cost"] == 60.0


@pytest.mark.parametrize("payload", [
    {"part_number": "X", "part_name": "Bad qty", "quantity": 0, "unit_cost": 1.0},
    {"part_number": "X", "part_name": "Bad cost", "quantity": 1, "unit_cost": -0.01},
    {"part_number": "  ", "part_name": "Blank number", "quantity": 1, "unit_cost": 1.0},
])
def test_invalid_parts_are_rejected(client, claimed, payload):
    resp = client.post(f"/assignments/{claimed.assignment_id}/parts", json=payload)
    assert resp.status_code == 422
    assert _assignment(client, claimed.assignment_id)["total_parts_cost"] == 0.0


def test_parts_require_permission(client, act_as, claimed, dispatcher):
    # Dispatchers see parts but do not record them
    act_as(dispatcher)
    assert client.get(f"/assignments/{claimed.assignment_id}/parts").status_code == 200
    resp = _add_part(client, claimed.assignment_id, 1, 5.0)
    assert resp.status_code == 403
    assert resp.json()["error_code"] == "PERMISSION_DENIED"


def test_part_on_unknown_assignment_is_not_found(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = _add_part(client, 31337, 1, 5.0)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "ASSIGNMENT_NOT_FOUND"


def test_deleting_unknown_part_is_not_found(client, act_as, vendor_user):
    act_as(vendor_user)
    resp = client.delete("/parts/999")
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "PART_NOT_FOUND"
