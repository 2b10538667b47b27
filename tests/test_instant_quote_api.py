"""
Instant quote API tests: parts geometry + POST /api/instant-quote end to end.

Uses the seeded default catalog: Aluminum 6061 (1.2 machinability),
As Machined, Standard tolerance, default USD rate card ($0.75/min three-axis,
$25 setup, 8% tax, $15 shipping).
"""

import pytest

from cnc_quoting.routers.instant_quote import UNPRICEABLE_DETAIL


def _by_name(client, path, name):
    rows = client.get(path).json()
    return next(r for r in rows if r["name"] == name)


def _part(client, geometry=True):
    part = client.post("/api/parts/", json={"file_url": "uploads/bracket.step", "file_name": "bracket.step"}).json()
    if geometry:
        resp = client.patch(f"/api/parts/{part['id']}/geometry", json={
            "volume_mm3": 8000.0,
            "surface_area_mm2": 2400.0,
            "bbox": {"x": {"min": 0, "max": 20}, "y": {"min": 0, "max": 20}, "z": {"min": 0, "max": 20}},
        })
        assert resp.status_code == 200
    return part["id"]


def _quote_body(client, part_id, **overrides):
    body = {
        "part_id": part_id,
        "material_id": _by_name(client, "/api/materials/", "Aluminum 6061")["id"],
        "finish_id": _by_name(client, "/api/finishes/", "As Machined")["id"],
        "tolerance_id": _by_name(client, "/api/tolerances/", "Standard (+/- 0.1mm)")["id"],
        "quantity": 1,
    }
    body.update(overrides)
    return body


# ============================================================
# Parts
# ============================================================

def test_register_part_starts_without_geometry(client):
    part = client.post("/api/parts/", json={"file_url": "uploads/a.stl"}).json()
    assert part["status"] == "uploaded"
    assert part["volume_mm3"] is None


def test_record_geometry_marks_processed(client):
    part_id = _part(client)
    part = client.get(f"/api/parts/{part_id}").json()
    assert part["status"] == "processed"
    assert part["volume_mm3"] == 8000.0
    assert part["bbox"]["x"]["max"] == 20


def test_geometry_must_be_positive(client):
    part_id = _part(client, geometry=False)
    resp = client.patch(f"/api/parts/{part_id}/geometry", json={"volume_mm3": 0, "surface_area_mm2": 10})
    assert resp.status_code == 422


def test_mark_failed(client):
    part_id = _part(client, geometry=False)
    assert client.post(f"/api/parts/{part_id}/failed").json()["status"] == "error"


def test_geometry_is_written_once(client):
    part_id = _part(client)
    resp = client.patch(f"/api/parts/{part_id}/geometry", json={"volume_mm3": 1.0, "surface_area_mm2": 1.0})
    assert resp.status_code == 409
    assert client.get(f"/api/parts/{part_id}").json()["volume_mm3"] == 8000.0


def test_processed_part_cannot_be_marked_failed(client):
    part_id = _part(client)
    assert client.post(f"/api/parts/{part_id}/failed").status_code == 409
    assert client.get(f"/api/parts/{part_id}").json()["status"] == "processed"


def test_failed_part_can_still_receive_geometry(client):
    part_id = _part(client, geometry=False)
    client.post(f"/api/parts/{part_id}/failed")
    resp = client.patch(f"/api/parts/{part_id}/geometry", json={"volume_mm3": 8000.0, "surface_area_mm2": 2400.0})
    assert resp.status_code == 200
    assert resp.json()["status"] == "processed"


def test_unknown_part_is_404(client):
    assert client.get("/api/parts/missing").status_code == 404


# ============================================================
# Instant quote
# ============================================================

def test_instant_quote_end_to_end(seeded_client):
    part_id = _part(seeded_client)
    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id))
    assert resp.status_code == 200
    data = resp.json()
    b = data["pricing_breakdown"]

    # (10 + 2) min * 1.2 machinability = 14.4 min; 14.4 * 0.75 + 25 setup
    assert b["machining_time_min"] == pytest.approx(14.4, abs=0.01)
    assert b["machining_cost_raw"] == pytest.approx(35.8, abs=0.01)
    assert b["finish_cost_raw"] == 0.0
    assert b["shipping_amount"] == 15.0
    assert b["currency"] == "USD"
    assert b["machine_class"] == "three_axis"
    assert b["total_price"] == pytest.approx(54.01, abs=0.01)
    assert data["unit_price"] == pytest.approx(54.01, abs=0.01)
    assert data["line_total"] == b["total_price"]


def test_instant_quote_quantity_discount(seeded_client):
    part_id = _part(seeded_client)
    data = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id, quantity=25)).json()
    b = data["pricing_breakdown"]
    assert b["quantity_discount_percentage"] == pytest.approx(0.2)
    assert data["unit_price"] * 25 == pytest.approx(data["line_total"], abs=0.13)


def test_part_without_geometry_is_unpriceable(seeded_client):
    part_id = _part(seeded_client, geometry=False)
    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id))
    assert resp.status_code == 422
    assert resp.json()["detail"] == UNPRICEABLE_DETAIL


def test_deactivated_material_is_unpriceable(seeded_client):
    part_id = _part(seeded_client)
    body = _quote_body(seeded_client, part_id)
    seeded_client.patch(f"/api/materials/{body['material_id']}", json={"is_active": False})
    resp = seeded_client.post("/api/instant-quote/", json=body)
    assert resp.status_code == 422
    assert resp.json()["detail"] == UNPRICEABLE_DETAIL


def test_unknown_region_is_unpriceable(seeded_client):
    part_id = _part(seeded_client)
    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id, region="mars"))
    assert resp.status_code == 422


def test_regional_card_and_machine_class(seeded_client):
    seeded_client.post("/api/rate-cards/", json={
        "region": "eu", "currency": "EUR", "five_axis_rate_per_min": 2.0,
        "machine_setup_fee": 25, "tax_rate": 0.2, "shipping_flat": 15,
    })
    part_id = _part(seeded_client)

    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(
        seeded_client, part_id, region="eu", machine_class="five_axis",
    ))
    assert resp.status_code == 200
    b = resp.json()["pricing_breakdown"]
    assert b["currency"] == "EUR"
    assert b["region"] == "eu"
    assert b["machining_cost_raw"] == pytest.approx(14.4 * 2.0 + 25, abs=0.01)

    # eu card has no three-axis rate
    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id, region="eu"))
    assert resp.status_code == 422


@pytest.mark.parametrize("overrides", [
    {"quantity": 0},
    {"quantity": -3},
    {"quantity": 1.5},
    {"region": ""},
    {"machine_class": "laser"},
])
def test_invalid_request_rejected(seeded_client, overrides):
    part_id = _part(seeded_client)
    resp = seeded_client.post("/api/instant-quote/", json=_quote_body(seeded_client, part_id, **overrides))
    assert resp.status_code == 422
    assert resp.json()["detail"] != UNPRICEABLE_DETAIL


def test_quote_is_repeatable(seeded_client):
    part_id = _part(seeded_client)
    body = _quote_body(seeded_client, part_id, quantity=3)
    first = seeded_client.post("/api/instant-quote/", json=body).json()
    second = seeded_client.post("/api/instant-quote/", json=body).json()
    assert first == second


def test_options_lists_active_catalog(seeded_client):
    tol = _by_name(seeded_client, "/api/tolerances/", "Precision (+/- 0.02mm)")
    seeded_client.patch(f"/api/tolerances/{tol['id']}", json={"is_active": False})

    options = seeded_client.get("/api/instant-quote/options").json()
    assert len(options["materials"]) == 5
    assert "Precision (+/- 0.02mm)" not in [t["name"] for t in options["tolerances"]]
    assert options["regions"] == ["default"]


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
