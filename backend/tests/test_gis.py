"""
Tests for map data, heatmap binning, boundaries and coordinate edits.
"""
import json
from decimal import Decimal

import pytest

from elacak.core.errors import NotFoundError
from elacak.services import gis, housing
from elacak.services.gis import SyntheticBoundaryProvider


@pytest.mark.asyncio
async def test_map_data_skips_records_without_coordinates(make_record, db_session):
    located = await make_record()
    await make_record(latitude=None, longitude=None)
    await make_record(longitude=None)

    points = await gis.get_map_data(db_session)
    assert [p.id for p in points] == [located.id]
    assert points[0].latitude == pytest.approx(-5.39712345)
    assert isinstance(points[0].longitude, float)


@pytest.mark.asyncio
async def test_map_data_filters_are_combined(make_record, db_session, other_village):
    rtlh = await make_record(housing_status="RTLH")
    await make_record(housing_status="RLH")
    await make_record(
        housing_status="RTLH",
        district_id=other_village.district_id,
        village_id=other_village.id,
    )

    points = await gis.get_map_data(
        db_session, district_id=rtlh.district_id, housing_status="RTLH"
    )
    assert [p.id for p in points] == [rtlh.id]

    points = await gis.get_map_data(db_session, village_id=other_village.id)
    assert len(points) == 1


@pytest.mark.asyncio
async def test_heatmap_bins_to_three_decimals(make_record, db_session):
    await make_record(latitude="-5.39712345", longitude="105.26654321")
    await make_record(latitude="-5.39701000", longitude="105.26660000")
    await make_record(latitude="-5.41000000", longitude="105.30000000")
    await make_record(latitude=None, longitude=None)

    cells = {(c.latitude, c.longitude): c.intensity for c in await gis.get_heatmap_data(db_session)}
    assert cells == {(-5.397, 105.267): 2, (-5.41, 105.3): 1}


def test_heatmap_cell_rounds_half_towards_positive_infinity():
    assert gis._cell(Decimal("-5.3615")) == Decimal("-5.361")
    assert gis._cell(Decimal("105.2665")) == Decimal("105.267")
    assert gis._cell(Decimal("105.26649999")) == Decimal("105.266")


@pytest.mark.asyncio
async def test_heatmap_empty(db_session):
    assert await gis.get_heatmap_data(db_session) == []


def test_synthetic_district_boundary_is_closed_square():
    district = type("D", (), {"id": 2})()
    polygon = SyntheticBoundaryProvider().district_boundary(district)
    ring = polygon["coordinates"][0]
    assert polygon["type"] == "Polygon"
    assert len(ring) == 5
    assert ring[0] == ring[-1]
    assert ring[0] == pytest.approx([105.45, -5.60])
    assert ring[2] == pytest.approx([105.50, -5.65])


@pytest.mark.asyncio
async def test_boundaries_are_json_strings(db_session, district, village, other_village):
    provider = SyntheticBoundaryProvider()

    districts = await gis.get_district_boundaries(db_session, provider)
    assert [d.district_id for d in districts] == [district.id, other_village.district_id]
    geometry = json.loads(districts[0].boundary_geojson)
    assert geometry["type"] == "Polygon"

    villages = await gis.get_village_boundaries(db_session, provider, district.id)
    assert [v.village_id for v in villages] == [village.id]
    ring = json.loads(villages[0].boundary_geojson)["coordinates"][0]
    assert ring[1][0] - ring[0][0] == pytest.approx(0.02)


@pytest.mark.asyncio
async def test_update_coordinates(make_record, db_session, admin_user):
    record = await make_record(latitude=None, longitude=None)
    before = record.updated_at

    mutation = await housing.update_coordinates(db_session, record.id, -5.4, 105.3, admin_user.id)
    assert mutation.result.latitude == Decimal("-5.40000000")
    assert mutation.result.longitude == Decimal("105.30000000")
    assert mutation.result.updated_at >= before
    assert mutation.result.verification_status == "PENDING"


@pytest.mark.asyncio
async def test_update_coordinates_missing_record(db_session, admin_user):
    with pytest.raises(NotFoundError):
        await housing.update_coordinates(db_session, 9999, 0, 0, admin_user.id)


@pytest.mark.asyncio
async def test_gis_api(client, make_record):
    record = await make_record(latitude=None, longitude=None)
    assert (await client.get("/api/v1/gis/map-data")).json() == []

    resp = await client.put(
        f"/api/v1/gis/housing-records/{record.id}/coordinates",
        json={"latitude": -5.42, "longitude": 105.28},
    )
    assert resp.status_code == 200
    assert resp.json()["latitude"] == pytest.approx(-5.42)

    points = (await client.get("/api/v1/gis/map-data", params={"housing_status": "RTLH"})).json()
    assert [p["id"] for p in points] == [record.id]

    resp = await client.put(
        f"/api/v1/gis/housing-records/{record.id}/coordinates",
        json={"latitude": 91, "longitude": 105.28},
    )
    assert resp.status_code == 422

    resp = await client.get("/api/v1/gis/boundaries/districts")
    assert resp.status_code == 200
    assert isinstance(resp.json()[0]["boundary_geojson"], str)
