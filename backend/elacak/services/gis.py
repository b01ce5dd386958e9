"""
Map projections over housing-record coordinates.

Boundaries come from a BoundaryProvider. The synthetic provider below draws a
square per district/village from its numeric id; a real GIS source replaces
it without touching the callers.
"""
import json
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from elacak.models.housing import HousingRecord
from elacak.models.reference import District, Village
from elacak.schemas.gis import DistrictBoundary, HeatmapCell, MapPoint, VillageBoundary

# 3 decimal places, roughly a 100m grid.
HEATMAP_CELL = Decimal("0.001")


class BoundaryProvider(Protocol):
    def district_boundary(self, district: District) -> dict[str, Any]: ...

    def village_boundary(self, village: Village) -> dict[str, Any]: ...


def _square(lon0: float, lat0: float, size: float) -> dict[str, Any]:
    ring = [
        [lon0, lat0],
        [lon0 + size, lat0],
        [lon0 + size, lat0 - size],
        [lon0, lat0 - size],
        [lon0, lat0],
    ]
    return {"type": "Polygon", "coordinates": [ring]}


class SyntheticBoundaryProvider:
    ORIGIN_LON = 105.25
    ORIGIN_LAT = -5.40

    def district_boundary(self, district: District) -> dict[str, Any]:
        return _square(
            self.ORIGIN_LON + district.id * 0.1, self.ORIGIN_LAT - district.id * 0.1, 0.05
        )

    def village_boundary(self, village: Village) -> dict[str, Any]:
        return _square(
            self.ORIGIN_LON + village.id * 0.01, self.ORIGIN_LAT - village.id * 0.01, 0.02
        )


def get_boundary_provider() -> BoundaryProvider:
    return SyntheticBoundaryProvider()


def _cell(value: Decimal) -> Decimal:
    # Half-up towards +infinity, so -5.3615 bins to -5.361.
    return ((value / HEATMAP_CELL) + Decimal("0.5")).to_integral_value(ROUND_FLOOR) * HEATMAP_CELL


async def get_map_data(
    db: AsyncSession,
    district_id: int | None = None,
    village_id: int | None = None,
    housing_status: str | None = None,
) -> list[MapPoint]:
    stmt = select(HousingRecord).where(
        HousingRecord.latitude.is_not(None), HousingRecord.longitude.is_not(None)
    )
    if district_id is not None:
        stmt = stmt.where(HousingRecord.district_id == district_id)
    if village_id is not None:
        stmt = stmt.where(HousingRecord.village_id == village_id)
    if housing_status is not None:
        stmt = stmt.where(HousingRecord.housing_status == housing_status)

    result = await db.execute(stmt.order_by(HousingRecord.id))
    return [
        MapPoint(
            id=record.id,
            latitude=float(record.latitude),
            longitude=float(record.longitude),
            housing_status=record.housing_status,
            head_of_household=record.head_of_household,
            address=record.address,
        )
        for record in result.scalars().all()
    ]


async def get_heatmap_data(db: AsyncSession) -> list[HeatmapCell]:
    result = await db.execute(
        select(HousingRecord.latitude, HousingRecord.longitude)
        .where(HousingRecord.latitude.is_not(None), HousingRecord.longitude.is_not(None))
        .order_by(HousingRecord.id)
    )

    cells: dict[tuple[Decimal, Decimal], int] = {}
    for latitude, longitude in result.all():
        key = (_cell(Decimal(latitude)), _cell(Decimal(longitude)))
        cells[key] = cells.get(key, 0) + 1

    return [
        HeatmapCell(latitude=float(lat), longitude=float(lon), intensity=count)
        for (lat, lon), count in cells.items()
    ]


async def get_district_boundaries(
    db: AsyncSession, provider: BoundaryProvider
) -> list[DistrictBoundary]:
    result = await db.execute(select(District).order_by(District.id))
    return [
        DistrictBoundary(
            district_id=district.id,
            district_name=district.name,
            boundary_geojson=json.dumps(provider.district_boundary(district)),
        )
        for district in result.scalars().all()
    ]


async def get_village_boundaries(
    db: AsyncSession, provider: BoundaryProvider, district_id: int | None = None
) -> list[VillageBoundary]:
    stmt = select(Village)
    if district_id is not None:
        stmt = stmt.where(Village.district_id == district_id)
    result = await db.execute(stmt.order_by(Village.id))
    return [
        VillageBoundary(
            village_id=village.id,
            village_name=village.name,
            district_id=village.district_id,
            boundary_geojson=json.dumps(provider.village_boundary(village)),
        )
        for village in result.scalars().all()
    ]
