from pydantic import BaseModel, Field


class MapPoint(BaseModel):
    id: int
    latitude: float
    longitude: float
    housing_status: str
    head_of_household: str
    address: str


class HeatmapCell(BaseModel):
    latitude: float
    longitude: float
    intensity: int


class DistrictBoundary(BaseModel):
    district_id: int
    district_name: str
    boundary_geojson: str


class VillageBoundary(BaseModel):
    village_id: int
    village_name: str
    district_id: int
    boundary_geojson: str


class CoordinatesUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
