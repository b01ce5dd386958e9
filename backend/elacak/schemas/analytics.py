from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_houses: int
    rtlh_count: int
    rlh_count: int
    pending_verification: int
    districts_count: int
    villages_count: int


class HousingByDistrict(BaseModel):
    district_id: int
    district_name: str
    rtlh_count: int
    rlh_count: int
    total_count: int


class HousingByVillage(BaseModel):
    village_id: int
    village_name: str
    rtlh_count: int
    rlh_count: int
    total_count: int


class VerificationStats(BaseModel):
    pending: int
    verified: int
    rejected: int


class EligibilityShare(BaseModel):
    category: str
    count: int
    percentage: int


class MonthlyTrend(BaseModel):
    month: int
    rtlh_created: int
    rlh_created: int
    verified_count: int
