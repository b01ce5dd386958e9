from datetime import datetime

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    user_id: int
    action: str
    resource_type: str
    resource_id: int | None
    details: str | None
    ip_address: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class SecurityReport(BaseModel):
    suspicious_activities: int
    failed_logins: int
    data_exports: int
    recent_changes: int
