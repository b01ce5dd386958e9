from datetime import datetime

from pydantic import BaseModel, Field

from elacak.schemas.common import DocumentType


class DocumentCreate(BaseModel):
    housing_record_id: int
    document_type: DocumentType
    filename: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=500)
    file_size: int = Field(gt=0)
    mime_type: str = Field(min_length=1, max_length=100)


class DocumentResponse(BaseModel):
    id: int
    housing_record_id: int
    document_type: str
    filename: str
    file_path: str
    file_size: int
    mime_type: str
    uploaded_by: int
    created_at: datetime

    model_config = {"from_attributes": True}
