from pydantic import BaseModel
from typing import List

from app.schemas.common import PageMeta


class SupportRequest(BaseModel):
    id: int
    device_id: str
    category: str
    message: str
    status: str
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class SupportRequestPage(PageMeta):
    items: List[SupportRequest]

    class Config:
        from_attributes = True
