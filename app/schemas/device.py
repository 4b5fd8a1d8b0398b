from pydantic import BaseModel, Field
from typing import List, Optional

from app.schemas.common import PageMeta
from app.schemas.session import Session


class Device(BaseModel):
    id: int
    device_id: str
    expo_notification_id: Optional[str] = None
    created_at: int  # Unix timestamp
    updated_at: int  # Unix timestamp
    images_limit: int
    user_type: str

    class Config:
        from_attributes = True


class DeviceAlias(BaseModel):
    id: int
    device_id: str
    device_name: str
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class PremiumUser(BaseModel):
    device_id: str
    device_name: Optional[str] = None
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class DevicePage(PageMeta):
    items: List[Device]

    class Config:
        from_attributes = True


class PremiumUserPage(PageMeta):
    items: List[PremiumUser]

    class Config:
        from_attributes = True


class DeviceDetail(BaseModel):
    device: Device
    device_name: Optional[str] = None
    recent_sessions: List[Session]

    class Config:
        from_attributes = True


class PromotePremiumRequest(BaseModel):
    # Older dashboard builds post {"deviceId": ...}
    device_id: Optional[str] = Field(None, alias="deviceId")

    class Config:
        populate_by_name = True


class PromotePremiumResponse(BaseModel):
    success: bool
    device_id: str
