from app.models.device import Device
from app.models.device_map import DeviceAlias
from app.models.session import Session
from app.models.support_request import SupportRequest

__all__ = [
    "Device", "DeviceAlias", "Session", "SupportRequest",
]
