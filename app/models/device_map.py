from sqlalchemy import Column, String, Integer
from app.db.session import Base


class DeviceAlias(Base):
    """Human-readable name for a device. Owned by the app backend; read-only here."""
    __tablename__ = "device_map"

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False, unique=True, index=True)
    device_name = Column(String, nullable=False)
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)
