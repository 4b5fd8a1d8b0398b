from sqlalchemy import Column, String, Integer, Text
from app.db.session import Base


class Device(Base):
    __tablename__ = "devices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False, unique=True, index=True)
    expo_notification_id = Column(Text, nullable=True)
    created_at = Column(Integer, nullable=False, index=True)  # Unix timestamp (seconds)
    updated_at = Column(Integer, nullable=False)  # Unix timestamp (seconds)
    images_limit = Column(Integer, nullable=False, default=0)  # Generation quota
    user_type = Column(String, nullable=False, default="free_user", index=True)  # free_user, premium_user
