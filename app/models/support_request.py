from sqlalchemy import Column, String, Integer, Text
from app.db.session import Base


class SupportRequest(Base):
    __tablename__ = "support_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=False, index=True)
    created_at = Column(Integer, nullable=False, index=True)
    updated_at = Column(Integer, nullable=False)
