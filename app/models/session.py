from sqlalchemy import Column, String, Integer, Text
from app.db.session import Base


class Session(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, nullable=False, index=True)
    device_id = Column(String, nullable=False, index=True)
    recording_s3_key = Column(Text, nullable=True)
    transcription_s3_key = Column(Text, nullable=True)
    generations = Column(Text, nullable=True)  # JSON-encoded list written by the app backend
    total_generations = Column(Integer, nullable=True, default=0)
    duration_seconds = Column(Integer, nullable=True, default=0)
    status = Column(String, nullable=False, index=True)  # completed, in_progress, failed
    started_at = Column(Integer, nullable=True)
    ended_at = Column(Integer, nullable=True)
    created_at = Column(Integer, nullable=False, index=True)  # Unix timestamp (seconds)
    is_listened = Column(Integer, nullable=False, default=0)
