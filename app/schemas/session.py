from pydantic import BaseModel
from typing import List, Optional

from app.schemas.common import PageMeta


class Session(BaseModel):
    id: int
    session_id: str
    device_id: str
    recording_s3_key: Optional[str] = None
    transcription_s3_key: Optional[str] = None
    generations: Optional[str] = None
    total_generations: Optional[int] = 0
    duration_seconds: Optional[int] = 0
    status: str
    started_at: Optional[int] = None
    ended_at: Optional[int] = None
    created_at: int
    is_listened: int = 0

    class Config:
        from_attributes = True


class SessionPage(PageMeta):
    items: List[Session]

    class Config:
        from_attributes = True
