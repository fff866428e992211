from typing import Optional
from pydantic import BaseModel
from datetime import datetime

class ActivityCountsResponse(BaseModel):
    new_conversation_count: int

class UserActivityResponse(BaseModel):
    user_id: str
    last_seen_at: Optional[datetime] = None
    updated_at: datetime

    class Config:
        from_attributes = True
