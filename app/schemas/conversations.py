from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from app.schemas.base import PaginatedResponse

class DisplayNameInput(BaseModel):
    user_id: str = Field(..., min_length=1)
    display_name: str = Field(..., max_length=100)

class ConversationCreate(BaseModel):
    participant_ids: List[str] = Field(..., min_length=1)
    context_type: Optional[str] = Field(None, min_length=1, max_length=64)
    context_id: Optional[str] = Field(None, min_length=1, max_length=64)
    title: Optional[str] = Field(None, max_length=200)
    display_names: Optional[List[DisplayNameInput]] = None

    @model_validator(mode="after")
    def check_context_pair(self):
        if (self.context_type is None) != (self.context_id is None):
            raise ValueError("context_type and context_id must be provided together")
        return self

class ParticipantResponse(BaseModel):
    user_id: str
    display_name: Optional[str] = None
    last_seen_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ConversationResponse(BaseModel):
    id: str
    context_type: Optional[str] = None
    context_id: Optional[str] = None
    title: Optional[str] = None
    created_by: str
    last_message_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True

class ConversationSummaryResponse(ConversationResponse):
    has_unread: bool = False

class ConversationDetailResponse(ConversationSummaryResponse):
    participants: List[ParticipantResponse]

class ConversationList(PaginatedResponse):
    items: List[ConversationSummaryResponse]
