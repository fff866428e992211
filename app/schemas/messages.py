# app/schemas/messages.py
from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

class MessageBase(BaseModel):
    """Base message properties."""
    body: str = Field(..., min_length=1)
    metadata: Optional[str] = None
    reply_to: Optional[str] = None

class MessageCreate(MessageBase):
    """Properties required to send a message as the authenticated user."""
    pass

class MessageResponse(BaseModel):
    """Response model for a stored message."""
    id: str
    conversation_id: str
    sender_id: str
    body: str
    metadata: Optional[str] = Field(None, validation_alias="message_metadata")
    reply_to: Optional[str] = None
    is_deleted: bool
    created_at: datetime

    class Config:
        from_attributes = True
        populate_by_name = True

class MessageList(BaseModel):
    """Messages of one conversation, oldest first."""
    conversation_id: str
    items: List[MessageResponse]
