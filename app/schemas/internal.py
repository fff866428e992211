from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.conversations import ConversationCreate
from app.schemas.messages import MessageBase

class InternalConversationCreate(ConversationCreate):
    """Conversation created on behalf of a user by a trusted service."""
    created_by: str = Field(..., min_length=1)

class InternalMessageCreate(MessageBase):
    """Message sent on behalf of a participant by a trusted service."""
    conversation_id: str = Field(..., min_length=1)
    sender_id: str = Field(..., min_length=1)

class ModerationDeleteRequest(BaseModel):
    reason: Optional[str] = None

class SuccessResponse(BaseModel):
    success: bool = True

class AnonymizeResponse(SuccessResponse):
    messages_anonymized: int
    participants_anonymized: int
