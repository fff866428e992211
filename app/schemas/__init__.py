"""
Schema definitions for the application.
This module exports all schemas for easy importing throughout the app.
"""

# Import from base
from app.schemas.base import PageInfo, PaginatedResponse

# Import from auth
from app.schemas.auth import Principal

# Import from conversations
from app.schemas.conversations import (
    DisplayNameInput, ConversationCreate, ParticipantResponse, ConversationResponse,
    ConversationSummaryResponse, ConversationDetailResponse, ConversationList
)

# Import from messages
from app.schemas.messages import (
    MessageBase, MessageCreate, MessageResponse, MessageList
)

# Import from activity
from app.schemas.activity import ActivityCountsResponse, UserActivityResponse

# Import from internal
from app.schemas.internal import (
    InternalConversationCreate, InternalMessageCreate, ModerationDeleteRequest,
    SuccessResponse, AnonymizeResponse
)
