"""
ORM models for the conversation store.
Importing this package registers every table on ``Base.metadata``.
"""

from app.models.conversation import ANONYMOUS_DISPLAY_NAME, Conversation, ConversationParticipant
from app.models.message import ANONYMIZED_BODY, ANONYMOUS_SENDER_ID, DELETED_BODY, Message
from app.models.user_activity import UserActivity

__all__ = [
    "ANONYMIZED_BODY",
    "ANONYMOUS_DISPLAY_NAME",
    "ANONYMOUS_SENDER_ID",
    "DELETED_BODY",
    "Conversation",
    "ConversationParticipant",
    "Message",
    "UserActivity",
]
