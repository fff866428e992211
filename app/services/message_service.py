# app/services/message_service.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import List, Optional
import logging

from app.exceptions import ForbiddenError, InvalidInputError, NotFoundError, require_caller
from app.models.message import ANONYMOUS_SENDER_ID, Message
from app.models.conversation import Conversation, ConversationParticipant
from app.models.mixins import generate_id, later_of, utcnow

logger = logging.getLogger(__name__)


class MessageService:
    """Service for handling message operations."""

    def __init__(self, db: Session):
        self.db = db

    def send(
        self,
        conversation_id: str,
        sender_id: str,
        body: str,
        metadata: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> Message:
        """
        Append a message to a conversation.

        The message insert and the conversation's ``last_message_at`` advance
        are committed together; if either fails neither is kept.

        Args:
            conversation_id: ID of the conversation.
            sender_id: User id of the sender, who must be a participant.
            body: The message text.
            metadata: Opaque caller-defined string.
            reply_to: ID of the message being replied to. Not validated.

        Returns:
            The created Message instance.

        Raises:
            NotFoundError: The conversation does not exist.
            ForbiddenError: The sender is not a participant.
        """
        sender_id = require_caller(sender_id)
        if not body:
            raise InvalidInputError("body is required")

        conversation = self.db.query(Conversation).filter(
            Conversation.id == conversation_id
        ).first()
        if not conversation:
            raise NotFoundError("Conversation", conversation_id)

        participant = self.db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == sender_id
        ).first()
        if not participant:
            raise ForbiddenError("Not a participant in this conversation")

        try:
            position = self.db.query(func.coalesce(func.max(Message.position), 0)).filter(
                Message.conversation_id == conversation_id
            ).scalar() + 1

            message = Message(
                id=generate_id(),
                conversation_id=conversation_id,
                sender_id=sender_id,
                body=body,
                message_metadata=metadata,
                reply_to=reply_to,
                is_deleted=False,
                deleted_reason=None,
                position=position,
                created_at=utcnow(),
            )
            self.db.add(message)
            conversation.last_message_at = later_of(conversation.last_message_at, message.created_at)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(message)

        logger.info(f"Message {message.id} sent to conversation {conversation_id}")
        return message

    def get_message(self, message_id: str) -> Optional[Message]:
        """Retrieve a message by its ID."""
        return self.db.query(Message).filter(Message.id == message_id).first()

    def get_conversation_messages(self, conversation_id: str) -> List[Message]:
        """Messages of a conversation, oldest first, insertion order on ties."""
        return self.db.query(Message).filter(
            Message.conversation_id == conversation_id
        ).order_by(Message.created_at, Message.position).all()

    def list_for_caller(self, conversation_id: str, caller_id: str) -> Optional[List[Message]]:
        """
        Messages of a conversation the caller participates in.

        Returns None for non-participants and missing conversations alike.
        """
        caller_id = require_caller(caller_id)
        participant = self.db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == caller_id
        ).first()
        if not participant:
            return None
        return self.get_conversation_messages(conversation_id)

    def delete_own(self, message_id: str, caller_id: str) -> Message:
        """
        Soft-delete a message sent by the caller.

        The body is replaced with the tombstone; metadata and reply_to are
        kept and no reason is recorded.
        """
        caller_id = require_caller(caller_id)
        message = self.get_message(message_id)
        if not message:
            raise NotFoundError("Message", message_id)

        # Only sender can delete their own messages; anonymized ones have no sender
        if message.sender_id != caller_id or message.sender_id == ANONYMOUS_SENDER_ID:
            raise ForbiddenError("Only the sender can delete their message")

        message.tombstone()
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Message {message_id} deleted by its sender")
        return message
