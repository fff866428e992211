# app/services/moderation_service.py
from sqlalchemy.orm import Session
from typing import Dict, List, NamedTuple, Optional, Tuple
import logging

from app.exceptions import NotFoundError
from app.models.conversation import ANONYMOUS_DISPLAY_NAME, Conversation, ConversationParticipant
from app.models.message import ANONYMIZED_BODY, ANONYMOUS_SENDER_ID, Message
from app.services.conversation_service import ConversationService
from app.services.message_service import MessageService

logger = logging.getLogger(__name__)


class AnonymizationResult(NamedTuple):
    messages_anonymized: int
    participants_anonymized: int


class ModerationService:
    """
    Privileged operations for trusted internal callers.

    Callers are authenticated upstream by the shared internal secret, so no
    participant checks are made for moderation itself.
    """

    def __init__(self, db: Session):
        self.db = db

    def force_delete(self, message_id: str, reason: Optional[str] = None) -> Message:
        """Tombstone any message, recording the moderation reason when given."""
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if not message:
            raise NotFoundError("Message", message_id)

        message.tombstone(reason)
        self.db.commit()
        self.db.refresh(message)

        logger.info(f"Message {message_id} deleted by moderation (reason: {reason})")
        return message

    def anonymize(self, user_id: str) -> AnonymizationResult:
        """
        Irreversibly strip a user's authored content and display names.

        Messages the user sent lose body, metadata and sender identity; the
        user's participant rows keep their watermarks but get the anonymous
        display name. Messages from other senders are untouched.
        """
        try:
            messages_anonymized = self.db.query(Message).filter(
                Message.sender_id == user_id
            ).update(
                {
                    Message.body: ANONYMIZED_BODY,
                    Message.message_metadata: None,
                    Message.sender_id: ANONYMOUS_SENDER_ID,
                },
                synchronize_session=False
            )
            participants_anonymized = self.db.query(ConversationParticipant).filter(
                ConversationParticipant.user_id == user_id
            ).update(
                {ConversationParticipant.display_name: ANONYMOUS_DISPLAY_NAME},
                synchronize_session=False
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Anonymized user {user_id}: {messages_anonymized} messages, "
            f"{participants_anonymized} participant rows"
        )
        return AnonymizationResult(messages_anonymized, participants_anonymized)

    def create_conversation(
        self,
        created_by: str,
        participant_ids: List[str],
        context_type: Optional[str] = None,
        context_id: Optional[str] = None,
        title: Optional[str] = None,
        display_names: Optional[Dict[str, str]] = None,
    ) -> Tuple[Conversation, bool]:
        """Resolve or create a conversation on behalf of ``created_by``."""
        return ConversationService(self.db).resolve_or_create(
            creator_id=created_by,
            participant_ids=participant_ids,
            context_type=context_type,
            context_id=context_id,
            title=title,
            display_names=display_names,
        )

    def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        body: str,
        metadata: Optional[str] = None,
        reply_to: Optional[str] = None
    ) -> Message:
        """Send a message on behalf of a participant, through the regular ledger."""
        return MessageService(self.db).send(
            conversation_id=conversation_id,
            sender_id=sender_id,
            body=body,
            metadata=metadata,
            reply_to=reply_to,
        )
