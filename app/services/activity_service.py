# app/services/activity_service.py
from sqlalchemy.orm import Session
from sqlalchemy import func
from typing import Optional
import logging

from app.exceptions import require_caller
from app.models.conversation import Conversation, ConversationParticipant
from app.models.user_activity import UserActivity
from app.models.mixins import ensure_utc, later_of, utcnow

logger = logging.getLogger(__name__)


class ActivityService:
    """
    Unread state for conversations.

    Two watermarks are kept on purpose. ``ConversationParticipant.last_seen_at``
    drives the per-conversation ``has_unread`` flag, while
    ``UserActivity.last_seen_at`` drives the coarser "new conversations" badge.
    Marking one conversation seen never changes the badge; only
    ``mark_all_seen`` resets it.
    """

    def __init__(self, db: Session):
        self.db = db

    def has_unread(self, conversation: Conversation, caller_id: Optional[str]) -> bool:
        """
        True when the caller never viewed the conversation or a message arrived
        after their last view. Always False for non-participants.
        """
        if not caller_id:
            return False
        participant = self.db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation.id,
            ConversationParticipant.user_id == caller_id
        ).first()
        if not participant:
            return False
        if participant.last_seen_at is None:
            return True
        return ensure_utc(conversation.last_message_at) > ensure_utc(participant.last_seen_at)

    def get_user_activity(self, user_id: str) -> Optional[UserActivity]:
        return self.db.query(UserActivity).filter(UserActivity.user_id == user_id).first()

    def count_new(self, user_id: str) -> int:
        """
        Count conversations of the user with activity after their global
        watermark, or all of their conversations when they have none.
        """
        user_id = require_caller(user_id)
        activity = self.get_user_activity(user_id)

        query = self.db.query(func.count(Conversation.id)).join(
            ConversationParticipant,
            Conversation.id == ConversationParticipant.conversation_id
        ).filter(
            ConversationParticipant.user_id == user_id
        )
        if activity and activity.last_seen_at is not None:
            query = query.filter(Conversation.last_message_at > activity.last_seen_at)

        return query.scalar() or 0

    def mark_all_seen(self, user_id: str) -> UserActivity:
        """Move the user's global watermark to now; safe to call repeatedly."""
        user_id = require_caller(user_id)
        now = utcnow()

        activity = self.get_user_activity(user_id)
        if activity:
            activity.last_seen_at = later_of(activity.last_seen_at, now)
            activity.updated_at = now
        else:
            activity = UserActivity(user_id=user_id, last_seen_at=now, updated_at=now)
            self.db.add(activity)

        self.db.commit()
        self.db.refresh(activity)

        logger.debug(f"User {user_id} marked all conversations seen")
        return activity
