# app/services/conversation_service.py
from sqlalchemy.orm import Session, aliased
from sqlalchemy import func, or_
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple
from datetime import datetime
import logging

from app.exceptions import ForbiddenError, InvalidInputError, require_caller
from app.models.conversation import Conversation, ConversationParticipant
from app.models.mixins import generate_id, later_of, utcnow

logger = logging.getLogger(__name__)


class ConversationPage(NamedTuple):
    items: List[Conversation]
    total_count: int
    has_next_page: bool
    has_previous_page: bool


def canonicalize_participants(caller_id: str, requested_ids: Iterable[str]) -> List[str]:
    """
    Union of the requested participants and the caller, deduplicated and
    sorted so the same logical set always has the same ordering.
    """
    participant_ids = set()
    for user_id in list(requested_ids) + [caller_id]:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInputError("Participant ids must be non-empty strings")
        participant_ids.add(user_id)
    return sorted(participant_ids)


def _check_context_pair(context_type: Optional[str], context_id: Optional[str]) -> bool:
    """Return True for a complete context pair, False for none; reject halves."""
    if (context_type is None) != (context_id is None):
        raise InvalidInputError("context_type and context_id must be provided together")
    return context_type is not None


class ConversationService:
    """Resolves conversations and gates access on participation"""

    def __init__(self, db: Session):
        self.db = db

    def resolve_or_create(
        self,
        creator_id: str,
        participant_ids: List[str],
        context_type: Optional[str] = None,
        context_id: Optional[str] = None,
        title: Optional[str] = None,
        display_names: Optional[Dict[str, str]] = None,
    ) -> Tuple[Conversation, bool]:
        """
        Return the conversation for this context and participant set, creating it
        when none exists yet.

        With a context pair the lookup is idempotent: an existing conversation
        with exactly the same participants is returned untouched (title and
        display names are not updated). Without a context pair a new
        conversation is always created.

        Returns:
            Tuple of (conversation, created).
        """
        creator_id = require_caller(creator_id)
        if not participant_ids:
            raise InvalidInputError("participant_ids must contain at least one user id")
        has_context = _check_context_pair(context_type, context_id)

        canonical_ids = canonicalize_participants(creator_id, participant_ids)

        if has_context:
            existing = self.find_by_context_and_participants(context_type, context_id, canonical_ids)
            if existing:
                logger.info(
                    f"Returning existing conversation {existing.id} for context {context_type}/{context_id}"
                )
                return existing, False

        names = display_names or {}
        now = utcnow()
        conversation = Conversation(
            id=generate_id(),
            context_type=context_type,
            context_id=context_id,
            title=title,
            created_by=creator_id,
            last_message_at=now,
            created_at=now,
        )
        self.db.add(conversation)
        for user_id in canonical_ids:
            self.db.add(ConversationParticipant(
                conversation_id=conversation.id,
                user_id=user_id,
                display_name=names.get(user_id),
                last_seen_at=None,
            ))

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(conversation)

        logger.info(f"Conversation {conversation.id} created with {len(canonical_ids)} participants")
        return conversation, True

    def find_by_context_and_participants(
        self, context_type: str, context_id: str, participant_ids: List[str]
    ) -> Optional[Conversation]:
        """
        Find a conversation attached to the context whose participant set is
        exactly ``participant_ids``: same size and every id a member. Subsets
        and supersets do not match.
        """
        participant_ids = sorted(set(participant_ids))
        if not participant_ids:
            return None
        expected = len(participant_ids)

        member_count = self.db.query(func.count(ConversationParticipant.user_id)).filter(
            ConversationParticipant.conversation_id == Conversation.id
        ).correlate(Conversation).scalar_subquery()

        matching_count = self.db.query(func.count(ConversationParticipant.user_id)).filter(
            ConversationParticipant.conversation_id == Conversation.id,
            ConversationParticipant.user_id.in_(participant_ids)
        ).correlate(Conversation).scalar_subquery()

        # Oldest first, so duplicates from a create race resolve to the same row
        return self.db.query(Conversation).filter(
            Conversation.context_type == context_type,
            Conversation.context_id == context_id,
            member_count == expected,
            matching_count == expected
        ).order_by(Conversation.created_at, Conversation.id).first()

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        """Get a conversation by ID, without any access check"""
        return self.db.query(Conversation).filter(Conversation.id == conversation_id).first()

    def find_participant(self, conversation_id: str, user_id: str) -> Optional[ConversationParticipant]:
        return self.db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.user_id == user_id
        ).first()

    def get_participants(self, conversation_id: str) -> List[ConversationParticipant]:
        return self.db.query(ConversationParticipant).filter(
            ConversationParticipant.conversation_id == conversation_id
        ).order_by(ConversationParticipant.user_id).all()

    def check_user_access(self, user_id: str, conversation_id: str) -> bool:
        """Check if a user is a participant of a conversation"""
        return self.find_participant(conversation_id, user_id) is not None

    def get_for_caller(self, conversation_id: str, caller_id: str) -> Optional[Conversation]:
        """
        Get a conversation the caller participates in.

        Non-participants get None exactly as for a missing conversation, so the
        result never reveals whether the id exists.
        """
        caller_id = require_caller(caller_id)
        conversation = self.get_conversation(conversation_id)
        if not conversation or not self.check_user_access(caller_id, conversation_id):
            return None
        return conversation

    def get_by_context_for_pair(
        self, context_type: str, context_id: str, other_participant_id: str, caller_id: str
    ) -> Optional[Conversation]:
        """Get the two-party conversation between caller and another user for a context"""
        caller_id = require_caller(caller_id)
        _check_context_pair(context_type, context_id)
        participant_ids = canonicalize_participants(caller_id, [other_participant_id])

        conversation = self.find_by_context_and_participants(context_type, context_id, participant_ids)
        if not conversation or not self.check_user_access(caller_id, conversation.id):
            return None
        return conversation

    def list_for_caller(
        self,
        caller_id: str,
        context_type: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ConversationPage:
        """
        Get conversations where the caller participates, most recently active first.

        ``search`` matches case-insensitively against the title or any
        participant's display name.
        """
        caller_id = require_caller(caller_id)
        if limit < 1:
            raise InvalidInputError("limit must be at least 1")
        if offset < 0:
            raise InvalidInputError("offset must not be negative")

        query = self.db.query(Conversation).join(
            ConversationParticipant,
            Conversation.id == ConversationParticipant.conversation_id
        ).filter(
            ConversationParticipant.user_id == caller_id
        )

        if context_type is not None:
            query = query.filter(Conversation.context_type == context_type)

        if search:
            search_term = f"%{search}%"
            named = aliased(ConversationParticipant)
            name_match = self.db.query(named.user_id).filter(
                named.conversation_id == Conversation.id,
                named.display_name.ilike(search_term)
            ).exists()
            query = query.filter(
                or_(
                    Conversation.title.ilike(search_term),
                    name_match
                )
            )

        total_count = query.count()
        conversations = query.order_by(
            Conversation.last_message_at.desc(),
            Conversation.created_at.desc(),
            Conversation.id
        ).offset(offset).limit(limit).all()

        return ConversationPage(
            items=conversations,
            total_count=total_count,
            has_next_page=offset + limit < total_count,
            has_previous_page=offset > 0,
        )

    def mark_conversation_seen(
        self, conversation_id: str, caller_id: str, seen_at: Optional[datetime] = None
    ) -> ConversationParticipant:
        """
        Advance the caller's watermark for one conversation.

        The watermark only moves forward; a ``seen_at`` earlier than the stored
        value leaves it unchanged.
        """
        caller_id = require_caller(caller_id)
        participant = self.find_participant(conversation_id, caller_id)
        if not participant:
            raise ForbiddenError("Not a participant in this conversation")

        participant.last_seen_at = later_of(participant.last_seen_at, seen_at or utcnow())
        self.db.commit()
        self.db.refresh(participant)

        logger.debug(f"User {caller_id} marked conversation {conversation_id} seen")
        return participant
