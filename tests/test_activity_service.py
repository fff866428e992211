"""
Tests for ActivityService: per-conversation unread flags and the global
new-conversation badge.
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from app.models import UserActivity
from app.models.mixins import ensure_utc, utcnow
from app.services.activity_service import ActivityService
from app.services.conversation_service import ConversationService
from app.services.message_service import MessageService


class TestHasUnread:

    def test_never_viewed_is_unread(self, activity_service: ActivityService, item_conversation):
        assert activity_service.has_unread(item_conversation, "u2") is True

    def test_unread_after_message_then_read_after_mark_seen(
        self,
        activity_service: ActivityService,
        conversation_service: ConversationService,
        message_service: MessageService,
        item_conversation,
    ):
        message_service.send(item_conversation.id, "u1", "hi")
        assert activity_service.has_unread(item_conversation, "u2") is True

        conversation_service.mark_conversation_seen(item_conversation.id, "u2")
        assert activity_service.has_unread(item_conversation, "u2") is False

    def test_new_message_after_seen_is_unread(
        self,
        activity_service: ActivityService,
        conversation_service: ConversationService,
        message_service: MessageService,
        item_conversation,
    ):
        conversation_service.mark_conversation_seen(
            item_conversation.id, "u2", seen_at=utcnow() - timedelta(minutes=5)
        )
        message_service.send(item_conversation.id, "u1", "are you there?")

        assert activity_service.has_unread(item_conversation, "u2") is True

    def test_equal_watermark_is_read(
        self, activity_service: ActivityService, conversation_service: ConversationService, item_conversation
    ):
        conversation_service.mark_conversation_seen(
            item_conversation.id, "u2", seen_at=ensure_utc(item_conversation.last_message_at)
        )

        assert activity_service.has_unread(item_conversation, "u2") is False

    def test_non_participant_never_unread(self, activity_service: ActivityService, item_conversation):
        assert activity_service.has_unread(item_conversation, "u3") is False

    def test_anonymous_caller_never_unread(self, activity_service: ActivityService, item_conversation):
        assert activity_service.has_unread(item_conversation, None) is False


class TestCountNew:

    def test_no_conversations_counts_zero(self, activity_service: ActivityService):
        assert activity_service.count_new("nobody") == 0

    def test_without_activity_row_counts_every_conversation(
        self, activity_service: ActivityService, conversation_service: ConversationService
    ):
        conversation_service.resolve_or_create(creator_id="u1", participant_ids=["u2"])
        conversation_service.resolve_or_create(creator_id="u3", participant_ids=["u1"])
        conversation_service.resolve_or_create(creator_id="u3", participant_ids=["u4"])

        assert activity_service.count_new("u1") == 2
        assert activity_service.count_new("u4") == 1

    def test_mark_all_seen_resets_until_new_message(
        self,
        activity_service: ActivityService,
        message_service: MessageService,
        item_conversation,
    ):
        assert activity_service.count_new("u2") == 1

        activity_service.mark_all_seen("u2")
        assert activity_service.count_new("u2") == 0

        message_service.send(item_conversation.id, "u1", "new offer")
        assert activity_service.count_new("u2") == 1

    def test_marking_one_conversation_seen_keeps_badge(
        self,
        activity_service: ActivityService,
        conversation_service: ConversationService,
        item_conversation,
    ):
        conversation_service.mark_conversation_seen(item_conversation.id, "u2")

        assert activity_service.has_unread(item_conversation, "u2") is False
        assert activity_service.count_new("u2") == 1

    def test_only_conversations_newer_than_watermark(
        self,
        activity_service: ActivityService,
        conversation_service: ConversationService,
        db_session: Session,
    ):
        watermark = utcnow()
        old, _ = conversation_service.resolve_or_create(creator_id="u1", participant_ids=["u2"])
        new, _ = conversation_service.resolve_or_create(creator_id="u1", participant_ids=["u3"])
        old.last_message_at = watermark - timedelta(hours=1)
        new.last_message_at = watermark + timedelta(hours=1)
        db_session.add(UserActivity(user_id="u1", last_seen_at=watermark, updated_at=watermark))
        db_session.commit()

        assert activity_service.count_new("u1") == 1


class TestMarkAllSeen:

    def test_creates_activity_row(self, activity_service: ActivityService, db_session: Session):
        before = utcnow()
        activity = activity_service.mark_all_seen("u1")

        assert activity.user_id == "u1"
        assert ensure_utc(activity.last_seen_at) >= before
        assert db_session.query(UserActivity).count() == 1

    def test_repeated_calls_update_single_row(self, activity_service: ActivityService, db_session: Session):
        first = ensure_utc(activity_service.mark_all_seen("u1").last_seen_at)
        second = ensure_utc(activity_service.mark_all_seen("u1").last_seen_at)

        assert second >= first
        assert db_session.query(UserActivity).count() == 1

    def test_does_not_touch_conversation_watermarks(
        self, activity_service: ActivityService, conversation_service: ConversationService, item_conversation
    ):
        activity_service.mark_all_seen("u2")

        assert conversation_service.find_participant(item_conversation.id, "u2").last_seen_at is None
        assert activity_service.has_unread(item_conversation, "u2") is True
