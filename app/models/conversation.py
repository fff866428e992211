# app/models/conversation.py
from sqlalchemy import Column, String, ForeignKey, DateTime, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.mixins import CreatedAtMixin, generate_id, utcnow

ANONYMOUS_DISPLAY_NAME = "Anonymous"

class Conversation(Base, CreatedAtMixin):
    __tablename__ = "conversations"

    id = Column(String(16), primary_key=True, default=generate_id, index=True)
    context_type = Column(String(64), nullable=True)
    context_id = Column(String(64), nullable=True)
    title = Column(String(200), nullable=True)
    created_by = Column(String(64), nullable=False, index=True)
    last_message_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    messages = relationship("Message", back_populates="conversation")
    participants = relationship("ConversationParticipant", back_populates="conversation", order_by="ConversationParticipant.user_id")

    __table_args__ = (
        CheckConstraint('(context_type IS NULL) = (context_id IS NULL)', name='check_complete_context_pair'),
        Index('ix_conversations_context', "context_type", "context_id"),
    )

    def __repr__(self):
        return f"<Conversation {self.id} - {self.title}>"

class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    conversation_id = Column(String(16), ForeignKey("conversations.id"), primary_key=True)
    user_id = Column(String(64), primary_key=True, index=True)
    display_name = Column(String(100), nullable=True)
    last_seen_at = Column(DateTime(timezone=True), nullable=True)

    conversation = relationship("Conversation", back_populates="participants")

    def __repr__(self):
        return f"<ConversationParticipant {self.user_id} - Conversation: {self.conversation_id}>"
