# app/models/message.py
from sqlalchemy import Column, String, Text, ForeignKey, Index, Boolean, Integer
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.mixins import CreatedAtMixin, generate_id

DELETED_BODY = "[deleted]"
ANONYMIZED_BODY = "[anonymized]"
ANONYMOUS_SENDER_ID = "anonymous"

class Message(Base, CreatedAtMixin):
    __tablename__ = "messages"

    id = Column(String(16), primary_key=True, default=generate_id)
    body = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes, the column keeps the name
    message_metadata = Column("metadata", Text, nullable=True)
    reply_to = Column(String(16), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_reason = Column(Text, nullable=True)
    # Insertion order within the conversation, breaks created_at ties
    position = Column(Integer, nullable=False, default=0)

    conversation_id = Column(String(16), ForeignKey("conversations.id"), nullable=False, index=True)
    sender_id = Column(String(64), nullable=False, index=True)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index('ix_messages_conversation_created', "conversation_id", "created_at", "position"),
    )

    def tombstone(self, reason=None):
        self.is_deleted = True
        self.body = DELETED_BODY
        self.deleted_reason = reason

    def __repr__(self):
        return f"<Message {self.id} in Conversation {self.conversation_id}>"
