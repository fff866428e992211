# app/api/dependencies.py
from typing import Type, Callable
from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import NotFoundError
from app.models.conversation import Conversation
from app.schemas.auth import Principal
from app.api.auth import get_current_principal
from app.services.conversation_service import ConversationService

def get_service(service_class: Type) -> Callable:
    """Factory function to create service dependencies with DB injection"""
    def _get_service(db: Session = Depends(get_db)):
        return service_class(db)
    return _get_service

def get_conversation_access(
    conversation_id: str,
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService))
) -> Conversation:
    """
    Verify that the current user has access to the conversation.
    Non-participants get the same 404 as a missing conversation.
    """
    conversation = conversation_service.get_for_caller(conversation_id, principal.user_id)
    if not conversation:
        raise NotFoundError("Conversation", conversation_id)
    return conversation
