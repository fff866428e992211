from fastapi import APIRouter, Body, Depends, Response, status
from typing import Optional
import logging

from app.schemas import (
    AnonymizeResponse,
    ConversationResponse,
    InternalConversationCreate,
    InternalMessageCreate,
    MessageResponse,
    ModerationDeleteRequest,
    SuccessResponse,
)
from app.api.auth import verify_internal_secret
from app.api.dependencies import get_service
from app.services.moderation_service import ModerationService

logger = logging.getLogger(__name__)

# Every route here is for trusted services holding the internal secret
router = APIRouter(dependencies=[Depends(verify_internal_secret)])


@router.post("/conversation", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: InternalConversationCreate,
    response: Response,
    moderation_service: ModerationService = Depends(get_service(ModerationService)),
):
    """
    Create (or resolve) a conversation on behalf of a user.
    """
    display_names = {
        entry.user_id: entry.display_name for entry in conversation_data.display_names or []
    }
    conversation, created = moderation_service.create_conversation(
        created_by=conversation_data.created_by,
        participant_ids=conversation_data.participant_ids,
        context_type=conversation_data.context_type,
        context_id=conversation_data.context_id,
        title=conversation_data.title,
        display_names=display_names,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    logger.info(f"Internal: conversation {conversation.id} resolved (created={created})")
    return ConversationResponse.model_validate(conversation)


@router.post("/message", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: InternalMessageCreate,
    moderation_service: ModerationService = Depends(get_service(ModerationService)),
):
    """
    Send a message on behalf of a participant.
    """
    message = moderation_service.send_message(
        conversation_id=message_data.conversation_id,
        sender_id=message_data.sender_id,
        body=message_data.body,
        metadata=message_data.metadata,
        reply_to=message_data.reply_to,
    )
    return MessageResponse.model_validate(message)


@router.delete("/message/{message_id}", response_model=SuccessResponse)
async def delete_message(
    message_id: str,
    delete_request: Optional[ModerationDeleteRequest] = Body(None),
    moderation_service: ModerationService = Depends(get_service(ModerationService)),
):
    """
    Delete any message, recording an optional moderation reason.
    """
    reason = delete_request.reason if delete_request else None
    moderation_service.force_delete(message_id, reason)
    return SuccessResponse()


@router.post("/anonymize/{user_id}", response_model=AnonymizeResponse)
async def anonymize_user(
    user_id: str,
    moderation_service: ModerationService = Depends(get_service(ModerationService)),
):
    """
    Irreversibly anonymize everything a user has written.
    """
    result = moderation_service.anonymize(user_id)
    return AnonymizeResponse(
        messages_anonymized=result.messages_anonymized,
        participants_anonymized=result.participants_anonymized,
    )
