from fastapi import APIRouter, Depends, status

from app.exceptions import NotFoundError
from app.schemas import MessageCreate, MessageResponse, MessageList
from app.schemas.auth import Principal
from app.api.auth import get_current_principal
from app.api.dependencies import get_service
from app.services.message_service import MessageService

router = APIRouter()

@router.post(
    "/conversations/{conversation_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_message(
    conversation_id: str,
    message_data: MessageCreate,
    principal: Principal = Depends(get_current_principal),
    message_service: MessageService = Depends(get_service(MessageService))
):
    """
    Send a message in a conversation as the current user.

    The sender must be a participant; the conversation's last activity time
    moves to the new message.
    """
    message = message_service.send(
        conversation_id=conversation_id,
        sender_id=principal.user_id,
        body=message_data.body,
        metadata=message_data.metadata,
        reply_to=message_data.reply_to
    )
    return MessageResponse.model_validate(message)

@router.get(
    "/conversations/{conversation_id}",
    response_model=MessageList
)
async def list_conversation_messages(
    conversation_id: str,
    principal: Principal = Depends(get_current_principal),
    message_service: MessageService = Depends(get_service(MessageService))
):
    """
    Get the messages of a conversation, oldest first.
    """
    messages = message_service.list_for_caller(conversation_id, principal.user_id)
    if messages is None:
        raise NotFoundError("Conversation", conversation_id)

    return MessageList(
        conversation_id=conversation_id,
        items=[MessageResponse.model_validate(message) for message in messages]
    )

@router.delete("/{message_id}", response_model=MessageResponse)
async def delete_message(
    message_id: str,
    principal: Principal = Depends(get_current_principal),
    message_service: MessageService = Depends(get_service(MessageService))
):
    """
    Delete one of the current user's own messages.
    """
    message = message_service.delete_own(message_id, principal.user_id)
    return MessageResponse.model_validate(message)
