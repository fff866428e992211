from fastapi import APIRouter, Depends, Query, Response, status
from typing import Optional

from app.config import get_settings
from app.exceptions import NotFoundError
from app.schemas import (
    ConversationCreate,
    ConversationDetailResponse,
    ConversationList,
    ConversationResponse,
    ConversationSummaryResponse,
    PageInfo,
    ParticipantResponse,
)
from app.schemas.auth import Principal
from app.api.auth import get_current_principal
from app.api.dependencies import get_service, get_conversation_access
from app.services.conversation_service import ConversationService
from app.services.activity_service import ActivityService
from app.models.conversation import Conversation

router = APIRouter()
settings = get_settings()


def _summary(conversation: Conversation, has_unread: bool) -> ConversationSummaryResponse:
    return ConversationSummaryResponse(
        **ConversationResponse.model_validate(conversation).model_dump(),
        has_unread=has_unread,
    )


@router.post("/", response_model=ConversationDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    conversation_data: ConversationCreate,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService)),
    activity_service: ActivityService = Depends(get_service(ActivityService)),
):
    """
    Create a conversation with the given participants; the caller is always included.

    With a context pair the call is idempotent: an existing conversation with the
    same context and exactly the same participants is returned with status 200.
    """
    display_names = {
        entry.user_id: entry.display_name for entry in conversation_data.display_names or []
    }
    conversation, created = conversation_service.resolve_or_create(
        creator_id=principal.user_id,
        participant_ids=conversation_data.participant_ids,
        context_type=conversation_data.context_type,
        context_id=conversation_data.context_id,
        title=conversation_data.title,
        display_names=display_names,
    )
    if not created:
        response.status_code = status.HTTP_200_OK

    return ConversationDetailResponse(
        **_summary(conversation, activity_service.has_unread(conversation, principal.user_id)).model_dump(),
        participants=[
            ParticipantResponse.model_validate(p)
            for p in conversation_service.get_participants(conversation.id)
        ],
    )


@router.get("/", response_model=ConversationList)
async def list_conversations(
    context_type: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService)),
    activity_service: ActivityService = Depends(get_service(ActivityService)),
):
    """
    Get the current user's conversations, most recently active first.
    """
    page = conversation_service.list_for_caller(
        caller_id=principal.user_id,
        context_type=context_type,
        search=search,
        limit=limit,
        offset=offset,
    )
    return ConversationList(
        items=[
            _summary(conversation, activity_service.has_unread(conversation, principal.user_id))
            for conversation in page.items
        ],
        total_count=page.total_count,
        limit=limit,
        offset=offset,
        page_info=PageInfo(
            has_next_page=page.has_next_page,
            has_previous_page=page.has_previous_page,
        ),
    )


@router.get("/by-context", response_model=ConversationSummaryResponse)
async def get_conversation_by_context(
    context_type: str = Query(..., min_length=1),
    context_id: str = Query(..., min_length=1),
    participant_id: str = Query(..., min_length=1),
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService)),
    activity_service: ActivityService = Depends(get_service(ActivityService)),
):
    """
    Get the conversation between the current user and another participant for a context.
    """
    conversation = conversation_service.get_by_context_for_pair(
        context_type, context_id, participant_id, principal.user_id
    )
    if not conversation:
        raise NotFoundError("Conversation")
    return _summary(conversation, activity_service.has_unread(conversation, principal.user_id))


@router.get("/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation: Conversation = Depends(get_conversation_access),
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService)),
    activity_service: ActivityService = Depends(get_service(ActivityService)),
):
    """
    Get details of a specific conversation, including participants and unread state.
    """
    return ConversationDetailResponse(
        **_summary(conversation, activity_service.has_unread(conversation, principal.user_id)).model_dump(),
        participants=[
            ParticipantResponse.model_validate(p)
            for p in conversation_service.get_participants(conversation.id)
        ],
    )


@router.post("/{conversation_id}/seen", response_model=ParticipantResponse)
async def mark_conversation_seen(
    conversation_id: str,
    principal: Principal = Depends(get_current_principal),
    conversation_service: ConversationService = Depends(get_service(ConversationService)),
):
    """
    Mark a conversation as seen by the current user.
    """
    participant = conversation_service.mark_conversation_seen(conversation_id, principal.user_id)
    return ParticipantResponse.model_validate(participant)
