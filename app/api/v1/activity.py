from fastapi import APIRouter, Depends

from app.schemas import ActivityCountsResponse, UserActivityResponse
from app.schemas.auth import Principal
from app.api.auth import get_current_principal
from app.api.dependencies import get_service
from app.services.activity_service import ActivityService

router = APIRouter()


@router.get("/counts", response_model=ActivityCountsResponse)
async def get_activity_counts(
    principal: Principal = Depends(get_current_principal),
    activity_service: ActivityService = Depends(get_service(ActivityService))
):
    """
    Get the number of conversations with activity since the user last marked everything seen.
    """
    return ActivityCountsResponse(
        new_conversation_count=activity_service.count_new(principal.user_id)
    )


@router.post("/seen", response_model=UserActivityResponse)
async def mark_all_seen(
    principal: Principal = Depends(get_current_principal),
    activity_service: ActivityService = Depends(get_service(ActivityService))
):
    """
    Mark every conversation as seen for the badge count.
    """
    activity = activity_service.mark_all_seen(principal.user_id)
    return UserActivityResponse.model_validate(activity)
