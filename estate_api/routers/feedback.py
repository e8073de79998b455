"""
Public feedback endpoint behind the home page contact form.
"""

from fastapi import APIRouter, Depends, status
from typing import Optional

from estate_api.models.user import User
from estate_api.services.feedback import FeedbackService
from estate_api.schemas.feedback import FeedbackCreate, FeedbackSubmitResponse
from estate_api.schemas.error import get_error_responses
from estate_api.utils.dependencies import get_feedback_service, get_optional_current_user


router = APIRouter(prefix="/feedback", tags=["Feedback"])


@router.post(
    "",
    response_model=FeedbackSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit feedback",
    description="No login required. When a valid bearer token is sent the entry is linked to that user.",
    responses=get_error_responses(400, 422)
)
async def submit_feedback(
    feedback_data: FeedbackCreate,
    current_user: Optional[User] = Depends(get_optional_current_user),
    feedback_service: FeedbackService = Depends(get_feedback_service)
) -> FeedbackSubmitResponse:
    await feedback_service.submit(feedback_data, current_user)
    return FeedbackSubmitResponse(message="Feedback submitted successfully")
