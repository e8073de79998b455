"""
Feedback service for the public contact form.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from estate_api.models.feedback import Feedback
from estate_api.models.user import User
from estate_api.repositories.feedback import FeedbackRepository
from estate_api.schemas.feedback import FeedbackCreate
from estate_api.utils.exceptions import BadRequestError
import logging

logger = logging.getLogger(__name__)


class FeedbackService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.feedback_repo = FeedbackRepository(db_session)

    async def submit(self, feedback_data: FeedbackCreate, user: Optional[User] = None) -> Feedback:
        """
        Store a feedback entry.

        Args:
            feedback_data: Validated form fields
            user: Logged-in submitter, if any

        Returns:
            Created feedback entry

        Raises:
            BadRequestError: If the entry could not be stored
        """
        create_data = feedback_data.model_dump()
        create_data["user_id"] = user.id if user else None

        try:
            feedback = await self.feedback_repo.create(create_data)
        except Exception as e:
            logger.error(f"Failed to store feedback from {feedback_data.email}: {e}")
            raise BadRequestError("Failed to submit feedback")

        logger.info(f"Feedback received from {feedback.email} (ID: {feedback.id})")
        return feedback
