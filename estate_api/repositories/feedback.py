"""
Feedback repository for contact form submissions.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from estate_api.repositories.base import BaseRepository
from estate_api.models.feedback import Feedback
from typing import List
import logging

logger = logging.getLogger(__name__)


class FeedbackRepository(BaseRepository[Feedback]):

    def __init__(self, db: AsyncSession):
        super().__init__(Feedback, db)

    async def get_recent(self, limit: int = 5) -> List[Feedback]:
        """Most recent feedback entries, newest first, with the submitting user loaded."""
        try:
            query = (
                select(Feedback)
                .order_by(desc(Feedback.created_at), desc(Feedback.id))
                .limit(limit)
            )
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get recent feedback: {e}")
            raise
