from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional

from app.crud.base import CRUDBase
from app.models.feedback import Feedback
from app.schemas.feedback import FeedbackCreate, FeedbackAddress

class CRUDFeedback(CRUDBase[Feedback, FeedbackCreate, FeedbackAddress]):
    async def get_newest_first(
        self,
        db: AsyncSession,
        *,
        user_id: Optional[int] = None,
        is_addressed: Optional[bool] = None,
    ) -> List[Feedback]:
        stmt = select(Feedback)
        if user_id is not None:
            stmt = stmt.where(Feedback.user_id == user_id)
        if is_addressed is not None:
            stmt = stmt.where(Feedback.is_addressed == is_addressed)
        stmt = stmt.order_by(Feedback.timestamp.desc(), Feedback.id.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

feedback = CRUDFeedback(Feedback)
