import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models, schemas
from app.core.exceptions import NotFound
from app.models.enums import NotificationType

logger = logging.getLogger(__name__)

async def submit_feedback(
    db: AsyncSession, *, feedback_in: schemas.FeedbackCreate, current_user: models.User
) -> models.Feedback:
    feedback = await crud.feedback.create(
        db,
        obj_in=feedback_in,
        user_id=current_user.id,
        user_email=current_user.email,
        is_addressed=False,
        timestamp=datetime.utcnow(),
    )
    logger.info(f"User {current_user.id} submitted feedback {feedback.id}")
    return feedback

async def list_own_feedback(db: AsyncSession, *, user_id: int) -> List[models.Feedback]:
    return await crud.feedback.get_newest_first(db, user_id=user_id)

async def list_feedback(db: AsyncSession, *, is_addressed: Optional[bool] = None) -> List[models.Feedback]:
    return await crud.feedback.get_newest_first(db, is_addressed=is_addressed)

async def get_feedback(db: AsyncSession, *, feedback_id: int) -> models.Feedback:
    feedback = await crud.feedback.get(db, id=feedback_id)
    if not feedback:
        raise NotFound("Feedback not found.")
    return feedback

async def mark_addressed(db: AsyncSession, *, feedback_id: int, admin_notes: str = "") -> models.Feedback:
    feedback = await get_feedback(db, feedback_id=feedback_id)
    feedback = await crud.feedback.update(
        db, db_obj=feedback, obj_in={"is_addressed": True, "admin_notes": admin_notes}
    )
    logger.info(f"Feedback {feedback.id} marked as addressed")

    try:
        await crud.crud_notification.create_notification(
            db,
            user_id=feedback.user_id,
            type=NotificationType.FEEDBACK_ADDRESSED,
            title="Feedback Addressed",
            message=f"Your feedback has been addressed.{f' Notes: {admin_notes}' if admin_notes else ''}",
            related_entity_id=feedback.id,
        )
    except Exception as e:
        logger.error(f"Failed to notify user {feedback.user_id} about feedback {feedback.id}: {e}", exc_info=True)
        await db.rollback()
        await db.refresh(feedback)
    return feedback

async def update_notes(db: AsyncSession, *, feedback_id: int, admin_notes: str) -> models.Feedback:
    feedback = await get_feedback(db, feedback_id=feedback_id)
    return await crud.feedback.update(db, db_obj=feedback, obj_in={"admin_notes": admin_notes})

async def delete_feedback(db: AsyncSession, *, feedback_id: int) -> None:
    await get_feedback(db, feedback_id=feedback_id)
    await crud.feedback.remove(db, id=feedback_id)
    logger.info(f"Deleted feedback {feedback_id}")
