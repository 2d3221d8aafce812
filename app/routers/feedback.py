from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.db.session import get_db
from app.dependencies import get_current_active_user, require_admin

router = APIRouter()

@router.post("", response_model=schemas.Feedback, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    feedback_in: schemas.FeedbackCreate,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await services.feedback_service.submit_feedback(db, feedback_in=feedback_in, current_user=current_user)

@router.get("/me", response_model=List[schemas.Feedback])
async def list_my_feedback(
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await services.feedback_service.list_own_feedback(db, user_id=current_user.id)

@router.get("", response_model=List[schemas.Feedback])
async def list_feedback(
    is_addressed: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.feedback_service.list_feedback(db, is_addressed=is_addressed)

@router.post("/{feedback_id}/address", response_model=schemas.Feedback)
async def mark_feedback_addressed(
    feedback_id: int,
    address_in: schemas.FeedbackAddress,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.feedback_service.mark_addressed(
        db, feedback_id=feedback_id, admin_notes=address_in.admin_notes
    )

@router.put("/{feedback_id}/notes", response_model=schemas.Feedback)
async def update_feedback_notes(
    feedback_id: int,
    address_in: schemas.FeedbackAddress,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.feedback_service.update_notes(
        db, feedback_id=feedback_id, admin_notes=address_in.admin_notes
    )

@router.delete("/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(
    feedback_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    await services.feedback_service.delete_feedback(db, feedback_id=feedback_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
