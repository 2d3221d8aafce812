from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.db.session import get_db
from app.dependencies import get_current_active_user, require_admin

router = APIRouter()

@router.get("", response_model=List[schemas.Announcement])
async def list_active_announcements(
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await services.announcement_service.list_active(db)

@router.get("/all", response_model=List[schemas.Announcement])
async def list_all_announcements(
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.announcement_service.list_all(db)

@router.post("", response_model=schemas.Announcement, status_code=status.HTTP_201_CREATED)
async def post_announcement(
    announcement_in: schemas.AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.announcement_service.post_announcement(
        db, announcement_in=announcement_in, admin_id=admin.id
    )

@router.put("/{announcement_id}", response_model=schemas.Announcement)
async def update_announcement(
    announcement_id: int,
    announcement_in: schemas.AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.announcement_service.update_announcement(
        db, announcement_id=announcement_id, announcement_in=announcement_in
    )

@router.post("/{announcement_id}/activate", response_model=schemas.Announcement)
async def activate_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.announcement_service.set_active(db, announcement_id=announcement_id, is_active=True)

@router.post("/{announcement_id}/deactivate", response_model=schemas.Announcement)
async def deactivate_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.announcement_service.set_active(db, announcement_id=announcement_id, is_active=False)

@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    await services.announcement_service.delete_announcement(db, announcement_id=announcement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
