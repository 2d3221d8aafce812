from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app import crud, schemas, services
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/register", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: schemas.UserCreate, db: AsyncSession = Depends(get_db)):
    return await services.auth_service.register_user(db, user_in=user_in)

@router.post("/login", response_model=schemas.TokenWithUser)
async def login_for_access_token_route(
    db: AsyncSession = Depends(get_db), form_data: OAuth2PasswordRequestForm = Depends()
):
    user = await services.auth_service.authenticate_user(db, email=form_data.username, password=form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user. Please contact the library staff.",
        )
    user = await crud.crud_user.touch_last_login(db, user=user)
    access_token = services.auth_service.issue_access_token(user)
    logger.info(f"User {user.id} logged in")
    return schemas.TokenWithUser(
        access_token=access_token, token_type="bearer", user=schemas.User.model_validate(user)
    )
