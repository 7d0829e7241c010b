# app/users/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.deps import get_current_user_id, get_settings
from app.db.session import get_session
from app.users.schemas import AvatarUpdate, TokenOut, UserCreate, UserLogin, UserOut
from app.users import service as svc

auth_router = APIRouter(prefix="/auth", tags=["auth"])
router = APIRouter(prefix="/users", tags=["users"])


@auth_router.post("/register", response_model=TokenOut)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    token = await svc.register_user(db, settings, payload.username, payload.password)
    await db.commit()
    return {"access_token": token, "token_type": "bearer"}


@auth_router.post("/login", response_model=TokenOut)
async def login(
    payload: UserLogin,
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    token = await svc.login_user(db, settings, payload.username, payload.password)
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
async def me(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    return await svc.get_user(db, user_id)


@router.patch("/me", response_model=UserOut)
async def update_me(
    payload: AvatarUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    """
    Actualiza el avatar. Los posts ya publicados NO cambian.
    """
    user = await svc.update_avatar(db, user_id, payload.avatar_url)
    await db.commit()
    return user
