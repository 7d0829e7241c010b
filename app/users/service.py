# app/users/service.py
from __future__ import annotations

import logging

from jose import JWTError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.errors import (
    DuplicateUser,
    InvalidCredentials,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.users.models import User
from app.users.repository import create_user, get_by_id, get_by_username, set_avatar

log = logging.getLogger("uvicorn")

USERNAME_MIN_LEN = 3
PASSWORD_MIN_LEN = 6


def _issue(user: User, settings: Settings) -> str:
    return create_access_token(
        sub=str(user.id),
        secret=settings.SECRET_KEY,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MIN,
    )


async def register_user(
    db: AsyncSession, settings: Settings, username: str, password: str
) -> str:
    username = (username or "").strip()
    if len(username) < USERNAME_MIN_LEN:
        raise ValidationError(f"username must be at least {USERNAME_MIN_LEN} characters")
    if len(password or "") < PASSWORD_MIN_LEN:
        raise ValidationError(f"password must be at least {PASSWORD_MIN_LEN} characters")

    if await get_by_username(db, username):
        raise DuplicateUser()

    try:
        user = await create_user(db, username, hash_password(password))
    except IntegrityError:
        # otro registro con el mismo username se coló entre el check y el insert
        raise DuplicateUser()

    # El commit lo hace el router
    log.info(f"👤 usuario registrado id={user.id}")
    return _issue(user, settings)


async def login_user(
    db: AsyncSession, settings: Settings, username: str, password: str
) -> str:
    user = await get_by_username(db, (username or "").strip())
    # mismo error para "no existe" y "password incorrecto" (sin enumeración)
    if not user or not verify_password(password or "", user.hashed_password):
        raise InvalidCredentials()
    return _issue(user, settings)


def authenticate(token: str | None, settings: Settings) -> int:
    """Valida el token y devuelve el id de usuario que lleva."""
    if not token:
        raise Unauthenticated("missing token")
    try:
        return int(decode_access_token(token, secret=settings.SECRET_KEY))
    except (JWTError, ValueError):
        raise Unauthenticated("invalid token")


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await get_by_id(db, user_id)
    if not user:
        raise NotFound("user not found")
    return user


async def update_avatar(db: AsyncSession, user_id: int, avatar_url: str | None) -> User:
    """
    Cambia el avatar del usuario. Los posts/comentarios ya publicados
    conservan la copia que tomaron al crearse.
    """
    user = await get_user(db, user_id)
    avatar_url = (avatar_url or "").strip() or None
    return await set_avatar(db, user, avatar_url)
