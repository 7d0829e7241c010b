# app/feed/router.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.deps import get_current_user_id, get_settings
from app.core.json import UTF8JSONResponse  # JSON siempre UTF-8
from app.db.session import get_session
from app.feed.schemas import LikeOut, MessageOut, PostCreate, PostOut
from app.feed import service as svc

router = APIRouter(
    prefix="/posts",
    tags=["posts"],
    default_response_class=UTF8JSONResponse,
)


@router.get("", response_model=List[PostOut])
async def feed_list(db: AsyncSession = Depends(get_session)):
    # feed público: no pide token
    return await svc.list_feed(db)


@router.get("/{post_id}", response_model=PostOut)
async def post_detail(post_id: int, db: AsyncSession = Depends(get_session)):
    return await svc.get_post_detail(db, post_id)


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def publish(
    payload: PostCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    post = await svc.publish_post(db, settings, user_id, payload.image_url, payload.caption)
    await db.commit()
    return post


@router.put("/{post_id}/like", response_model=LikeOut)
async def toggle_like_on_post(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    likes = await svc.toggle_like(db, post_id, user_id)
    await db.commit()
    return likes


@router.delete("/{post_id}", response_model=MessageOut)
async def delete_post_endpoint(
    post_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    await svc.remove_post(db, post_id, user_id)
    await db.commit()
    return {"message": "post deleted"}
