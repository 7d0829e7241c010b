#app/comments/router.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_user_id
from app.db.session import get_session
from app.comments.schemas import CommentCreate, CommentsOut
from app.comments import service as svc

# cuelga de /posts: los comentarios no existen fuera de su post
router = APIRouter(prefix="/posts", tags=["comments"])


@router.post("/{post_id}/comment", response_model=CommentsOut)
async def add_comment_endpoint(
    post_id: int,
    payload: CommentCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    comments = await svc.add_comment(db, post_id, user_id, payload.text)
    await db.commit()
    return {"comments": comments}


@router.delete("/{post_id}/comment/{comment_id}", response_model=CommentsOut)
async def delete_comment_endpoint(
    post_id: int,
    comment_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
):
    comments = await svc.delete_comment(db, post_id, comment_id, user_id)
    await db.commit()
    return {"comments": comments}
