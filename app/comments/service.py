# app/comments/service.py
from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.comments import repository as repo
from app.comments.models import Comment
from app.core.errors import NotFound, Unauthorized, ValidationError
from app.feed.repository import get_post
from app.users.service import get_user


async def add_comment(
    db: AsyncSession, post_id: int, author_id: int, text: str
) -> List[Comment]:
    """
    Agrega un comentario y devuelve la lista completa (más nuevo primero).
    """
    post = await get_post(db, post_id)
    if not post:
        raise NotFound("post not found")

    text = (text or "").strip()
    if not text:
        raise ValidationError("comment text is required")

    author = await get_user(db, author_id)
    await repo.create_comment(
        db,
        post_id=post.id,
        author_id=author.id,
        author_username=author.username,
        text=text,
    )
    return await repo.list_post_comments(db, post.id)


async def delete_comment(
    db: AsyncSession, post_id: int, comment_id: int, requester_id: int
) -> List[Comment]:
    """
    Puede borrar: el autor del comentario o el dueño del post.
    """
    post = await get_post(db, post_id)
    if not post:
        raise NotFound("post not found")

    comment = await repo.get_comment(db, post.id, comment_id)
    if not comment:
        raise NotFound("comment not found")

    if requester_id not in (comment.author_id, post.author_id):
        raise Unauthorized("not allowed to delete this comment")

    await repo.delete_comment(db, comment.id)
    return await repo.list_post_comments(db, post.id)
