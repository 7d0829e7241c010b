# app/comments/repository.py
from __future__ import annotations

from collections import defaultdict
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.comments.models import Comment


async def create_comment(
    db: AsyncSession,
    *,
    post_id: int,
    author_id: int,
    author_username: str,
    text: str,
) -> Comment:
    c = Comment(
        post_id=post_id,
        author_id=author_id,
        author_username=author_username,
        text=text,
    )
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


async def get_comment(db: AsyncSession, post_id: int, comment_id: int) -> Comment | None:
    # el comentario tiene que pertenecer a ESE post
    res = await db.execute(
        select(Comment).where(Comment.id == comment_id, Comment.post_id == post_id)
    )
    return res.scalar_one_or_none()


def _newest_first(q):
    return q.order_by(Comment.created_at.desc(), Comment.id.desc())


async def list_post_comments(db: AsyncSession, post_id: int) -> List[Comment]:
    res = await db.execute(_newest_first(select(Comment).where(Comment.post_id == post_id)))
    return list(res.scalars())


async def comments_by_post(db: AsyncSession, post_ids: list[int]) -> dict[int, List[Comment]]:
    """Un solo query para todos los posts del feed."""
    if not post_ids:
        return {}
    res = await db.execute(_newest_first(select(Comment).where(Comment.post_id.in_(post_ids))))
    out: dict[int, List[Comment]] = defaultdict(list)
    for c in res.scalars():
        out[c.post_id].append(c)
    return out


async def delete_comment(db: AsyncSession, comment_id: int) -> None:
    await db.execute(delete(Comment).where(Comment.id == comment_id))
    await db.flush()
