# app/feed/repository.py
from collections import defaultdict

from sqlalchemy import select, desc, delete, update, case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.feed.models import Post, PostLike
from app.comments.models import Comment


# -------------------------
# POSTS
# -------------------------
async def create_post(
    db: AsyncSession,
    *,
    author_id: int,
    author_username: str,
    author_avatar: str | None,
    image_url: str,
    caption: str,
) -> Post:
    post = Post(
        author_id=author_id,
        author_username=author_username,
        author_avatar=author_avatar,
        image_url=image_url,
        caption=caption,
        like_count=0,
    )
    db.add(post)
    await db.flush()
    await db.refresh(post)
    return post


async def list_posts(db: AsyncSession) -> list[Post]:
    # sin paginación: el feed completo, más nuevo primero
    q = (
        select(Post)
        .order_by(desc(Post.created_at), desc(Post.id))
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return list(res.scalars())


async def get_post(db: AsyncSession, post_id: int) -> Post | None:
    # populate_existing: like_count se actualiza con UPDATE directo en la DB
    res = await db.execute(
        select(Post)
        .where(Post.id == post_id)
        .execution_options(populate_existing=True)
    )
    return res.scalar_one_or_none()


async def delete_post(db: AsyncSession, post_id: int) -> None:
    """
    Borra el post con sus likes y comentarios en la misma transacción.
    No dependemos de ON DELETE CASCADE (SQLite lo ignora sin PRAGMA).
    """
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(PostLike).where(PostLike.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    await db.flush()


# -------------------------
# ❤️ LIKES
# -------------------------
async def list_likers(db: AsyncSession, post_id: int) -> list[int]:
    res = await db.execute(
        select(PostLike.user_id)
        .where(PostLike.post_id == post_id)
        .order_by(PostLike.created_at, PostLike.id)
    )
    return [row[0] for row in res.all()]


async def likers_by_post(db: AsyncSession, post_ids: list[int]) -> dict[int, list[int]]:
    if not post_ids:
        return {}
    res = await db.execute(
        select(PostLike.post_id, PostLike.user_id)
        .where(PostLike.post_id.in_(post_ids))
        .order_by(PostLike.created_at, PostLike.id)
    )
    out: dict[int, list[int]] = defaultdict(list)
    for post_id, user_id in res.all():
        out[post_id].append(user_id)
    return out


async def _remove_like(db: AsyncSession, post_id: int, user_id: int) -> bool:
    res = await db.execute(
        delete(PostLike).where(
            PostLike.post_id == post_id,
            PostLike.user_id == user_id,
        )
    )
    return bool(res.rowcount)


async def toggle_like(db: AsyncSession, post_id: int, user_id: int) -> bool:
    """
    Activa/desactiva el like de un usuario sobre un post.
    Devuelve True si quedó likeado.

    La pertenencia la garantiza uq_post_like y el contador se mueve con
    UPDATE en la DB (like_count = like_count ± 1), nunca leyendo y
    reescribiendo el valor en memoria. Dos usuarios distintos a la vez
    no pierden likes.
    """
    if await _remove_like(db, post_id, user_id):
        liked = False
    else:
        try:
            async with db.begin_nested():
                db.add(PostLike(post_id=post_id, user_id=user_id))
        except IntegrityError:
            # el mismo usuario ganó la carrera con otra petición: este toggle lo quita.
            # Si no había fila que quitar, el error es otro (FK, etc.): se propaga
            if not await _remove_like(db, post_id, user_id):
                raise
            liked = False
        else:
            liked = True

    if liked:
        new_value = Post.like_count + 1
    else:
        # piso en 0 por si el contador se desfasó
        new_value = case((Post.like_count > 0, Post.like_count - 1), else_=0)

    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(like_count=new_value)
        .execution_options(synchronize_session=False)
    )
    await db.flush()
    return liked


async def get_like_count(db: AsyncSession, post_id: int) -> int:
    res = await db.execute(select(Post.like_count).where(Post.id == post_id))
    return int(res.scalar_one_or_none() or 0)
