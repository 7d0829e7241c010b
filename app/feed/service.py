# app/feed/service.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.comments.models import Comment
from app.comments.repository import comments_by_post, list_post_comments
from app.core.config import Settings
from app.core.errors import NotFound, Unauthorized, ValidationError
from app.feed import repository as repo
from app.feed.models import Post
from app.users.service import get_user

log = logging.getLogger("uvicorn")


def post_out(post: Post, liked_by: list[int], comments: list[Comment]) -> dict:
    """
    Dict que espera el front para un Post.
    Autor y avatar salen de la copia guardada en el post: nunca se consulta
    la tabla users para mostrar.
    """
    return {
        "id": post.id,
        "author_id": post.author_id,
        "author_username": post.author_username,
        "author_avatar": post.author_avatar,
        "image_url": post.image_url,
        "caption": post.caption or "",
        "like_count": post.like_count,
        "liked_by": liked_by,
        "comments": comments,
        "created_at": post.created_at,
    }


async def list_feed(db: AsyncSession) -> list[dict]:
    posts = await repo.list_posts(db)
    ids = [p.id for p in posts]
    likes = await repo.likers_by_post(db, ids)
    comments = await comments_by_post(db, ids)
    return [post_out(p, likes.get(p.id, []), comments.get(p.id, [])) for p in posts]


async def get_post_detail(db: AsyncSession, post_id: int) -> dict:
    post = await repo.get_post(db, post_id)
    if not post:
        raise NotFound("post not found")
    return post_out(
        post,
        await repo.list_likers(db, post.id),
        await list_post_comments(db, post.id),
    )


async def publish_post(
    db: AsyncSession,
    settings: Settings,
    author_id: int,
    image_url: str | None,
    caption: str | None,
) -> dict:
    image_url = (image_url or "").strip()
    if not image_url:
        raise ValidationError("image_url is required")

    caption = (caption or "").strip()
    if len(caption) > settings.CAPTION_MAX_LEN:
        raise ValidationError(f"caption must be at most {settings.CAPTION_MAX_LEN} characters")

    author = await get_user(db, author_id)

    # 📸 copia por valor del autor: cambios de avatar posteriores no afectan
    post = await repo.create_post(
        db,
        author_id=author.id,
        author_username=author.username,
        author_avatar=author.avatar_url or settings.DEFAULT_AVATAR_URL,
        image_url=image_url,
        caption=caption,
    )
    log.info(f"📝 post creado id={post.id} autor={author.id}")
    return post_out(post, [], [])


async def toggle_like(db: AsyncSession, post_id: int, user_id: int) -> dict:
    post = await repo.get_post(db, post_id)
    if not post:
        raise NotFound("post not found")

    # el token puede traer un id que ya no está en users
    liker = await get_user(db, user_id)

    await repo.toggle_like(db, post.id, liker.id)
    return {
        "like_count": await repo.get_like_count(db, post.id),
        "liked_by": await repo.list_likers(db, post.id),
    }


async def remove_post(db: AsyncSession, post_id: int, requester_id: int) -> None:
    """Solo el autor puede borrar. Likes y comentarios se van con el post."""
    post = await repo.get_post(db, post_id)
    if not post:
        raise NotFound("post not found")

    if post.author_id != requester_id:
        raise Unauthorized("not your post")

    await repo.delete_post(db, post.id)
    log.info(f"🗑️ post borrado id={post_id}")
