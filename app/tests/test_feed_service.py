import unittest

from sqlalchemy import func, select

from app.comments import service as comments_svc
from app.comments.models import Comment
from app.core.config import Settings
from app.core.errors import (
    DuplicateUser,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    ValidationError,
)
from app.db.init_db import init_models
from app.db.session import build_engine, build_sessionmaker
from app.feed import service as feed_svc
from app.feed.models import PostLike
from app.users import service as users_svc
from app.users.repository import get_by_username


class FeedServiceTests(unittest.IsolatedAsyncioTestCase):
    """
    Cada operación corre en su propia sesión y hace commit, como una request.
    """

    async def asyncSetUp(self):
        self.settings = Settings(DATABASE_URL="sqlite+aiosqlite://", SECRET_KEY="test-secret")
        self.engine = build_engine(self.settings.DATABASE_URL)
        await init_models(self.engine)
        self.Session = build_sessionmaker(self.engine)

        self.alice = await self._register("alice")
        self.bob = await self._register("bob")
        self.carol = await self._register("carol")

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def _register(self, username: str) -> int:
        async with self.Session() as db:
            await users_svc.register_user(db, self.settings, username, "secret1")
            await db.commit()
            return (await get_by_username(db, username)).id

    async def _publish(self, author_id: int, caption: str = "hi") -> dict:
        async with self.Session() as db:
            post = await feed_svc.publish_post(
                db, self.settings, author_id, "http://x/y.jpg", caption
            )
            await db.commit()
            return post

    async def _toggle(self, post_id: int, user_id: int) -> dict:
        async with self.Session() as db:
            likes = await feed_svc.toggle_like(db, post_id, user_id)
            await db.commit()
            return likes

    async def _comment(self, post_id: int, user_id: int, text: str):
        async with self.Session() as db:
            comments = await comments_svc.add_comment(db, post_id, user_id, text)
            await db.commit()
            return comments

    async def _feed(self) -> list[dict]:
        async with self.Session() as db:
            return await feed_svc.list_feed(db)

    # ---------- usuarios ----------

    async def test_register_rules(self):
        async with self.Session() as db:
            with self.assertRaises(DuplicateUser):
                await users_svc.register_user(db, self.settings, "alice", "another1")
        async with self.Session() as db:
            with self.assertRaises(ValidationError):
                await users_svc.register_user(db, self.settings, "al", "secret1")
            with self.assertRaises(ValidationError):
                await users_svc.register_user(db, self.settings, "dave", "12345")

    async def test_login_does_not_reveal_which_part_failed(self):
        async with self.Session() as db:
            token = await users_svc.login_user(db, self.settings, "alice", "secret1")
            self.assertEqual(users_svc.authenticate(token, self.settings), self.alice)

            with self.assertRaises(InvalidCredentials) as wrong_pw:
                await users_svc.login_user(db, self.settings, "alice", "nope!!")
            with self.assertRaises(InvalidCredentials) as no_user:
                await users_svc.login_user(db, self.settings, "zed", "secret1")
        self.assertEqual(wrong_pw.exception.detail, no_user.exception.detail)

    # ---------- posts ----------

    async def test_new_post_starts_empty(self):
        post = await self._publish(self.alice)
        self.assertEqual(post["like_count"], 0)
        self.assertEqual(post["liked_by"], [])
        self.assertEqual(post["comments"], [])
        self.assertEqual(post["author_username"], "alice")
        self.assertEqual(post["author_avatar"], self.settings.DEFAULT_AVATAR_URL)

    async def test_publish_validation(self):
        async with self.Session() as db:
            with self.assertRaises(ValidationError):
                await feed_svc.publish_post(db, self.settings, self.alice, "  ", "hi")
            with self.assertRaises(ValidationError):
                await feed_svc.publish_post(
                    db, self.settings, self.alice, "http://x/y.jpg", "a" * 501
                )
            with self.assertRaises(NotFound):
                await feed_svc.publish_post(db, self.settings, 9999, "http://x/y.jpg", "hi")

    async def test_feed_is_newest_first(self):
        first = await self._publish(self.alice, "uno")
        second = await self._publish(self.bob, "dos")
        feed = await self._feed()
        self.assertEqual([p["id"] for p in feed], [second["id"], first["id"]])

    async def test_author_snapshot_survives_avatar_change(self):
        old = await self._publish(self.alice, "antes")
        async with self.Session() as db:
            await users_svc.update_avatar(db, self.alice, "http://x/alice.png")
            await db.commit()
        new = await self._publish(self.alice, "después")

        by_id = {p["id"]: p for p in await self._feed()}
        self.assertEqual(by_id[old["id"]]["author_avatar"], self.settings.DEFAULT_AVATAR_URL)
        self.assertEqual(by_id[new["id"]]["author_avatar"], "http://x/alice.png")

    # ---------- likes ----------

    async def test_like_scenario(self):
        post = await self._publish(self.alice)
        likes = await self._toggle(post["id"], self.bob)
        self.assertEqual(likes, {"like_count": 1, "liked_by": [self.bob]})
        likes = await self._toggle(post["id"], self.bob)
        self.assertEqual(likes, {"like_count": 0, "liked_by": []})

    async def test_like_count_matches_members_after_any_sequence(self):
        post = await self._publish(self.alice)
        members: set[int] = set()
        for user in (self.bob, self.carol, self.bob, self.alice, self.carol, self.bob):
            likes = await self._toggle(post["id"], user)
            members ^= {user}
            self.assertEqual(likes["like_count"], len(likes["liked_by"]))
            self.assertEqual(set(likes["liked_by"]), members)
            self.assertEqual(len(set(likes["liked_by"])), len(likes["liked_by"]))

        async with self.Session() as db:
            detail = await feed_svc.get_post_detail(db, post["id"])
        self.assertEqual(detail["like_count"], len(members))

    async def test_like_missing_post(self):
        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await feed_svc.toggle_like(db, 12345, self.bob)

    async def test_like_from_unknown_user_leaves_post_untouched(self):
        post = await self._publish(self.alice)
        await self._toggle(post["id"], self.bob)

        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await feed_svc.toggle_like(db, post["id"], 999)

        async with self.Session() as db:
            detail = await feed_svc.get_post_detail(db, post["id"])
        self.assertEqual(detail["like_count"], 1)
        self.assertEqual(detail["liked_by"], [self.bob])

    # ---------- comentarios ----------

    async def test_comments_are_newest_first(self):
        post = await self._publish(self.alice)
        await self._comment(post["id"], self.bob, "nice!")
        comments = await self._comment(post["id"], self.carol, "yum")
        self.assertEqual([c.text for c in comments], ["yum", "nice!"])
        self.assertEqual([c.author_username for c in comments], ["carol", "bob"])

        feed = await self._feed()
        self.assertEqual([c.text for c in feed[0]["comments"]], ["yum", "nice!"])

    async def test_comment_validation(self):
        post = await self._publish(self.alice)
        async with self.Session() as db:
            with self.assertRaises(ValidationError):
                await comments_svc.add_comment(db, post["id"], self.bob, "   ")
            with self.assertRaises(NotFound):
                await comments_svc.add_comment(db, 12345, self.bob, "hola")

    async def test_delete_comment_by_author_or_post_owner(self):
        post = await self._publish(self.alice)
        comments = await self._comment(post["id"], self.bob, "nice!")
        bobs = comments[0].id
        comments = await self._comment(post["id"], self.bob, "otra")
        bobs_second = comments[0].id

        async with self.Session() as db:
            with self.assertRaises(Unauthorized):
                await comments_svc.delete_comment(db, post["id"], bobs, self.carol)

        async with self.Session() as db:
            left = await comments_svc.delete_comment(db, post["id"], bobs, self.bob)
            await db.commit()
        self.assertEqual([c.id for c in left], [bobs_second])

        async with self.Session() as db:
            left = await comments_svc.delete_comment(db, post["id"], bobs_second, self.alice)
            await db.commit()
        self.assertEqual(left, [])

        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await comments_svc.delete_comment(db, post["id"], bobs, self.bob)

    async def test_comment_must_belong_to_post(self):
        post = await self._publish(self.alice)
        other = await self._publish(self.bob)
        comments = await self._comment(other["id"], self.bob, "mío")
        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await comments_svc.delete_comment(db, post["id"], comments[0].id, self.alice)

    # ---------- borrar posts ----------

    async def test_non_owner_cannot_delete_post(self):
        post = await self._publish(self.alice)
        async with self.Session() as db:
            with self.assertRaises(Unauthorized):
                await feed_svc.remove_post(db, post["id"], self.bob)
        self.assertEqual([p["id"] for p in await self._feed()], [post["id"]])

    async def test_owner_delete_takes_likes_and_comments(self):
        post = await self._publish(self.alice)
        await self._toggle(post["id"], self.bob)
        await self._comment(post["id"], self.carol, "yum")

        async with self.Session() as db:
            await feed_svc.remove_post(db, post["id"], self.alice)
            await db.commit()

        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await feed_svc.get_post_detail(db, post["id"])
            n_comments = await db.scalar(
                select(func.count()).select_from(Comment).where(Comment.post_id == post["id"])
            )
            n_likes = await db.scalar(
                select(func.count()).select_from(PostLike).where(PostLike.post_id == post["id"])
            )
        self.assertEqual(n_comments, 0)
        self.assertEqual(n_likes, 0)

        async with self.Session() as db:
            with self.assertRaises(NotFound):
                await feed_svc.remove_post(db, post["id"], self.alice)


if __name__ == "__main__":
    unittest.main()
