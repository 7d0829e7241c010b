import asyncio
import os
import tempfile
import unittest

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError

from app.core.config import Settings
from app.db.init_db import init_models
from app.db.session import build_engine, build_sessionmaker
from app.feed import repository as feed_repo
from app.feed import service as feed_svc
from app.users import service as users_svc
from app.users.repository import get_by_username


class _LikeFixture(unittest.IsolatedAsyncioTestCase):
    db_url = "sqlite+aiosqlite://"

    def make_engine(self):
        return build_engine(self.db_url)

    async def asyncSetUp(self):
        self.settings = Settings(DATABASE_URL=self.db_url, SECRET_KEY="test-secret")
        self.engine = self.make_engine()
        await init_models(self.engine)
        self.Session = build_sessionmaker(self.engine)

        self.alice = await self._register("alice")
        self.bob = await self._register("bob")
        async with self.Session() as db:
            post = await feed_svc.publish_post(db, self.settings, self.alice, "http://x/y.jpg", "hi")
            await db.commit()
        self.post_id = post["id"]

    async def asyncTearDown(self):
        await self.engine.dispose()

    async def _register(self, username: str) -> int:
        async with self.Session() as db:
            await users_svc.register_user(db, self.settings, username, "secret1")
            await db.commit()
            return (await get_by_username(db, username)).id

    async def _toggle(self, user_id: int) -> dict:
        async with self.Session() as db:
            likes = await feed_svc.toggle_like(db, self.post_id, user_id)
            await db.commit()
            return likes

    async def _detail(self) -> dict:
        async with self.Session() as db:
            return await feed_svc.get_post_detail(db, self.post_id)


class LikeIntegrityErrorTests(_LikeFixture):
    """Con FKs activas (como en Postgres) un insert inválido no toca el contador."""

    def make_engine(self):
        engine = build_engine(self.db_url)

        @event.listens_for(engine.sync_engine, "connect")
        def _foreign_keys_on(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    async def test_foreign_key_failure_propagates_and_keeps_count(self):
        await self._toggle(self.bob)

        async with self.Session() as db:
            with self.assertRaises(IntegrityError):
                await feed_repo.toggle_like(db, self.post_id, 999)
            await db.rollback()

        detail = await self._detail()
        self.assertEqual(detail["like_count"], 1)
        self.assertEqual(detail["liked_by"], [self.bob])


class ConcurrentLikeTests(_LikeFixture):
    """Varias requests a la vez contra SQLite en archivo (una conexión por sesión)."""

    async def asyncSetUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.db_url = f"sqlite+aiosqlite:///{os.path.join(self._tmp.name, 'feed.db')}"
        await super().asyncSetUp()
        self.carol = await self._register("carol")
        self.dave = await self._register("dave")

    async def asyncTearDown(self):
        await super().asyncTearDown()
        self._tmp.cleanup()

    async def test_concurrent_toggles_keep_count_and_members_in_sync(self):
        users = [self.bob, self.carol, self.alice, self.bob, self.carol, self.dave]
        results = await asyncio.gather(*(self._toggle(u) for u in users))

        for likes in results:
            self.assertEqual(likes["like_count"], len(likes["liked_by"]))
            self.assertEqual(len(set(likes["liked_by"])), len(likes["liked_by"]))

        detail = await self._detail()
        # bob y carol dieron dos toggles: quedan fuera
        self.assertEqual(set(detail["liked_by"]), {self.alice, self.dave})
        self.assertEqual(detail["like_count"], len(detail["liked_by"]))
        self.assertEqual(len(set(detail["liked_by"])), len(detail["liked_by"]))


if __name__ == "__main__":
    unittest.main()
