# alembic/env.py
from __future__ import annotations

import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import create_engine
from alembic import context

# --- repo root en el PYTHONPATH (alembic corre fuera del paquete) ---
BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from app.core.config import Settings
from app.db.base import Base
from app.db.session import sync_url

# 👇 registra las tablas en Base.metadata
from app.users.models import User  # noqa: F401
from app.feed.models import Post, PostLike  # noqa: F401
from app.comments.models import Comment  # noqa: F401

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _db_url() -> str:
    # `alembic -x db_url=...` pisa DATABASE_URL (útil para apuntar a staging)
    override = context.get_x_argument(as_dictionary=True).get("db_url")
    return sync_url(override or Settings().DATABASE_URL)


def run_migrations_offline():
    """Genera el SQL sin conectarse."""
    context.configure(
        url=_db_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(_db_url())
    try:
        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
