# follicle_backend/app/db/session.py

# [DB Session] Engine + helpers
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine
from follicle_backend.app.config import DB_URL  # absolute import (exported by app/config/__init__.py)
from follicle_backend.app.config.paths import ensure_data_dir_exists


def make_engine(url: Optional[str] = None) -> Engine:
    url = url or DB_URL
    # SQLite needs check_same_thread=False for typical FastAPI usage
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, connect_args=connect_args)


def init_db(engine: Engine) -> Engine:
    # Ensure table definitions are registered before create_all
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)
    return engine


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    ensure_data_dir_exists()
    return init_db(make_engine())
