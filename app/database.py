# app/database.py
import os
from functools import lru_cache

from dotenv import load_dotenv
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from app.repositories.scene_repo import SceneStore

load_dotenv()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # requests are served from FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


@lru_cache
def get_engine() -> Engine:
    """
    Process-wide engine built from DATABASE_URL; used by the Celery worker
    side, which has no FastAPI app to hang one on.
    """
    return make_engine(os.environ["DATABASE_URL"])


def init_db(engine: Engine) -> None:
    """
    Create all tables that are defined via SQLModel subclasses.
    """
    SQLModel.metadata.create_all(engine)


def get_scene_store(request: Request) -> SceneStore:
    return request.app.state.scene_store
