# app/celery_app.py
import os
from celery import Celery
from dotenv import load_dotenv

# the API and the pipeline workers share one .env; the broker URL is
# decided here only
load_dotenv()


def broker_url() -> str:
    explicit = os.getenv("CELERY_BROKER_URL")
    if explicit:
        return explicit
    # queue lives in the scene database by default
    return f"sqla+{os.getenv('DATABASE_URL')}"


celery_app = Celery(
    "scenes",
    broker=broker_url(),
    include=["app.tasks"],           # record_video / record_sfm / record_nerf
)

# kombu needs its message tables on first use of the sqla transport
celery_app.conf.database_create_tables_at_setup = True
