# app/tasks.py
"""
Sink tasks the pipeline workers call when a stage finishes.

The workers live in their own processes and only know scene ids as hex
strings and stage results as plain dicts; these tasks validate them and
write them through the same store the API reads from.
"""
import logging

from app.celery_app import celery_app
from app.core.ids import SceneId
from app.database import get_engine
from app.models.scene import Nerf, Sfm, Video
from app.repositories.scene_repo import SceneStore

logger = logging.getLogger(__name__)


def _store() -> SceneStore:
    return SceneStore(get_engine())


@celery_app.task(name="app.tasks.record_video")
def record_video(scene_id: str, video: dict) -> str:
    outcome = _store().set_video(SceneId.from_hex(scene_id), Video.model_validate(video))
    logger.info("video for scene %s %s", scene_id, outcome.value)
    return outcome.value


@celery_app.task(name="app.tasks.record_sfm")
def record_sfm(scene_id: str, sfm: dict) -> str:
    outcome = _store().set_sfm(SceneId.from_hex(scene_id), Sfm.model_validate(sfm))
    logger.info("sfm for scene %s %s", scene_id, outcome.value)
    return outcome.value


@celery_app.task(name="app.tasks.record_nerf")
def record_nerf(scene_id: str, nerf: dict) -> str:
    outcome = _store().set_nerf(SceneId.from_hex(scene_id), Nerf.model_validate(nerf))
    logger.info("nerf for scene %s %s", scene_id, outcome.value)
    return outcome.value
