
import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import List

from fastapi import HTTPException, UploadFile, status

from app.celery_app import celery_app
from app.core.errors import SceneNotFound, SubResourceNotFound
from app.core.ids import SceneId
from app.models.scene import Nerf, Scene, Sfm, TrainingConfig, Video
from app.repositories.scene_repo import SceneStore

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Scene not found or not owned by you."


@contextmanager
def translate_store_errors():
    """
    Map store errors onto HTTP errors, one class to one outcome.
    """
    try:
        yield
    except SceneNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, NOT_FOUND_DETAIL) from exc
    except SubResourceNotFound as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, exc.detail.capitalize()) from exc


def _ensure_owner(store: SceneStore, owner_id: str, scene_id: SceneId) -> None:
    # someone else's scene looks exactly like a missing one
    if store.get_owner(scene_id) != owner_id:
        raise SceneNotFound(scene_id)


def _discard_partial_scene(store: SceneStore, scene_id: SceneId, video_path: Path) -> None:
    video_path.unlink(missing_ok=True)
    try:
        store.delete_scene(scene_id)
    except SceneNotFound:
        # failed before the first write landed
        pass


def create_and_enqueue_scene(
    store: SceneStore,
    owner_id: str,
    upload_file: UploadFile,
    config: TrainingConfig,
    scene_name: str,
    data_dir: str,
    task_name: str,
) -> SceneId:
    scene_id = SceneId.generate()

    # 1) save the upload as data/raw/videos/<scene_id><ext> before any store write
    suffix = Path(upload_file.filename or "").suffix or ".mp4"
    video_dir = Path(data_dir) / "raw" / "videos"
    video_dir.mkdir(parents=True, exist_ok=True)
    video_path = video_dir / f"{scene_id}{suffix}"
    try:
        with open(video_path, "wb") as dst:
            shutil.copyfileobj(upload_file.file, dst)
    except OSError:
        video_path.unlink(missing_ok=True)
        raise

    # 2) the config write creates the scene
    try:
        store.set_training_config(scene_id, config)
        store.set_owner(scene_id, owner_id)
        store.set_name(scene_id, scene_name)
        store.set_video(scene_id, Video(file_path=str(video_path)))
    except Exception:
        logger.warning("creating scene %s failed, removing what was written", scene_id)
        _discard_partial_scene(store, scene_id, video_path)
        raise
    logger.info("created scene %s for owner %s", scene_id, owner_id)

    # 3) hand over to the SfM worker
    celery_app.send_task(
        task_name,
        args=(str(scene_id),),
        kwargs={"video_path": str(video_path), "config": config.model_dump(mode="json")},
    )
    logger.info("dispatched scene %s to %s", scene_id, task_name)

    return scene_id


def list_scenes_for_user(store: SceneStore, owner_id: str) -> List[str]:
    return [str(s) for s in store.list_scenes_by_owner(owner_id)]


def fetch_scene(store: SceneStore, owner_id: str, scene_id: SceneId) -> Scene:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_scene(scene_id)


def fetch_name(store: SceneStore, owner_id: str, scene_id: SceneId) -> str:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_name(scene_id)


def rename_scene(store: SceneStore, owner_id: str, scene_id: SceneId, name: str) -> None:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        store.set_name(scene_id, name)


def fetch_video(store: SceneStore, owner_id: str, scene_id: SceneId) -> Video:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_video(scene_id)


def fetch_sfm(store: SceneStore, owner_id: str, scene_id: SceneId) -> Sfm:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_sfm(scene_id)


def fetch_nerf(store: SceneStore, owner_id: str, scene_id: SceneId) -> Nerf:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_nerf(scene_id)


def fetch_training_config(store: SceneStore, owner_id: str, scene_id: SceneId) -> TrainingConfig:
    with translate_store_errors():
        _ensure_owner(store, owner_id, scene_id)
        return store.get_training_config(scene_id)


def delete_scene(store: SceneStore, owner_id: str, scene_id: SceneId) -> None:
    with translate_store_errors():
        # 1) verify it exists & ownership
        _ensure_owner(store, owner_id, scene_id)
        scene = store.get_scene(scene_id)

        # 2) delete the document
        store.delete_scene(scene_id)
    logger.info("deleted scene %s", scene_id)

    # 3) delete the uploaded video, if we have one
    if scene.video is not None:
        Path(scene.video.file_path).unlink(missing_ok=True)
