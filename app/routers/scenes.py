# app/routers/scenes.py
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Path, Request, UploadFile, status
from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import InvalidSceneId
from app.core.gateway import get_current_owner
from app.core.ids import SceneId
from app.database import get_scene_store
from app.models.scene import (
    Nerf,
    Scene,
    SceneCreated,
    SceneHistory,
    SceneName,
    Sfm,
    TrainingConfig,
    Video,
)
from app.repositories.scene_repo import SceneStore
from app.services import scene_service

router = APIRouter(tags=["scenes"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def scene_id_path(
    scene_id: str = Path(..., description="24-character hex id of the scene"),
) -> SceneId:
    try:
        return SceneId.from_hex(scene_id)
    except InvalidSceneId as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid scene ID") from exc


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@router.post(
    "/video",
    response_model=SceneCreated,
    status_code=status.HTTP_202_ACCEPTED,
)
def receive_video(
    owner_id: str = Depends(get_current_owner),
    file: Optional[UploadFile] = File(None),
    training_mode: Optional[str] = Form(None),
    output_types: Optional[str] = Form(None),
    save_iterations: Optional[str] = Form(None),
    total_iterations: Optional[str] = Form(None),
    scene_name: Optional[str] = Form(None),
    store: SceneStore = Depends(get_scene_store),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a video and start processing it as a new scene.

    output_types and save_iterations are comma-separated lists. Every
    form problem is a 400.
    """
    missing = [
        name
        for name, value in (
            ("file", file),
            ("training_mode", training_mode),
            ("output_types", output_types),
            ("total_iterations", total_iterations),
            ("scene_name", scene_name),
        )
        if value is None
    ]
    if missing:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, f"missing form fields: {', '.join(missing)}")

    try:
        config = TrainingConfig(
            training_mode=training_mode,
            output_types=_split_csv(output_types),
            save_iterations=[int(i) for i in _split_csv(save_iterations or "")],
            total_iterations=int(total_iterations),
        )
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc

    if not scene_name.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "scene_name must not be empty")

    scene_id = scene_service.create_and_enqueue_scene(
        store,
        owner_id,
        file,
        config,
        scene_name.strip(),
        data_dir=settings.DATA_DIR,
        task_name=settings.SFM_TASK_NAME,
    )
    return SceneCreated(
        id=str(scene_id),
        message="Video received and processing scene. Check back later for updates.",
    )


@router.get(
    "/history",
    response_model=SceneHistory,
    summary="List all scenes for the current user",
)
def get_user_scene_history(
    owner_id: str = Depends(get_current_owner),
    store: SceneStore = Depends(get_scene_store),
):
    return SceneHistory(resources=scene_service.list_scenes_for_user(store, owner_id))


@router.get("/data/scene/metadata/{scene_id}", response_model=Scene)
def get_scene_metadata(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    """
    Everything known about a scene so far. Stages that have not finished
    yet are null.
    """
    return scene_service.fetch_scene(store, owner_id, scene_id)


@router.get("/data/scene/name/{scene_id}", response_model=SceneName)
def get_scene_name(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    # an unnamed scene comes back as ""
    return SceneName(scene_name=scene_service.fetch_name(store, owner_id, scene_id))


@router.put("/data/scene/name/{scene_id}", status_code=status.HTTP_204_NO_CONTENT)
def rename_scene(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    body: Any = Body(None),
    store: SceneStore = Depends(get_scene_store),
):
    try:
        name = SceneName.model_validate(body).scene_name.strip()
    except ValidationError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
    if not name:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "scene_name must not be empty")
    scene_service.rename_scene(store, owner_id, scene_id, name)
    return None


@router.get("/data/scene/video/{scene_id}", response_model=Video)
def get_scene_video(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    return scene_service.fetch_video(store, owner_id, scene_id)


@router.get("/data/scene/sfm/{scene_id}", response_model=Sfm)
def get_scene_sfm(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    return scene_service.fetch_sfm(store, owner_id, scene_id)


@router.get("/data/scene/nerf/{scene_id}", response_model=Nerf)
def get_scene_nerf(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    return scene_service.fetch_nerf(store, owner_id, scene_id)


@router.get("/data/scene/config/{scene_id}", response_model=TrainingConfig)
def get_scene_config(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    return scene_service.fetch_training_config(store, owner_id, scene_id)


@router.delete(
    "/data/scene/{scene_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a scene",
)
def delete_scene(
    owner_id: str = Depends(get_current_owner),
    scene_id: SceneId = Depends(scene_id_path),
    store: SceneStore = Depends(get_scene_store),
):
    """
    Delete a scene owned by the authenticated user.
    """
    scene_service.delete_scene(store, owner_id, scene_id)
    return None
