# app/repositories/scene_repo.py
import logging
from enum import Enum
from typing import Any, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from app.core.errors import (
    NerfNotFound,
    SceneNotFound,
    SfmNotFound,
    SubResourceNotFound,
    TrainingConfigNotFound,
    VideoNotFound,
)
from app.core.ids import SceneId
from app.models.scene import Nerf, Scene, SceneRecord, Sfm, TrainingConfig, Video

logger = logging.getLogger(__name__)

scenes = SceneRecord.__table__

# columns a single upsert may target
FIELDS = ("name", "owner_id", "video", "sfm", "nerf", "config")


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class SceneStore:
    """
    All reads and writes of scene documents.

    Every call addresses exactly one row and runs as one statement, so
    writers of different stages never step on each other; writers of the
    same stage are last-write-wins. Scenes come into existence on the first
    write to any field and never on a read.
    """

    def __init__(self, engine: Engine):
        self._engine = engine

    # ---------- primitive ----------

    def apply_upsert(self, scene_id: SceneId, field: str, value: Any) -> UpsertOutcome:
        """
        Set one top-level field, creating the scene if it does not exist yet.
        """
        if field not in FIELDS:
            raise ValueError(f"unknown scene field {field!r}")

        if self._update(scene_id, field, value):
            return UpsertOutcome.UPDATED

        try:
            with self._engine.begin() as conn:
                conn.execute(insert(scenes).values({"id": scene_id.binary, field: value}))
            logger.debug("created scene %s via %s", scene_id, field)
            return UpsertOutcome.CREATED
        except IntegrityError:
            # another writer created the row between our update and insert
            logger.debug("insert race on scene %s, retrying update of %s", scene_id, field)

        if self._update(scene_id, field, value):
            return UpsertOutcome.UPDATED
        # neither matched nor created
        raise SceneNotFound(scene_id)

    def _update(self, scene_id: SceneId, field: str, value: Any) -> bool:
        with self._engine.begin() as conn:
            result = conn.execute(
                update(scenes).where(scenes.c.id == scene_id.binary).values({field: value})
            )
            return result.rowcount > 0

    def _get_field(self, scene_id: SceneId, field: str) -> Any:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(scenes.c.id, scenes.c[field]).where(scenes.c.id == scene_id.binary)
            ).first()
        if row is None:
            raise SceneNotFound(scene_id)
        return row[1]

    def _get_stage(
        self,
        scene_id: SceneId,
        field: str,
        model: Type[BaseModel],
        missing: Type[SubResourceNotFound],
    ):
        raw = self._get_field(scene_id, field)
        if raw is None:
            raise missing(scene_id)
        return model.model_validate(raw)

    @staticmethod
    def _dump(value: BaseModel) -> dict:
        return value.model_dump(mode="json")

    # ---------- name ----------

    def set_name(self, scene_id: SceneId, name: str) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "name", name)

    def get_name(self, scene_id: SceneId) -> str:
        """An unnamed scene yields "" rather than an error."""
        return self._get_field(scene_id, "name") or ""

    # ---------- owner ----------

    def set_owner(self, scene_id: SceneId, owner_id: str) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "owner_id", owner_id)

    def get_owner(self, scene_id: SceneId) -> Optional[str]:
        return self._get_field(scene_id, "owner_id")

    # ---------- stages ----------

    def set_video(self, scene_id: SceneId, video: Video) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "video", self._dump(video))

    def get_video(self, scene_id: SceneId) -> Video:
        return self._get_stage(scene_id, "video", Video, VideoNotFound)

    def set_sfm(self, scene_id: SceneId, sfm: Sfm) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "sfm", self._dump(sfm))

    def get_sfm(self, scene_id: SceneId) -> Sfm:
        return self._get_stage(scene_id, "sfm", Sfm, SfmNotFound)

    def set_nerf(self, scene_id: SceneId, nerf: Nerf) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "nerf", self._dump(nerf))

    def get_nerf(self, scene_id: SceneId) -> Nerf:
        return self._get_stage(scene_id, "nerf", Nerf, NerfNotFound)

    def set_training_config(self, scene_id: SceneId, config: TrainingConfig) -> UpsertOutcome:
        return self.apply_upsert(scene_id, "config", self._dump(config))

    def get_training_config(self, scene_id: SceneId) -> TrainingConfig:
        return self._get_stage(scene_id, "config", TrainingConfig, TrainingConfigNotFound)

    # ---------- whole scene ----------

    def get_scene(self, scene_id: SceneId) -> Scene:
        with self._engine.connect() as conn:
            row = conn.execute(
                select(scenes).where(scenes.c.id == scene_id.binary)
            ).mappings().first()
        if row is None:
            raise SceneNotFound(scene_id)
        return Scene(
            id=str(scene_id),
            owner_id=row["owner_id"],
            name=row["name"] or "",
            video=row["video"],
            sfm=row["sfm"],
            nerf=row["nerf"],
            config=row["config"],
        )

    def list_scenes_by_owner(self, owner_id: str) -> List[SceneId]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(scenes.c.id).where(scenes.c.owner_id == owner_id).order_by(scenes.c.id)
            ).all()
        return [SceneId(bytes(r[0])) for r in rows]

    def delete_scene(self, scene_id: SceneId) -> None:
        with self._engine.begin() as conn:
            deleted = conn.execute(delete(scenes).where(scenes.c.id == scene_id.binary)).rowcount
        if deleted == 0:
            raise SceneNotFound(scene_id)
