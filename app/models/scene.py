# app/models/scene.py
from typing import Dict, List, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field as PydanticField, model_validator
from sqlalchemy import JSON, Column, LargeBinary
from sqlmodel import SQLModel, Field

MAX_ITERATIONS = 30000

class TrainingMode(str, Enum):
    GAUSSIAN = "gaussian"
    TENSORF  = "tensorf"

OUTPUT_TYPES = {
    TrainingMode.GAUSSIAN: {"splat_cloud", "point_cloud", "video"},
    TrainingMode.TENSORF:  {"model", "video"},
}

# ---------- stage records (what the store hands out) ----------

class Video(BaseModel):
    file_path: str
    width: Optional[int] = None
    height: Optional[int] = None
    fps: Optional[float] = None
    duration: Optional[float] = None
    frame_count: Optional[int] = None

class SfmFrame(BaseModel):
    file_path: str
    transform_matrix: List[List[float]]

class Sfm(BaseModel):
    intrinsic_matrix: Optional[List[List[float]]] = None
    frames: List[SfmFrame] = PydanticField(default_factory=list)
    white_background: bool = False

class Nerf(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    # keyed by training iteration
    model_file_paths: Dict[int, str] = PydanticField(default_factory=dict)
    splat_cloud_file_paths: Dict[int, str] = PydanticField(default_factory=dict)
    point_cloud_file_paths: Dict[int, str] = PydanticField(default_factory=dict)
    video_file_paths: Dict[int, str] = PydanticField(default_factory=dict)
    flag: int = 0

class TrainingConfig(BaseModel):
    training_mode: TrainingMode
    output_types: List[str] = PydanticField(min_length=1)
    save_iterations: List[int] = PydanticField(default_factory=list)
    total_iterations: int = PydanticField(ge=0, le=MAX_ITERATIONS)

    @model_validator(mode="after")
    def check_outputs_and_iterations(self):
        allowed = OUTPUT_TYPES[self.training_mode]
        bad = [t for t in self.output_types if t not in allowed]
        if bad:
            raise ValueError(
                f"output types {bad} not valid for {self.training_mode.value} "
                f"(allowed: {sorted(allowed)})"
            )
        for it in self.save_iterations:
            if it < 0 or it > self.total_iterations:
                raise ValueError(
                    f"save iteration {it} outside 0..{self.total_iterations}"
                )
        return self

# ---------- table ----------

class SceneRecord(SQLModel, table=True):
    __tablename__ = "scenes"

    id: bytes = Field(sa_column=Column(LargeBinary(12), primary_key=True))
    owner_id: Optional[str] = Field(default=None, index=True)
    name: Optional[str] = None

    # stage payloads, stored as plain JSON documents
    video:  Optional[dict] = Field(default=None, sa_column=Column(JSON))
    sfm:    Optional[dict] = Field(default=None, sa_column=Column(JSON))
    nerf:   Optional[dict] = Field(default=None, sa_column=Column(JSON))
    config: Optional[dict] = Field(default=None, sa_column=Column(JSON))

# ---------- API shapes ----------

class Scene(BaseModel):
    """Full scene as returned by the store; every stage may be absent."""
    id: str
    owner_id: Optional[str] = None
    name: str = ""
    video: Optional[Video] = None
    sfm: Optional[Sfm] = None
    nerf: Optional[Nerf] = None
    config: Optional[TrainingConfig] = None

class SceneCreated(BaseModel):
    id: str
    message: str

class SceneName(BaseModel):
    scene_name: str

class SceneHistory(BaseModel):
    resources: List[str]
