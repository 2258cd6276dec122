# app/core/errors.py
"""
Errors raised by the scene store.

Callers only need these classes to tell a missing scene from a missing
stage; storage-driver errors are never wrapped and propagate as-is.
"""


class SceneStoreError(Exception):
    detail = "scene store error"

    def __init__(self, scene_id=None):
        self.scene_id = scene_id
        super().__init__(f"{self.detail}: {scene_id}" if scene_id is not None else self.detail)


class SceneNotFound(SceneStoreError):
    detail = "scene not found"


class SubResourceNotFound(SceneStoreError):
    """The scene exists but the requested stage was never written."""
    detail = "sub-resource not found"


class VideoNotFound(SubResourceNotFound):
    detail = "video not found"


class SfmNotFound(SubResourceNotFound):
    detail = "sfm not found"


class NerfNotFound(SubResourceNotFound):
    detail = "nerf not found"


class TrainingConfigNotFound(SubResourceNotFound):
    detail = "training config not found"


class InvalidSceneId(ValueError):
    pass
