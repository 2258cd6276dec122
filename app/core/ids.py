# app/core/ids.py
import os
import re
import threading
import time

from app.core.errors import InvalidSceneId

_HEX_RE = re.compile(r"[0-9a-fA-F]{24}")

# process-wide part of generated ids: 5 random bytes + a 3-byte counter
_process_unique = os.urandom(5)
_counter = int.from_bytes(os.urandom(3), "big")
_counter_lock = threading.Lock()


class SceneId:
    """
    Opaque 12-byte scene identifier.

    Clients see the 24-character hex form; the store only ever sees
    ``binary``. Layout of generated ids: 4-byte big-endian timestamp,
    5 bytes fixed per process, 3-byte counter.
    """

    __slots__ = ("binary",)

    def __init__(self, binary: bytes):
        if not isinstance(binary, bytes) or len(binary) != 12:
            raise InvalidSceneId("scene id must be exactly 12 bytes")
        self.binary = binary

    @classmethod
    def from_hex(cls, value: str) -> "SceneId":
        if not isinstance(value, str) or not _HEX_RE.fullmatch(value):
            raise InvalidSceneId(f"invalid scene id {value!r}: expected 24 hex characters")
        return cls(bytes.fromhex(value))

    @classmethod
    def generate(cls) -> "SceneId":
        global _counter
        with _counter_lock:
            _counter = (_counter + 1) % 0x1000000
            count = _counter
        return cls(
            int(time.time()).to_bytes(4, "big")
            + _process_unique
            + count.to_bytes(3, "big")
        )

    def __str__(self) -> str:
        return self.binary.hex()

    def __repr__(self) -> str:
        return f"SceneId('{self}')"

    def __eq__(self, other) -> bool:
        return isinstance(other, SceneId) and other.binary == self.binary

    def __hash__(self) -> int:
        return hash(self.binary)
