import pytest

from app.core.errors import InvalidSceneId
from app.core import ids
from app.core.ids import SceneId


def test_hex_round_trip_is_canonical_lowercase():
    sid = SceneId.from_hex("507F1F77BCF86CD799439011")
    assert sid.binary == bytes.fromhex("507f1f77bcf86cd799439011")
    assert str(sid) == "507f1f77bcf86cd799439011"
    assert sid == SceneId.from_hex("507f1f77bcf86cd799439011")


@pytest.mark.parametrize(
    "value",
    [
        "",
        "507f1f77bcf86cd79943901",
        "507f1f77bcf86cd7994390111",
        "zzzf1f77bcf86cd799439011",
        "507f1f77bcf86cd799439011\n",
        " 507f1f77bcf86cd799439011",
        None,
        12,
    ],
)
def test_invalid_hex_rejected(value):
    with pytest.raises(InvalidSceneId):
        SceneId.from_hex(value)


def test_generated_ids_are_unique_and_fixed_width():
    generated = {SceneId.generate() for _ in range(1000)}
    assert len(generated) == 1000
    assert all(len(sid.binary) == 12 for sid in generated)


def test_counter_uses_full_three_bytes(monkeypatch):
    monkeypatch.setattr(ids, "_counter", 0xFFFFFE)
    assert SceneId.generate().binary[-3:] == b"\xff\xff\xff"
    assert SceneId.generate().binary[-3:] == b"\x00\x00\x00"
