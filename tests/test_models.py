"""データモデルのユニットテスト"""

import dataclasses

import pytest
from flagsnap import EvaluationResult, Provenance, RawFlagSet, Snapshot


def test_empty_snapshot() -> None:
    """空スナップショットは version 0 でフラグを持たない。"""
    snap = Snapshot.empty()
    assert snap.version == 0
    assert len(snap) == 0
    assert snap.get("anything") is None
    assert snap.etag is None


def test_snapshot_copies_input_mapping() -> None:
    """生成後に元の辞書を変更してもスナップショットは変わらない。"""
    source = {"A": True}
    snap = Snapshot(flags=source, version=1, fetched_at=0.0)
    source["A"] = False
    source["B"] = "x"
    assert snap.get("A") is True
    assert "B" not in snap


def test_snapshot_is_read_only() -> None:
    """フラグのマッピングもフィールドも変更できない。"""
    snap = Snapshot(flags={"A": True}, version=1, fetched_at=0.0)
    with pytest.raises(TypeError):
        snap.flags["A"] = False  # type: ignore[index]
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.version = 2  # type: ignore[misc]


def test_absent_is_distinct_from_false() -> None:
    """False の値と未定義のキーは区別される。"""
    snap = Snapshot(flags={"off": False}, version=1, fetched_at=0.0)
    assert snap.get("off") is False
    assert snap.get("missing") is None
    assert "off" in snap
    assert "missing" not in snap


def test_snapshot_age() -> None:
    snap = Snapshot(flags={}, version=1, fetched_at=100.0)
    assert snap.age(130.0) == pytest.approx(30.0)
    assert snap.age(50.0) == 0.0


def test_renewed_keeps_flags_and_etag() -> None:
    """renewed は version と取得時刻だけを更新する。"""
    snap = Snapshot(flags={"A": "blue"}, version=4, fetched_at=10.0, etag='"e1"')
    renewed = snap.renewed(5, 99.0)
    assert renewed.version == 5
    assert renewed.get("A") == "blue"
    assert renewed.etag == '"e1"'
    assert renewed.fetched_at == 99.0
    assert snap.version == 4
    assert snap.fetched_at == 10.0


def test_raw_flag_set_defaults() -> None:
    raw = RawFlagSet()
    assert raw.flags == {}
    assert raw.etag is None
    assert raw.not_modified is False


def test_evaluation_result_is_default() -> None:
    result = EvaluationResult("k", False, Provenance.DEFAULT_FALLBACK)
    assert result.is_default is True
    assert EvaluationResult("k", True, Provenance.FRESH, 3).is_default is False


def test_provenance_values() -> None:
    assert Provenance.FRESH == "fresh"
    assert Provenance.STALE == "stale"
    assert Provenance.DEFAULT_FALLBACK == "default-fallback"
