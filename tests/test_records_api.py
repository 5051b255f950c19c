from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from benchtrend.records.builds import (
    CI_ACCEPT_HEADER,
    BuildRecord,
    Builds,
    load_build_history,
)
from benchtrend.records.snapshots import Snapshot, Snapshots


def _write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload))


def _history_records() -> list[dict[str, object]]:
    return [
        {
            "sha1": "1111111111aaaa",
            "created_at": "2019-01-01T00:00:00Z",
            "benchmark": {"hello": {"mean": 0.02}},
            "binary_size": 41000000,
        },
        {
            "sha1": "2222222222bbbb",
            "created_at": "2019-01-02T00:00:00Z",
            "benchmark": {"hello": {"mean": 0.03}, "cold_hello": {"mean": 0.05}},
            "throughput": {"100M_tcp": 2.4},
            "binary_size": {"deno": 42000000, "main.js": 300000},
        },
    ]


def _response(payload: object) -> MagicMock:
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


def test_snapshot_from_dict_splits_groups() -> None:
    snap = Snapshot.from_dict(_history_records()[1])
    assert snap.commit_hash == "2222222222bbbb"
    assert snap.created_at == "2019-01-02T00:00:00Z"
    assert set(snap.groups) == {"benchmark", "throughput", "binary_size"}
    assert snap.group("req_per_sec") is None
    assert snap.short_hash == "222222"


def test_snapshot_without_sha1_is_rejected() -> None:
    with pytest.raises(ValueError, match="sha1"):
        Snapshot.from_dict({"benchmark": {}})


def test_snapshots_from_json(tmp_path: Path) -> None:
    path = tmp_path / "gh-pages" / "data.json"
    _write_json(path, _history_records())

    history = Snapshots.from_json(path)
    assert len(history) == 2
    assert history.commit_hashes == ["1111111111aaaa", "2222222222bbbb"]
    assert history.short_hashes == ["111111", "222222"]
    assert history.series("benchmark") == ("hello", "cold_hello")
    assert history.exec_time_columns() == [
        ["hello", 0.02, 0.03],
        ["cold_hello", None, 0.05],
    ]
    assert history.binary_size_columns() == [
        ["deno", 41000000, 42000000],
        ["main.js", 0, 300000],
    ]


def test_snapshots_from_json_rejects_non_array(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    _write_json(path, {"sha1": "abcdef"})
    with pytest.raises(ValueError, match="JSON array"):
        Snapshots.from_json(path)


def test_snapshots_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Snapshots.from_json(tmp_path / "missing.json")


def test_snapshots_sequence_protocol() -> None:
    history = Snapshots.from_records(_history_records())
    assert bool(history)
    assert not Snapshots([])
    assert history[-1].commit_hash == "2222222222bbbb"
    assert [s.commit_hash for s in history] == history.commit_hashes
    assert repr(history) == "Snapshots(2 snapshots)"


def test_snapshots_where_and_last() -> None:
    history = Snapshots.from_records(_history_records())
    assert history.last(1).commit_hashes == ["2222222222bbbb"]
    assert len(history.last(5)) == 2
    assert len(history.last(0)) == 0
    with_throughput = history.where(lambda s: s.group("throughput") is not None)
    assert with_throughput.throughput_columns() == [["100M_tcp", 2.4]]


def test_snapshots_to_dataframe() -> None:
    df = Snapshots.from_records(_history_records()).to_dataframe("benchmark")
    assert list(df.index) == ["1111111111aaaa", "2222222222bbbb"]
    assert list(df.columns) == ["hello", "cold_hello"]
    assert df.loc["2222222222bbbb", "cold_hello"] == 0.05


def test_snapshots_from_hf(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    _write_json(path, _history_records())
    with patch("benchtrend.sources.hf_hub_download", return_value=str(path)) as dl:
        history = Snapshots.from_hf("org/bench-history", revision="main")
    assert len(history) == 2
    dl.assert_called_once_with(
        repo_id="org/bench-history",
        filename="data.json",
        repo_type="dataset",
        revision="main",
    )


def test_builds_from_payload_is_chronological() -> None:
    payload = {
        "builds": [
            {"id": 3, "duration": 500, "pull_request_number": 30},
            {"id": 2, "duration": 400, "pull_request_number": 20},
            {"id": 1, "duration": 300, "pull_request_number": 10},
        ]
    }
    builds = Builds.from_payload(payload)
    assert [b.id for b in builds] == [1, 2, 3]
    assert builds.compile_time_columns() == [["duration_time", 300, 400, 500]]
    assert builds.pull_request_numbers == [10, 20, 30]


def test_builds_from_payload_requires_builds_list() -> None:
    with pytest.raises(ValueError, match="builds"):
        Builds.from_payload({"repos": []})


def test_builds_with_duration() -> None:
    builds = Builds(
        [
            BuildRecord(duration=0, pull_request_number=1),
            BuildRecord(duration=None, pull_request_number=2),
            BuildRecord(duration=250, pull_request_number=3),
        ]
    )
    kept = builds.with_duration()
    assert kept.durations == [250]
    assert kept.pull_request_numbers == [3]


def test_builds_from_api_sends_accept_header_and_filters() -> None:
    payload = {
        "builds": [
            {"duration": 0, "pull_request_number": 12, "state": "started"},
            {"duration": 610, "pull_request_number": 11, "state": "passed"},
        ]
    }
    with patch("benchtrend.sources.requests.get", return_value=_response(payload)) as get:
        builds = load_build_history(
            "https://ci.example.com/builds", lambda b: (b.duration or 0) > 0
        )
    get.assert_called_once_with(
        "https://ci.example.com/builds",
        headers={"Accept": CI_ACCEPT_HEADER},
        timeout=None,
    )
    assert len(builds) == 1
    assert builds[0].state == "passed"


def test_builds_from_api_uses_session() -> None:
    session = MagicMock()
    session.get.return_value = _response({"builds": [{"duration": 60, "pull_request_number": 1}]})
    builds = Builds.from_api("https://ci.example.com/builds", session=session)
    assert builds.durations == [60]
    session.get.assert_called_once()


def test_builds_from_api_propagates_http_errors() -> None:
    resp = _response({})
    resp.raise_for_status.side_effect = RuntimeError("503 Server Error")
    with patch("benchtrend.sources.requests.get", return_value=resp):
        with pytest.raises(RuntimeError, match="503"):
            Builds.from_api("https://ci.example.com/builds")


def test_builds_to_dataframe() -> None:
    builds = Builds.from_payload({"builds": [{"duration": 90, "pull_request_number": 4}]})
    df = builds.to_dataframe()
    assert list(df["duration"]) == [90]
    assert Builds([]).to_dataframe().empty
