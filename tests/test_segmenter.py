import os
import subprocess

import pytest

from pipeline.errors import SegmentationFailed
from pipeline.models import AudioArtifact
from pipeline.process_utils import RunResult
from pipeline.segmenter import Segmenter


def make_parent(store, name="abc12345678.mp3"):
    path = store.put(name)
    with open(path, "wb") as f:
        f.write(b"\x00" * 64)
    return AudioArtifact(local_path=path, title="Talk", source_id="abc12345678")


def fake_ffmpeg(parts, returncode=0, calls=None):
    def run(args, timeout_s=None):
        if calls is not None:
            calls.append(list(args))
        pattern = args[-1]
        # write out of order to check sorting
        for i in reversed(range(parts)):
            with open(pattern % i, "wb") as f:
                f.write(b"x")
        return RunResult(returncode=returncode, stdout="", stderr="boom" if returncode else "")

    return run


def test_segments_are_ordered_and_titled(store, monkeypatch):
    calls = []
    monkeypatch.setattr("pipeline.segmenter.run_command", fake_ffmpeg(12, calls=calls))
    parent = make_parent(store)

    segments = Segmenter(store, ffmpeg_path="/opt/ffmpeg").segment(parent, 600)

    assert len(segments) == 12
    names = [os.path.basename(s.local_path) for s in segments]
    assert names == sorted(names)
    assert names[0] == "abc12345678_part_000.mp3"
    assert segments[0].title == "Talk (part 1/12)"
    assert segments[-1].title == "Talk (part 12/12)"
    assert {s.source_id for s in segments} == {"abc12345678"}
    assert os.path.exists(parent.local_path)

    args = calls[0]
    assert args[0] == "/opt/ffmpeg"
    assert args[args.index("-segment_time") + 1] == "600"
    assert args[args.index("-c") + 1] == "copy"


def test_non_zero_exit_fails_and_discards_parts(store, monkeypatch):
    monkeypatch.setattr("pipeline.segmenter.run_command", fake_ffmpeg(2, returncode=1))
    parent = make_parent(store)

    with pytest.raises(SegmentationFailed, match="boom"):
        Segmenter(store).segment(parent, 600)
    assert store.list("abc12345678_part_") == []


def test_zero_parts_fails(store, monkeypatch):
    monkeypatch.setattr("pipeline.segmenter.run_command", fake_ffmpeg(0))
    with pytest.raises(SegmentationFailed):
        Segmenter(store).segment(make_parent(store), 600)


def test_missing_binary_or_timeout_fails(store, monkeypatch):
    def missing(args, timeout_s=None):
        raise FileNotFoundError("ffmpeg")

    monkeypatch.setattr("pipeline.segmenter.run_command", missing)
    with pytest.raises(SegmentationFailed):
        Segmenter(store).segment(make_parent(store), 600)

    def slow(args, timeout_s=None):
        raise subprocess.TimeoutExpired(args, timeout_s)

    monkeypatch.setattr("pipeline.segmenter.run_command", slow)
    with pytest.raises(SegmentationFailed):
        Segmenter(store, timeout_s=1).segment(make_parent(store), 600)


def test_duration_must_be_positive(store):
    with pytest.raises(SegmentationFailed):
        Segmenter(store).segment(make_parent(store), 0)
