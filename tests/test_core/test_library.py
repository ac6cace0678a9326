"""Tests for the finished-video library."""

import os
import re
from pathlib import Path

import pytest

from lapse.core.errors import VideoNotFoundError
from lapse.core.library import delete_video, list_videos, new_video_path, resolve_video


@pytest.fixture
def library(tmp_path: Path) -> Path:
    out = tmp_path / "outputs"
    out.mkdir()
    for i, name in enumerate(["video_a_1.mp4", "video_b_2.mp4", "video_c_3.mp4"]):
        path = out / name
        path.write_bytes(b"x" * (10 * (i + 1)))
        os.utime(path, (1_700_000_000 + i * 60, 1_700_000_000 + i * 60))
    (out / "notes.txt").write_text("skip me")
    (out / ".video_d_4.mp4.partial").write_bytes(b"in progress")
    return out


class TestLibrary:
    def test_new_video_path_format(self, tmp_path: Path):
        path = new_video_path(tmp_path)
        assert path.parent == tmp_path
        assert re.fullmatch(r"video_[0-9a-f-]{36}_\d{13}\.mp4", path.name)
        assert new_video_path(tmp_path) != path

    def test_list_newest_first(self, library: Path):
        entries = list_videos(library)
        assert [e.filename for e in entries] == ["video_c_3.mp4", "video_b_2.mp4", "video_a_1.mp4"]
        assert entries[0].size_bytes == 30

    def test_list_missing_directory(self, tmp_path: Path):
        assert list_videos(tmp_path / "nope") == []

    def test_resolve(self, library: Path):
        assert resolve_video(library, "video_a_1.mp4") == (library / "video_a_1.mp4").resolve()

    @pytest.mark.parametrize("name", ["missing.mp4", "../outputs/../secret.mp4", ".video_d_4.mp4.partial", ""])
    def test_resolve_rejects(self, library: Path, name: str):
        (library.parent / "secret.mp4").write_bytes(b"x")
        with pytest.raises(VideoNotFoundError):
            resolve_video(library, name)

    def test_delete(self, library: Path):
        delete_video(library, "video_b_2.mp4")
        assert not (library / "video_b_2.mp4").exists()
        assert len(list_videos(library)) == 2

    def test_delete_missing(self, library: Path):
        with pytest.raises(VideoNotFoundError, match="nope.mp4"):
            delete_video(library, "nope.mp4")
