"""Unit tests for output naming and persistence."""

import os
import stat
import sys
from unittest.mock import patch

import pytest
from PIL import Image

from himactl.compositor import Compositor
from himactl.errors import PersistenceError
from himactl.model import OutputFormat
from himactl.output import ensure_directory, output_filename, resolve_target, save_image


class TestNaming:
    """Test output file naming."""

    @pytest.mark.parametrize(
        "fmt, store_latest_only, expected",
        [
            (OutputFormat.JPEG, False, "himawari8_20240301_042000.jpg"),
            (OutputFormat.PNG, False, "himawari8_20240301_042000.png"),
            (OutputFormat.JPEG, True, "himawari8_latest.jpg"),
            (OutputFormat.PNG, True, "himawari8_latest.png"),
        ],
    )
    def test_output_filename(self, timestamp, fmt, store_latest_only, expected):
        assert output_filename(timestamp, fmt, store_latest_only) == expected

    def test_resolve_target(self, timestamp, tmp_path):
        target = resolve_target(timestamp, tmp_path, OutputFormat.PNG, store_latest_only=False, force=True)
        assert target.path == tmp_path / "himawari8_20240301_042000.png"
        assert target.format is OutputFormat.PNG
        assert target.force is True


class TestPersistence:
    """Test directory creation and image writing."""

    def test_ensure_directory(self, tmp_path):
        directory = tmp_path / "a" / "b"
        ensure_directory(directory)
        assert directory.is_dir()

    def test_ensure_directory_failure(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError, match="output-dir"):
            ensure_directory(blocker / "sub")

    def test_save_png_keeps_transparency(self, timestamp, tmp_path):
        canvas = Compositor.new(6, 4)
        canvas.paste((255, 0, 0, 255), (0, 0, 3, 4))
        target = resolve_target(timestamp, tmp_path, OutputFormat.PNG)
        assert save_image(canvas, target) == target.path

        with Image.open(target.path) as saved:
            assert saved.format == "PNG"
            assert saved.size == (6, 4)
            assert saved.getpixel((0, 0)) == (255, 0, 0, 255)
            assert saved.getpixel((5, 3)) == (0, 0, 0, 0)

    def test_save_jpeg_flattens_onto_black(self, timestamp, tmp_path):
        canvas = Compositor.new(16, 16)
        target = resolve_target(timestamp, tmp_path, OutputFormat.JPEG, store_latest_only=True)
        save_image(canvas, target)

        with Image.open(target.path) as saved:
            assert saved.format == "JPEG"
            assert saved.mode == "RGB"
            assert saved.getpixel((8, 8)) == (0, 0, 0)

    def test_overwrites_existing(self, timestamp, tmp_path):
        target = resolve_target(timestamp, tmp_path, OutputFormat.PNG, store_latest_only=True)
        target.path.write_bytes(b"old")
        save_image(Compositor.new(2, 2), target)
        with Image.open(target.path) as saved:
            assert saved.size == (2, 2)

    def test_failed_write_leaves_no_partial_file(self, timestamp, tmp_path):
        """A failure while encoding leaves neither the target nor a temporary file."""
        target = resolve_target(timestamp, tmp_path, OutputFormat.PNG)
        with patch.object(Image.Image, "save", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError, match="disk full"):
                save_image(Compositor.new(2, 2), target)
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, timestamp, tmp_path):
        target = resolve_target(timestamp, tmp_path / "missing", OutputFormat.PNG)
        with pytest.raises(PersistenceError, match="output-write"):
            save_image(Compositor.new(2, 2), target)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    @pytest.mark.parametrize("umask, expected", [(0o022, 0o644), (0o077, 0o600), (0o002, 0o664)])
    def test_saved_file_follows_umask(self, timestamp, tmp_path, umask, expected):
        """The written image gets the same mode a plainly created file would."""
        target = resolve_target(timestamp, tmp_path, OutputFormat.PNG, store_latest_only=True)
        previous = os.umask(umask)
        try:
            save_image(Compositor.new(2, 2), target)
        finally:
            os.umask(previous)
        assert stat.S_IMODE(target.path.stat().st_mode) == expected
