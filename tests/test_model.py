"""Unit tests for the data model parsers."""

from datetime import datetime, timezone

import pytest

from himactl.errors import ConfigurationError
from himactl.model import ImageTimestamp, Margins, OutputFormat, OutputTarget, ResolutionLevel


class TestMargins:
    """Test the compact margins syntax."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("5", (5, 5, 5, 5)),
            ("5,10", (5, 10, 5, 10)),
            ("5,10,15", (5, 10, 15, 5)),
            ("5,10,15,20", (5, 10, 15, 20)),
            (" 5 , 10 ", (5, 10, 5, 10)),
            ("0", (0, 0, 0, 0)),
        ],
    )
    def test_parse_valid(self, text, expected):
        """Missing sides are inherited from the opposite ones."""
        margins = Margins.parse(text)
        assert (margins.top, margins.right, margins.bottom, margins.left) == expected

    @pytest.mark.parametrize("text", ["5,10,15,20,25", "a", "5,x", "", "5,,5", "-5", "1.5"])
    def test_parse_invalid(self, text):
        """Too many fields or anything that is not a non-negative integer is rejected."""
        with pytest.raises(ConfigurationError, match="TOP\\[,RIGHT\\]"):
            Margins.parse(text)

    def test_empty(self):
        """Default margins are all zero."""
        assert Margins.empty() == Margins(top=0, right=0, bottom=0, left=0)

    def test_str(self):
        """The string form round-trips through the parser."""
        margins = Margins(top=1, right=2, bottom=3, left=4)
        assert Margins.parse(str(margins)) == margins


class TestResolutionLevel:
    """Test resolution level validation."""

    @pytest.mark.parametrize("value", ["4", "8", " 16 ", 20])
    def test_parse_valid(self, value):
        assert int(ResolutionLevel.parse(value)) == int(str(value).strip())

    @pytest.mark.parametrize("value", ["0", "5", "12", "abc", "", -4, None, [4]])
    def test_parse_invalid(self, value):
        with pytest.raises(ConfigurationError, match="Invalid level"):
            ResolutionLevel.parse(value)

    def test_default(self):
        assert ResolutionLevel.default() is ResolutionLevel.L8


class TestOutputFormat:
    """Test output format parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [("png", OutputFormat.PNG), ("PNG", OutputFormat.PNG), ("jpeg", OutputFormat.JPEG), (" JPEG ", OutputFormat.JPEG)],
    )
    def test_parse_valid(self, value, expected):
        assert OutputFormat.parse(value) is expected

    @pytest.mark.parametrize("value", ["jpg", "gif", "Png", ""])
    def test_parse_invalid(self, value):
        with pytest.raises(ConfigurationError, match="Invalid image format"):
            OutputFormat.parse(value)

    def test_extensions(self):
        assert OutputFormat.PNG.extension == "png"
        assert OutputFormat.JPEG.extension == "jpg"


class TestImageTimestamp:
    """Test metadata date parsing."""

    def test_from_date_string(self):
        """Dates are parsed as UTC and split into URL components."""
        ts = ImageTimestamp.from_date_string("2024-03-01 04:20:00")
        assert ts.value == datetime(2024, 3, 1, 4, 20, 0, tzinfo=timezone.utc)
        assert (ts.year, ts.month, ts.day, ts.time) == ("2024", "03", "01", "042000")
        assert ts.compact_date == "20240301"

    @pytest.mark.parametrize("value", ["2024-03-01", "2024-03-01T04:20:00", "yesterday", "2024-13-01 04:20:00"])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            ImageTimestamp.from_date_string(value)


class TestOutputTarget:
    """Test the overwrite policy."""

    def test_missing_file_is_not_skipped(self, tmp_path):
        target = OutputTarget(path=tmp_path / "a.jpg", format=OutputFormat.JPEG)
        assert not target.should_skip

    @pytest.mark.parametrize(
        "store_latest_only, force, expected",
        [(False, False, True), (False, True, False), (True, False, False), (True, True, False)],
    )
    def test_existing_file(self, tmp_path, store_latest_only, force, expected):
        path = tmp_path / "a.jpg"
        path.write_bytes(b"data")
        target = OutputTarget(
            path=path,
            format=OutputFormat.JPEG,
            store_latest_only=store_latest_only,
            force=force,
        )
        assert target.should_skip is expected
