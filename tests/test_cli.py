"""Tests for the CLI implementation."""

import json
import time

import pytest
from typer.testing import CliRunner

from formatsniff.cli import app
from formatsniff.core.model import FormatDescriptor
from formatsniff.core.registry import default_registry
from formatsniff.formats import ids
import samples


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def flac_path(tmp_path):
    path = tmp_path / "tiny.flac"
    path.write_bytes(samples.FLAC)
    return path


@pytest.fixture
def slow_format():
    """A registered format whose stream search takes seconds."""
    def crawl(_):
        time.sleep(3)
        return True

    slow = FormatDescriptor(9001, "Slow", "SLOW", stream_search=crawl)
    slow.add_extension("slow")
    registry = default_registry()
    registry.register(slow, priority=1)
    yield slow
    registry.unregister(slow.id)


@pytest.fixture
def tagged_mp3_path(tmp_path):
    path = tmp_path / "tagged.mp3"
    path.write_bytes(samples.id3v2_tag(200) + samples.mpeg_frames(3))
    return path


class TestIdentify:
    """The identify command."""

    def test_single_file_json_pretty(self, runner, flac_path):
        result = runner.invoke(app, ["identify", str(flac_path)])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["id"] == ids.FLAC
        assert payload["short_name"] == "FLAC"
        assert payload["method"] == "header"
        assert payload["source"] == str(flac_path)
        assert payload["bytes_fetched"] == len(samples.FLAC)

    def test_multiple_files_jsonl(self, runner, flac_path, tagged_mp3_path):
        result = runner.invoke(app, ["identify", str(flac_path), str(tagged_mp3_path)])
        assert result.exit_code == 0
        lines = [json.loads(line) for line in result.stdout.strip().splitlines()]
        assert [obj["short_name"] for obj in lines] == ["FLAC", "MPEG"]
        assert [obj["method"] for obj in lines] == ["header", "search"]

    def test_force_jsonl_single_file(self, runner, flac_path):
        result = runner.invoke(app, ["identify", "--jsonl", str(flac_path)])
        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["short_name"] == "FLAC"

    def test_sync_mode(self, runner, flac_path, tagged_mp3_path):
        result = runner.invoke(app, ["identify", "--sync", str(flac_path), str(tagged_mp3_path)])
        assert result.exit_code == 0
        lines = [json.loads(line) for line in result.stdout.strip().splitlines()]
        assert [obj["id"] for obj in lines] == [ids.FLAC, ids.MPEG]

    def test_no_search_uses_extension(self, runner, tagged_mp3_path):
        result = runner.invoke(app, ["identify", "--no-search", str(tagged_mp3_path)])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["method"] == "extension"

    def test_no_search_no_fallback_fails(self, runner, tagged_mp3_path):
        result = runner.invoke(app, ["identify", "--no-search", "--no-extension-fallback", str(tagged_mp3_path)])
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "No format matches" in payload["error"]

    def test_fields_filter(self, runner, flac_path):
        result = runner.invoke(app, ["identify", "--fields", "short_name", str(flac_path)])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["short_name"] == "FLAC"
        assert "name" not in payload
        assert "method" not in payload
        assert payload["success"] is True

    def test_output_file(self, runner, flac_path, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(app, ["identify", "-o", str(out), str(flac_path)])
        assert result.exit_code == 0
        assert result.stdout == ""
        assert json.loads(out.read_text())["id"] == ids.FLAC

    def test_missing_file(self, runner, tmp_path, flac_path):
        missing = tmp_path / "missing.flac"
        result = runner.invoke(app, ["identify", str(flac_path), str(missing)])
        assert result.exit_code == 1
        lines = [json.loads(line) for line in result.stdout.strip().splitlines()]
        assert lines[0]["success"] is True
        assert lines[1]["success"] is False
        assert lines[1]["source"] == str(missing)

    def test_stdin_sources(self, runner, flac_path):
        result = runner.invoke(app, ["identify", "-"], input=f"{flac_path}\n\n")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["id"] == ids.FLAC

    def test_timeout_bounds_command(self, runner, slow_format, tmp_path):
        path = tmp_path / "x.slow"
        path.write_bytes(b"\x00" * 64)
        started = time.monotonic()
        result = runner.invoke(app, ["identify", "--timeout", "0.1", str(path)])
        assert time.monotonic() - started < 1.5
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "timed out" in payload["error"]

    def test_no_input(self, runner):
        result = runner.invoke(app, ["identify"])
        assert result.exit_code == 1


class TestFormats:
    """The formats command."""

    def test_lists_all(self, runner):
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 0
        entries = [json.loads(line) for line in result.stdout.strip().splitlines()]
        by_id = {entry["id"]: entry for entry in entries}
        assert by_id[ids.FLAC]["extensions"] == ["flac", "fla"]
        assert by_id[ids.FLAC]["mime_types"] == ["audio/flac", "audio/x-flac"]
        assert by_id[ids.FLAC]["stream_search"] is True
        assert by_id[ids.DSF]["stream_search"] is False

    def test_filter_by_extension(self, runner):
        result = runner.invoke(app, ["formats", "--ext", ".OPUS"])
        assert result.exit_code == 0
        entries = [json.loads(line) for line in result.stdout.strip().splitlines()]
        assert [entry["id"] for entry in entries] == [ids.OPUS]

    def test_filter_by_mime(self, runner):
        result = runner.invoke(app, ["formats", "--mime", "audio/ogg"])
        entries = [json.loads(line) for line in result.stdout.strip().splitlines()]
        assert [entry["id"] for entry in entries] == [ids.OPUS, ids.OGG]
