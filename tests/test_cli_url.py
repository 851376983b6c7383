import json

import pytest
from typer.testing import CliRunner

from formatsniff.cli import app
from formatsniff.formats import ids
import samples


class TestCLIURL:
    """Test the CLI functionality with remote URLs."""

    @pytest.fixture
    def runner(self):
        """CLI test runner."""
        return CliRunner()

    @pytest.mark.parametrize("mode", [[], ["--sync"]])
    def test_remote_file(self, runner, httpserver, mode):
        httpserver.expect_request("/clip.opus").respond_with_data(samples.OPUS, content_type="audio/opus")
        url = httpserver.url_for("/clip.opus")
        result = runner.invoke(app, ["identify", *mode, url])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["id"] == ids.OPUS
        assert payload["method"] == "header"
        assert payload["source"] == url

    def test_remote_search(self, runner, httpserver):
        body = samples.id3v2_tag(500) + samples.FLAC
        httpserver.expect_request("/tagged.flac").respond_with_data(body)
        result = runner.invoke(app, ["identify", httpserver.url_for("/tagged.flac")])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["id"] == ids.FLAC
        assert payload["method"] == "search"

    def test_remote_missing(self, runner, httpserver):
        httpserver.expect_request("/missing.mp3").respond_with_data("", status=404)
        result = runner.invoke(app, ["identify", httpserver.url_for("/missing.mp3")])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["success"] is False
