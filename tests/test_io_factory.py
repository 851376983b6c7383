"""Tests for I/O factory functions."""

import io

import pytest

from formatsniff.io import is_url, open_reader, open_reader_async
from formatsniff.io.http_async import HTTPAsyncByteReader
from formatsniff.io.http_sync import HTTPByteReader
from formatsniff.io.local import LocalAsyncByteReader, LocalByteReader
import samples


class TestFactoryFunctions:
    """Reader selection by source type."""

    def test_is_url(self):
        assert is_url("http://example.com/a.mp3")
        assert is_url("https://example.com/a.mp3")
        assert not is_url("/music/a.mp3")
        assert not is_url("ftp://example.com/a.mp3")

    def test_path_string_and_object(self, tmp_path):
        path = tmp_path / "a.aiff"
        path.write_bytes(samples.AIFF)
        for source in (str(path), path):
            reader = open_reader(source)
            assert isinstance(reader, LocalByteReader)
            assert reader.fetch(8, 4) == b"AIFF"
            reader.close()

    def test_binary_io(self):
        reader = open_reader(io.BytesIO(samples.AIFF))
        assert isinstance(reader, LocalByteReader)
        assert reader.fetch(0, 4) == b"FORM"

    def test_http_url(self, httpserver):
        httpserver.expect_request("/a.aiff").respond_with_data(samples.AIFF)
        reader = open_reader(httpserver.url_for("/a.aiff"))
        assert isinstance(reader, HTTPByteReader)
        assert reader.fetch(8, 4) == b"AIFF"

    @pytest.mark.asyncio
    async def test_async_path(self, tmp_path):
        path = tmp_path / "a.aiff"
        path.write_bytes(samples.AIFF)
        reader = await open_reader_async(path)
        assert isinstance(reader, LocalAsyncByteReader)
        assert await reader.fetch(0, 4) == b"FORM"
        await reader.close()

    @pytest.mark.asyncio
    async def test_async_binary_io(self):
        reader = await open_reader_async(io.BytesIO(samples.AIFF))
        assert isinstance(reader, LocalAsyncByteReader)
        assert await reader.fetch(0, 4) == b"FORM"
        await reader.close()

    @pytest.mark.asyncio
    async def test_async_http_url(self, httpserver):
        httpserver.expect_request("/a.aiff").respond_with_data(samples.AIFF)
        reader = await open_reader_async(httpserver.url_for("/a.aiff"))
        assert isinstance(reader, HTTPAsyncByteReader)
        assert await reader.fetch(8, 4) == b"AIFF"
