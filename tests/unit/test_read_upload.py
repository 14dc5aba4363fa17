"""Unit tests for reading multipart file parts in adstudio.api.main."""

import asyncio
import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from adstudio.api.main import read_upload
from adstudio.api.relay import validate_submission
from adstudio.core.errors import ValidationError
from adstudio.core.rules import MAX_IMAGE_BYTES, TOO_LARGE_MESSAGE


class RecordingUpload:
    """UploadFile stand-in that records whether it was read."""

    def __init__(self, filename, content_type, size, data=b""):
        self.filename = filename
        self.content_type = content_type
        self.size = size
        self.data = data
        self.reads = 0

    async def read(self, size=-1):
        self.reads += 1
        return self.data


class TestReadUpload:
    """read_upload() and the size limit."""

    def test_small_part_is_read(self, png_bytes):
        upload = UploadFile(
            file=io.BytesIO(png_bytes),
            size=len(png_bytes),
            filename="bottle.png",
            headers=Headers({"content-type": "image/png"}),
        )
        incoming = asyncio.run(read_upload(upload))

        assert incoming.filename == "bottle.png"
        assert incoming.content_type == "image/png"
        assert incoming.data == png_bytes
        assert incoming.size == len(png_bytes)

    def test_oversized_part_is_not_read(self):
        upload = RecordingUpload("huge.png", "image/png", MAX_IMAGE_BYTES + 1)
        incoming = asyncio.run(read_upload(upload))

        assert upload.reads == 0
        assert incoming.data == b""
        assert incoming.size == MAX_IMAGE_BYTES + 1

    def test_oversized_part_fails_validation(self):
        upload = RecordingUpload("huge.png", "image/png", MAX_IMAGE_BYTES + 1)
        incoming = asyncio.run(read_upload(upload))

        with pytest.raises(ValidationError, match=TOO_LARGE_MESSAGE):
            validate_submission("Widget", "on a table", [incoming])

    def test_unknown_size_is_read(self, png_bytes):
        upload = RecordingUpload("bottle.png", "image/png", None, data=png_bytes)
        incoming = asyncio.run(read_upload(upload))

        assert upload.reads == 1
        assert incoming.size == len(png_bytes)
