"""Shared pytest fixtures for AdStudio tests."""

import base64
import io
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest
from PIL import Image

# Keep the import-time global config away from the working directory.
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="adstudio-tests-"))
os.environ.setdefault("ADSTUDIO_UPLOADS_DIR", str(_SESSION_DIR / "uploads"))
os.environ.setdefault("ADSTUDIO_RESULTS_DIR", str(_SESSION_DIR / "results"))

from fastapi.testclient import TestClient  # noqa: E402

from adstudio.api.image_client import OpenAIImageClient  # noqa: E402
from adstudio.api.main import create_app  # noqa: E402
from adstudio.core.config import AdStudioConfig  # noqa: E402
from adstudio.ui.models import WizardState  # noqa: E402


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 8)) -> bytes:
    """Encode a small solid-colour image."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeImageAPI:
    """Stand-in for the OpenAI image edits endpoint.

    Records every request.  By default it answers with ``n`` copies of a
    small PNG; set ``status_code``/``payload`` to simulate failures.
    """

    def __init__(self, image_b64: str) -> None:
        self.image_b64 = image_b64
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload = None

    @staticmethod
    def form_field(request: httpx.Request, name: str) -> str | None:
        """Extract a text field from a recorded multipart request."""
        match = re.search(
            rb'name="' + re.escape(name.encode()) + rb'"\r\n\r\n(.*?)\r\n',
            request.read(),
            re.DOTALL,
        )
        return match.group(1).decode() if match else None

    @staticmethod
    def image_part_count(request: httpx.Request) -> int:
        return request.read().count(b'name="image[]"')

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.payload is not None or self.status_code >= 400:
            return httpx.Response(self.status_code, json=self.payload)

        n = int(self.form_field(request, "n") or 1)
        return httpx.Response(200, json={"data": [{"b64_json": self.image_b64} for _ in range(n)]})


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AdStudioConfig:
    """Create a test configuration with temporary directories."""
    frontend_dir = temp_dir / "frontend"
    frontend_dir.mkdir()

    return AdStudioConfig(
        openai_api_key="test-key",
        uploads_dir=str(temp_dir / "uploads"),
        results_dir=str(temp_dir / "results"),
        frontend_dir=str(frontend_dir),
        _env_file=None,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")


@pytest.fixture
def png_b64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def fake_image_api(png_b64: str) -> FakeImageAPI:
    return FakeImageAPI(png_b64)


@pytest.fixture
def image_client(fake_image_api: FakeImageAPI) -> OpenAIImageClient:
    """OpenAI client whose transport is the fake image API."""
    return OpenAIImageClient(
        api_key="test-key",
        transport=httpx.MockTransport(fake_image_api.handle),
    )


@pytest.fixture
def test_client(test_config: AdStudioConfig, image_client: OpenAIImageClient) -> Generator[TestClient, None, None]:
    """FastAPI TestClient for a relay wired to the fake image API."""
    app = create_app(test_config, image_client=image_client)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def image_files(temp_dir: Path, png_bytes: bytes) -> dict[str, Path]:
    """Sample files for the wizard: valid images, a text file and an oversized PNG."""
    files_dir = temp_dir / "picked"
    files_dir.mkdir()

    files = {
        "png": files_dir / "bottle.png",
        "jpg": files_dir / "bottle.jpg",
        "webp": files_dir / "bottle.webp",
        "txt": files_dir / "notes.txt",
        "huge": files_dir / "huge.png",
    }
    files["png"].write_bytes(png_bytes)
    files["jpg"].write_bytes(make_image_bytes("JPEG"))
    files["webp"].write_bytes(make_image_bytes("WEBP"))
    files["txt"].write_text("not an image")
    files["huge"].write_bytes(png_bytes + b"\0" * (5 * 1024 * 1024))
    return files


@pytest.fixture
def wizard_state() -> WizardState:
    """Create empty wizard state for testing."""
    return WizardState()
