"""AdStudio Image Generator: FastAPI Application.

This module is the entry point for the relay server.  It defines the
``create_app`` factory, the module-level ``app`` instance used by uvicorn,
and the ``main()`` CLI function that launches the server.

Architecture
------------
The application is a stateless relay:

- **Configuration** comes from :class:`~adstudio.core.config.AdStudioConfig`.
  The factory hands the uploads and results directories to the service
  explicitly.
- **Generation** is delegated to :class:`~adstudio.api.relay.AdRelayService`,
  which returns a tagged result; the route only maps it to JSON.
- **Generated images** are served read-only by ``StaticFiles`` under
  ``/results``.
- **The UI** is whatever was built into ``frontend_dir``.  Unmatched GET
  paths fall back to its ``index.html`` for client-side routing.

Every failure, including framework-level ones, is rendered as
``{"success": false, "message": ...}``.

Endpoints
---------
========  ======================  =======================================
Method    Path                    Purpose
========  ======================  =======================================
GET       ``/health``             Liveness probe
POST      ``/api/generate-ads``   Generate ad images from product photos
GET       ``/results/{file}``     Generated images
GET       ``/{path}``             Built UI assets / ``index.html``
========  ======================  =======================================

Usage
-----
CLI (installed entry point)::

    adstudio

Direct invocation::

    python -m adstudio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from adstudio import __version__
from adstudio.api.image_client import OpenAIImageClient
from adstudio.api.models import ErrorResponse, GenerateAdsResponse, HealthResponse
from adstudio.api.relay import AdRelayService, IncomingImage, RelaySuccess
from adstudio.core.config import AdStudioConfig, config
from adstudio.core.errors import GENERIC_FAILURE_MESSAGE
from adstudio.core.rules import MAX_IMAGE_BYTES

logger = logging.getLogger(__name__)

RESULTS_URL_PREFIX = "/results"


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


async def read_upload(upload: UploadFile) -> IncomingImage:
    """Read one multipart file part.

    A part whose size is already known to exceed the limit is not read; it
    keeps only its declared size so validation can reject it.
    """
    filename = upload.filename or ""
    if upload.size is not None and upload.size > MAX_IMAGE_BYTES:
        return IncomingImage(
            filename=filename,
            content_type=upload.content_type,
            data=b"",
            declared_size=upload.size,
        )

    data = await upload.read()
    return IncomingImage(filename=filename, content_type=upload.content_type, data=data)


def create_app(cfg: AdStudioConfig | None = None, image_client=None) -> FastAPI:
    """Build the relay application.

    Args:
        cfg: Configuration to use.  Defaults to the global ``config``.
        image_client: Client for the image API.  Defaults to an
            :class:`OpenAIImageClient` built from *cfg*.

    Returns:
        The configured FastAPI application.
    """
    cfg = cfg or config
    uploads_dir = Path(cfg.uploads_dir)
    results_dir = Path(cfg.results_dir)
    frontend_dir = Path(cfg.frontend_dir)

    # StaticFiles refuses to mount a directory that does not exist.
    results_dir.mkdir(parents=True, exist_ok=True)

    # -----------------------------------------------------------------------
    # Application lifecycle - relay service setup.
    # -----------------------------------------------------------------------

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the relay service on startup and store it on ``app.state``.

        Args:
            app: The FastAPI application instance.

        Yields:
            Control back to the application for the duration of its lifetime.
        """
        app.state.relay = AdRelayService(
            uploads_dir=uploads_dir,
            results_dir=results_dir,
            image_client=image_client or OpenAIImageClient.from_config(cfg),
            results_url_prefix=RESULTS_URL_PREFIX,
        )
        logger.info(f"Relay ready (uploads: {uploads_dir}, results: {results_dir})")
        if not cfg.openai_api_key and image_client is None:
            logger.warning("No OpenAI API key configured; generation requests will fail upstream.")

        yield

        logger.info("Relay shut down.")

    app = FastAPI(
        title="AdStudio Image Generator",
        description="Relay that turns product photos into AI-generated ad images.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Uniform failure shape for framework-level errors.
    # -----------------------------------------------------------------------

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        field = ".".join(str(part) for part in errors[0]["loc"][1:]) if errors else ""
        message = f"Invalid request field: {field}" if field else "Invalid request"
        return _error_response(400, message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return _error_response(500, GENERIC_FAILURE_MESSAGE)

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/health", response_model=HealthResponse)
    async def health() -> dict:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post(
        "/api/generate-ads",
        response_model=GenerateAdsResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def generate_ads(
        request: Request,
        product_name: str | None = Form(default=None, alias="productName"),
        guidance_prompt: str | None = Form(default=None, alias="guidancePrompt"),
        number_of_ads: str | None = Form(default=None, alias="numberOfAds"),
        image: list[UploadFile] | None = File(default=None),
    ) -> JSONResponse:
        """Generate ad images from product photos.

        Multipart fields ``productName``, ``guidancePrompt`` and
        ``numberOfAds`` plus one to five files under ``image``.

        Returns:
            200 with ``success``, ``images`` and ``count``; otherwise the
            failure shape with 400, 500 or the image API's status.
        """
        images: list[IncomingImage] = []
        for upload in image or []:
            incoming = await read_upload(upload)
            # Browsers send an empty, unnamed part when no file was chosen.
            if not incoming.filename and not incoming.size:
                continue
            images.append(incoming)

        relay: AdRelayService = request.app.state.relay
        result = await relay.generate_ads(product_name, guidance_prompt, number_of_ads, images)

        if isinstance(result, RelaySuccess):
            body = GenerateAdsResponse(images=result.images, count=result.count)
            return JSONResponse(status_code=result.status_code, content=body.model_dump())
        return _error_response(result.status_code, result.message)

    app.mount(RESULTS_URL_PREFIX, StaticFiles(directory=str(results_dir)), name="results")

    @app.get("/{full_path:path}", include_in_schema=False)
    async def frontend(full_path: str) -> FileResponse:
        """Serve built UI assets, falling back to ``index.html``.

        Raises:
            HTTPException: 404 if the UI has not been built.
        """
        root = frontend_dir.resolve()
        if full_path:
            candidate = (root / full_path).resolve()
            # Only serve files inside the frontend directory.
            if candidate.is_relative_to(root) and candidate.is_file():
                return FileResponse(candidate)

        index_path = root / "index.html"
        if index_path.is_file():
            return FileResponse(index_path)
        raise StarletteHTTPException(status_code=404, detail="index.html not found")

    return app


# ---------------------------------------------------------------------------
# Module-level application instance for uvicorn.
# ---------------------------------------------------------------------------
app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~adstudio.core.config.config` (which
    loads from ``ADSTUDIO_SERVER_HOST`` and ``ADSTUDIO_SERVER_PORT``).
    Defaults to ``0.0.0.0:3001``.

    This function is registered as the ``adstudio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Uploads: {config.uploads_dir}")
    logger.info(f"Results: {config.results_dir}")

    uvicorn.run(
        "adstudio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
