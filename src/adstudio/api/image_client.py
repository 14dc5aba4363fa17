"""Client for the external image generation API.

The relay talks to an OpenAI-compatible ``/images/edits`` endpoint: one
multipart request carries the model identifier, the instruction, the
requested count, a fixed square size and every source image as an
``image[]`` part.  The API answers synchronously with a ``data`` list whose
items hold base64-encoded PNG bytes under ``b64_json``.
"""

from __future__ import annotations

import logging

import httpx

from adstudio.api.file_store import StoredUpload
from adstudio.core.errors import GENERIC_FAILURE_MESSAGE, UpstreamError

logger = logging.getLogger(__name__)


def _error_message(payload) -> str:
    """Read ``{"error": {"message": ...}}`` from an API body, if present."""
    error_obj = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error_obj, dict) and error_obj.get("message"):
        return str(error_obj["message"])
    return GENERIC_FAILURE_MESSAGE


def _upstream_error(response: httpx.Response) -> UpstreamError:
    """Convert an error response into an :class:`UpstreamError`.

    The upstream status is always propagated.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    return UpstreamError(_error_message(payload), response.status_code)


class OpenAIImageClient:
    """Async client for OpenAI image edits.

    Args:
        api_key: Bearer credential.  A missing key is not checked locally;
            the API's own 401 is propagated like any other upstream error.
        base_url: API base URL, e.g. ``https://api.openai.com/v1``.
        model: Model identifier sent with every request.
        size: Output size, e.g. ``1024x1024``.
        timeout: Seconds to wait for a response, or ``None`` for no limit.
        transport: Optional httpx transport (tests pass a ``MockTransport``).
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-image-1",
        size: str = "1024x1024",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.size = size
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_config(cls, cfg, transport: httpx.AsyncBaseTransport | None = None) -> OpenAIImageClient:
        """Build a client from an :class:`~adstudio.core.config.AdStudioConfig`."""
        return cls(
            api_key=cfg.openai_api_key,
            base_url=cfg.openai_base_url,
            model=cfg.image_model,
            size=cfg.image_size,
            timeout=cfg.upstream_timeout,
            transport=transport,
        )

    async def edit_images(self, prompt: str, count: int, references: list[StoredUpload]) -> list[str]:
        """Request *count* images guided by *prompt* and the reference images.

        Args:
            prompt: Complete natural-language instruction.
            count: Number of images to request.
            references: Stored source images attached as edit references.

        Returns:
            Base64 payloads in the order the API returned them.  Items
            without ``b64_json`` are skipped.

        Raises:
            UpstreamError: If the API is unreachable, answers with an error,
                or returns a body without a ``data`` list.
        """
        data = {
            "model": self.model,
            "prompt": prompt,
            "n": str(count),
            "size": self.size,
        }
        files = [
            ("image[]", (ref.filename, ref.path.read_bytes(), ref.content_type))
            for ref in references
        ]
        headers = {"Authorization": f"Bearer {self.api_key or ''}"}

        logger.info(f"Calling {self.model} image edits (n={count}, references={len(references)})")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/images/edits",
                    headers=headers,
                    data=data,
                    files=files,
                )
        except httpx.HTTPError as e:
            logger.error(f"Image API request failed: {e}")
            raise UpstreamError(GENERIC_FAILURE_MESSAGE) from e

        if response.status_code >= 400:
            error = _upstream_error(response)
            logger.error(f"Image API returned {response.status_code}: {error.message}")
            raise error

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("Image API returned an unreadable response") from e

        items = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            # A success status with an error body, or no image list at all.
            message = _error_message(payload)
            logger.error(f"Image API response has no image list: {message}")
            raise UpstreamError(message)

        return [
            item["b64_json"]
            for item in items
            if isinstance(item, dict) and item.get("b64_json")
        ]
