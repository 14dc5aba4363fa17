"""HTTP client the wizard uses to submit to the relay."""

import logging
from contextlib import ExitStack
from urllib.parse import urljoin

import httpx

from .models import UploadedImage

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Failed to generate images"
NETWORK_FAILURE_MESSAGE = "Something went wrong. Please try again."


class RelayClientError(Exception):
    """Submission failed.  The message is shown in the wizard's error banner."""

    pass


class RelayClient:
    """Synchronous client for ``POST /api/generate-ads``.

    Args:
        base_url: Relay base URL, e.g. ``http://127.0.0.1:3001``.
        timeout: Seconds to wait, or None to wait for as long as generation takes.
        transport: Optional httpx transport (tests pass a ``MockTransport``).
        public_url: Relay base URL as seen from the user's browser, used for
            result links.  Defaults to *base_url*.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
        public_url: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/") + "/"
        self.public_url = (public_url or base_url).rstrip("/") + "/"
        self.timeout = timeout
        self.transport = transport

    def resolve(self, url: str) -> str:
        """Turn a root-relative result URL into an absolute one for display."""
        return urljoin(self.public_url, url)

    def generate_ads(
        self,
        product_name: str,
        guidance_prompt: str,
        number_of_ads: int,
        images: list[UploadedImage],
    ) -> list[str]:
        """Submit one generation request.

        Every image is sent under the shared ``image`` field name.

        Returns:
            Absolute URLs of the generated images.

        Raises:
            RelayClientError: On any failure; the message is user-facing.
        """
        data = {
            "productName": product_name,
            "guidancePrompt": guidance_prompt,
            "numberOfAds": str(number_of_ads),
        }

        try:
            with ExitStack() as stack:
                files = [
                    (
                        "image",
                        (img.filename, stack.enter_context(open(img.source_path, "rb")), img.content_type),
                    )
                    for img in images
                ]
                with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                    response = client.post(
                        urljoin(self.base_url, "api/generate-ads"),
                        data=data,
                        files=files,
                    )
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Submission to relay failed: {e}")
            raise RelayClientError(NETWORK_FAILURE_MESSAGE) from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Relay returned non-JSON response ({response.status_code})")
            if response.is_success:
                raise RelayClientError(NETWORK_FAILURE_MESSAGE) from e
            raise RelayClientError(DEFAULT_FAILURE_MESSAGE) from e

        if not response.is_success:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise RelayClientError(message or DEFAULT_FAILURE_MESSAGE)

        urls = payload.get("images") if isinstance(payload, dict) else None
        if not isinstance(urls, list):
            raise RelayClientError(NETWORK_FAILURE_MESSAGE)

        return [self.resolve(url) for url in urls]
