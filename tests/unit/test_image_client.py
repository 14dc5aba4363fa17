"""Unit tests for adstudio.api.image_client - the OpenAI edits client."""

import asyncio

import httpx
import pytest

from adstudio.api.file_store import save_upload
from adstudio.api.image_client import OpenAIImageClient
from adstudio.core.errors import GENERIC_FAILURE_MESSAGE, ErrorKind, UpstreamError


@pytest.fixture
def references(temp_dir, png_bytes):
    return [save_upload(temp_dir, "bottle.png", "image/png", png_bytes)]


class TestEditImagesRequest:
    """What the client sends."""

    def test_posts_multipart_to_edits_endpoint(self, image_client, fake_image_api, references):
        asyncio.run(image_client.edit_images("make an ad", 2, references))

        request = fake_image_api.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.openai.com/v1/images/edits"
        assert request.headers["Authorization"] == "Bearer test-key"
        assert request.headers["Content-Type"].startswith("multipart/form-data")

    def test_form_fields(self, image_client, fake_image_api, references):
        asyncio.run(image_client.edit_images("make an ad", 3, references))

        request = fake_image_api.requests[0]
        assert fake_image_api.form_field(request, "model") == "gpt-image-1"
        assert fake_image_api.form_field(request, "prompt") == "make an ad"
        assert fake_image_api.form_field(request, "n") == "3"
        assert fake_image_api.form_field(request, "size") == "1024x1024"

    def test_every_reference_attached(self, image_client, fake_image_api, temp_dir, png_bytes):
        refs = [save_upload(temp_dir, f"{i}.png", "image/png", png_bytes) for i in range(3)]
        asyncio.run(image_client.edit_images("p", 1, refs))

        assert fake_image_api.image_part_count(fake_image_api.requests[0]) == 3

    def test_base_url_trailing_slash(self, fake_image_api, references):
        client = OpenAIImageClient(
            api_key="k",
            base_url="http://proxy.local/v1/",
            transport=httpx.MockTransport(fake_image_api.handle),
        )
        asyncio.run(client.edit_images("p", 1, references))
        assert str(fake_image_api.requests[0].url) == "http://proxy.local/v1/images/edits"

    def test_from_config(self, test_config):
        client = OpenAIImageClient.from_config(test_config)
        assert client.api_key == "test-key"
        assert client.model == test_config.image_model
        assert client.timeout is None


class TestEditImagesResponse:
    """How the client reads answers."""

    def test_returns_payloads_in_order(self, image_client, fake_image_api, references):
        fake_image_api.payload = {"data": [{"b64_json": "QQ=="}, {"b64_json": "Qg=="}]}
        assert asyncio.run(image_client.edit_images("p", 2, references)) == ["QQ==", "Qg=="]

    def test_items_without_b64_are_skipped(self, image_client, fake_image_api, references):
        fake_image_api.payload = {"data": [{"url": "http://x"}, {"b64_json": "QQ=="}]}
        assert asyncio.run(image_client.edit_images("p", 2, references)) == ["QQ=="]

    def test_empty_data_list_is_empty(self, image_client, fake_image_api, references):
        fake_image_api.payload = {"data": []}
        assert asyncio.run(image_client.edit_images("p", 1, references)) == []

    def test_missing_data_is_upstream_error(self, image_client, fake_image_api, references):
        fake_image_api.payload = {}

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(image_client.edit_images("p", 1, references))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == GENERIC_FAILURE_MESSAGE

    def test_error_body_with_success_status(self, image_client, fake_image_api, references):
        fake_image_api.payload = {"error": {"message": "content policy violation"}}

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(image_client.edit_images("p", 1, references))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "content policy violation"

    @pytest.mark.parametrize("payload", [["QQ=="], {"data": {"b64_json": "QQ=="}}])
    def test_malformed_body_is_upstream_error(self, image_client, fake_image_api, references, payload):
        fake_image_api.payload = payload
        with pytest.raises(UpstreamError):
            asyncio.run(image_client.edit_images("p", 1, references))


class TestEditImagesErrors:
    """Upstream failures become UpstreamError."""

    def test_error_status_and_message_propagated(self, image_client, fake_image_api, references):
        fake_image_api.status_code = 429
        fake_image_api.payload = {"error": {"message": "rate limited"}}

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(image_client.edit_images("p", 1, references))

        assert exc_info.value.status_code == 429
        assert exc_info.value.message == "rate limited"
        assert exc_info.value.kind is ErrorKind.UPSTREAM

    def test_error_without_message_uses_generic(self, image_client, fake_image_api, references):
        fake_image_api.status_code = 503
        fake_image_api.payload = {"detail": "down"}

        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(image_client.edit_images("p", 1, references))

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == GENERIC_FAILURE_MESSAGE

    def test_non_json_error_body(self, references):
        client = OpenAIImageClient(
            api_key="k",
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad Gateway")),
        )
        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(client.edit_images("p", 1, references))
        assert exc_info.value.status_code == 502

    def test_transport_failure_is_500(self, references):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = OpenAIImageClient(api_key="k", transport=httpx.MockTransport(refuse))
        with pytest.raises(UpstreamError) as exc_info:
            asyncio.run(client.edit_images("p", 1, references))

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == GENERIC_FAILURE_MESSAGE
