"""End-to-end wizard flow against the real relay app.

The wizard's :class:`RelayClient` is pointed at an ``httpx.MockTransport``
that forwards each request to the FastAPI ``TestClient``; the relay in turn
talks to the fake image API.
"""

import httpx
import pytest

from adstudio.ui.client import RelayClient
from adstudio.ui.models import WizardStep
from adstudio.ui.state import (
    add_images,
    begin_submission,
    go_back,
    go_to_guidance,
    go_to_upload,
    remove_image,
    reset_wizard,
    submit,
)

RELAY_URL = "http://relay.test"


@pytest.fixture
def relay_client(test_client) -> RelayClient:
    """Wizard client whose requests are served by the in-process relay."""

    def forward(request: httpx.Request) -> httpx.Response:
        resp = test_client.request(
            request.method,
            request.url.path,
            content=request.read(),
            headers={"content-type": request.headers["content-type"]},
        )
        return httpx.Response(
            resp.status_code,
            content=resp.content,
            headers={"content-type": resp.headers["content-type"]},
        )

    return RelayClient(RELAY_URL, transport=httpx.MockTransport(forward))


class TestWizardFlow:
    """Walk the four steps end to end."""

    def test_generate_two_ads(self, wizard_state, image_files, relay_client, test_client, fake_image_api, png_bytes):
        state = go_to_upload(wizard_state, "Widget")
        add_images(state, [image_files["png"], image_files["jpg"]])
        remove_image(state, 1)
        go_to_guidance(state)
        begin_submission(state, "on a table", 2)

        submit(state, relay_client)

        assert state.step == WizardStep.RESULTS
        assert state.error == ""
        assert len(state.generated_images) == 2
        assert all(url.startswith(f"{RELAY_URL}/results/") for url in state.generated_images)

        request = fake_image_api.requests[0]
        assert fake_image_api.form_field(request, "n") == "2"
        assert fake_image_api.image_part_count(request) == 1
        assert "on a table" in fake_image_api.form_field(request, "prompt")

        served = test_client.get(httpx.URL(state.generated_images[0]).path)
        assert served.content == png_bytes

        fresh = reset_wizard(state)
        assert fresh.step == WizardStep.PRODUCT_INFO
        assert fresh.images == []

    def test_upstream_failure_keeps_guidance_step(self, wizard_state, image_files, relay_client, fake_image_api):
        fake_image_api.status_code = 429
        fake_image_api.payload = {"error": {"message": "rate limited"}}

        state = go_to_upload(wizard_state, "Widget")
        add_images(state, [image_files["webp"]])
        go_to_guidance(state)
        begin_submission(state, "on a table", 1)

        submit(state, relay_client)

        assert state.step == WizardStep.GUIDANCE
        assert state.error == "rate limited"
        assert state.is_submitting is False

        # Entered values survive for a retry.
        go_back(state)
        assert state.product_name == "Widget"
        assert len(state.images) == 1
