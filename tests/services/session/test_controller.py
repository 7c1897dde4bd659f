"""
Tests for the session controller state machine.

Drives the controller with the in-memory generation service and credential
provider from conftest.py; no network or audio device is touched.
"""

import asyncio
import json
from unittest.mock import patch

import pytest

from conftest import make_artifact
from veo_studio.core import UpstreamCallError
from veo_studio.models import (
    AspectRatio,
    GenerationMode,
    GenerationRequest,
    Resolution,
    SessionStatus,
)
from veo_studio.services.generation import (
    GenerationOrchestrator,
    GenerationOutcome,
    classify_message,
)
from veo_studio.services.session import (
    EXTEND_FAILED_PREFIX,
    MISSING_URL_MESSAGE,
    SessionController,
)


@pytest.fixture
def controller(fake_service, fake_credentials, fake_output):
    ctrl = SessionController(
        GenerationOrchestrator(fake_service),
        fake_credentials,
        output_factory=fake_output,
    )
    yield ctrl
    ctrl.close()


def _story_request(image_prompt: str = "a lighthouse at night, 9:16") -> GenerationRequest:
    script = json.dumps({
        "dialogue": "The light never sleeps.",
        "voice_tone": "softly",
        "image_prompt": image_prompt,
    })
    return GenerationRequest(
        mode=GenerationMode.STORY_TO_VIDEO,
        prompt=script,
        aspect_ratio=AspectRatio.LANDSCAPE,
    )


@pytest.mark.asyncio
class TestSubmit:

    async def test_text_to_video_success(self, controller, fake_service):
        request = GenerationRequest(prompt="a red fox")

        started = await controller.submit(request)

        assert started is True
        state = controller.state
        assert state.status is SessionStatus.SUCCESS
        assert state.last_request is request
        assert state.last_result.video_url == fake_service.artifact.url
        assert state.last_result.audio is None
        assert state.error_message is None

    async def test_story_success_with_audio(self, controller, fake_service):
        await controller.submit(_story_request())

        state = controller.state
        assert state.status is SessionStatus.SUCCESS
        assert fake_service.video_calls[0].aspect_ratio is AspectRatio.PORTRAIT
        assert fake_service.speech_calls == [("The light never sleeps.", "softly")]
        assert state.last_result.audio is not None
        assert controller.playback is not None
        assert controller.playback.buffer is state.last_result.audio

    async def test_ignored_unless_idle(self, controller, fake_service):
        await controller.submit(GenerationRequest(prompt="one"))

        started = await controller.submit(GenerationRequest(prompt="two"))

        assert started is False
        assert len(fake_service.video_calls) == 1
        assert controller.state.last_request.prompt == "one"

    async def test_failure_sets_error_message(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("500 INTERNAL")

        await controller.submit(GenerationRequest(prompt="x"))

        state = controller.state
        assert state.status is SessionStatus.ERROR
        assert state.error_message == "Video generation failed: 500 INTERNAL"
        assert state.last_result is None
        assert state.credential_prompt is False
        assert state.last_request.prompt == "x"

    @pytest.mark.parametrize("message", [
        "Requested entity was not found.",
        "API_KEY_INVALID",
        "403 permission denied",
    ])
    async def test_auth_failures_raise_credential_prompt(self, controller, fake_service, message):
        fake_service.video_error = UpstreamCallError(message)

        await controller.submit(GenerationRequest(prompt="x"))

        assert controller.status is SessionStatus.ERROR
        assert controller.state.credential_prompt is True

    async def test_missing_url_is_an_error(self, controller, fake_service):
        fake_service.artifact = make_artifact(url=None)

        await controller.submit(GenerationRequest(prompt="x"))

        state = controller.state
        assert state.status is SessionStatus.ERROR
        assert state.error_message == MISSING_URL_MESSAGE
        assert state.last_result is None

    async def test_no_key_prompts_without_calling(self, controller, fake_service, fake_credentials):
        fake_credentials.has_key = False

        started = await controller.submit(GenerationRequest(prompt="x"))

        assert started is False
        assert controller.status is SessionStatus.IDLE
        assert controller.state.credential_prompt is True
        assert fake_service.video_calls == []

    async def test_key_check_failure_treated_as_no_key(self, controller, fake_service, fake_credentials):
        fake_credentials.check_error = RuntimeError("host bridge unavailable")

        started = await controller.submit(GenerationRequest(prompt="x"))

        assert started is False
        assert controller.state.credential_prompt is True
        assert fake_service.video_calls == []

    async def test_background_submit(self, controller, fake_service):
        fake_service.video_delay = 0.05

        started = await controller.submit(GenerationRequest(prompt="x"), wait=False)

        assert started is True
        assert controller.status is SessionStatus.LOADING
        await asyncio.gather(*controller._tasks)
        assert controller.status is SessionStatus.SUCCESS


@pytest.mark.asyncio
class TestRetry:

    async def test_retry_from_error(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("503 UNAVAILABLE")
        request = GenerationRequest(prompt="x")
        await controller.submit(request)

        fake_service.video_error = None
        started = await controller.retry()

        assert started is True
        assert controller.status is SessionStatus.SUCCESS
        assert fake_service.video_calls == [request, request]

    async def test_retry_ignored_when_idle_or_success(self, controller, fake_service):
        assert await controller.retry() is False

        await controller.submit(GenerationRequest(prompt="x"))
        assert await controller.retry() is False
        assert len(fake_service.video_calls) == 1

    async def test_retry_blocked_while_credential_prompt(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("API key not valid")
        await controller.submit(GenerationRequest(prompt="x"))

        assert await controller.retry() is False
        assert len(fake_service.video_calls) == 1

    async def test_retry_while_loading_drops_stale_outcome(self, controller):
        release_first = asyncio.Event()
        real_execute = controller.orchestrator.execute
        calls = []

        async def execute(request):
            calls.append(request)
            if len(calls) == 1:
                await release_first.wait()
                return GenerationOutcome(error=classify_message("first attempt failed"))
            return await real_execute(request)

        controller.orchestrator.execute = execute
        await controller.submit(GenerationRequest(prompt="x"), wait=False)
        first = set(controller._tasks)
        await asyncio.sleep(0)

        assert await controller.retry() is True
        assert controller.status is SessionStatus.SUCCESS

        release_first.set()
        await asyncio.gather(*first)

        assert controller.status is SessionStatus.SUCCESS
        assert controller.state.error_message is None
        assert len(calls) == 2


@pytest.mark.asyncio
class TestCredentialSelection:

    async def test_continue_retries_failed_attempt(self, controller, fake_service, fake_credentials):
        fake_service.video_error = UpstreamCallError("Requested entity was not found.")
        await controller.submit(GenerationRequest(prompt="x"))
        assert controller.state.credential_prompt is True

        fake_service.video_error = None
        await controller.continue_after_credential_selection()

        assert fake_credentials.open_calls == 1
        assert controller.state.credential_prompt is False
        assert controller.status is SessionStatus.SUCCESS
        assert len(fake_service.video_calls) == 2

    async def test_continue_from_idle_only_selects_key(self, controller, fake_service, fake_credentials):
        fake_credentials.has_key = False
        await controller.submit(GenerationRequest(prompt="x"))

        await controller.continue_after_credential_selection()

        assert fake_credentials.open_calls == 1
        assert fake_credentials.has_key is True
        assert controller.status is SessionStatus.IDLE
        assert controller.state.credential_prompt is False
        assert fake_service.video_calls == []

    async def test_submit_after_auth_failure_waits_for_key_selection(
        self, controller, fake_service, fake_credentials
    ):
        fake_service.video_error = UpstreamCallError("API key not valid")
        await controller.submit(GenerationRequest(prompt="x"))
        fake_service.video_error = None
        controller.try_again()

        started = await controller.submit(controller.state.prefill)

        assert started is False
        assert controller.status is SessionStatus.IDLE
        assert controller.state.credential_prompt is True
        assert len(fake_service.video_calls) == 1

        await controller.continue_after_credential_selection()
        assert await controller.submit(controller.state.prefill) is True
        assert controller.status is SessionStatus.SUCCESS

    async def test_reset_keeps_gate_closed(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("Requested entity was not found.")
        await controller.submit(GenerationRequest(prompt="x"))

        controller.new()

        assert await controller.submit(GenerationRequest(prompt="y")) is False
        assert len(fake_service.video_calls) == 1

    async def test_generic_failure_after_key_selection_can_retry(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("API_KEY_INVALID")
        await controller.submit(GenerationRequest(prompt="x"))

        fake_service.video_error = UpstreamCallError("500 INTERNAL")
        await controller.continue_after_credential_selection()
        assert controller.status is SessionStatus.ERROR
        assert controller.state.credential_prompt is False

        fake_service.video_error = None
        assert await controller.retry() is True
        assert controller.status is SessionStatus.SUCCESS
        assert len(fake_service.video_calls) == 3


@pytest.mark.asyncio
class TestNavigation:

    async def test_try_again_prefills_last_request(self, controller, fake_service):
        fake_service.video_error = UpstreamCallError("boom")
        request = GenerationRequest(prompt="keep this prompt", aspect_ratio=AspectRatio.PORTRAIT)
        await controller.submit(request)

        assert controller.try_again() is True

        state = controller.state
        assert state.status is SessionStatus.IDLE
        assert state.prefill is request
        assert state.error_message is None

    async def test_try_again_ignored_outside_error(self, controller):
        assert controller.try_again() is False
        await controller.submit(GenerationRequest(prompt="x"))
        assert controller.try_again() is False
        assert controller.status is SessionStatus.SUCCESS

    async def test_try_again_without_request_resets(self, controller):
        controller._state.status = SessionStatus.ERROR
        controller._state.error_message = "stale"

        assert controller.try_again() is True

        state = controller.state
        assert state.status is SessionStatus.IDLE
        assert state.prefill is None
        assert state.error_message is None

    async def test_new_clears_everything(self, controller, fake_output):
        await controller.submit(_story_request())
        controller.play_audio()

        controller.new()

        state = controller.state
        assert state.status is SessionStatus.IDLE
        assert state.last_request is None
        assert state.last_result is None
        assert state.prefill is None
        assert controller.playback is None
        assert fake_output.instances[0].closed

    async def test_new_while_loading_drops_outcome(self, controller, fake_service):
        fake_service.video_delay = 0.05
        await controller.submit(GenerationRequest(prompt="x"), wait=False)
        pending = set(controller._tasks)

        controller.new()
        await asyncio.gather(*pending)

        assert controller.status is SessionStatus.IDLE
        assert controller.state.last_result is None

    async def test_new_keeps_credential_prompt(self, controller, fake_credentials):
        fake_credentials.has_key = False
        await controller.submit(GenerationRequest(prompt="x"))

        controller.new()

        assert controller.state.credential_prompt is True


@pytest.mark.asyncio
class TestExtend:

    async def test_extend_prefills_request(self, controller, fake_service):
        await controller.submit(GenerationRequest(prompt="a fox", aspect_ratio=AspectRatio.PORTRAIT))
        handle = controller.state.last_result.video_handle

        assert controller.can_extend
        assert controller.extend() is True

        state = controller.state
        assert state.status is SessionStatus.IDLE
        assert state.last_result is None
        prefill = state.prefill
        assert prefill.mode is GenerationMode.EXTEND_VIDEO
        assert prefill.prompt == ""
        assert prefill.resolution is Resolution.P720
        assert prefill.aspect_ratio is AspectRatio.PORTRAIT
        assert prefill.input_video_handle is handle
        assert prefill.input_video.content == fake_service.artifact.video_bytes

    async def test_extend_releases_playback(self, controller, fake_output):
        await controller.submit(_story_request())
        controller.play_audio()
        source = fake_output.instances[0].sources[0]

        controller.extend()

        assert source.stopped
        assert fake_output.instances[0].closed
        assert controller.playback is None

    async def test_extend_not_allowed_at_1080p(self, controller):
        await controller.submit(GenerationRequest(prompt="x", resolution=Resolution.P1080))

        assert controller.can_extend is False
        assert controller.extend() is False
        assert controller.status is SessionStatus.SUCCESS

    async def test_extend_ignored_outside_success(self, controller, fake_service):
        assert controller.extend() is False
        fake_service.video_error = UpstreamCallError("boom")
        await controller.submit(GenerationRequest(prompt="x"))
        assert controller.extend() is False
        assert controller.status is SessionStatus.ERROR

    async def test_extend_preparation_failure(self, controller):
        await controller.submit(GenerationRequest(prompt="x"))

        with patch(
            "veo_studio.services.session.controller.build_extend_request",
            side_effect=ValueError("video bytes unavailable"),
        ):
            assert controller.extend() is True

        state = controller.state
        assert state.status is SessionStatus.ERROR
        assert state.error_message == f"{EXTEND_FAILED_PREFIX}video bytes unavailable"
        assert state.last_result is None

    async def test_extended_request_runs(self, controller, fake_service):
        await controller.submit(GenerationRequest(prompt="x"))
        controller.extend()

        await controller.submit(controller.state.prefill)

        assert controller.status is SessionStatus.SUCCESS
        assert fake_service.video_calls[-1].mode is GenerationMode.EXTEND_VIDEO


@pytest.mark.asyncio
class TestPlayback:

    async def test_play_restarts_narration(self, controller, fake_output):
        await controller.submit(_story_request())

        assert controller.play_audio() is True
        assert controller.play_audio() is True

        output = fake_output.instances[0]
        assert output.sample_rate == 24000
        assert [s.stopped for s in output.sources] == [True, False]

    async def test_play_without_audio(self, controller, fake_output):
        await controller.submit(GenerationRequest(prompt="x"))

        assert controller.play_audio() is False
        assert fake_output.instances == []

    async def test_play_ignored_outside_success(self, controller, fake_output):
        assert controller.play_audio() is False
        assert fake_output.instances == []

    async def test_resubmission_releases_previous_playback(self, controller, fake_service, fake_output):
        await controller.submit(_story_request())
        controller.play_audio()
        fake_service.speech_error = UpstreamCallError("boom")
        controller._state.status = SessionStatus.ERROR

        await controller.retry()

        assert fake_output.instances[0].closed
        assert controller.playback is None

    async def test_close_releases_output(self, controller, fake_output):
        await controller.submit(_story_request())
        controller.play_audio()

        controller.close()

        assert fake_output.instances[0].closed


@pytest.mark.asyncio
class TestStoredVideoCleanup:

    @pytest.fixture
    def stored(self, fake_service, tmp_path):
        path = tmp_path / "video.mp4"
        path.write_bytes(b"mp4")
        fake_service.artifact = make_artifact(video_path=path)
        return path

    async def test_kept_while_displayed(self, controller, stored):
        await controller.submit(GenerationRequest(prompt="x"))

        assert controller.state.last_result.video_path == stored
        assert stored.exists()

    async def test_removed_on_new(self, controller, stored):
        await controller.submit(GenerationRequest(prompt="x"))

        controller.new()

        assert not stored.exists()

    async def test_removed_on_extend(self, controller, stored):
        await controller.submit(GenerationRequest(prompt="x"))

        controller.extend()

        assert not stored.exists()
        assert controller.state.prefill.input_video.content == b"\x00\x00\x00\x18ftypmp42"

    async def test_removed_on_close(self, controller, stored):
        await controller.submit(GenerationRequest(prompt="x"))

        controller.close()

        assert not stored.exists()

    async def test_removed_when_outcome_is_dropped(self, controller, fake_service, stored):
        fake_service.video_delay = 0.05
        await controller.submit(GenerationRequest(prompt="x"), wait=False)
        pending = set(controller._tasks)

        controller.new()
        await asyncio.gather(*pending)

        assert controller.state.last_result is None
        assert not stored.exists()

    async def test_removed_when_url_is_missing(self, controller, fake_service, tmp_path):
        path = tmp_path / "orphan.mp4"
        path.write_bytes(b"mp4")
        fake_service.artifact = make_artifact(url=None, video_path=path)

        await controller.submit(GenerationRequest(prompt="x"))

        assert controller.status is SessionStatus.ERROR
        assert not path.exists()
