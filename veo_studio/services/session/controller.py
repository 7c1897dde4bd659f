"""
Session controller - the single owner of SessionState.

Transitions:
    Idle            --submit-->      Loading
    Loading         --completed-->   Success
    Loading         --failed-->      Error
    Error | Loading --retry-->       Loading   (same request, fresh attempt)
    Error           --try_again-->   Idle      (last request as pre-fill)
    Success         --extend-->      Idle      (extend request as pre-fill)
    any             --new-->         Idle      (everything cleared)

Anything else is ignored. Attempts are never cancelled; when a retry or a
reset supersedes an attempt still in flight, its outcome is dropped.
Submit and retry are both held back while credential selection is
pending; only the credential flow clears that gate. Stored video files are
deleted once their result is replaced, dropped or cleared.
"""

import asyncio
import dataclasses
import uuid
from typing import Optional, Set

from veo_studio.core import get_logger, remove_file, set_session_id
from veo_studio.models import (
    EXTEND_RESOLUTION,
    GenerationRequest,
    GenerationResult,
    SessionState,
    SessionStatus,
)
from veo_studio.services.generation import (
    CredentialProvider,
    GenerationOrchestrator,
    GenerationOutcome,
    build_extend_request,
)
from veo_studio.services.playback import AudioPlayback
from veo_studio.services.playback.player import OutputFactory, PydubAudioOutput

logger = get_logger(__name__, component="session")

MISSING_URL_MESSAGE = "Video generated, but URL is missing. Please try again."
EXTEND_FAILED_PREFIX = "Failed to prepare video for extension: "


class SessionController:
    """Mediates user actions on the single active generation session."""

    def __init__(
        self,
        orchestrator: GenerationOrchestrator,
        credentials: CredentialProvider,
        output_factory: OutputFactory = PydubAudioOutput,
    ):
        self.orchestrator = orchestrator
        self.credentials = credentials
        self._output_factory = output_factory
        self._state = SessionState()
        self._playback: Optional[AudioPlayback] = None
        self._attempt = 0
        self._tasks: Set[asyncio.Task] = set()
        self.session_id = uuid.uuid4().hex

    @property
    def state(self) -> SessionState:
        """Snapshot of the current state."""
        return dataclasses.replace(self._state)

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def playback(self) -> Optional[AudioPlayback]:
        return self._playback

    @property
    def can_extend(self) -> bool:
        state = self._state
        return (
            state.status is SessionStatus.SUCCESS
            and state.last_result is not None
            and state.last_request is not None
            and state.last_request.resolution == EXTEND_RESOLUTION
        )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    async def submit(self, request: GenerationRequest, wait: bool = True) -> bool:
        """Start a generation attempt from Idle.

        With ``wait=False`` the attempt keeps running in the background and
        this returns as soon as the session is Loading.
        """
        if self._state.status is not SessionStatus.IDLE:
            logger.debug(f"Ignoring submit while {self._state.status.value}")
            return False
        return await self._start_attempt(request, wait)

    async def retry(self, wait: bool = True) -> bool:
        """Re-submit the last request unchanged."""
        state = self._state
        if state.status not in (SessionStatus.ERROR, SessionStatus.LOADING) or state.last_request is None:
            logger.debug(f"Ignoring retry while {state.status.value}")
            return False
        return await self._start_attempt(state.last_request, wait)

    async def _start_attempt(self, request: GenerationRequest, wait: bool) -> bool:
        if self._state.credential_prompt:
            logger.info("Attempt blocked until an API key is selected")
            return False
        if not await self._credentials_ready():
            self._state.credential_prompt = True
            logger.warning("No API key selected, requesting credential selection")
            return False

        self._attempt += 1
        attempt = self._attempt
        self._release_result()
        self._state = SessionState(
            status=SessionStatus.LOADING,
            last_request=request,
        )
        self._log_transition("loading", mode=request.mode.value)

        if wait:
            await self._complete(attempt, request)
        else:
            task = asyncio.create_task(self._complete(attempt, request))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return True

    async def _complete(self, attempt: int, request: GenerationRequest) -> None:
        set_session_id(self.session_id)
        outcome = await self.orchestrator.execute(request)

        if attempt != self._attempt:
            logger.info("Dropping outcome of a superseded attempt", extra={"attempt": attempt})
            if outcome.ok:
                remove_file(outcome.result.video_path)
            return

        self._apply_outcome(outcome)

    def _apply_outcome(self, outcome: GenerationOutcome) -> None:
        if outcome.ok:
            result = outcome.result
            if not result.video_url:
                remove_file(result.video_path)
                self._fail(MISSING_URL_MESSAGE)
                return
            self._succeed(result)
            return

        error = outcome.error
        self._fail(error.user_message)
        if error.needs_credential_reselection:
            self._state.credential_prompt = True

    def _succeed(self, result: GenerationResult) -> None:
        self._state.status = SessionStatus.SUCCESS
        self._state.last_result = result
        self._state.error_message = None
        self._playback = AudioPlayback(result.audio, self._output_factory)
        self._log_transition("success", has_audio=result.audio is not None)

    def _fail(self, message: str) -> None:
        self._state.status = SessionStatus.ERROR
        self._state.error_message = message
        self._log_transition("error", error=message)

    async def _credentials_ready(self) -> bool:
        try:
            return bool(await self.credentials.has_selected_api_key())
        except Exception as exc:
            logger.warning(f"API key check failed, assuming no key selected: {exc}")
            return False

    async def continue_after_credential_selection(self, wait: bool = True) -> None:
        """Run the credential selection flow, then retry a failed attempt."""
        self._state.credential_prompt = False
        await self.credentials.open_select_key()
        if self._state.status is SessionStatus.ERROR and self._state.last_request is not None:
            await self.retry(wait=wait)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def try_again(self) -> bool:
        """Leave Error for Idle with the last request as pre-fill."""
        if self._state.status is not SessionStatus.ERROR:
            logger.debug(f"Ignoring try_again while {self._state.status.value}")
            return False
        if self._state.last_request is None:
            self.new()
            return True

        self._state.prefill = self._state.last_request
        self._state.status = SessionStatus.IDLE
        self._state.error_message = None
        self._log_transition("idle", prefilled=True)
        return True

    def new(self) -> None:
        """Start over with nothing stored."""
        self._attempt += 1
        self._release_result()
        self._state = SessionState(credential_prompt=self._state.credential_prompt)
        self._log_transition("idle", reset=True)

    def extend(self) -> bool:
        """Leave Success for Idle pre-filled with a request that continues the video."""
        if not self.can_extend:
            logger.debug("Ignoring extend: no extendable result")
            return False

        state = self._state
        try:
            prefill = build_extend_request(state.last_request, state.last_result)
        except Exception as exc:
            logger.error("Failed to prepare video for extension", exc_info=True)
            self._release_result()
            self._fail(f"{EXTEND_FAILED_PREFIX}{exc}")
            return True

        self._release_result()
        state.prefill = prefill
        state.status = SessionStatus.IDLE
        state.error_message = None
        self._log_transition("idle", extend=True)
        return True

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play_audio(self) -> bool:
        """Play the narration of the displayed result, restarting it if running."""
        if self._state.status is not SessionStatus.SUCCESS or self._playback is None:
            return False
        if self._playback.buffer is None:
            return False
        self._playback.play()
        return True

    def close(self) -> None:
        """Tear down: release playback resources."""
        self._release_result()

    def _release_result(self) -> None:
        playback, self._playback = self._playback, None
        result, self._state.last_result = self._state.last_result, None
        try:
            if playback is not None:
                playback.release()
        finally:
            if result is not None:
                remove_file(result.video_path)

    def _log_transition(self, target: str, **extra) -> None:
        logger.info(f"Session -> {target}", extra={"session": self.session_id, **extra})
