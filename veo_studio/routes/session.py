"""
Session routes - drive the single generation session over HTTP
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from ..core import get_logger
from ..models import GenerationRequest, SessionStatus
from ..services.audio import encode_wav
from ..services.gemini import EnvironmentCredentials, GeminiGenerationService
from ..services.generation import GenerationOrchestrator
from ..services.session import SessionController

router = APIRouter(prefix="/session", tags=["session"])
logger = get_logger(__name__, service="api")

_controller: Optional[SessionController] = None


def get_session_controller() -> SessionController:
    """Process-wide session controller, created on first use."""
    global _controller
    if _controller is None:
        orchestrator = GenerationOrchestrator(GeminiGenerationService())
        _controller = SessionController(orchestrator, EnvironmentCredentials())
    return _controller


def shutdown_session_controller() -> None:
    global _controller
    if _controller is not None:
        _controller.close()
        _controller = None


def _state_payload(controller: SessionController) -> Dict[str, Any]:
    payload = controller.state.to_dict()
    payload["can_extend"] = controller.can_extend
    return payload


def _conflict(action: str, controller: SessionController) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=f"Cannot {action} while session is {controller.status.value}",
    )


@router.get("")
async def get_session(controller: SessionController = Depends(get_session_controller)):
    """Current session state"""
    return _state_payload(controller)


@router.post("/generate", status_code=202)
async def generate(request: GenerationRequest, controller: SessionController = Depends(get_session_controller)):
    """Submit a request; generation continues in the background."""
    prompt_pending = controller.state.credential_prompt
    started = await controller.submit(request, wait=False)
    if started:
        return _state_payload(controller)

    # Accepted only when this request raised the credential prompt
    state = controller.state
    if state.status is SessionStatus.IDLE and state.credential_prompt and not prompt_pending:
        return _state_payload(controller)
    if prompt_pending:
        raise HTTPException(status_code=409, detail="Select an API key before generating")
    raise _conflict("generate", controller)


@router.post("/retry", status_code=202)
async def retry(controller: SessionController = Depends(get_session_controller)):
    if not await controller.retry(wait=False):
        raise _conflict("retry", controller)
    return _state_payload(controller)


@router.post("/try-again")
async def try_again(controller: SessionController = Depends(get_session_controller)):
    if not controller.try_again():
        raise _conflict("try again", controller)
    return _state_payload(controller)


@router.post("/extend")
async def extend(controller: SessionController = Depends(get_session_controller)):
    if not controller.extend():
        raise _conflict("extend", controller)
    return _state_payload(controller)


@router.post("/new")
async def new(controller: SessionController = Depends(get_session_controller)):
    controller.new()
    return _state_payload(controller)


@router.post("/credentials/continue")
async def continue_after_credentials(controller: SessionController = Depends(get_session_controller)):
    """The user picked a key: reload it and retry a failed attempt."""
    await controller.continue_after_credential_selection(wait=False)
    return _state_payload(controller)


@router.get("/video")
async def get_video(controller: SessionController = Depends(get_session_controller)):
    result = controller.state.last_result
    if result is None:
        raise HTTPException(status_code=404, detail="No video available")
    return Response(content=result.video_bytes, media_type=result.mime_type)


@router.get("/audio")
async def get_audio(controller: SessionController = Depends(get_session_controller)):
    """Narration of the displayed result as WAV"""
    result = controller.state.last_result
    if result is None or result.audio is None:
        raise HTTPException(status_code=404, detail="No narration available")
    return Response(content=encode_wav(result.audio), media_type="audio/wav")
