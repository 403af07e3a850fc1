"""
Action endpoint.
"""
import time

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from nutriplan.core.config import settings
from nutriplan.core.errors import ActionError
from nutriplan.core.limiter import limiter
from nutriplan.core.logger import log_request, log_response, log_error
from nutriplan.models.schemas import ActionRequest, ActionResponse, ErrorResponse
from nutriplan.services import action_router
from nutriplan.services.completion_service import CompletionClient
from nutriplan.services.stream_relay import NDJSON_MEDIA_TYPE

router = APIRouter()

ENDPOINT = "/api/actions"


def get_completion_client(request: Request) -> CompletionClient:
    """FastAPI dependency — the client built at startup."""
    return request.app.state.completion_client


@router.post(
    ENDPOINT,
    response_model=ActionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid envelope, payload or image data"},
        500: {"model": ErrorResponse, "description": "AI returned nothing usable or failed"},
        504: {"model": ErrorResponse, "description": "AI request timed out"},
    },
)
@limiter.limit(settings.RATE_LIMIT)
async def run_action(
    request: Request,
    req: ActionRequest,
    client: CompletionClient = Depends(get_completion_client),
):
    """
    Run one AI action.

    Body: {"action": "<name>", "payload": {...}}. Returns {"result": ...},
    or an NDJSON stream of {"text": ...} lines for sendMessageToAI.
    """
    log_request(ENDPOINT, req.action)
    started = time.perf_counter()

    try:
        prepared = action_router.prepare_action(req.action, req.payload)

        if prepared.streaming:
            body = await action_router.open_action_stream(client, prepared)
            log_response(ENDPOINT, f"{req.action} streaming")
            return StreamingResponse(body, media_type=NDJSON_MEDIA_TYPE)

        result = await action_router.execute_action(client, prepared)
    except ActionError as e:
        log_error(f"action '{req.action}'", e)
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        log_error(f"action '{req.action}'", e)
        raise HTTPException(status_code=500, detail=str(e) or "Internal Server Error")

    log_response(ENDPOINT, f"{req.action} ok", (time.perf_counter() - started) * 1000)
    return {"result": result}
