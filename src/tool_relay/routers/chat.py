"""Chat API endpoint.

Runs one conversation turn, including any tool calls the model makes, and
returns the final answer or the stop signal a capability returned.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request

from tool_relay.conversation import (
    ChatOrchestrator,
    TerminalAnswer,
    ToolExecutionError,
    UnknownToolError,
)
from tool_relay.dependencies import get_orchestrator
from tool_relay.llm import ProviderError
from tool_relay.models.chat import ChatRequest, ChatResponse, StopInfo
from tool_relay.tools import discover

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _error(status_code: int, code: str, message: str, details: dict | None = None):
    return HTTPException(
        status_code=status_code,
        detail={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
            }
        },
    )


@router.post("", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    request: Request,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    """Run one conversation turn.

    Args:
        request_body: Conversation history and option overrides
        request: FastAPI request object
        orchestrator: Injected conversation orchestrator

    Returns:
        ChatResponse with the answer or the stop signal

    Raises:
        HTTPException: 400 for an empty history, 502 if the provider fails,
            500 if a capability fails
    """
    if not request_body.messages:
        raise _error(400, "empty_history", "Conversation has no messages to process")

    settings = request.app.state.settings
    fragments: list = [message.to_message() for message in request_body.messages]
    if request_body.options is not None:
        fragments.append(request_body.options.overrides())
    if request_body.use_tools:
        fragments.insert(0, await discover(settings.resolved_tools_dirs))

    try:
        result = await orchestrator.converse(*fragments)
    except ProviderError as e:
        logger.error(f"Provider error: {e.message}")
        raise _error(502, "provider_error", e.message, e.details())
    except httpx.HTTPError as e:
        logger.error(f"Provider request failed: {e}")
        raise _error(502, "provider_unreachable", f"Provider request failed: {str(e)}")
    except (ToolExecutionError, UnknownToolError) as e:
        raise _error(500, "tool_error", str(e), {"tool_id": e.tool_id})

    if isinstance(result, TerminalAnswer):
        logger.info(f"Chat answered ({'cached' if result.cached else 'fresh'})")
        return ChatResponse(
            status="answer",
            messages=result.messages,
            content=result.content,
            fingerprint=result.fingerprint,
            cached=result.cached,
        )

    return ChatResponse(
        status="stopped",
        stop=StopInfo(kind=result.kind.value, value=result.value),
    )
