"""Capability listing endpoint."""

import logging

from fastapi import APIRouter, Request

from tool_relay.models.tools import ToolInfo, ToolListResponse
from tool_relay.tools import discover

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.get("", response_model=ToolListResponse)
async def list_tools(request: Request) -> ToolListResponse:
    """List the capabilities found in the configured tool directories.

    Discovery runs on every request, so edits to capability modules show up
    immediately.

    Args:
        request: The FastAPI request object.

    Returns:
        ToolListResponse with every discovered capability
    """
    settings = request.app.state.settings
    registry = await discover(settings.resolved_tools_dirs)
    tools = [ToolInfo.from_capability(capability) for capability in registry]
    return ToolListResponse(tools=tools, count=len(tools))
