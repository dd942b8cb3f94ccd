"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from tool_relay.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Returns the service status and version along with the configured provider
    base URL and cache directory. No request is sent to the provider.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and version information.
    """
    settings = request.app.state.settings
    provider_base_url = None
    if hasattr(request.app.state, "llm_client"):
        provider_base_url = request.app.state.llm_client.base_url

    return HealthResponse(
        status="ok",
        version=request.app.version,
        provider_base_url=provider_base_url,
        cache_dir=str(settings.resolved_cache_dir),
    )
