"""FastAPI routers for API endpoints.

Each router module defines the endpoints for one resource (health, tools,
chat).
"""

from tool_relay.routers import chat, health, tools

__all__ = ["chat", "health", "tools"]
