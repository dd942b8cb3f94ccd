"""CLI entry point for tool-relay.

This module provides the command-line interface for starting the tool-relay
server. It can be invoked as `tool-relay` (via the script entry point) or
`python -m tool_relay`.
"""

import argparse
import logging
import sys

import uvicorn

from tool_relay import __version__, create_app
from tool_relay.config import ToolRelaySettings


def main() -> None:
    """Main entry point for the tool-relay CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="tool-relay",
        description="Tool-calling chat server for OpenAI-compatible LLM providers",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"tool-relay {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOL_RELAY_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOL_RELAY_PORT)",
    )

    parser.add_argument(
        "--base-url",
        type=str,
        default=None,
        help="Chat-completion provider base URL (can be set via TOOL_RELAY_BASE_URL)",
    )

    parser.add_argument(
        "--chat-model",
        type=str,
        default=None,
        help="Model for plain chat (default: qwen-plus, can be set via TOOL_RELAY_CHAT_MODEL)",
    )

    parser.add_argument(
        "--tools-model",
        type=str,
        default=None,
        help="Model used when tools are offered (can be set via TOOL_RELAY_TOOLS_MODEL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for cache and tools (default: ., can be set via TOOL_RELAY_DATA_DIR)",
    )

    parser.add_argument(
        "--tools-dir",
        action="append",
        default=None,
        dest="tools_dirs",
        help="Capability directory, relative to the data dir; repeatable "
        "(default: tools, can be set via TOOL_RELAY_TOOLS_DIRS)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOL_RELAY_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    for name in (
        "host",
        "port",
        "base_url",
        "chat_model",
        "tools_model",
        "data_dir",
        "tools_dirs",
        "log_level",
    ):
        value = getattr(args, name)
        if value is not None:
            settings_kwargs[name] = value

    settings = ToolRelaySettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
