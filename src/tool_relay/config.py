"""Configuration module for tool-relay using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolRelaySettings(BaseSettings):
    """Main configuration settings for tool-relay.

    All settings can be overridden via environment variables with the TOOL_RELAY_
    prefix. For example, TOOL_RELAY_BASE_URL will override the base_url setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Chat-completion provider
    base_url: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    api_key: str = ""
    chat_model: str = "qwen-plus"
    # Model used when tools are offered; falls back to chat_model
    tools_model: str | None = None
    # None disables the HTTP timeout entirely
    request_timeout: float | None = None

    # Request defaults
    max_tokens: int = 8192
    temperature: float = 0.7
    enable_thinking: bool | None = None

    # Data directories (relative to data_dir)
    data_dir: str = "."
    cache_dir: str = ".cache"
    tools_dirs: list[str] = Field(default_factory=lambda: ["tools"])

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOL_RELAY_")

    # --- Resolved paths (computed from data_dir + relative dirs) ---

    @property
    def resolved_cache_dir(self) -> Path:
        """Get the full path to the response cache directory."""
        return Path(self.data_dir) / self.cache_dir

    @property
    def resolved_tools_dirs(self) -> list[Path]:
        """Get the full paths to the capability directories."""
        return [Path(self.data_dir) / tools_dir for tools_dir in self.tools_dirs]

    @property
    def resolved_tools_model(self) -> str:
        """Get the model used for tool-augmented requests."""
        return self.tools_model or self.chat_model
