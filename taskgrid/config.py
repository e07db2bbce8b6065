# taskgrid/config.py
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # The sandbox folder name (.taskgrid) is a fixed constant, not a setting.
    SERVER_NAME: str = "TaskgridSandbox"

    # File context gathering
    CONTEXT_MAX_FILES: int = 10
    CONTEXT_MAX_DEPTH: int = 2

    # HTTP MCP transport
    MCP_HTTP_HOST: str = "127.0.0.1"
    MCP_HTTP_PORT: int = 8080
    MCP_HTTP_PATH: str = "/mcp"

    # Security: Bearer token and allowed origins
    MCP_HTTP_BEARER_TOKEN: str = "change-me"         # set in .env for prod
    MCP_HTTP_ALLOWED_ORIGINS: str = "http://localhost, http://127.0.0.1, tauri://localhost"
    MCP_HTTP_ALLOW_NO_ORIGIN: bool = True            # allow non-browser clients

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
