"""
Application configuration module.

Uses pydantic-settings to load configuration from environment variables
(or a .env file) and exposes a single `settings` object used by the rest
of the people-mcp service: database connection details, the optional API
key for the HTTP transport, and server identity/limits.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Validated application settings loaded from environment variables.

    Attributes:
        DATABASE_URL:      Full PostgreSQL DSN. When set it takes precedence
                           over the individual DB_* values.
        DB_HOST .. DB_PASSWORD: Individual connection parameters.
        DB_POOL_MIN_SIZE:  Minimum number of pooled connections.
        DB_POOL_MAX_SIZE:  Maximum number of pooled connections.
        MCP_API_KEY:       API key required by the HTTP transport. Empty
                           disables the check (development mode).
        HTTP_HOST:         Interface the HTTP transport binds to.
        HTTP_PORT:         Port the HTTP transport listens on.
        MCP_PATH:          Path the MCP endpoint is mounted at.
        MAX_DURATION:      Maximum seconds an HTTP tool call may run.
        SERVER_NAME:       Name advertised to MCP clients.
        SERVER_VERSION:    Version advertised to MCP clients.
        LOG_LEVEL:         Root logging level for the entry points.
    """
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "127.0.0.1"
    DB_PORT: int = 5432
    DB_NAME: str = "people"
    DB_USER: str = "people"
    DB_PASSWORD: str = ""
    DB_POOL_MIN_SIZE: int = 1
    DB_POOL_MAX_SIZE: int = 5

    MCP_API_KEY: str = ""

    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8000
    MCP_PATH: str = "/mcp"
    MAX_DURATION: float = 60.0

    SERVER_NAME: str = "person-crud-server"
    SERVER_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"       # Load variables from a .env file if present
        extra = "ignore"        # Ignore extra env vars not listed above


# Singleton instance used by the entry points
settings = Settings()
