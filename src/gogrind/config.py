from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    jwt_secret_key: str
    jwt_ttl_days: int = 7
    cors_origins: list[str] = []
    stream_api_key: str | None = None  # Chat/video provider API key (optional)
    stream_api_secret: str | None = None  # Secret used to sign chat user tokens (optional)
    space_write_attempts: int = 5  # Optimistic write retries before giving up with 409

    model_config = {
        "env_file": [".env"],
        "env_prefix": "GOGRIND_",
        "extra": "ignore",
    }
