"""Application settings read from the environment at startup."""

import os

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Runtime configuration injected into the app via ``app.state.settings``."""

    es_url: str = Field("http://localhost:9200", description="Elasticsearch URL")
    es_api_key: str | None = Field(None, description="Elasticsearch API key")
    post_index: str = "post"
    user_index: str = "user"
    bucket_name: str = Field("", description="Object storage bucket for post media")
    jwt_signing_key: str = Field(..., min_length=1, description="HS256 signing key for bearer tokens")
    token_ttl_hours: int = Field(24, gt=0)
    default_search_range_km: float = Field(200.0, gt=0)
    search_size: int = Field(100, ge=1, le=10000)
    external_timeout: float = Field(
        10.0, gt=0, description="Seconds allowed for each object store, scorer or index call"
    )
    log_level: str = "INFO"


_ENV_VARS = {
    "es_url": "ES_URL",
    "es_api_key": "ES_API_KEY",
    "post_index": "POST_INDEX",
    "user_index": "USER_INDEX",
    "bucket_name": "BUCKET_NAME",
    "jwt_signing_key": "JWT_SIGNING_KEY",
    "token_ttl_hours": "TOKEN_TTL_HOURS",
    "default_search_range_km": "DEFAULT_SEARCH_RANGE_KM",
    "search_size": "SEARCH_SIZE",
    "external_timeout": "EXTERNAL_TIMEOUT",
    "log_level": "LOG_LEVEL",
}


def load_settings(environ=None) -> Settings:
    """Build ``Settings`` from environment variables.

    Unset variables fall back to the model defaults; pydantic coerces the
    string values and raises ``ValidationError`` for bad or missing ones.
    """
    env = os.environ if environ is None else environ
    values = {field: env[var] for field, var in _ENV_VARS.items() if env.get(var)}
    return Settings(**values)
