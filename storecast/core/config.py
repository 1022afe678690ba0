# storecast/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (storage + auth admin operations)
      - SITE_URL (used in invite / reset / magic-link redirects)
      - ALLOW_ADMIN_SIGNUP (public registration may request the admin role)
    """

    PROJECT_NAME: str = "Storecast CMS"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Public site origin for links embedded in Supabase emails
    SITE_URL: str = "http://localhost:3000"

    # Storage bucket holding uploaded media
    STORAGE_BUCKET: str = "content"
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024

    # Browser sessions carry the Supabase access token in this cookie
    SESSION_COOKIE_NAME: str = "sb-access-token"

    # Public /auth/register may create admin accounts
    ALLOW_ADMIN_SIGNUP: bool = True

    # Comma separated
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
