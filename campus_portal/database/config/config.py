"""
Portal settings (pydantic-settings, env / .env)
===============================================

One `Settings` object serves both halves of the package: the FastAPI server
reads the database, JWT and CORS values; the client data layer reads the
remote API URL, the Local Store path, the job-search endpoints and the chat
model values.

Environment variables win over `.env`; everything has a development default,
so an empty environment gives a local SQLite server. Unknown variables are
ignored. Deployments must override ``SECRET_KEY``.

>>> from campus_portal.database.config.config import settings
>>> settings.PORTAL_API_URL
'http://localhost:8000'
"""


from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Typed view over the process environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:5173", description="Allowed CORS origin of the web frontend.")
    DB_DRIVER_NAME: str = Field("sqlite", description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_USERNAME: str | None = Field(None, description="Database user (unused for sqlite).")
    DB_PASSWORD: str | None = Field(None, description="Database password (unused for sqlite).")
    DB_HOST: str | None = Field(None, description="Database host.")
    DB_PORT: int | None = Field(None, description="Database port.")
    DB_DATABASE_NAME: str = Field("campus_portal.db", description="Name of the application's database (file path for sqlite).")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60 * 24, description="Lifetime of the `token` cookie JWT, in minutes.")
    SECRET_KEY: str = Field("change-this-secret", description="HMAC key for session JWTs.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    OPENAI_API_KEY: str = Field("", description="API key for the chat completion service.")
    OPENAI_MODEL: str = Field("gpt-4o-mini", description="Chat model name (e.g., `gpt-4o-mini`).")
    LLM_TEMPERATURE: float = Field(0.6, description="Sampling temperature for agent replies.")
    PORTAL_API_URL: str = Field("http://localhost:8000", description="Base URL of the remote data API used by the client facade.")
    PORTAL_API_TIMEOUT: float = Field(15.0, description="Timeout (seconds) for remote data API calls.")
    LOCAL_STORE_PATH: str = Field(".campus_portal/local_store.json", description="File backing the client-side Local Store.")
    HH_API_BASE: str = Field("https://api.hh.ru", description="Upstream job-search API base URL used by the proxy route.")
    HH_PROXY_BASE: str = Field("http://localhost:8000/api/hh", description="Job-search proxy base URL used by the client.")
    HH_DEFAULT_AREA: str = Field("40", description="Default job-search area identifier.")
    HH_USER_AGENT: str = Field("campus-portal/1.0", description="User-Agent sent to the job-search API.")
    INIT_MODE: str = Field("runtime", description="Initialization mode: `runtime` creates and seeds tables at startup.")

settings = Settings()
