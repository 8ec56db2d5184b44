from functools import lru_cache
from typing import Any, List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CORS = ["http://localhost:3000", "http://localhost:5173"]
_REMOTE_SCHEMES = ("mongodb://", "mongodb+srv://")


def _parse_cors_origins(v: Any) -> List[str]:
    try:
        if v is None or v == "":
            return _DEFAULT_CORS.copy()
        if isinstance(v, list):
            return [x for x in v if isinstance(x, str) and x.strip()]
        s = str(v).strip()
        if not s:
            return _DEFAULT_CORS.copy()
        if s.startswith("["):
            import orjson
            out = orjson.loads(s)
            return [x for x in out if isinstance(x, str) and x.strip()] or _DEFAULT_CORS.copy()
        return [x.strip() for x in s.split(",") if x.strip()] or _DEFAULT_CORS.copy()
    except Exception:
        return _DEFAULT_CORS.copy()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # App
    debug: bool = Field(default=False, description="DEBUG")
    secret_key: str = Field(default="change-me-in-production-min-32-chars")

    # Remote document store. Leaving these empty selects the local store.
    mongodb_uri: str = Field(default="", alias="MONGODB_URI")
    mongodb_db_name: str = Field(default="", alias="MONGODB_DB_NAME")
    mongodb_username: str | None = Field(default=None, alias="MONGODB_USERNAME")
    mongodb_password: str | None = Field(default=None, alias="MONGODB_PASSWORD")

    # Local fallback store
    store_local_path: str = Field(default="./data", alias="STORE_LOCAL_PATH")

    # Reserved administrative identity
    admin_email: str = Field(default="admin@catalog.local", alias="ADMIN_EMAIL")
    admin_password: str = Field(default="change-me-admin-password", alias="ADMIN_PASSWORD")
    admin_name: str = Field(default="System Admin", alias="ADMIN_NAME")

    # Redirect used by the credit-earning flow until an admin overrides it
    default_earn_link: str = Field(default="https://google.com", alias="DEFAULT_EARN_LINK")

    # CORS: env as string, exposed as list
    cors_origins_raw: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="CORS_ORIGINS",
        description="Comma-separated or JSON list",
    )

    @property
    def cors_origins(self) -> List[str]:
        return _parse_cors_origins(getattr(self, "cors_origins_raw", None))

    @property
    def remote_configured(self) -> bool:
        """True when the remote connection parameters are structurally valid."""
        uri = (self.mongodb_uri or "").strip()
        if not uri.startswith(_REMOTE_SCHEMES):
            return False
        host = uri.split("://", 1)[1].split("/", 1)[0]
        if not host or host.startswith(("@", ":")):
            return False
        if bool(self.mongodb_username) != bool(self.mongodb_password):
            return False
        return bool(self.mongodb_db_name.strip())

    @property
    def storage_backend(self) -> str:
        return "remote" if self.remote_configured else "local"


@lru_cache
def get_settings() -> Settings:
    return Settings()
