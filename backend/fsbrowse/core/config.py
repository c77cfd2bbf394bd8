from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "fsbrowse"
    debug: bool = False

    # Sandbox root - nothing outside it is ever read or written
    base_dir: Path = Path("/files")

    # URL prefix the browser API is mounted under ("" or "/" for the root)
    base_path: str = "/files"

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]

    # Inline preview ceiling
    view_max_bytes: int = 5 * 1024 * 1024

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "FSBROWSE_",
    }

    @field_validator("base_path")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value


settings = Settings()
