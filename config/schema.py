from pydantic import BaseModel, Field, field_validator
from enum import Enum


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"

    def toggled(self) -> "Theme":
        return Theme.DARK if self is Theme.LIGHT else Theme.LIGHT


# ─── APP CONFIG ───

class AppConfig(BaseModel):
    """Runtime configuration of the STAR admin tool.

    Loaded once at startup and passed explicitly to the client, the
    controllers and the CLI. There is no module-level base URL.
    """
    # Base URL of the REST API, e.g. "http://localhost:3001/api"
    api_base_url: str = Field("http://localhost:3001/api",
        description="Base URL of the STAR REST API")
    # Per-request timeout in seconds (requests are never retried)
    request_timeout: float = Field(10.0, gt=0, le=120,
        description="Per-request timeout (seconds)")
    # Colour scheme for terminal output and the TUI
    theme: Theme = Field(Theme.LIGHT,
        description="Colour scheme (light/dark)")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store the base URL without a trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"API URL must start with http:// or https://: {v!r}")
        return v.rstrip("/")

    def url_for(self, *segments) -> str:
        """Join the base URL and path segments into a resource URL."""
        parts = [str(s).strip("/") for s in segments if str(s).strip("/")]
        if not parts:
            return self.api_base_url
        return f"{self.api_base_url}/{'/'.join(parts)}"
