"""Runtime configuration loaded from the environment.

Every setting can be overridden with a ``DEALCART_``-prefixed variable
(``DEALCART_API_BASE_URL``, ``DEALCART_POLL_INTERVAL``...) or a ``.env``
file in the working directory.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# The session file defaults to data/ at the project root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DEALCART_",
        env_file=".env",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:5055/api"
    cart_path: str = "/jomfood-deals/cart"
    request_timeout: float = Field(10.0, gt=0)
    poll_interval: float = Field(3.0, gt=0)

    # Issued by the authentication flow, which is not part of this package.
    access_token: str | None = None

    # "en" or "malay"; anything but English is forwarded as ``lang``.
    language: str = "en"

    session_file: Path = _DATA_DIR / "session.json"


def load_settings() -> Settings:
    return Settings()
