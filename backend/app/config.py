import os
from typing import Optional

from dotenv import load_dotenv

from app.exceptions import ConfigurationError

# Resolve absolute path to backend/.env
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
ENV_PATH = os.path.join(BASE_DIR, ".env")

# Load .env (absolute path ensures it works from any working directory)
load_dotenv(ENV_PATH)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_UPLOAD_BYTES = 20 * 1024 * 1024
DEFAULT_REQUEST_TIMEOUT = 60.0
DEFAULT_AUTHENTICITY_DELAY = 1.5


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    return value


class Config:
    """
    Explicit settings handed to the analysis components.

    Services never read the environment themselves; build one of these with
    `Config.from_env()` at startup, or construct it directly in tests.
    """

    def __init__(self,
                 openai_api_key: Optional[str] = None,
                 openai_model: str = DEFAULT_MODEL,
                 openai_base_url: Optional[str] = None,
                 max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
                 request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
                 authenticity_delay: float = DEFAULT_AUTHENTICITY_DELAY):
        self.openai_api_key = openai_api_key
        self.openai_model = openai_model or DEFAULT_MODEL
        self.openai_base_url = openai_base_url
        self.max_upload_bytes = max_upload_bytes
        self.request_timeout = request_timeout
        self.authenticity_delay = authenticity_delay

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", DEFAULT_MODEL),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            max_upload_bytes=_env_number("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES, int),
            request_timeout=_env_number("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, float),
            authenticity_delay=_env_number("AUTHENTICITY_DELAY", DEFAULT_AUTHENTICITY_DELAY, float),
        )

    def __repr__(self) -> str:
        # never print the key
        return (f"Config(model={self.openai_model!r}, base_url={self.openai_base_url!r}, "
                f"key_set={bool(self.openai_api_key)}, max_upload_bytes={self.max_upload_bytes})")
