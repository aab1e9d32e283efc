import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_MEDIA_DIR = Path(tempfile.gettempdir()) / "farm_assistant_media"

_FALSE = {"0", "false", "no", "off"}
_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    server_url: Optional[str] = None
    use_mock: bool = False
    timeout: Optional[float] = None
    camera_allowed: bool = True
    gallery_allowed: bool = True
    media_dir: Path = DEFAULT_MEDIA_DIR
    language: str = "en"

    @property
    def backend_available(self) -> bool:
        return self.use_mock or bool(self.server_url)


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    value = value.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment (``os.environ`` by default)."""
    env = os.environ if environ is None else environ

    server_url = (env.get("FARM_ASSISTANT_SERVER_URL") or "").strip().rstrip("/") or None

    timeout = None
    raw_timeout = (env.get("FARM_ASSISTANT_TIMEOUT") or "").strip()
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"FARM_ASSISTANT_TIMEOUT must be a number, got {raw_timeout!r}")
        if timeout <= 0:
            raise ValueError("FARM_ASSISTANT_TIMEOUT must be positive")

    media_dir = env.get("FARM_ASSISTANT_MEDIA_DIR")

    return Settings(
        server_url=server_url,
        use_mock=_flag(env.get("FARM_ASSISTANT_MOCK"), False),
        timeout=timeout,
        camera_allowed=_flag(env.get("FARM_ASSISTANT_CAMERA"), True),
        gallery_allowed=_flag(env.get("FARM_ASSISTANT_GALLERY"), True),
        media_dir=Path(media_dir) if media_dir else DEFAULT_MEDIA_DIR,
        language=(env.get("FARM_ASSISTANT_LANGUAGE") or "en").strip() or "en",
    )
