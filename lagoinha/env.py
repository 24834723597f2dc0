import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_SETTLE_DELAY = 2.0
MIN_SETTLE_DELAY = 1.0
DEFAULT_HTTP_TIMEOUT = 15.0


def load_env() -> None:
    """Load .env from the working directory if present.

    Variables already set in the environment win over the file.
    """
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


@dataclass(frozen=True)
class Settings:
    settle_delay: float = DEFAULT_SETTLE_DELAY
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "WARNING"
    log_dir: Optional[Path] = None


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")


def get_settings() -> Settings:
    """Read settings from LAGOINHA_* environment variables."""
    settle_delay = max(_float_env("LAGOINHA_SETTLE_DELAY", DEFAULT_SETTLE_DELAY), MIN_SETTLE_DELAY)
    http_timeout = _float_env("LAGOINHA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)
    if http_timeout <= 0:
        raise ValueError(f"LAGOINHA_HTTP_TIMEOUT must be positive, got {http_timeout}")

    log_level, log_dir = get_log_settings()
    return Settings(
        settle_delay=settle_delay,
        http_timeout=http_timeout,
        log_level=log_level,
        log_dir=log_dir,
    )


def get_log_settings() -> Tuple[str, Optional[Path]]:
    """Read only LAGOINHA_LOG_LEVEL and LAGOINHA_LOG_DIR.

    The logger is built at import time, so it must not fail on the numeric
    settings; those are checked when a lookup starts.
    """
    log_dir = os.getenv("LAGOINHA_LOG_DIR")
    return (os.getenv("LAGOINHA_LOG_LEVEL") or "WARNING").upper(), Path(log_dir) if log_dir else None
