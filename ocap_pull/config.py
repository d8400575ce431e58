"""
Runtime configuration for ocap-pull.

Loads configuration from environment variables.
"""
import os
from pathlib import Path
from typing import Optional, Mapping


def _optional_float(env: Mapping[str, str], name: str, default: Optional[float]) -> Optional[float]:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


class PullConfig:
    """Configuration for a pull run."""

    def __init__(self, env: Optional[Mapping[str, str]] = None):
        """Load configuration from environment."""
        env = os.environ if env is None else env

        # Keep the temporary clone for debugging
        self.keep_temp = env.get("KEEP_TEMP") == "1"

        # Fallback release selector when no positional version/branch is given
        self.release_version = env.get("RELEASE_VERSION", "").strip() or None

        # Optional token for the releases API (raises the rate limit)
        self.github_token = env.get("GITHUB_TOKEN") or None

        self.http_timeout = _optional_float(env, "OCAP_PULL_HTTP_TIMEOUT", 10.0)
        self.git_timeout = _optional_float(env, "OCAP_PULL_GIT_TIMEOUT", None)

        self.log_level = env.get("OCAP_PULL_LOG_LEVEL") or None

        target_config = env.get("OCAP_PULL_TARGET_CONFIG")
        self.target_config_path = Path(target_config).expanduser() if target_config else None


def get_config() -> PullConfig:
    """Get configuration from the process environment."""
    return PullConfig()
