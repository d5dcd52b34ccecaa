"""Configuration management for workflow recording and replay."""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


@dataclass
class Config:
    """Central configuration for the replay engine."""

    # =========================================================================
    # PATHS
    # =========================================================================
    artifacts_dir: Path = field(default_factory=lambda: Path.cwd() / "artifacts")

    @property
    def workflows_dir(self) -> Path:
        return self.artifacts_dir / "workflows"

    @property
    def screenshots_dir(self) -> Path:
        return self.artifacts_dir / "screenshots"

    @property
    def uploads_dir(self) -> Path:
        return self.artifacts_dir / "uploads"

    # =========================================================================
    # BROWSER SETTINGS
    # =========================================================================
    browser_headless: bool = False
    browser_default_url: str = "about:blank"
    viewport_width: int = 1280
    viewport_height: int = 800

    # =========================================================================
    # EXECUTION SETTINGS
    # =========================================================================
    step_timeout: float = 10.0  # Seconds, applied to every driver primitive
    run_timeout: Optional[float] = None  # Seconds for a whole run, None = unbounded
    settle_timeout: float = 5.0  # Seconds to wait for load after click/hover/nav
    file_chooser_timeout: float = 5.0

    # =========================================================================
    # LOGGING
    # =========================================================================
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    structured_logs: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        config = cls()

        if os.getenv("REPLAY_ARTIFACTS_DIR"):
            config.artifacts_dir = Path(os.getenv("REPLAY_ARTIFACTS_DIR"))

        if os.getenv("REPLAY_LOG_LEVEL"):
            config.log_level = os.getenv("REPLAY_LOG_LEVEL")

        if os.getenv("REPLAY_LOG_FILE"):
            config.log_file = Path(os.getenv("REPLAY_LOG_FILE"))

        if os.getenv("REPLAY_STRUCTURED_LOGS"):
            config.structured_logs = os.getenv("REPLAY_STRUCTURED_LOGS").lower() == "true"

        if os.getenv("REPLAY_BROWSER_HEADLESS"):
            config.browser_headless = os.getenv("REPLAY_BROWSER_HEADLESS").lower() == "true"

        if os.getenv("REPLAY_DEFAULT_URL"):
            config.browser_default_url = os.getenv("REPLAY_DEFAULT_URL")

        step_timeout = _env_float("REPLAY_STEP_TIMEOUT")
        if step_timeout is not None:
            config.step_timeout = step_timeout

        run_timeout = _env_float("REPLAY_RUN_TIMEOUT")
        if run_timeout is not None:
            config.run_timeout = run_timeout if run_timeout > 0 else None

        return config


# Global config instance
config = Config.from_env()
