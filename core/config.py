"""Configuration models and loading."""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "http-request-instant"
CONFIG_FILE = CONFIG_DIR / "config.json"

# Any value other than "production" switches the executor to mock mode
ENV_FLAG = "HTTP_INSTANT_ENV"
PRODUCTION = "production"


class ExecutorSettings(BaseModel):
    timeout: float = Field(default=30.0, gt=0)
    follow_redirects: bool = True
    user_agent: str = "http-request-instant/0.1.0"
    debug: bool = False
    mock_mode: bool = False


class TraceSettings(BaseModel):
    sink: Literal["console", "logging", "file"] = "console"
    redact_headers: bool = True
    log_dir: Path = Path("logs")


class Config(BaseModel):
    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    trace: TraceSettings = Field(default_factory=TraceSettings)


def load_config(path: Path | None = None) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default


def apply_env_overrides(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """Return a copy of ``config`` with mock mode taken from the environment flag.

    An unset or empty flag leaves the configured value untouched.
    """
    env = os.environ if environ is None else environ
    value = env.get(ENV_FLAG, "").strip().lower()
    if not value:
        return config
    executor = config.executor.model_copy(update={"mock_mode": value != PRODUCTION})
    return config.model_copy(update={"executor": executor})
