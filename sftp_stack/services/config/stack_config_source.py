from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from sftp_stack.models.stack_config import StackConfig
from sftp_stack.services.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackConfigSource:
    """Where the declarative stack configuration document lives."""

    path: Path

    @staticmethod
    def from_env() -> "StackConfigSource":
        raw = os.getenv("SFTP_STACK_CONFIG_PATH")
        if not raw:
            raise ValueError("Missing required environment variable: SFTP_STACK_CONFIG_PATH")
        return StackConfigSource(path=Path(raw))

    def load(self) -> StackConfig:
        return load_stack_config(self.path)


def load_stack_config(path: Path) -> StackConfig:
    """Parse a JSON configuration document into a frozen StackConfig."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read stack configuration: {path}") from exc

    try:
        config = StackConfig.model_validate_json(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid stack configuration ({path}): {exc.error_count()} error(s)\n{exc}") from exc

    logger.info("Loaded stack configuration from %s (users=%d)", path, len(config.users))
    return config
