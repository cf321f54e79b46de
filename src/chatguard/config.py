"""Configuration for chatguard."""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from chatguard.exceptions import ConfigError
from chatguard.llm.retry import RetryConfig

ENV_PREFIX = "CHATGUARD_"


@dataclass
class ChatGuardConfig:
    """Configuration for the chat-completion client."""

    model: str = "gpt-4.1"
    api_key: str | None = None
    temperature: float = 0.0
    max_attempts: int = 3
    retry_grace: float = 0.1

    def retry_config(self) -> RetryConfig:
        """Retry settings for retry_on_rate_limit."""
        return RetryConfig(max_attempts=self.max_attempts, grace=self.retry_grace)

    @classmethod
    def _field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def _check_keys(cls, values: dict[str, Any], source: str) -> None:
        unknown = set(values) - cls._field_names()
        if unknown:
            raise ConfigError(f"Unknown config keys in {source}: {', '.join(sorted(unknown))}")

    @staticmethod
    def _env_values() -> dict[str, Any]:
        """Read overrides from CHATGUARD_* environment variables."""
        values: dict[str, Any] = {}
        if model := os.environ.get(f"{ENV_PREFIX}MODEL"):
            values["model"] = model
        api_key = os.environ.get(f"{ENV_PREFIX}API_KEY") or os.environ.get("OPENAI_API_KEY")
        if api_key:
            values["api_key"] = api_key
        try:
            if temperature := os.environ.get(f"{ENV_PREFIX}TEMPERATURE"):
                values["temperature"] = float(temperature)
            if max_attempts := os.environ.get(f"{ENV_PREFIX}MAX_ATTEMPTS"):
                values["max_attempts"] = int(max_attempts)
            if grace := os.environ.get(f"{ENV_PREFIX}RETRY_GRACE"):
                values["retry_grace"] = float(grace)
        except ValueError as e:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment value: {e}") from e
        return values

    @classmethod
    def from_env(cls) -> "ChatGuardConfig":
        """Create config from environment variables."""
        return cls(**cls._env_values())

    @classmethod
    def _file_values(cls, path: Path) -> dict[str, Any]:
        text = path.read_text()
        if path.suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        elif path.suffix == ".json":
            data = json.loads(text)
        else:
            raise ConfigError(f"Unsupported config file type: {path.suffix}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        cls._check_keys(data, str(path))
        return data

    @classmethod
    def from_file(cls, path: Path | str) -> "ChatGuardConfig":
        """Create config from a YAML or JSON file."""
        return cls(**cls._file_values(Path(path)))

    @classmethod
    def load(cls, config_path: Path | str | None = None, **overrides: Any) -> "ChatGuardConfig":
        """Load config with hierarchy: defaults < file < env < kwargs."""
        values: dict[str, Any] = {}
        if config_path is not None:
            values.update(cls._file_values(Path(config_path)))
        values.update(cls._env_values())
        explicit = {k: v for k, v in overrides.items() if v is not None}
        cls._check_keys(explicit, "keyword arguments")
        values.update(explicit)
        return cls(**values)
