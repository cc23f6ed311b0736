import logging
import math
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from exceptions import ConfigError

DEFAULT_DATA_FILE = Path("data/sample-interval-3s.json")

ENV_VARS = {
    'host': 'MOCK_HOST',
    'port': 'MOCK_PORT',
    'data_file': 'MOCK_DATA_FILE',
    'interval': 'MOCK_INTERVAL',
    'certfile': 'MOCK_TLS_CERTFILE',
    'keyfile': 'MOCK_TLS_KEYFILE',
    'log_level': 'MOCK_LOG_LEVEL',
}

_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}
_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def parse_duration(value: Any) -> float:
    """Seconds from a number or a duration string such as "3s", "500ms" or "1m30s"."""
    if isinstance(value, bool):
        raise ConfigError(f"invalid interval: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            seconds = float(text)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _DURATION_PART.finditer(text):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _UNITS[match.group(2)]
                pos = match.end()
            if not text or pos != len(text):
                raise ConfigError(f"invalid interval: {value!r}")
    else:
        raise ConfigError(f"invalid interval: {value!r}")

    if not math.isfinite(seconds) or seconds <= 0:
        raise ConfigError(f"interval must be positive, got {value!r}")
    return seconds


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(8080, ge=1, le=65535)
    data_file: Path = DEFAULT_DATA_FILE
    interval: float = 3.0
    certfile: Optional[Path] = None
    keyfile: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator('interval', mode='before')
    @classmethod
    def _parse_interval(cls, value):
        return parse_duration(value)

    @field_validator('log_level')
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    @model_validator(mode='after')
    def _check_tls_pair(self):
        if (self.certfile is None) != (self.keyfile is None):
            raise ValueError("certfile and keyfile must be given together")
        return self

    @property
    def tls_enabled(self) -> bool:
        return self.certfile is not None and self.keyfile is not None

    @property
    def scheme(self) -> str:
        return "https" if self.tls_enabled else "http"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "Settings":
        """Settings from MOCK_* environment variables (and .env), then explicit overrides.

        Overrides that are None are ignored so unset CLI flags keep the environment value.
        """
        load_dotenv(env_file)

        values: Dict[str, Any] = {}
        for field, var in ENV_VARS.items():
            raw = os.getenv(var)
            if raw:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigError(str(e)) from e
