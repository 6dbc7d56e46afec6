"""Config models and loader.

This module defines Pydantic models for file- and environment-based
configuration. JSON parsing prefers `orjson` when available for speed and
lower memory usage, but intentionally falls back to the Python standard
library's `json` module so the tool runs on minimal hosts where the wheel is
not available.
"""

from __future__ import annotations

import json as _json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

try:
    import orjson as _orjson_mod  # type: ignore[assignment]
except ImportError:  # pragma: no cover - optional dependency
    _orjson_mod = None  # type: ignore[assignment]
    _loads_orjson: Optional[Callable[[bytes], Any]] = None
else:

    def _loads_orjson(buf: bytes) -> Any:
        loader = getattr(_orjson_mod, "loads")  # type: ignore[assignment]
        return loader(buf)


from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DomainConfig(BaseModel):
    """Connection settings for a single managed UCS domain.

    Attributes
    ----------
    endpoint: str
        UCS Manager address (``https://ucsm.example.com``) for the XML API,
        or a filesystem path to a JSON dump for ``snapshot`` domains.
    username: Optional[str]
        Login name for the XML API.
    password: Optional[SecretStr]
        Login password; never rendered in logs or reprs.
    type: str
        Session type identifier ("ucsm-xml" or "snapshot").
    timeout_seconds: int
        HTTP request timeout in seconds for adapter operations.
    """

    endpoint: str = Field(..., description="UCS Manager URL or snapshot path")
    username: Optional[str] = Field(None, description="XML API login name")
    password: Optional[SecretStr] = Field(None, description="XML API password")
    type: str = Field("ucsm-xml", description="Session type identifier")
    timeout_seconds: int = Field(60, ge=1)
    max_retries: int = Field(1, ge=0, description="Number of retry attempts")
    backoff_initial_ms: int = Field(
        200, ge=0, description="Initial backoff in milliseconds"
    )
    backoff_multiplier: float = Field(
        2.0, ge=1.0, description="Backoff multiplier per attempt"
    )
    verify_tls: bool = Field(
        True, description="Verify the UCS Manager TLS certificate"
    )


class AppConfig(BaseModel):
    """Top-level application configuration.

    Attributes
    ----------
    domains: Dict[str, DomainConfig]
        Mapping from configured domain identifier (usually the address the
        operator knows the domain by) to connection settings.
    skip_telemetry: bool
        Do not pull the statistics dump; counters are zero placeholders.
    max_workers: int
        Maximum number of domains collected concurrently.
    poll_interval_seconds: float
        Interval between progress polls of the orchestrator.
    domain_timeout_seconds: Optional[float]
        Upper bound for one domain's whole collection pass.
    call_timeout_seconds: Optional[float]
        Upper bound for a single management-API call.
    """

    domains: Dict[str, DomainConfig] = Field(default_factory=dict)
    skip_telemetry: bool = Field(False)
    max_workers: int = Field(10, ge=1)
    poll_interval_seconds: float = Field(1.0, gt=0)
    domain_timeout_seconds: Optional[float] = Field(1800.0, gt=0)
    call_timeout_seconds: Optional[float] = Field(300.0, gt=0)

    @staticmethod
    def load(path: Path) -> "AppConfig":
        """Load application config from a JSON file."""
        raw = path.read_bytes()
        if _loads_orjson is not None:
            data = _loads_orjson(raw)
        else:
            data = _json.loads(raw.decode("utf-8"))
        return AppConfig.model_validate(data)


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Values set here override the corresponding file configuration when
    present (see :func:`ucs_report.cli.main`).

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    config: Optional[str]
        Path to the JSON configuration file.
    skip_telemetry: Optional[bool]
        Force telemetry collection off for every domain.
    max_workers: Optional[int]
        Override for the worker pool size.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="UCS_REPORT_")

    log_level: str = Field("INFO")
    config: Optional[str] = None
    skip_telemetry: Optional[bool] = None
    max_workers: Optional[int] = Field(None, ge=1)
