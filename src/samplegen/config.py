"""Centralized configuration for samplegen.

All settings are configurable via environment variables with the
``SAMPLEGEN_`` prefix.  For example, ``SAMPLEGEN_CACHE_INDEX`` overrides the
default model cache index.

Environment Variables
---------------------
SAMPLEGEN_CATALOG_DIR : str
    Directory holding ``models.yaml``, ``apis.yaml`` and ``samples/``.
    Default: the ``data`` directory shipped inside the package.
SAMPLEGEN_CACHE_INDEX : str
    Path to the JSON index of downloaded models.
    Default: ``~/.cache/samplegen/cache.json``
SAMPLEGEN_LOG_LEVEL : str
    Logging level. One of: DEBUG, INFO, WARNING, ERROR, CRITICAL.
    Default: ``WARNING``
OLLAMA_HOST : str
    Address of the Ollama server baked into rendered samples that use a
    remote-server model. ``SAMPLEGEN_OLLAMA_HOST`` is accepted too. A value
    without a scheme, such as ``127.0.0.1:11434``, gets ``http://``.
    Default: ``http://localhost:11434/``
"""

from __future__ import annotations

import importlib.resources
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OLLAMA_HOST = "http://localhost:11434/"


def _resolve_default_catalog_dir() -> Path:
    """Resolve the catalog directory bundled with the package.

    Uses ``importlib.resources`` (works for installed packages), falling
    back to a path relative to this file.
    """
    try:
        ref = importlib.resources.files("samplegen") / "data"
        resolved = Path(str(ref)).resolve()
        if resolved.is_dir():
            return resolved
    except (TypeError, ModuleNotFoundError):
        pass

    return (Path(__file__).parent / "data").resolve()


class SamplegenSettings(BaseSettings):
    """Centralized settings for samplegen.

    All fields can be overridden via environment variables prefixed with
    ``SAMPLEGEN_``.  See module docstring for the full list.
    """

    model_config = SettingsConfigDict(
        env_prefix="SAMPLEGEN_",
        populate_by_name=True,
    )

    # Catalog
    catalog_dir: Path = Field(default_factory=_resolve_default_catalog_dir)

    # Model cache
    cache_index: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "samplegen" / "cache.json"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    # Remote runtime
    ollama_host: str = Field(
        default=DEFAULT_OLLAMA_HOST,
        validation_alias=AliasChoices("OLLAMA_HOST", "SAMPLEGEN_OLLAMA_HOST", "ollama_host"),
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase and validate."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("ollama_host", mode="before")
    @classmethod
    def _normalize_ollama_host(cls, v: str | None) -> str:
        """Use the address as given; a bare ``host:port`` is served over http."""
        if v is None or not v.strip():
            return DEFAULT_OLLAMA_HOST
        v = v.strip()
        if "://" not in v:
            return f"http://{v}"
        return v


# ---------------------------------------------------------------------------
# Singleton / cached accessor
# ---------------------------------------------------------------------------

_settings_instance: SamplegenSettings | None = None


def get_settings() -> SamplegenSettings:
    """Return the cached SamplegenSettings singleton.

    Creates the instance on first call.  Use :func:`_clear_settings_cache`
    in tests to reset.
    """
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        _settings_instance = SamplegenSettings()
    return _settings_instance


def _clear_settings_cache() -> None:
    """Clear the settings singleton cache.

    Intended for test teardown so each test can start with fresh settings.
    """
    global _settings_instance  # noqa: PLW0603
    _settings_instance = None
