"""
Global configuration for the price oracle attestation service.

This module contains environment-specific settings and the service settings
shared by the CLI, the API server and the attestation pipeline.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import Field

from oracle_attest.types import StrictBaseModel

_SUPPORTED_ORACLE_ENVS: list[str] = ["prod", "test"]

ORACLE_ENV = os.environ.get("ORACLE_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod'."""

if ORACLE_ENV not in _SUPPORTED_ORACLE_ENVS:
    raise ValueError(
        f"Invalid ORACLE_ENV environment variable: '{ORACLE_ENV}'. "
        f"Supported values: {_SUPPORTED_ORACLE_ENVS}"
    )


class ServiceConfig(StrictBaseModel):
    """
    Settings for one running attestation service.

    Values come from environment variables, a YAML file, or both, with CLI
    flags applied on top by the entry point.
    """

    db_path: str = "oracle_attestations.db"
    """SQLite database file. Use ":memory:" for a throwaway database."""

    api_host: str = "0.0.0.0"
    """Host address the HTTP API binds to."""

    api_port: int = Field(default=5053, ge=0, lt=65536)
    """Port the HTTP API listens on."""

    verify_workers: int = Field(default=4, ge=1)
    """Size of the thread pool that runs signature verification."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServiceConfig:
        """
        Build a config from `ORACLE_*` environment variables.

        Unset variables fall back to the field defaults.

        Raises:
            ValueError: If a numeric variable is not an integer.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, object] = {}
        if "ORACLE_DB_PATH" in environ:
            values["db_path"] = environ["ORACLE_DB_PATH"]
        if "ORACLE_API_HOST" in environ:
            values["api_host"] = environ["ORACLE_API_HOST"]
        if "ORACLE_API_PORT" in environ:
            values["api_port"] = int(environ["ORACLE_API_PORT"])
        if "ORACLE_VERIFY_WORKERS" in environ:
            values["verify_workers"] = int(environ["ORACLE_VERIFY_WORKERS"])
        return cls.model_validate(values)

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> ServiceConfig:
        """
        Load configuration from a YAML file.

        Keys are the field names (`db_path`, `api_host`, `api_port`,
        `verify_workers`).

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})
