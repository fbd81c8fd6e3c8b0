"""
Configuration Loader

Pydantic models for scan settings and the YAML/JSON loader that fills them.
Credentials are usually kept out of the file as ${NAME} references.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from dotenv import load_dotenv

from writable_wmi.core.schema.models import CimType


# Load environment variables from .env file if present
load_dotenv()


class ConnectionConfig(BaseModel):
    """WMI connection configuration."""

    host: str = Field(default=".", description="Target host, '.' for the local machine")
    username: str | None = Field(default=None, description="DOMAIN\\user for remote hosts")
    password: str | None = Field(default=None, description="Password for remote hosts")
    authority: str | None = Field(default=None, description="Kerberos or NTLM authority")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Strip UNC prefixes and whitespace."""
        v = v.strip().lstrip("\\")
        return v or "."

    @model_validator(mode="after")
    def password_needs_user(self) -> "ConnectionConfig":
        if self.password and not self.username:
            raise ValueError("A password was given without a username")
        return self


class ScanConfig(BaseModel):
    """Default selectors for a scan."""

    namespace: str = Field(default="cimv2", description="Namespace below root")
    data_type: str | None = Field(default=None, description="CIM data type to filter on")
    class_name: str | None = Field(default=None, description="Single class to inspect")
    all_classes: bool = Field(default=False, description="Inspect every class in the namespace")

    @field_validator("data_type")
    @classmethod
    def validate_data_type(cls, v: str | None) -> str | None:
        """Normalise the type name to its canonical label."""
        if v is None:
            return None
        return CimType.parse(v).label

    @model_validator(mode="after")
    def single_selector(self) -> "ScanConfig":
        if self.class_name and self.all_classes:
            raise ValueError("class_name and all_classes are mutually exclusive")
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    output: str | None = Field(default=None, description="Export matches to this JSON or CSV file")
    console_progress: bool = Field(default=True, description="Show console messages")


class ToolConfig(BaseModel):
    """Root configuration."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="wmi-writable-scan", description="Scan name/identifier")
    version: str = Field(default="1.0", description="Configuration version")

    connection: ConnectionConfig = Field(
        default_factory=ConnectionConfig,
        description="WMI connection settings",
    )
    scan: ScanConfig = Field(
        default_factory=ScanConfig,
        description="Default scan selectors",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings",
    )


# ${NAME} or ${NAME:-fallback}
ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<default>[^}]*))?\}")


def expand_env(value: str) -> str:
    """
    Resolve ``${NAME}`` references in a single config value.

    ``${NAME:-fallback}`` uses the fallback when NAME is unset. A bare
    reference to an unset variable is an error, so credentials are never
    silently blank.
    """
    def resolve(match: re.Match[str]) -> str:
        name, default = match.group("name"), match.group("default")
        resolved = os.environ.get(name, default)
        if resolved is None:
            raise ValueError(f"Environment variable '{name}' referenced in config is not set")
        return resolved

    return ENV_REFERENCE.sub(resolve, value)


def _expand_tree(node: Any) -> Any:
    if isinstance(node, str):
        return expand_env(node)
    if isinstance(node, dict):
        return {key: _expand_tree(item) for key, item in node.items()}
    if isinstance(node, list):
        return [_expand_tree(item) for item in node]
    return node


class ConfigLoader:
    """
    Reads scan settings from a YAML or JSON file.

    References to environment variables are resolved after parsing, value
    by value, so a password full of YAML punctuation stays intact.

    Example:
        >>> config = ConfigLoader(env_file=Path(".env.audit")).load("dc01.yaml")
        >>> config.connection.host
    """

    def __init__(self, env_file: Path | None = None):
        if env_file:
            load_dotenv(env_file)

    def load(self, config_path: str | Path) -> ToolConfig:
        """
        Parse and validate a config file.

        Raises:
            FileNotFoundError: If the file is missing
            ValueError: On unparsable content, an unset variable or invalid settings
        """
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Cannot parse {path.name}: {e}") from e

        return self.from_mapping({} if data is None else data)

    @staticmethod
    def from_mapping(data: Any) -> ToolConfig:
        """Validate already-parsed settings, expanding environment references."""
        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration must be a dictionary of sections, not {type(data).__name__}"
            )

        try:
            return ToolConfig.model_validate(_expand_tree(data))
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

    @staticmethod
    def create_example_config(output_path: str | Path) -> Path:
        """Write a commented starter config that reads credentials from the environment."""
        example = {
            "name": "dc01_writable_strings",
            "connection": {
                "host": "${WMI_HOST:-.}",
                "username": "${WMI_USER}",
                "password": "${WMI_PASSWORD}",
            },
            "scan": {"namespace": "cimv2", "data_type": "String", "all_classes": True},
            "logging": {"level": "INFO", "output": "./results/writable.json"},
        }

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        body = yaml.safe_dump(example, sort_keys=False, allow_unicode=True)
        path.write_text(
            "# wmi-writable scan settings; ${NAME} is read from the environment or .env\n" + body,
            encoding="utf-8",
        )
        return path
