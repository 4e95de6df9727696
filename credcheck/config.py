#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

import json
from typing import Any
from pathlib import Path
from dataclasses import field, replace, dataclass

import yaml
import jsonschema

from credcheck.logger import LOG
from credcheck.settings import (
    NAMESPACE,
    get_region,
    get_config_file,
    get_profile_name,
    get_bucket_prefix,
)
from credcheck.sanitizer import sanitize_exception_message


def set_else_none(key: str, data: dict, default: Any) -> Any:
    """Get value from dict or return default if not present."""
    return data.get(key, default)


@dataclass
class Config:
    """Settings of a verification run."""

    profile_name: str = field(default_factory=lambda: get_profile_name(NAMESPACE))
    region: str = field(default_factory=lambda: get_region(NAMESPACE))
    bucket_prefix: str = field(default_factory=lambda: get_bucket_prefix(NAMESPACE))
    source_file: str | None = None

    def with_overrides(self, **overrides: Any) -> Config:
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        LOG.debug("Applying configuration overrides: %s", sorted(values))
        updated = replace(self, **values)
        self.validate_schema(updated.to_dict())
        return updated

    def to_dict(self) -> dict:
        return {
            "profile_name": self.profile_name,
            "region": self.region,
            "bucket_prefix": self.bucket_prefix,
        }

    @classmethod
    def load(cls, config_path: str | None = None) -> Config:
        """Load from the given file, the file named in the environment, or defaults."""
        config_path = config_path or get_config_file(NAMESPACE)
        if config_path is None:
            config = cls()
            cls.validate_schema(config.to_dict())
            return config
        return cls.from_file(config_path)

    @classmethod
    def from_file(cls, config_path: str) -> Config:
        """Load configuration from YAML or JSON file."""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
            LOG.info("Loaded configuration from %s as YAML", config_path)
        except yaml.YAMLError as error:
            LOG.debug("YAML parsing failed, trying JSON")
            try:
                with open(config_file, encoding="utf-8") as f:
                    config_data = json.load(f)
                LOG.info("Loaded configuration from %s as JSON", config_path)
            except json.JSONDecodeError as json_error:
                raise ValueError(
                    f"File is not valid YAML or JSON. YAML error: {error}, "
                    f"JSON error: {json_error}"
                ) from error

        # An empty file parses to None
        if config_data is None:
            config_data = {}

        return cls.from_dict(config_data, str(config_file.resolve()))

    @classmethod
    def from_dict(cls, config_data: dict, config_path: str | None = None) -> Config:
        """Create configuration from dictionary."""
        cls.validate_schema(config_data)

        return cls(
            profile_name=set_else_none(
                "profile_name", config_data, get_profile_name(NAMESPACE)
            ),
            region=set_else_none("region", config_data, get_region(NAMESPACE)),
            bucket_prefix=set_else_none(
                "bucket_prefix", config_data, get_bucket_prefix(NAMESPACE)
            ),
            source_file=config_path,
        )

    @classmethod
    def validate_schema(cls, config_data: Any) -> None:
        """Validate configuration data against JSON schema."""
        schema_path = Path(__file__).parent / "config-schema.json"

        if not schema_path.exists():
            LOG.warning("JSON schema file not found at %s", schema_path)
            return

        try:
            with open(schema_path, encoding="utf-8") as f:
                schema = json.load(f)

            jsonschema.validate(config_data, schema)
            LOG.debug("Configuration validation against JSON schema passed")

        except jsonschema.ValidationError as error:
            error_path = (
                " -> ".join(str(p) for p in error.absolute_path)
                if error.absolute_path
                else "root"
            )
            sanitized_message = sanitize_exception_message(error.message)

            LOG.error(
                "Configuration validation failed at %s: %s",
                error_path,
                sanitized_message,
            )

            raise ValueError(
                f"Configuration validation failed at {error_path}: {sanitized_message}"
            ) from error
        except jsonschema.SchemaError as error:
            LOG.error("JSON schema error: %s", error.message)
            raise ValueError(f"Invalid JSON schema: {error.message}") from error
