#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""
CredCheck Environment Variables Configuration

Defaults for the verification run, overridable from the environment. Values
from a configuration file or the command line take precedence over these.
"""

from __future__ import annotations

import os
from pathlib import Path


DEFAULT_PROFILE_NAME = "rolesanywhere-demo"
DEFAULT_REGION = "us-east-1"
DEFAULT_BUCKET_PREFIX = "test-bucket-"


def get_credcheck_namespace() -> str:
    return os.environ.get("CREDCHECK_NAMESPACE", "CREDCHECK_")


def get_config_file(namespace: str) -> str | None:
    """Get the configuration file path from environment, if any."""
    config_file = os.environ.get(f"{namespace}CONFIG_FILE")
    if not config_file:
        return None
    return str(Path(config_file).resolve())


def get_profile_name(namespace: str) -> str:
    return os.environ.get(f"{namespace}PROFILE", DEFAULT_PROFILE_NAME)


def get_region(namespace: str) -> str:
    return os.environ.get(f"{namespace}REGION", DEFAULT_REGION)


def get_bucket_prefix(namespace: str) -> str:
    return os.environ.get(f"{namespace}BUCKET_PREFIX", DEFAULT_BUCKET_PREFIX)


def _validate_log_level(log_level: str):
    """Validate log level, accepting case-insensitive values with fallback."""
    valid_levels = {"debug", "info", "warning", "error", "critical"}
    normalized_level = log_level.lower().strip()
    return normalized_level if normalized_level in valid_levels else "warning"


def get_log_level(namespace: str) -> str:
    """Get log level from environment with validation and fallback."""
    raw_level = os.environ.get(f"{namespace}LOG_LEVEL", "warning")
    return _validate_log_level(raw_level)


NAMESPACE = get_credcheck_namespace()

# Logging
LOG_LEVEL: str = get_log_level(NAMESPACE)
