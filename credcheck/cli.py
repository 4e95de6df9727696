#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Command-line interface for CredCheck."""

from __future__ import annotations

import argparse

from credcheck import __version__
from credcheck.logger import LOG, set_log_level


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="credcheck",
        description=(
            "Verify that an AWS credential profile (e.g. IAM Roles Anywhere) "
            "resolves an identity, can list S3 buckets and cannot create one"
        ),
    )

    _ = parser.add_argument(
        "--profile",
        help="AWS profile to use (default: rolesanywhere-demo)",
    )

    _ = parser.add_argument(
        "--region",
        help="AWS region for the STS and S3 clients (default: us-east-1)",
    )

    _ = parser.add_argument(
        "--bucket-prefix",
        help="Prefix of the bucket the creation probe tries to create "
        "(default: test-bucket-)",
    )

    _ = parser.add_argument(
        "--config",
        help="Path to a YAML or JSON configuration file",
    )

    _ = parser.add_argument(
        "--validate-only", action="store_true", help="Validate configuration and exit"
    )

    _ = parser.add_argument(
        "--metrics-file",
        help="Write check outcomes in Prometheus text format to this file",
    )

    _ = parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: WARNING)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point - parse arguments and delegate."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        set_log_level(args.log_level)

    try:
        if args.validate_only:
            from credcheck.runner import validate_config_file

            success = validate_config_file(args.config)
            return 0 if success else 1
    except Exception as error:
        LOG.error("Fatal error during validation: %s", str(error))
        return 1

    from credcheck.runner import run

    return run(args)


if __name__ == "__main__":
    import sys

    sys.exit(main())
