#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Verification sequence and console report for CredCheck."""

from __future__ import annotations

import sys
import time
import traceback
from typing import TYPE_CHECKING, TextIO
from dataclasses import field, dataclass

from credcheck.checks import (
    Bucket,
    CallerIdentity,
    CreateProbeResult,
    list_buckets,
    get_caller_identity,
    probe_bucket_creation,
)
from credcheck.config import Config
from credcheck.logger import LOG
from credcheck.sanitizer import sanitize_string
from credcheck.credentials import CredentialsProvider


if TYPE_CHECKING:
    import argparse


TITLE = "🎯 AWS IAM Roles Anywhere Python SDK Demo"
SUCCESS_BANNER = "🎉 Demo completed successfully!"
FAILURE_BANNER = "❌ Demo failed: {}"


@dataclass
class VerificationReport:
    """What a verification run observed. Steps not reached stay None."""

    profile_name: str
    identity: CallerIdentity | None = None
    buckets: list[Bucket] | None = None
    probe: CreateProbeResult | None = None
    error: str | None = None
    duration: float = 0.0
    _started: float = field(default_factory=time.monotonic, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def finish(self) -> None:
        self.duration = time.monotonic() - self._started


def _print_title(out: TextIO) -> None:
    print(TITLE, file=out)
    print("=" * 40, file=out)


def _print_identity(identity: CallerIdentity, out: TextIO) -> None:
    print(f"User ID: {identity.user_id}", file=out)
    print(f"Account: {identity.account}", file=out)
    print(f"ARN: {identity.arn}", file=out)


def _print_buckets(buckets: list[Bucket], out: TextIO) -> None:
    if not buckets:
        print("No S3 buckets found in account", file=out)
        return
    for bucket in buckets:
        created = bucket.creation_date.isoformat() if bucket.creation_date else "-"
        print(f"{created} {bucket.name}", file=out)


def _print_probe(probe: CreateProbeResult, out: TextIO) -> None:
    if probe.denied:
        print("✅ Expected failure - ReadOnly access working correctly", file=out)
        print(f"Error: {probe.error_message}", file=out)
    else:
        print("❌ Unexpected success - bucket creation should have failed", file=out)
        print(f"Bucket {probe.bucket_name} was created and must be removed", file=out)


def run_verification(
    config: Config,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> VerificationReport:
    """Run the identity, listing and forbidden write checks for a profile.

    Never raises: an unexpected error stops the sequence, is printed with its
    trace and recorded on the returned report.
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    report = VerificationReport(profile_name=config.profile_name)

    _print_title(out)

    try:
        provider = CredentialsProvider(config.profile_name, config.region)
        resolved = provider.resolve()
        print(
            f"Profile: {config.profile_name} ({config.region}) - credentials from "
            f"{resolved.method} ({resolved.masked_access_key_id()})",
            file=out,
        )

        print(
            "\n📋 Test 1: Getting caller identity with certificate-based "
            "authentication",
            file=out,
        )
        report.identity = get_caller_identity(provider.client("sts"))
        _print_identity(report.identity, out)

        print("\n📋 Test 2: Listing S3 buckets (ReadOnly access)", file=out)
        s3_client = provider.client("s3")
        report.buckets = list_buckets(s3_client)
        _print_buckets(report.buckets, out)

        print(
            "\n📋 Test 3: Trying to create S3 bucket (should fail - ReadOnly access)",
            file=out,
        )
        report.probe = probe_bucket_creation(
            s3_client, config.region, config.bucket_prefix
        )
        _print_probe(report.probe, out)

    except Exception as error:
        report.error = sanitize_string(str(error)) or type(error).__name__
        LOG.error(
            "Verification failed for profile %s: %s",
            config.profile_name,
            report.error,
        )
        err.write(sanitize_string(traceback.format_exc()))
        report.finish()
        print(FAILURE_BANNER.format(report.error), file=out)
        return report

    report.finish()
    print(f"\n{SUCCESS_BANNER}", file=out)
    return report


def validate_config_file(config_path: str | None) -> bool:
    """Validate configuration file."""
    try:
        _ = Config.load(config_path)
        LOG.info("Configuration is valid")
        return True
    except Exception as error:
        LOG.error("Configuration validation failed: %s", str(error))
        return False


def run(args: argparse.Namespace) -> int:
    """Run CredCheck with the parsed command line arguments."""
    try:
        config = Config.load(args.config).with_overrides(
            profile_name=args.profile,
            region=args.region,
            bucket_prefix=args.bucket_prefix,
        )
    except Exception as error:
        LOG.error("Invalid configuration: %s", str(error))
        _print_title(sys.stdout)
        print(FAILURE_BANNER.format(error), file=sys.stdout)
        return 1

    LOG.info(
        "Verifying profile %s in %s",
        config.profile_name,
        config.region,
        extra={"profile": config.profile_name},
    )
    report = run_verification(config)

    if args.metrics_file:
        from credcheck.metrics import record_report, write_metrics_file

        record_report(report)
        write_metrics_file(args.metrics_file)

    return 0 if report.succeeded else 1
