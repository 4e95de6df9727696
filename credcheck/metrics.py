#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""Prometheus metrics for CredCheck runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import (
    Info,
    Gauge,
    CollectorRegistry,
    write_to_textfile,
)

from credcheck import __version__
from credcheck.logger import LOG


if TYPE_CHECKING:
    from credcheck.runner import VerificationReport


CHECK_NAMES = ("identity", "list_buckets", "create_bucket_denied")

# Custom registry, isolated from the default process/platform collectors
REGISTRY = CollectorRegistry()

CHECK_SUCCESS = Gauge(
    "credcheck_check_success",
    "Whether a verification check passed (1) or not (0)",
    ["check", "profile"],
    registry=REGISTRY,
)

RUN_DURATION = Gauge(
    "credcheck_run_duration_seconds",
    "Duration of the last verification run in seconds",
    ["profile"],
    registry=REGISTRY,
)

BUCKETS_LISTED = Gauge(
    "credcheck_buckets_listed",
    "Number of buckets returned by the listing check",
    ["profile"],
    registry=REGISTRY,
)

APP_INFO = Info(
    "credcheck_app",
    "CredCheck application information",
    registry=REGISTRY,
)


def record_report(report: VerificationReport) -> None:
    """Set the gauges from a finished verification run."""
    APP_INFO.info({"version": __version__, "name": "credcheck"})

    profile = report.profile_name
    outcomes = (
        report.identity is not None,
        report.buckets is not None,
        report.probe is not None and report.probe.denied,
    )
    for check, passed in zip(CHECK_NAMES, outcomes):
        CHECK_SUCCESS.labels(check=check, profile=profile).set(1 if passed else 0)

    RUN_DURATION.labels(profile=profile).set(report.duration)
    if report.buckets is not None:
        BUCKETS_LISTED.labels(profile=profile).set(len(report.buckets))


def write_metrics_file(path: str) -> bool:
    """Write the registry for the node exporter textfile collector."""
    try:
        write_to_textfile(path, REGISTRY)
    except OSError as error:
        LOG.error("Failed to write metrics to %s: %s", path, error)
        return False
    LOG.info("Metrics written to %s", path)
    return True
