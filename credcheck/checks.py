#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

"""The three verification calls: identity, bucket listing, bucket creation."""

from __future__ import annotations

import time
from datetime import datetime
from dataclasses import dataclass

from botocore.exceptions import ClientError, BotoCoreError

from credcheck.logger import LOG
from credcheck.sanitizer import sanitize_exception_message


# Regions where CreateBucket must not carry a LocationConstraint
_NO_LOCATION_CONSTRAINT_REGIONS = {None, "", "us-east-1"}

# Request errors raised before any authorization decision is made
_REQUEST_ERROR_CODES = {"InvalidBucketName", "InvalidLocationConstraint"}

_last_suffix = 0


@dataclass(frozen=True)
class CallerIdentity:
    user_id: str
    account: str
    arn: str


@dataclass(frozen=True)
class Bucket:
    name: str
    creation_date: datetime | None


@dataclass(frozen=True)
class CreateProbeResult:
    """Outcome of the create bucket attempt.

    ``denied`` is the expected outcome for a read-only scope.
    """

    bucket_name: str
    denied: bool
    error_message: str | None = None
    error_code: str | None = None


def get_caller_identity(sts_client) -> CallerIdentity:
    """Resolve the identity behind the credentials in use."""
    response = sts_client.get_caller_identity()
    identity = CallerIdentity(
        user_id=response["UserId"],
        account=response["Account"],
        arn=response["Arn"],
    )
    LOG.info(
        "Caller identity resolved to %s", identity.arn, extra={"check": "identity"}
    )
    return identity


def list_buckets(s3_client) -> list[Bucket]:
    """List buckets in the order returned by the API."""
    response = s3_client.list_buckets()
    buckets = [
        Bucket(name=bucket["Name"], creation_date=bucket.get("CreationDate"))
        for bucket in response.get("Buckets", [])
    ]
    LOG.info("Listed %d buckets", len(buckets), extra={"check": "list_buckets"})
    return buckets


def unique_bucket_name(prefix: str) -> str:
    """Build a bucket name suffixed with the current time in milliseconds.

    The suffix strictly increases within a process, so two calls in the same
    millisecond still get different names.
    """
    global _last_suffix
    suffix = max(time.time_ns() // 1_000_000, _last_suffix + 1)
    _last_suffix = suffix
    return f"{prefix}{suffix}"


def probe_bucket_creation(s3_client, region: str, prefix: str) -> CreateProbeResult:
    """Try to create a bucket, which a read-only scope must refuse.

    A malformed request (invalid name or location) proves nothing about the
    scope and is raised instead of being reported as a denial.
    """
    bucket_name = unique_bucket_name(prefix)
    params: dict = {"Bucket": bucket_name}
    if region not in _NO_LOCATION_CONSTRAINT_REGIONS:
        params["CreateBucketConfiguration"] = {"LocationConstraint": region}

    try:
        s3_client.create_bucket(**params)
    except ClientError as error:
        error_code = error.response.get("Error", {}).get("Code")
        if error_code in _REQUEST_ERROR_CODES:
            LOG.error(
                "Bucket creation request for %s rejected with %s",
                bucket_name,
                error_code,
                extra={"check": "create_bucket"},
            )
            raise
        LOG.info(
            "Bucket creation for %s denied with %s",
            bucket_name,
            error_code,
            extra={"check": "create_bucket"},
        )
        return CreateProbeResult(
            bucket_name=bucket_name,
            denied=True,
            error_message=sanitize_exception_message(str(error)),
            error_code=error_code,
        )
    except BotoCoreError as error:
        LOG.info(
            "Bucket creation for %s failed: %s",
            bucket_name,
            str(error),
            extra={"check": "create_bucket"},
        )
        return CreateProbeResult(
            bucket_name=bucket_name,
            denied=True,
            error_message=sanitize_exception_message(str(error)),
            error_code=type(error).__name__,
        )

    LOG.warning(
        "Bucket %s was created, the profile is not read-only",
        bucket_name,
        extra={"check": "create_bucket"},
    )
    return CreateProbeResult(bucket_name=bucket_name, denied=False)
