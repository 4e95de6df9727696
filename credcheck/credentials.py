#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

from dataclasses import dataclass

import boto3
from botocore.exceptions import BotoCoreError, ProfileNotFound

from credcheck.logger import LOG
from credcheck.sanitizer import register_sensitive_value


class CredentialsError(Exception):
    """Raised when no credentials can be resolved from the profile."""


@dataclass(frozen=True)
class ResolvedCredentials:
    """Summary of the credentials a profile resolved to, safe to display."""

    access_key_id: str
    method: str
    has_session_token: bool

    def masked_access_key_id(self) -> str:
        return self.access_key_id[:4] + "****"


class CredentialsProvider:
    """Credential provider bound to a named AWS profile.

    With IAM Roles Anywhere the profile declares a ``credential_process``
    running the signing helper, which exchanges the X.509 certificate for
    temporary credentials. Resolution is forced in :meth:`resolve` so that a
    broken profile fails before any API call is made.
    """

    def __init__(self, profile_name: str, region: str):
        self.profile_name = profile_name
        self.region = region
        self._session: boto3.Session | None = None

    @property
    def session(self) -> boto3.Session:
        if self._session is None:
            try:
                self._session = boto3.Session(
                    profile_name=self.profile_name, region_name=self.region
                )
            except ProfileNotFound as error:
                raise CredentialsError(
                    f"AWS profile '{self.profile_name}' not found: {error}"
                ) from error
        return self._session

    def resolve(self) -> ResolvedCredentials:
        """Resolve credentials and register them for log redaction."""
        try:
            credentials = self.session.get_credentials()
        except BotoCoreError as error:
            LOG.error(
                "Failed to resolve credentials for profile %s: %s",
                self.profile_name,
                str(error),
            )
            raise CredentialsError(
                f"Unable to resolve credentials for profile "
                f"'{self.profile_name}': {error}"
            ) from error

        if credentials is None:
            raise CredentialsError(
                f"Unable to locate credentials for profile '{self.profile_name}'"
            )

        frozen = credentials.get_frozen_credentials()
        register_sensitive_value(frozen.access_key)
        register_sensitive_value(frozen.secret_key)
        register_sensitive_value(frozen.token)

        resolved = ResolvedCredentials(
            access_key_id=frozen.access_key,
            method=getattr(credentials, "method", None) or "unknown",
            has_session_token=bool(frozen.token),
        )
        LOG.info(
            "Resolved credentials for profile %s using %s",
            self.profile_name,
            resolved.method,
            extra={"profile": self.profile_name},
        )
        return resolved

    def client(self, service_name: str):
        """Create a client for the given service from the profile session."""
        LOG.debug("Creating %s client in %s", service_name, self.region)
        return self.session.client(service_name, region_name=self.region)
