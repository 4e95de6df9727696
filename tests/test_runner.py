"""Tests for the verification sequence and its console report."""

from __future__ import annotations

import io
import argparse
from unittest.mock import MagicMock, patch

import pytest

from credcheck.config import Config
from credcheck.runner import (
    TITLE,
    SUCCESS_BANNER,
    VerificationReport,
    run,
    run_verification,
    validate_config_file,
)
from credcheck.credentials import CredentialsError, ResolvedCredentials
from tests.mock_aws import (
    mock_client_error,
    mock_list_buckets_response,
    mock_caller_identity_response,
)


def _provider(identity=None, buckets=None, create_error=True):
    """Build a mocked CredentialsProvider with STS and S3 clients."""
    sts_client = MagicMock()
    sts_client.get_caller_identity.return_value = (
        identity or mock_caller_identity_response()
    )

    s3_client = MagicMock()
    s3_client.list_buckets.return_value = mock_list_buckets_response(buckets or [])
    if create_error:
        s3_client.create_bucket.side_effect = mock_client_error()
    else:
        s3_client.create_bucket.return_value = {"Location": "/created"}

    provider = MagicMock()
    provider.resolve.return_value = ResolvedCredentials(
        access_key_id="ASIAEXAMPLEKEY123456",
        method="custom-process",
        has_session_token=True,
    )
    provider.client.side_effect = lambda name: {"sts": sts_client, "s3": s3_client}[
        name
    ]
    return provider, sts_client, s3_client


@pytest.fixture
def config():
    return Config(profile_name="rolesanywhere-demo", region="us-east-1")


def _run(config, provider):
    out, err = io.StringIO(), io.StringIO()
    with patch("credcheck.runner.CredentialsProvider", return_value=provider):
        report = run_verification(config, out=out, err=err)
    return report, out.getvalue(), err.getvalue()


class TestRunVerification:
    """Test run_verification."""

    def test_read_only_profile(self, config):
        identity = mock_caller_identity_response()
        provider, _, _ = _provider(identity=identity, buckets=["logs", "data"])

        report, out, err = _run(config, provider)

        assert report.succeeded is True
        assert report.identity.account == "123456789012"
        assert [bucket.name for bucket in report.buckets] == ["logs", "data"]
        assert report.probe.denied is True
        assert f"User ID: {identity['UserId']}" in out
        assert f"ARN: {identity['Arn']}" in out
        assert "2024-01-01T00:00:00+00:00 logs" in out
        assert "2024-01-02T00:00:00+00:00 data" in out
        assert "✅ Expected failure - ReadOnly access working correctly" in out
        assert "Error: An error occurred (AccessDenied)" in out
        assert out.strip().splitlines()[-1] == SUCCESS_BANNER
        assert err == ""

    def test_listing_order_is_preserved(self, config):
        provider, _, _ = _provider(buckets=["b", "c", "a"])

        _, out, _ = _run(config, provider)

        lines = [line for line in out.splitlines() if line.startswith("2024-")]
        assert [line.split()[-1] for line in lines] == ["b", "c", "a"]

    def test_empty_listing_is_stated(self, config):
        provider, _, _ = _provider(buckets=[])

        report, out, _ = _run(config, provider)

        assert report.buckets == []
        assert "No S3 buckets found in account" in out

    def test_unexpected_creation_is_flagged(self, config):
        provider, _, _ = _provider(create_error=False)

        report, out, _ = _run(config, provider)

        assert report.succeeded is True
        assert report.probe.denied is False
        assert "❌ Unexpected success - bucket creation should have failed" in out
        assert "Expected failure" not in out
        assert out.strip().splitlines()[-1] == SUCCESS_BANNER

    def test_credentials_failure_aborts(self, config):
        provider, sts_client, s3_client = _provider()
        provider.resolve.side_effect = CredentialsError(
            "AWS profile 'rolesanywhere-demo' not found"
        )

        report, out, err = _run(config, provider)

        assert report.succeeded is False
        assert report.identity is None
        sts_client.get_caller_identity.assert_not_called()
        s3_client.list_buckets.assert_not_called()
        assert "Traceback" in err
        assert (
            out.strip().splitlines()[-1]
            == "❌ Demo failed: AWS profile 'rolesanywhere-demo' not found"
        )

    def test_listing_failure_stops_sequence(self, config):
        provider, _, s3_client = _provider()
        s3_client.list_buckets.side_effect = mock_client_error(
            "AccessDenied", "Access Denied"
        )

        report, out, _ = _run(config, provider)

        assert report.succeeded is False
        assert report.identity is not None
        assert report.buckets is None
        s3_client.create_bucket.assert_not_called()
        assert out.strip().splitlines()[-1].startswith("❌ Demo failed: ")

    def test_failure_trace_written_once(self, config):
        provider, sts_client, _ = _provider()
        sts_client.get_caller_identity.side_effect = mock_client_error(
            "ExpiredToken", "The security token included in the request is expired"
        )

        with patch("credcheck.runner.LOG") as mock_log:
            report, _, err = _run(config, provider)

        assert report.succeeded is False
        mock_log.exception.assert_not_called()
        mock_log.error.assert_called_once()
        assert err.count("Traceback") == 1
        assert "ExpiredToken" in err

    def test_bucket_prefix_from_config(self):
        config = Config(
            profile_name="rolesanywhere-demo",
            region="us-east-1",
            bucket_prefix="scope-check-",
        )
        provider, _, _ = _provider()

        report, _, _ = _run(config, provider)

        assert report.probe.bucket_name.startswith("scope-check-")

    def test_duration_recorded(self, config):
        provider, _, _ = _provider()

        report, _, _ = _run(config, provider)

        assert report.duration >= 0.0


class TestVerificationReport:
    def test_succeeded_until_error(self):
        report = VerificationReport(profile_name="p")
        assert report.succeeded is True
        report.error = "boom"
        assert report.succeeded is False


class TestConfigValidation:
    """Test configuration file validation."""

    @patch("credcheck.runner.Config.load")
    def test_validate_config_file_success(self, mock_load):
        mock_load.return_value = MagicMock()

        assert validate_config_file("valid_config.yaml") is True
        mock_load.assert_called_once_with("valid_config.yaml")

    @patch("credcheck.runner.Config.load")
    def test_validate_config_file_failure(self, mock_load):
        mock_load.side_effect = ValueError("Invalid config")

        assert validate_config_file("invalid_config.yaml") is False


def _args(**overrides):
    values = {
        "config": None,
        "profile": None,
        "region": None,
        "bucket_prefix": None,
        "metrics_file": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


class TestRun:
    """Test run."""

    @patch("credcheck.runner.run_verification")
    def test_success_exit_code(self, mock_verification):
        mock_verification.return_value = VerificationReport(profile_name="p")

        assert run(_args(profile="p")) == 0
        config = mock_verification.call_args[0][0]
        assert config.profile_name == "p"

    @patch("credcheck.runner.run_verification")
    def test_failure_exit_code(self, mock_verification):
        mock_verification.return_value = VerificationReport(
            profile_name="p", error="boom"
        )

        assert run(_args()) == 1

    @patch("credcheck.runner.run_verification")
    def test_invalid_override(self, mock_verification):
        assert run(_args(region="Not A Region")) == 1
        mock_verification.assert_not_called()

    @patch("credcheck.runner.run_verification")
    def test_invalid_override_ends_with_failure_banner(self, mock_verification, capsys):
        assert run(_args(region="Not A Region")) == 1

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0] == TITLE
        assert lines[-1].startswith(
            "❌ Demo failed: Configuration validation failed at region"
        )
        mock_verification.assert_not_called()

    @patch("credcheck.runner.run_verification")
    def test_missing_config_file_ends_with_failure_banner(
        self, mock_verification, capsys
    ):
        assert run(_args(config="/nonexistent/credcheck.yaml")) == 1

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[-1].startswith("❌ Demo failed: Configuration file not found")

    @patch("credcheck.runner.run_verification")
    def test_missing_config_file(self, mock_verification):
        assert run(_args(config="/nonexistent/credcheck.yaml")) == 1
        mock_verification.assert_not_called()

    @patch("credcheck.runner.run_verification")
    def test_metrics_file_written(self, mock_verification, tmp_path):
        mock_verification.return_value = VerificationReport(profile_name="p")
        metrics_file = tmp_path / "credcheck.prom"

        assert run(_args(metrics_file=str(metrics_file))) == 0
        assert "credcheck_check_success" in metrics_file.read_text()
