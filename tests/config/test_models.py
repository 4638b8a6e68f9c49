"""Tests for config/models.py module.

Covers:
- LogOutputConfig / LoggingConfig
- ReportsConfig and SourcesConfig defaults
- SubmissionConfig validation
- DedupConfig policy values
- JobConfig
"""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from covreport.config.constants import COVERALLS_FILE_DEFAULT, COVERALLS_URL_DEFAULT
from covreport.config.models import (
    CovReportConfig,
    DedupConfig,
    JobConfig,
    LogOutputConfig,
    ReportsConfig,
    SourcesConfig,
    SubmissionConfig,
)


class TestLogOutputConfig:
    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="relative/run.log")


class TestReportsConfig:
    def test_defaults_point_at_project_root_module(self) -> None:
        config = ReportsConfig()
        assert config.modules == ["."]
        assert config.jacoco == []
        assert config.build_dir == "target"
        assert config.reporting_dir == "target/site"


class TestSourcesConfig:
    def test_unknown_encoding_rejected(self) -> None:
        """Encodings are checked when the config is loaded, not mid-run."""
        with pytest.raises(ValidationError, match="Unknown encoding"):
            SourcesConfig(encoding="not-a-codec")

    def test_known_encoding_accepted(self) -> None:
        assert SourcesConfig(encoding="ISO-8859-1").encoding == "ISO-8859-1"


class TestSubmissionConfig:
    def test_defaults(self) -> None:
        config = SubmissionConfig()
        assert config.url == COVERALLS_URL_DEFAULT
        assert config.timeout_sec == 30.0

    @pytest.mark.parametrize("url", ["ftp://example.com/jobs", "coveralls.io"])
    def test_non_http_url_rejected(self, url: str) -> None:
        with pytest.raises(ValidationError):
            SubmissionConfig(url=url)

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_non_positive_timeout_rejected(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            SubmissionConfig(timeout_sec=timeout)


class TestDedupConfig:
    def test_default_is_first_wins(self) -> None:
        assert DedupConfig().duplicates == "first-wins"

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DedupConfig(duplicates="merge")  # type: ignore[arg-type]


class TestJobConfig:
    def test_timestamp_parsed_from_string(self) -> None:
        config = JobConfig(timestamp="2024-03-01T12:00:00+00:00")  # type: ignore[arg-type]
        assert isinstance(config.timestamp, datetime)

    def test_defaults_are_not_dry_run(self) -> None:
        config = JobConfig()
        assert config.dry_run is False
        assert config.skip is False
        assert config.service_environment == {}


class TestCovReportConfig:
    def test_all_sections_present(self) -> None:
        config = CovReportConfig()
        assert config.output.coveralls_file == COVERALLS_FILE_DEFAULT
        assert config.logging.level == "INFO"
