"""Config module exports."""

from covreport.config.loader import load_config
from covreport.config.models import (
    CovReportConfig,
    DedupConfig,
    JobConfig,
    LoggingConfig,
    OutputConfig,
    ReportsConfig,
    SourcesConfig,
    SubmissionConfig,
)

__all__ = [
    "load_config",
    "CovReportConfig",
    "DedupConfig",
    "JobConfig",
    "LoggingConfig",
    "OutputConfig",
    "ReportsConfig",
    "SourcesConfig",
    "SubmissionConfig",
]
