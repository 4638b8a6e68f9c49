"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI options)
2. Environment variables (COVREPORT__SECTION__KEY)
3. Project YAML (<project>/.covreport.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    COVREPORT__<SECTION>__<KEY>=<VALUE>

Examples:
    COVREPORT__LOGGING__LEVEL=DEBUG
    COVREPORT__SUBMISSION__URL=https://coveralls.example.com/api/v1/jobs
    COVREPORT__JOB__SERVICE_NAME=jenkins
    COVREPORT__JOB__DRY_RUN=true
"""

from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from covreport.config.constants import (
    BUILD_DIR_DEFAULT,
    COVERALLS_FILE_DEFAULT,
    COVERALLS_URL_DEFAULT,
    REPORTING_DIR_DEFAULT,
    SOURCE_DIRECTORIES_DEFAULT,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
DuplicatePolicy = Literal["first-wins", "strict"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVREPORT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. INFO and below also enables the coverage summary.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ReportsConfig(BaseModel):
    """Coverage report discovery.

    Explicit report lists are load-bearing: a listed file that is missing
    fails the run. Convention files inside modules are optional.

    Env vars:
        COVREPORT__REPORTS__JACOCO: JSON list of JaCoCo XML files
        COVREPORT__REPORTS__MODULES: JSON list of module directories
    """

    jacoco: list[str] = Field(default_factory=list, description="JaCoCo XML reports.")
    cobertura: list[str] = Field(default_factory=list, description="Cobertura XML reports.")
    saga: list[str] = Field(default_factory=list, description="Saga (JavaScript) reports.")
    lcov: list[str] = Field(default_factory=list, description="LCOV tracefiles.")
    relative_dirs: list[str] = Field(
        default_factory=list,
        description="Extra per-module directories, relative to build and reporting dirs.",
    )
    modules: list[str] = Field(
        default_factory=lambda: ["."],
        description="Build module directories, relative to the project directory.",
    )
    build_dir: str = Field(default=BUILD_DIR_DEFAULT, description="Per-module build output.")
    reporting_dir: str = Field(
        default=REPORTING_DIR_DEFAULT, description="Per-module reporting output."
    )


class SourcesConfig(BaseModel):
    """Source file resolution.

    Env vars:
        COVREPORT__SOURCES__ENCODING: Source file encoding
        COVREPORT__SOURCES__SCAN: Fall back to scanning the project tree
    """

    directories: list[str] = Field(
        default_factory=lambda: list(SOURCE_DIRECTORIES_DEFAULT),
        description="Source roots, relative to each module directory.",
    )
    encoding: str = Field(default="utf-8", description="Encoding used to read sources.")
    scan: bool = Field(
        default=True,
        description="Search the project tree when no source root contains a file. "
        "TRADEOFF: Slow on large trees.",
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        import codecs

        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v


class OutputConfig(BaseModel):
    """Payload output.

    Env vars:
        COVREPORT__OUTPUT__COVERALLS_FILE: Payload path
    """

    coveralls_file: str = Field(
        default=COVERALLS_FILE_DEFAULT,
        description="Payload file, absolute or relative to the project directory.",
    )


class SubmissionConfig(BaseModel):
    """Coveralls API submission.

    Env vars:
        COVREPORT__SUBMISSION__URL: Jobs endpoint
        COVREPORT__SUBMISSION__TIMEOUT_SEC: Request timeout
    """

    url: str = Field(default=COVERALLS_URL_DEFAULT, description="Coveralls jobs endpoint.")
    timeout_sec: float = Field(
        default=30.0,
        description="Request timeout. RISK: Large payloads on slow links need more.",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must use http or https: {v}")
        return v

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class DedupConfig(BaseModel):
    """Cross-report duplicate handling.

    Env vars:
        COVREPORT__DEDUP__DUPLICATES: first-wins or strict
    """

    duplicates: DuplicatePolicy = Field(
        default="first-wins",
        description="first-wins drops later records for a seen source file. "
        "strict fails when a later record disagrees with the first one.",
    )


class JobConfig(BaseModel):
    """Build and CI service metadata, already resolved by the caller.

    Env vars:
        COVREPORT__JOB__REPO_TOKEN: Coveralls repository token
        COVREPORT__JOB__SERVICE_NAME: CI service name
        COVREPORT__JOB__DRY_RUN: Write the payload without submitting it
    """

    repo_token: str | None = None
    service_name: str | None = None
    service_job_id: str | None = None
    service_build_number: str | None = None
    service_build_url: str | None = None
    service_environment: dict[str, str] = Field(default_factory=dict)
    branch: str | None = None
    pull_request: str | None = None
    timestamp: datetime | None = None
    dry_run: bool = False
    skip: bool = False


class CovReportConfig(BaseModel):
    """Root configuration for covreport."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    job: JobConfig = Field(default_factory=JobConfig)
